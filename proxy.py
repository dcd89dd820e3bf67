"""Run the playground proxy with uvicorn.

Usage:
    python proxy.py

Bind address comes from configs/config_default.yaml (``server``), overridden
by PLAYGROUND_PROXY_HOST / PLAYGROUND_PROXY_PORT.
"""

import uvicorn

from playground_proxy.config_loader import load_config
from playground_proxy.main import app, server_address


def main() -> None:
    host, port = server_address(load_config())
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
