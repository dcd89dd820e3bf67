"""Abacus.AI agent endpoints: web search and research."""

import logging

from fastapi import Request
from fastapi.responses import Response

from ...core import (
    UpstreamCall,
    json_response,
    post_json,
    read_json_body,
    require_query,
    require_secrets,
    run_endpoint,
)
from ...core.cors import NO_STORE
from ...core.payload import preview
from ...settings import (
    ABACUS_DEPLOYMENT_ID,
    ABACUS_DEPLOYMENT_TOKEN,
    ABACUS_WEBSEARCH_ID,
    ABACUS_WEBSEARCH_TOKEN,
    ProxySettings,
)

logger = logging.getLogger("playground-proxy")

AGENT_ERROR_LABEL = "Abacus.AI API Error"
NO_SEARCH_RESULTS = "No search results found."
NO_RESEARCH_PAPERS = "No research papers found."


async def _web_search(request: Request, settings: ProxySettings) -> Response:
    token, deployment_id = require_secrets(
        settings,
        "Abacus.AI Web Search credentials not configured",
        ABACUS_WEBSEARCH_TOKEN,
        ABACUS_WEBSEARCH_ID,
    )
    payload = await read_json_body(request)
    query = require_query(payload)
    logger.info(f'Web search query: "{preview(query)}"')

    call = UpstreamCall(
        url=settings.websearch_url,
        payload={"deploymentId": deployment_id, "input": {"query": query}},
        credential=token,
        timeout=settings.websearch_timeout,
        subject="web search request",
        timeout_hint="Try a more specific search query.",
        error_label=AGENT_ERROR_LABEL,
    )
    data, _ = await post_json(call)
    logger.info("Abacus.AI Web Search API response received successfully")

    output = data.get("output") if isinstance(data, dict) else None
    results = output.get("search_output") if isinstance(output, dict) else None
    return json_response(
        {"search_results": results or NO_SEARCH_RESULTS, "success": True},
        headers={"Cache-Control": NO_STORE},
    )


async def _research(request: Request, settings: ProxySettings) -> Response:
    token, deployment_id = require_secrets(
        settings,
        "Abacus.AI credentials not configured",
        ABACUS_DEPLOYMENT_TOKEN,
        ABACUS_DEPLOYMENT_ID,
    )
    payload = await read_json_body(request)
    query = require_query(payload)
    email = payload.get("email") or None
    logger.info(f'Research query: "{preview(query)}"')
    logger.info(f"Email provided: {'Yes' if email else 'No'}")

    keyword_arguments = {"subject": query}
    if email:
        keyword_arguments["email"] = email

    call = UpstreamCall(
        url=settings.research_url,
        payload={
            "deployment_token": token,
            "deployment_id": deployment_id,
            "keyword_arguments": keyword_arguments,
        },
        credential=token,
        timeout=settings.research_timeout,
        subject="research agent request",
        timeout_hint="Try a more specific research query.",
        error_label=AGENT_ERROR_LABEL,
    )
    data, _ = await post_json(call)
    logger.info("Abacus.AI API response received successfully")

    papers = data.get("research_papers") if isinstance(data, dict) else None
    return json_response(
        {"research_papers": papers or NO_RESEARCH_PAPERS, "success": True},
        headers={"Cache-Control": NO_STORE},
    )


async def web_search(request: Request) -> Response:
    """Web search agent.

    POST /api/abacus-websearch
    """
    return await run_endpoint(request, "Abacus.AI Web Search Agent", _web_search)


async def research(request: Request) -> Response:
    """Research agent; long-running, so it gets the longest timeout.

    POST /api/abacus-research
    """
    return await run_endpoint(request, "Abacus.AI Research Agent", _research)
