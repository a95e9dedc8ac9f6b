"""ERD endpoints: parse, share links and server-side rendering."""

import logging
import time
from typing import Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from SCHEMA2ERD.ir.models import Graph, ParseFailure
from SCHEMA2ERD.utils.error_handling import ErrorContext, ErrorKind, handle_error
from backend.config import settings
from backend.models.requests import DiagramRequest, ParseRequest, ShortenRequest
from backend.models.responses import SharedLinkResponse, ShortenResponse
from backend.dependencies import (
    get_diagram_service,
    get_parse_service,
    get_share_service,
)
from backend.services.diagram_service import DiagramService
from backend.services.parse_service import ParseService
from backend.services.share_service import PayloadTooLargeError, ShareService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/erd", tags=["erd"])

SVG_MEDIA_TYPE = "image/svg+xml"
DOT_MEDIA_TYPE = "text/vnd.graphviz"


def _parse_failure_response(failure: ParseFailure) -> JSONResponse:
    return JSONResponse(status_code=422, content=failure.to_dict())


async def _graph_for(request: DiagramRequest, parse_service: ParseService) -> Union[Graph, JSONResponse]:
    """Graph from the request body, or the error response to send instead."""
    if request.graph is not None:
        try:
            return Graph.model_validate(request.graph)
        except ValidationError as e:
            context = ErrorContext(stage="api", operation="validate_graph")
            return JSONResponse(
                status_code=422,
                content=handle_error(e, context, kind=ErrorKind.DECODE_ERROR, log_level="warning"),
            )
    result = await parse_service.parse(request.schema_text or "")
    if isinstance(result, ParseFailure):
        return _parse_failure_response(result)
    return result


@router.post("/parse")
async def parse(
    request: ParseRequest,
    parse_service: ParseService = Depends(get_parse_service),
):
    """
    Parse schema.rb text into a graph.

    Returns the graph (`nodes`, `links`) or 422 with `{error, message}`.
    """
    start_time = time.time()
    logger.info(f"POST /erd/parse ({len(request.schema_text)} characters)")

    try:
        result = await parse_service.parse(request.schema_text)
    except Exception as e:
        context = ErrorContext(stage="api", operation="parse")
        return JSONResponse(
            status_code=422,
            content=handle_error(e, context, include_traceback=settings.include_tracebacks),
        )

    if isinstance(result, ParseFailure):
        logger.info(f"Parse failed: {result.message}")
        return _parse_failure_response(result)

    logger.info(
        f"Parsed {len(result.nodes)} table(s), {len(result.links)} link(s) "
        f"in {time.time() - start_time:.3f}s"
    )
    return JSONResponse(content=result.to_dict())


@router.post("/shorten", response_model=ShortenResponse)
async def shorten(
    request: ShortenRequest,
    share_service: ShareService = Depends(get_share_service),
):
    """Store an encoded snapshot and return its short URL."""
    try:
        key, url = await share_service.shorten(request.payload)
    except PayloadTooLargeError as e:
        return JSONResponse(status_code=413, content={"error": "payload_too_large", "message": str(e)})
    return ShortenResponse(key=key, url=url)


@router.get("/s/{key}", response_model=SharedLinkResponse)
async def resolve_short_link(
    key: str,
    share_service: ShareService = Depends(get_share_service),
):
    """Payload stored under `key`, or 404 `{error: "expired"}`."""
    entry = await share_service.resolve(key)
    if entry is None:
        return JSONResponse(status_code=404, content={"error": "expired"})
    return SharedLinkResponse(**entry)


@router.post("/render")
async def render(
    request: DiagramRequest,
    parse_service: ParseService = Depends(get_parse_service),
    diagram_service: DiagramService = Depends(get_diagram_service),
):
    """Render the diagram headlessly and return it as SVG."""
    graph = await _graph_for(request, parse_service)
    if isinstance(graph, JSONResponse):
        return graph
    svg = await diagram_service.render_svg(graph, compact=request.compact)
    logger.info(f"Rendered SVG for {len(graph.nodes)} table(s) ({len(svg)} bytes)")
    return Response(content=svg, media_type=SVG_MEDIA_TYPE)


@router.post("/export/dot")
async def export_dot(
    request: DiagramRequest,
    parse_service: ParseService = Depends(get_parse_service),
    diagram_service: DiagramService = Depends(get_diagram_service),
):
    """Graphviz DOT source for the diagram."""
    graph = await _graph_for(request, parse_service)
    if isinstance(graph, JSONResponse):
        return graph
    source = await diagram_service.export_dot(graph)
    return Response(content=source, media_type=DOT_MEDIA_TYPE)
