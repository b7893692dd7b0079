import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from config.settings import Settings, get_settings
from models.lcp_metric import LCPMetric
from models.performance_metric import PerformanceMetric
from schemas.performance import (
    ErrorResponse,
    LCPReportIn,
    PerformanceBundleIn,
    SuccessResponse,
)
from utils.enrichment import enrich
from utils.errors import ParseFailure, SinkFailure
from utils.persistence import PersistenceSink, get_sink

logger = logging.getLogger(__name__)

performance_router = APIRouter(prefix="/api/performance", tags=["performance"])

FAILURE_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _reject_constant(token: str):
    # NaN, Infinity and -Infinity are not JSON
    raise ParseFailure(f"Body is not valid JSON: {token} is not a JSON value")


async def read_json(request: Request) -> Any:
    body = await request.body()
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseFailure(f"Body is not valid JSON: {e}") from e


def store(sink: PersistenceSink, table: str, record: dict):
    ok, error = sink.insert(table, record)
    if not ok:
        raise SinkFailure(table, error)


def _error(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@performance_router.post(
    "/lcp", response_model=SuccessResponse, responses=FAILURE_RESPONSES
)
async def ingest_lcp(
    request: Request,
    sink: PersistenceSink = Depends(get_sink),
    settings: Settings = Depends(get_settings),
):
    """Store one Largest Contentful Paint sample. The url is taken from the body."""
    try:
        payload = await read_json(request)
        if not isinstance(payload, dict):
            raise ParseFailure("LCP report must be a JSON object")

        if settings.strict_telemetry_validation:
            try:
                LCPReportIn.model_validate(payload)
            except ValidationError as e:
                logger.warning(f"Rejected LCP report: {e.error_count()} error(s)")
                return _error("Invalid payload", 400)

        record = enrich(request, value=payload.get("value"), url=payload.get("url"))
        await run_in_threadpool(store, sink, LCPMetric.__tablename__, record)
    except SinkFailure as e:
        logger.error(f"Error storing LCP metric: {e}")
        return _error("Failed to store LCP metric")
    except ParseFailure as e:
        logger.error(f"Error processing LCP metric: {e}")
        return _error("Internal server error")
    except Exception:
        logger.exception("Unexpected error processing LCP metric")
        return _error("Internal server error")

    return {"success": True}


@performance_router.post("", response_model=SuccessResponse, responses=FAILURE_RESPONSES)
async def ingest_metrics(
    request: Request,
    sink: PersistenceSink = Depends(get_sink),
    settings: Settings = Depends(get_settings),
):
    """Store a metrics bundle verbatim.

    The page url always comes from the Referer header; a ``url`` key in the
    body is kept inside ``metrics`` and never used as the source page.
    """
    try:
        metrics = await read_json(request)

        if settings.strict_telemetry_validation:
            try:
                PerformanceBundleIn.model_validate(metrics)
            except ValidationError as e:
                logger.warning(f"Rejected metrics bundle: {e.error_count()} error(s)")
                return _error("Invalid payload", 400)

        record = enrich(request, metrics=metrics, url=request.headers.get("referer"))
        await run_in_threadpool(store, sink, PerformanceMetric.__tablename__, record)
    except SinkFailure as e:
        logger.error(f"Error storing performance metrics: {e}")
        return _error("Failed to store metrics")
    except ParseFailure as e:
        logger.error(f"Error processing performance metrics: {e}")
        return _error("Internal server error")
    except Exception:
        logger.exception("Unexpected error processing performance metrics")
        return _error("Internal server error")

    return {"success": True}
