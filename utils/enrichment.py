from typing import Any, Dict

from fastapi import Request

from utils.clock import utcnow


def enrich(request: Request, **fields: Any) -> Dict[str, Any]:
    """Add the server-observed user agent and ingestion time to a record."""
    record = dict(fields)
    record["user_agent"] = request.headers.get("user-agent")
    record["timestamp"] = utcnow()
    return record
