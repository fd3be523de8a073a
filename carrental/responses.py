"""Uniform success/error envelopes returned by every endpoint."""
from typing import Any, Dict, Optional


def success_response(message: str, **fields: Any) -> Dict[str, Any]:
    return {"success": True, "data": {"message": message, **fields}}


def error_response(message: str, error: Optional[Any] = None) -> Dict[str, Any]:
    err: Dict[str, Any] = {"message": message}
    if error is not None:
        err["error"] = error
    return {"success": False, "err": err}
