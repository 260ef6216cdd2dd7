"""
Calls to the transactional PostgreSQL functions in sql/functions.sql.

Each function runs in a single transaction and reports its outcome as a JSON
object: {"success": true, ...} or {"success": false, "error": CODE,
"message": TEXT}. A business-level failure (e.g. a status guard that no
longer holds) is therefore returned, not raised, and the caller decides
what it means.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from postgrest.exceptions import APIError

from repositories.client import get_supabase

logger = logging.getLogger(__name__)


def call_atomic(function: str, params: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Execute a transactional function and return its JSON result.

    Raises:
        RuntimeError: the call itself failed (network, SQL error, bad payload)
    """

    try:
        response = get_supabase().rpc(function, dict(params)).execute()
    except APIError as exc:
        # Some supabase-py releases raise APIError for any JSON object
        # returned by a function, successful or not.
        try:
            error_data = exc.json() if callable(getattr(exc, "json", None)) else {}
        except (TypeError, ValueError):
            error_data = {}

        if isinstance(error_data, Mapping) and "success" in error_data:
            return dict(error_data)

        logger.error(
            "RPC call failed",
            extra={"function": function, "code": getattr(exc, "code", None)},
        )
        raise RuntimeError(f"Failed to call {function}: {exc}") from exc

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to call {function}: {error}")

    result = getattr(response, "data", None)
    if not isinstance(result, Mapping):
        raise RuntimeError(f"Unexpected result from {function}: {result!r}")
    return dict(result)


__all__ = ["call_atomic"]
