# backend/services/redaction.py
import json
import logging
from typing import Any, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from services.tenant_scope import MANUFACTURER_ROLE, normalize_role

logger = logging.getLogger(__name__)

# Monetary keys a manufacturer must never receive (camelCase wire names)
FINANCIAL_FIELDS = frozenset({
    "unitPrice",
    "lineTotal",
    "subtotal",
    "total",
    "taxAmount",
    "discount",
    "msrp",
    "cost",
    "basePrice",
    "commission",
    "revenue",
    "amountPaid",
    "invoiceUrl",
    "actualCost",
})


def _strip(payload: Any) -> Any:
    if isinstance(payload, list):
        return [_strip(item) for item in payload]
    if not isinstance(payload, dict):
        return payload

    cleaned = {}
    for key, value in payload.items():
        if key in FINANCIAL_FIELDS:
            continue
        # nested payloads (lineItems, variant, order, ...) are stripped too
        cleaned[key] = _strip(value) if isinstance(value, (dict, list)) else value
    return cleaned


def redact(payload: Any, role: str) -> Any:
    """Remove financial fields for manufacturer callers.

    Any other role gets the very same object back.
    """
    if normalize_role(role) != MANUFACTURER_ROLE:
        return payload
    return _strip(payload)


class RoleRedactingRoute(APIRoute):
    """Route class that runs every JSON response through `redact`.

    The caller's Actor is placed on `request.state.actor` by the auth
    dependency, so any endpoint declared on a router using this class is
    filtered without the handler doing anything.
    """

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def redacting_route_handler(request: Request) -> Response:
            response = await original_route_handler(request)
            actor = getattr(request.state, "actor", None)
            if actor is None or normalize_role(actor.role) != MANUFACTURER_ROLE:
                return response
            if not (response.media_type or "").startswith("application/json") or not response.body:
                return response

            payload = json.loads(response.body)
            headers = {
                k: v for k, v in response.headers.items()
                if k.lower() not in ("content-length", "content-type")
            }
            return JSONResponse(
                content=redact(payload, actor.role),
                status_code=response.status_code,
                headers=headers,
                background=response.background,
            )

        return redacting_route_handler
