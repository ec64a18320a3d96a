# docintel/observability/middleware.py
from __future__ import annotations

import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from docintel.observability.context import request_id_ctx, session_id_ctx

SESSION_HEADER = "x-session-id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds x-request-id and x-session-id to the logging context for one request."""

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        rid_token = request_id_ctx.set(rid)
        sid_token = session_id_ctx.set(request.headers.get(SESSION_HEADER))
        try:
            response = await call_next(request)
            response.headers["x-request-id"] = rid
            return response
        finally:
            session_id_ctx.reset(sid_token)
            request_id_ctx.reset(rid_token)
