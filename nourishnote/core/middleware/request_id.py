import logging
import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware

from nourishnote.core.logging import latency_bucket_ms, request_id_ctx_var, user_id_ctx_var

logger = logging.getLogger("nourishnote")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id (echoed from x-request-id or minted) and its caller."""

    def __init__(self, app, header_name: str = "x-request-id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next):
        rid = request.headers.get(self.header_name) or str(uuid4())
        request.state.request_id = rid
        rid_token = request_id_ctx_var.set(rid)
        user_token = user_id_ctx_var.set((request.headers.get("x-user-id") or "").strip() or None)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_ctx_var.reset(rid_token)
            user_id_ctx_var.reset(user_token)

        response.headers[self.header_name] = rid
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "event": "request.complete",
                "request_id": rid,
                "path": request.url.path,
                "status": response.status_code,
                "latency_bucket": latency_bucket_ms((time.perf_counter() - start) * 1000),
            },
        )
        return response
