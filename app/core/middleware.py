"""
Middlewares de la API Maple.

`RequestContextMiddleware` asigna el request id, mide la latencia y deja una
línea de log por petición con el usuario autenticado (lo fija
`get_current_user_id` en `request.state.user_id`) y el tag consultado
(`tagId` en query o `{tag_id}` en la ruta), que es el recurso sobre el que se
decide el acceso.
"""
import logging
import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.core.config import settings

REQUEST_ID_HEADER = "X-Request-Id"
RESPONSE_TIME_HEADER = "X-Response-Time-Ms"

_log = logging.getLogger("maple.request")


def _tag_in_scope(request: Request) -> Optional[str]:
    # path_params sólo existe después del ruteo
    return request.query_params.get("tagId") or request.scope.get("path_params", {}).get("tag_id")


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.user_id = None
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            _log.error(
                "%s %s failed user=%s tag=%s request_id=%s",
                request.method, request.url.path, request.state.user_id, _tag_in_scope(request),
                request.state.request_id,
            )
            raise

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        response.headers[RESPONSE_TIME_HEADER] = str(elapsed_ms)
        level = logging.WARNING if response.status_code in (401, 403) else logging.INFO
        _log.log(
            level,
            "%s %s status=%s latency_ms=%s user=%s tag=%s request_id=%s",
            request.method, request.url.path, response.status_code, elapsed_ms,
            request.state.user_id, _tag_in_scope(request), request.state.request_id,
        )
        return response


def _cors_options() -> dict:
    if settings.cors_allow_any:
        # Orígenes dinámicos: CORS no permite credentials con comodín
        return {"allow_origin_regex": ".*", "allow_credentials": False}
    return {"allow_origins": settings.cors_origins, "allow_credentials": True}


def add_middlewares(app: FastAPI) -> None:
    app.add_middleware(CORSMiddleware, allow_methods=["*"], allow_headers=["*"], **_cors_options())
    app.add_middleware(RequestContextMiddleware)
