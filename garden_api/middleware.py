"""
API Engine Middleware
=====================
Runs the dispatcher in front of a Starlette/FastAPI application.

Usage:
    from garden_api import APIConfig, Dispatcher
    from garden_api.middleware import APIEngineMiddleware

    config = APIConfig()
    dispatcher = Dispatcher.create(resolver=UserStoreResolver(), config=config)

    app.add_middleware(APIEngineMiddleware, dispatcher=dispatcher, config=config)

    @app.post("/{path:path}")
    async def run_controller(request: Request):
        route = request.state.api_route
        ...

Rejected requests are answered here with a JSON error envelope. Accepted
ones reach the application with the routing decision on ``request.state``.
"""

from typing import Callable, Dict, Optional

from fastapi import HTTPException
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
import structlog

from garden_api.auth.session import RequestSession
from garden_api.body.normalizer import parse_urlencoded
from garden_api.config import APIConfig
from garden_api.delivery import cors_headers, select_delivery_format
from garden_api.dispatcher import APIRequest, Dispatcher, RoutingDecision
from garden_api.logging import request_id_var, user_id_var
from garden_api.signing.signature import generate_unique_id

logger = structlog.get_logger(__name__)

SessionFactory = Callable[[Request], RequestSession]


def _new_session(request: Request) -> RequestSession:
    return RequestSession()


class APIEngineMiddleware(BaseHTTPMiddleware):
    """
    Authenticates and routes API requests.

    Only paths under ``path_prefix`` are handled; everything else is passed
    through untouched.
    """

    def __init__(
        self,
        app,
        dispatcher: Dispatcher,
        config: Optional[APIConfig] = None,
        path_prefix: Optional[str] = None,
        session_factory: Optional[SessionFactory] = None,
    ):
        super().__init__(app)
        self.dispatcher = dispatcher
        self.config = config or dispatcher.config
        prefix = path_prefix if path_prefix is not None else self.config.path_prefix
        self.path_prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""
        self.session_factory = session_factory or _new_session

    def _api_path(self, path: str) -> Optional[str]:
        """Path relative to the API prefix, or None if outside it."""
        if not self.path_prefix:
            return path
        if path == self.path_prefix or path.startswith(self.path_prefix + "/"):
            return path[len(self.path_prefix):] or "/"
        return None

    async def _read_form(self, request: Request, body: bytes) -> Dict[str, str]:
        if request.method.upper() != "POST":
            return {}
        content_type = request.headers.get("content-type", "").lower()
        if content_type.startswith("application/x-www-form-urlencoded"):
            return parse_urlencoded(body)
        if content_type.startswith("multipart/form-data"):
            form = await request.form()
            return {key: value for key, value in form.items() if isinstance(value, str)}
        return {}

    async def _build_request(self, request: Request, path: str) -> APIRequest:
        body = await request.body()
        return APIRequest(
            method=request.method,
            path=path,
            query=request.url.query,
            body=body,
            content_type=request.headers.get("content-type"),
            accept=request.headers.get("accept"),
            form=await self._read_form(request, body),
        )

    async def dispatch(self, request: Request, call_next) -> Response:
        api_path = self._api_path(request.url.path)
        if api_path is None or request.method == "OPTIONS":
            response = await call_next(request)
            response.headers.update(cors_headers(self.config))
            return response

        request_token = request_id_var.set(generate_unique_id()[:8])
        user_token = None
        try:
            api_request = await self._build_request(request, api_path)
            session = self.session_factory(request)
            result = await run_in_threadpool(self.dispatcher.dispatch, api_request, session)

            if not result.ok:
                response = JSONResponse(result.error.to_response(), status_code=result.status)
            else:
                if result.identity is not None:
                    user_token = user_id_var.set(str(result.identity))
                request.state.api_route = result.route
                request.state.api_session = session
                request.state.api_uploads = result.uploads
                request.state.delivery_format = select_delivery_format(api_request.accept)
                if result.treat_as_post:
                    logger.debug("api_method_rewritten", original=request.method, path=api_path)
                    request.scope["method"] = "POST"
                response = await call_next(request)
        finally:
            if user_token is not None:
                user_id_var.reset(user_token)
            request_id_var.reset(request_token)

        response.headers.update(cors_headers(self.config))
        return response


def get_api_route(request: Request) -> RoutingDecision:
    """
    Dependency to get the routing decision made by the middleware.

    Usage:
        @app.post("/api/{path:path}")
        async def run_controller(route: RoutingDecision = Depends(get_api_route)):
            ...
    """
    route = getattr(request.state, "api_route", None)
    if route is None:
        raise HTTPException(status_code=404, detail="No API route for this request")
    return route


def get_api_session(request: Request) -> RequestSession:
    session = getattr(request.state, "api_session", None)
    if session is None:
        session = RequestSession()
    return session


def require_api_user(request: Request) -> RequestSession:
    """
    Dependency that requires an authenticated API user.
    Raises 401 if the request was not signed.
    """
    session = get_api_session(request)
    if not session.is_valid():
        raise HTTPException(status_code=401, detail="Authentication required")
    return session


__all__ = [
    "APIEngineMiddleware",
    "get_api_route",
    "get_api_session",
    "require_api_user",
]
