"""
API Dispatcher
==============
Maps an API request to the controller a resource asks for.

Dispatch runs as a linear pipeline::

    PATH_RESOLVED -> HANDLER_INVOKED -> DESCRIPTOR_VALIDATED
        -> AUTH_DECIDED -> ROUTED

Every stage either hands its output to the next one or stops the pipeline
with an ``APIError``. The result records the stage it stopped at.
"""

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

import structlog

from garden_api.auth.authenticator import RequestAuthenticator, has_login, parse_query
from garden_api.auth.identity import IdentityResolver
from garden_api.auth.session import RequestSession
from garden_api.body.normalizer import normalize_body
from garden_api.body.uploads import StoredUpload, discard_uploads
from garden_api.config import APIConfig
from garden_api.errors import APIError, ErrorKind, not_implemented
from garden_api.resources.base import AuthRequirement, DispatchDescriptor, ResourceHandler
from garden_api.resources.registry import ResourceRegistry, create_default_registry
from garden_api.signing.models import Identity

logger = structlog.get_logger(__name__)

VERBS = ("get", "post", "put", "delete")
# Verbs most frameworks cannot process natively; forwarded as POST
POST_ALIASED_VERBS = ("put", "delete")


class DispatchState(str, Enum):
    """Pipeline stages, in order."""
    PATH_RESOLVED = "path_resolved"
    HANDLER_INVOKED = "handler_invoked"
    DESCRIPTOR_VALIDATED = "descriptor_validated"
    AUTH_DECIDED = "auth_decided"
    ROUTED = "routed"


@dataclass
class APIRequest:
    """The parts of an HTTP request the dispatcher needs."""
    method: str
    path: str
    query: str = ""
    body: bytes = b""
    content_type: Optional[str] = None
    accept: Optional[str] = None
    form: Dict[str, str] = field(default_factory=dict)


@dataclass
class RoutingDecision:
    """Final instruction for the framework's controller dispatch."""
    controller: str
    method: str = "Index"
    arguments: Dict[str, Any] = field(default_factory=dict)
    application: Optional[str] = None


@dataclass
class DispatchResult:
    """Outcome of dispatching one request."""
    state: DispatchState
    route: Optional[RoutingDecision] = None
    error: Optional[APIError] = None
    resource: Optional[str] = None
    treat_as_post: bool = False
    identity: Optional[Identity] = None
    uploads: List[StoredUpload] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> int:
        return self.error.status if self.error else 200


class ApplicationLoader:
    """
    Attaches the application a route belongs to before the controller runs.

    The default implementation only logs the request; frameworks with a
    module loader override ``attach``.
    """

    def attach(self, application: str) -> None:
        logger.debug("application_attached", application=application)


def translate_path(path: str) -> List[str]:
    """Lower-case a request path and split it into segments."""
    path = path.split("?", 1)[0].lower()
    if not path.startswith("/"):
        path = "/" + path
    return path.split("/")


@dataclass
class _Invocation:
    descriptor: DispatchDescriptor
    incoming: Dict[str, str]
    treat_as_post: bool
    uploads: List[StoredUpload]


class Dispatcher:
    """
    Stateless request dispatcher.

    Collaborators are injected so they can be swapped out in tests; one
    instance serves any number of concurrent requests.
    """

    def __init__(
        self,
        registry: ResourceRegistry,
        authenticator: RequestAuthenticator,
        config: Optional[APIConfig] = None,
        application_loader: Optional[ApplicationLoader] = None,
    ):
        self.registry = registry
        self.authenticator = authenticator
        self.config = config or authenticator.config
        self.application_loader = application_loader or ApplicationLoader()

    @classmethod
    def create(
        cls,
        resolver: IdentityResolver,
        config: Optional[APIConfig] = None,
        registry: Optional[ResourceRegistry] = None,
        clock: Callable[[], float] = time.time,
        application_loader: Optional[ApplicationLoader] = None,
    ) -> "Dispatcher":
        config = config or APIConfig()
        return cls(
            registry=registry or create_default_registry(),
            authenticator=RequestAuthenticator(resolver, config, clock=clock),
            config=config,
            application_loader=application_loader,
        )

    def dispatch(
        self,
        request: APIRequest,
        session: Optional[RequestSession] = None,
    ) -> DispatchResult:
        """
        Run the dispatch pipeline for one request.

        Args:
            request: The inbound request
            session: Session for this request; a fresh one if omitted

        Returns:
            DispatchResult with the routing decision or the error that
            stopped the pipeline
        """
        session = session if session is not None else RequestSession()
        path = translate_path(request.path)
        resource = path[1] if len(path) > 1 else ""

        handler = self._resolve_handler(resource)
        if isinstance(handler, APIError):
            return self._fail(DispatchState.PATH_RESOLVED, handler, request, resource)

        invocation = self._invoke_handler(handler, path, request)
        if isinstance(invocation, APIError):
            return self._fail(DispatchState.HANDLER_INVOKED, invocation, request, resource)

        descriptor = invocation.descriptor
        if not descriptor.controller:
            discard_uploads(invocation.uploads, reason=ErrorKind.NO_CONTROLLER.value)
            return self._fail(
                DispatchState.DESCRIPTOR_VALIDATED,
                APIError(ErrorKind.NO_CONTROLLER, detail=type(handler).__name__),
                request,
                resource,
            )

        auth_error = self._decide_auth(descriptor, invocation.incoming, request, session)
        if auth_error is not None:
            discard_uploads(invocation.uploads, reason=auth_error.kind.value)
            return self._fail(DispatchState.AUTH_DECIDED, auth_error, request, resource)

        route = self._route(descriptor)
        logger.info(
            "api_request_dispatched",
            resource=resource,
            verb=request.method.upper(),
            controller=route.controller,
            method=route.method,
            application=route.application,
            user_id=session.user_id,
        )
        return DispatchResult(
            state=DispatchState.ROUTED,
            route=route,
            resource=resource,
            treat_as_post=invocation.treat_as_post,
            identity=session.user_id,
            uploads=invocation.uploads,
        )

    # =========================================================================
    # Stages
    # =========================================================================

    def _resolve_handler(self, resource: str) -> Union[ResourceHandler, APIError]:
        handler = self.registry.lookup(resource) if resource else None
        if handler is None:
            return APIError(ErrorKind.RESOURCE_NOT_FOUND, detail=resource or None)
        return handler

    def _invoke_handler(
        self,
        handler: ResourceHandler,
        path: List[str],
        request: APIRequest,
    ) -> Union[_Invocation, APIError]:
        verb = request.method.lower()
        if verb not in VERBS:
            return not_implemented(f"{request.method.upper()} {handler.name}")

        draft = getattr(handler, verb)(path)
        if isinstance(draft, APIError):
            return draft

        incoming = parse_query(request.query)
        uploads: List[StoredUpload] = []

        if verb == "put":
            body = normalize_body(request.body, request.content_type, self.config.upload_dir)
            uploads = body.uploads
            incoming.update(body.fields)
            arguments = {**body.fields, **draft.arguments}
        elif verb == "post":
            incoming.update(request.form)
            arguments = {**request.form, **draft.arguments}
        else:
            arguments = dict(draft.arguments)

        return _Invocation(
            descriptor=replace(draft, arguments=arguments),
            incoming=incoming,
            treat_as_post=verb in POST_ALIASED_VERBS,
            uploads=uploads,
        )

    def _decide_auth(
        self,
        descriptor: DispatchDescriptor,
        incoming: Dict[str, str],
        request: APIRequest,
        session: RequestSession,
    ) -> Optional[APIError]:
        if session.is_valid():
            return None

        requirement = descriptor.authenticate
        if requirement == AuthRequirement.NONE:
            return None
        if requirement == AuthRequirement.OPTIONAL and not has_login(incoming):
            return None

        result = self.authenticator.authenticate(request.query)
        if not result.allowed:
            return result.error

        session.start(result.identity, persistent=False)
        return None

    def _route(self, descriptor: DispatchDescriptor) -> RoutingDecision:
        route = RoutingDecision(
            controller=descriptor.controller,
            method=descriptor.method or "Index",
            arguments=descriptor.arguments or {},
            application=descriptor.application or None,
        )
        if route.application:
            self.application_loader.attach(route.application)
        return route

    def _fail(
        self,
        state: DispatchState,
        error: APIError,
        request: APIRequest,
        resource: str,
    ) -> DispatchResult:
        log = logger.error if error.kind is ErrorKind.NO_CONTROLLER else logger.warning
        log(
            "api_request_rejected",
            stage=state.value,
            code=error.kind.value,
            family=error.family.value,
            status=error.status,
            resource=resource,
            verb=request.method.upper(),
            detail=error.detail,
        )
        return DispatchResult(state=state, error=error, resource=resource)
