"""Request router — maps (method, resource, sub-resource, identifier) to one handler.

The router is transport-neutral: the HTTP layer hands it a ``GatewayRequest``
and writes back the ``GatewayResponse``. Every outcome, errors included, is a
JSON envelope with a stable ``success`` flag.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from course_api.application.interfaces import PasswordHasher, RepositoryFactory
from course_api.application.schemas import Envelope
from course_api.application.services.comment_service import CommentService
from course_api.application.services.credential_service import CredentialService
from course_api.application.services.record_service import RecordService
from course_api.application.validation import DEFAULT_MIN_SECRET_LENGTH, is_blank
from course_api.domain.catalog import RESOURCE_CATALOG
from course_api.domain.entities import (
    GatewayRequest,
    GatewayResponse,
    ResourceDescriptor,
)
from course_api.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    MethodNotAllowedError,
    UnauthorizedError,
    UnknownResourceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

SUB_RESOURCE_COMMENTS = "comments"
SUB_RESOURCE_CREDENTIAL = "credential"
CREDENTIAL_ACTION_CHANGE = "change"
# Older clients POST to the collection with ?action=change_password
LEGACY_CHANGE_PASSWORD_ACTION = "change_password"

INTERNAL_ERROR_MESSAGE = "Internal server error"
TIMEOUT_MESSAGE = "Request timed out"


class RequestRouter:
    """Dispatches one gateway request; holds no state between requests."""

    def __init__(
        self,
        repositories: RepositoryFactory,
        hasher: PasswordHasher,
        *,
        catalog: Mapping[str, ResourceDescriptor] = RESOURCE_CATALOG,
        admin_role: str = "admin",
        min_secret_length: int = DEFAULT_MIN_SECRET_LENGTH,
        timeout_seconds: float | None = None,
    ) -> None:
        self._repositories = repositories
        self._hasher = hasher
        self._catalog = catalog
        self._admin_role = admin_role
        self._min_secret_length = min_secret_length
        self._timeout_seconds = timeout_seconds

    async def dispatch(self, request: GatewayRequest) -> GatewayResponse:
        method = request.method.upper()
        if method == "OPTIONS":
            return GatewayResponse(status_code=200)

        try:
            if self._timeout_seconds:
                return await asyncio.wait_for(
                    self._route(method, request), timeout=self._timeout_seconds
                )
            return await self._route(method, request)
        except asyncio.TimeoutError:
            logger.error(
                "%s %s timed out after %.1fs", method, request.resource, self._timeout_seconds
            )
            return _respond(500, Envelope.error(TIMEOUT_MESSAGE))
        except (
            ValidationError,
            UnauthorizedError,
            EntityNotFoundError,
            MethodNotAllowedError,
            DuplicateEntityError,
        ) as exc:
            return _render_domain_error(exc)
        except Exception:
            logger.exception("Unhandled error while serving %s %s", method, request.resource)
            return _respond(500, Envelope.error(INTERNAL_ERROR_MESSAGE))

    # ── Resolution ───────────────────────────────────────────────────

    async def _route(self, method: str, request: GatewayRequest) -> GatewayResponse:
        token = (request.resource or "").strip().lower()
        descriptor = self._catalog.get(token)
        if descriptor is None:
            raise UnknownResourceError(request.resource)

        if descriptor.privileged and not request.auth.has_role(self._admin_role):
            raise UnauthorizedError()

        sub = (request.sub_resource or "").strip().lower() or None
        if sub is None:
            return await self._handle_records(descriptor, method, request)
        if sub == SUB_RESOURCE_COMMENTS and descriptor.has_comments:
            return await self._handle_comments(descriptor, method, request)
        if sub == SUB_RESOURCE_CREDENTIAL and descriptor.has_credential:
            return await self._handle_credential(descriptor, method, request)
        raise ValidationError(f"Unknown sub-resource '{request.sub_resource}' for {descriptor.name}")

    def _identifier(self, descriptor: ResourceDescriptor, request: GatewayRequest) -> str | None:
        for candidate in (
            request.identifier,
            request.query.get("id"),
            request.query.get(descriptor.key_field),
        ):
            if not is_blank(candidate):
                return candidate
        return None

    # ── Handlers ─────────────────────────────────────────────────────

    async def _handle_records(
        self,
        descriptor: ResourceDescriptor,
        method: str,
        request: GatewayRequest,
    ) -> GatewayResponse:
        service = RecordService(
            descriptor,
            self._repositories.records(descriptor),
            self._hasher,
            min_secret_length=self._min_secret_length,
        )
        identifier = self._identifier(descriptor, request)

        if method == "GET":
            if identifier is not None:
                record = await service.get_record(identifier)
                return _respond(200, Envelope.ok(data=record.to_dict()))
            records = await service.list_records(request.query)
            return _respond(200, Envelope.ok(data=[r.to_dict() for r in records]))

        if method == "POST":
            if (
                request.query.get("action") == LEGACY_CHANGE_PASSWORD_ACTION
                and descriptor.has_credential
            ):
                return await self._change_password(descriptor, request, identifier)
            record = await service.create_record(request.body)
            return _respond(
                201, Envelope.ok(data=record.to_dict(), message=f"{descriptor.label} created")
            )

        if method == "PUT":
            record = await service.update_record(request.body, fallback_key=identifier)
            return _respond(
                200, Envelope.ok(data=record.to_dict(), message=f"{descriptor.label} updated")
            )

        if method == "DELETE":
            raw_key = identifier if identifier is not None else request.body.get(descriptor.key_field)
            await service.delete_record(raw_key)
            return _respond(200, Envelope.ok(message=f"{descriptor.label} deleted"))

        raise MethodNotAllowedError(method)

    async def _handle_comments(
        self,
        descriptor: ResourceDescriptor,
        method: str,
        request: GatewayRequest,
    ) -> GatewayResponse:
        service = CommentService(
            descriptor,
            self._repositories.comments(descriptor),
            self._repositories.records(descriptor),
        )

        if method == "GET":
            parent = service.parent_from(request.query)
            if is_blank(parent):
                parent = request.identifier
            comments = await service.list_comments(parent)
            return _respond(200, Envelope.ok(data=[c.to_dict() for c in comments]))

        if method == "POST":
            data: dict[str, Any] = dict(request.body)
            if is_blank(service.parent_from(data)):
                data["parent"] = service.parent_from(request.query)
            comment = await service.create_comment(data)
            return _respond(201, Envelope.ok(data=comment.to_dict(), message="Comment added"))

        if method == "DELETE":
            raw_id = request.query.get("id")
            if is_blank(raw_id):
                raw_id = request.identifier
            if is_blank(raw_id):
                raw_id = request.body.get("id")
            await service.delete_comment(raw_id)
            return _respond(200, Envelope.ok(message="Comment deleted"))

        raise MethodNotAllowedError(method)

    async def _handle_credential(
        self,
        descriptor: ResourceDescriptor,
        method: str,
        request: GatewayRequest,
    ) -> GatewayResponse:
        if method != "POST":
            raise MethodNotAllowedError(method)

        action = (request.query.get("action") or "").strip().lower()
        if action != CREDENTIAL_ACTION_CHANGE:
            raise ValidationError("Unsupported credential action")
        return await self._change_password(
            descriptor, request, self._identifier(descriptor, request)
        )

    async def _change_password(
        self,
        descriptor: ResourceDescriptor,
        request: GatewayRequest,
        identifier: str | None,
    ) -> GatewayResponse:
        service = CredentialService(
            descriptor,
            self._repositories.records(descriptor),
            self._hasher,
            min_secret_length=self._min_secret_length,
        )
        await service.change_password(request.body, fallback_key=identifier)
        return _respond(200, Envelope.ok(message="Password updated"))


# ── Rendering ────────────────────────────────────────────────────────


def _respond(status_code: int, envelope: Envelope) -> GatewayResponse:
    return GatewayResponse(status_code=status_code, payload=envelope.to_payload())


def _render_domain_error(exc: Exception) -> GatewayResponse:
    if isinstance(exc, ValidationError):
        return _respond(400, Envelope.error(exc.message, missing=exc.missing))
    if isinstance(exc, UnauthorizedError):
        return _respond(401, Envelope.error(exc.message))
    if isinstance(exc, EntityNotFoundError):
        return _respond(404, Envelope.error(f"{exc.entity_type} not found"))
    if isinstance(exc, MethodNotAllowedError):
        return _respond(405, Envelope.error("Method not allowed"))
    if isinstance(exc, DuplicateEntityError):
        return _respond(409, Envelope.error(str(exc)))
    raise TypeError(f"Not a domain error: {exc!r}")
