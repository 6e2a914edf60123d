"""Gateway endpoints — one HTTP surface for every resource family.

The path is ``/{resource}`` or ``/{resource}/{segment}`` where ``segment`` is
either a sub-resource (``comments``, ``credential``) or a record identifier.
All routing decisions beyond that are made by the ``RequestRouter``.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from course_api.application.services import RequestRouter
from course_api.application.services.request_router import (
    SUB_RESOURCE_COMMENTS,
    SUB_RESOURCE_CREDENTIAL,
)
from course_api.domain.entities import AuthContext, GatewayRequest, GatewayResponse
from course_api.infrastructure.database.session import get_db_session
from course_api.infrastructure.dependencies import get_auth_context, get_request_router

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Gateway"])

GATEWAY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
_SUB_RESOURCES = frozenset({SUB_RESOURCE_COMMENTS, SUB_RESOURCE_CREDENTIAL})


async def _read_body(request: Request) -> dict[str, Any]:
    """Parse the JSON body; anything that is not a JSON object becomes ``{}``."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, ValueError):
        logger.debug("Ignoring unparseable request body on %s", request.url.path)
        return {}
    return data if isinstance(data, dict) else {}


async def _serve(
    request: Request,
    resource: str | None,
    segment: str | None,
    gateway: RequestRouter,
    session: AsyncSession,
    auth: AuthContext,
) -> Response:
    sub_resource = segment if segment in _SUB_RESOURCES else None
    identifier = segment if sub_resource is None else None

    outcome: GatewayResponse = await gateway.dispatch(
        GatewayRequest(
            method=request.method,
            resource=resource,
            sub_resource=sub_resource,
            identifier=identifier,
            query=dict(request.query_params),
            body=await _read_body(request),
            auth=auth,
        )
    )

    # Nothing from a failed request may be committed
    if outcome.status_code >= 500:
        await session.rollback()

    if outcome.payload is None:
        return Response(status_code=outcome.status_code)
    return JSONResponse(status_code=outcome.status_code, content=outcome.payload)


@router.api_route("/", methods=GATEWAY_METHODS, include_in_schema=False)
async def gateway_root(
    request: Request,
    gateway: RequestRouter = Depends(get_request_router),
    session: AsyncSession = Depends(get_db_session),
    auth: AuthContext = Depends(get_auth_context),
) -> Response:
    """Requests without a resource token; always rejected by the router."""
    return await _serve(request, None, None, gateway, session, auth)


@router.api_route("/{resource}", methods=GATEWAY_METHODS)
async def gateway_collection(
    resource: str,
    request: Request,
    gateway: RequestRouter = Depends(get_request_router),
    session: AsyncSession = Depends(get_db_session),
    auth: AuthContext = Depends(get_auth_context),
) -> Response:
    """List/create records, or update/delete with the key in the body or query."""
    return await _serve(request, resource, None, gateway, session, auth)


@router.api_route("/{resource}/{segment}", methods=GATEWAY_METHODS)
async def gateway_member(
    resource: str,
    segment: str,
    request: Request,
    gateway: RequestRouter = Depends(get_request_router),
    session: AsyncSession = Depends(get_db_session),
    auth: AuthContext = Depends(get_auth_context),
) -> Response:
    """Single-record operations, comments and the credential action."""
    return await _serve(request, resource, segment, gateway, session, auth)
