"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from course_api.config import get_settings
from course_api.application.interfaces import PasswordHasher
from course_api.application.services import RequestRouter
from course_api.domain.entities import AuthContext
from course_api.infrastructure.database.session import get_db_session
from course_api.infrastructure.database.repositories import SQLAlchemyRepositoryFactory
from course_api.infrastructure.security.passwords import BcryptPasswordHasher


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Process-wide hasher configured with the deployment's work factor."""
    return BcryptPasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_auth_context(request: Request) -> AuthContext:
    """Read the caller's role from the header set by the upstream session layer."""
    settings = get_settings()
    role = request.headers.get(settings.auth_role_header)
    return AuthContext(role=role.strip() if role and role.strip() else None)


async def get_request_router(
    session: AsyncSession = Depends(get_db_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> AsyncGenerator[RequestRouter, None]:
    """Provides a RequestRouter whose repositories share the request session."""
    settings = get_settings()
    yield RequestRouter(
        SQLAlchemyRepositoryFactory(session),
        hasher,
        admin_role=settings.admin_role,
        min_secret_length=settings.min_password_length,
        timeout_seconds=settings.request_timeout_seconds,
    )
