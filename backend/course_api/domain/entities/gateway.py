"""Transport-neutral request/response objects exchanged with the request router."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AuthContext:
    """Caller identity supplied by the authorization gate before dispatch."""

    role: str | None = None

    def has_role(self, role: str) -> bool:
        return self.role is not None and self.role == role


@dataclass
class GatewayRequest:
    """A parsed inbound request.

    ``body`` is always a dict — the HTTP adapter turns unparseable JSON
    into an empty record.
    """

    method: str
    resource: str | None
    sub_resource: str | None = None
    identifier: str | None = None
    query: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)
    auth: AuthContext = field(default_factory=AuthContext)


@dataclass
class GatewayResponse:
    """Status code plus JSON envelope; ``payload`` is None for empty bodies."""

    status_code: int
    payload: dict[str, Any] | None = None
