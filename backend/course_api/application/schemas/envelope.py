"""Pydantic DTO for the uniform JSON response envelope."""

from typing import Any

from pydantic import BaseModel


class Envelope(BaseModel):
    """``{"success": bool, "data"?: ..., "message"?: ..., "missing"?: [...]}``.

    Only the keys explicitly passed to the constructor are rendered.
    """

    success: bool
    data: Any = None
    message: str | None = None
    missing: list[str] | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)

    @classmethod
    def ok(cls, data: Any = None, message: str | None = None) -> "Envelope":
        kwargs: dict[str, Any] = {"success": True}
        if data is not None:
            kwargs["data"] = data
        if message is not None:
            kwargs["message"] = message
        return cls(**kwargs)

    @classmethod
    def error(cls, message: str, missing: list[str] | None = None) -> "Envelope":
        if missing:
            return cls(success=False, message=message, missing=missing)
        return cls(success=False, message=message)
