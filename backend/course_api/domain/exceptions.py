"""Domain-specific exceptions — framework-independent."""


class ValidationError(Exception):
    """Raised when request input is missing or malformed."""

    def __init__(self, message: str, missing: list[str] | None = None):
        self.message = message
        self.missing = missing
        super().__init__(message)


class UnknownResourceError(ValidationError):
    """Raised when a request names a resource family the gateway does not serve."""

    def __init__(self, token: str | None):
        self.token = token
        super().__init__(f"Unknown resource '{token or ''}'")


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class UnauthorizedError(Exception):
    """Raised on a credential mismatch or when the caller lacks the required role."""

    def __init__(self, message: str = "Unauthorized"):
        self.message = message
        super().__init__(message)


class MethodNotAllowedError(Exception):
    """Raised when a resolvable target does not support the request method."""

    def __init__(self, method: str):
        self.method = method
        super().__init__("Method not allowed")
