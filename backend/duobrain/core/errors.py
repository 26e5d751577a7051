# duobrain/core/errors.py
"""Domain exceptions raised by the service layer.

create_app() registers handlers that turn these into JSON responses, so
services never build HTTP responses themselves.
"""


class DomainError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(DomainError):
    """Entity is absent or belongs to another user (the two are not distinguished)."""
    status_code = 404


class BusinessRuleError(DomainError):
    status_code = 400


class ExternalServiceError(DomainError):
    """Mail or generative API failure; the upstream message is logged, not returned."""
    status_code = 500
