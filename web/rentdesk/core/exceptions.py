from typing import Any, Optional, Dict


class BaseError(Exception):
    """Root of the API errors; rendered as ``{"error": message, "details": {...}}``"""

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseError):
    """Missing entity, or one the caller is not a party to"""

    def __init__(self, entity: str, id: Any = None):
        if id is None:
            message = f"{entity} not found"
            details = {"entity": entity}
        else:
            message = f"{entity} with id {id} not found"
            details = {"entity": entity, "id": id}
        super().__init__(message=message, status_code=404, details=details)


class ValidationError(BaseError):
    """Bad input the request schema could not catch; ``details.field`` names it"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message=message, status_code=400, details={"field": field} if field else {})


class AuthenticationError(BaseError):

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message=message, status_code=401)


class AuthorizationError(BaseError):

    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, status_code=403)


class ConflictError(BaseError):
    """Duplicate invitation, application, signature or board row"""

    def __init__(self, message: str, entity: Optional[str] = None):
        super().__init__(message=message, status_code=409, details={"entity": entity} if entity else {})


class BusinessLogicError(BaseError):
    """A workflow rule was broken; ``details.rule`` carries its code"""

    def __init__(self, message: str, rule: Optional[str] = None, **extra: Any):
        details = {"rule": rule} if rule else {}
        details.update(extra)
        super().__init__(message=message, status_code=422, details=details)


class PaymentError(BusinessLogicError):
    """Card payment that cannot be accepted for the amount billed"""

    def __init__(self, message: str, rule: str, intent_id: Optional[str] = None):
        super().__init__(message, rule=rule, **({"payment_intent_id": intent_id} if intent_id else {}))


class ExternalServiceError(BaseError):
    """Stripe or object storage failed"""

    def __init__(self, service: str, message: str):
        super().__init__(
            message=f"External service error: {message}",
            status_code=503,
            details={"service": service}
        )
