"""
Unified base exception classes for the service layer.

Every error carries the HTTP status the API layer answers with, so routers
never translate error types by hand. Internal failures (500) keep the
underlying cause for logging but expose only a generic message.
"""

INTERNAL_ERROR_MESSAGE = "internal server error"


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InternalServiceError(ServiceError):
    """Failure of an infrastructure dependency (hashing, tokens, storage)."""

    def __init__(self, detail: str, status_code: int = 500):
        self.detail = detail
        super().__init__(INTERNAL_ERROR_MESSAGE, status_code)


# --- 400 ---

class EmailTakenError(ServiceError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("email already registered", 400)


class InvalidReferralCodeError(ServiceError):
    def __init__(self):
        super().__init__("invalid referral code", 400)


# --- 401 ---

class InvalidCredentialsError(ServiceError):
    def __init__(self):
        super().__init__("invalid credentials", 401)


class InvalidTokenError(ServiceError):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, 401)


# --- 404 ---

class UserNotFoundError(ServiceError):
    def __init__(self, user_ref):
        self.user_ref = user_ref
        super().__init__("user not found", 404)


class CodeExpiredError(ServiceError):
    def __init__(self):
        super().__init__("referral code expired", 404)


class NoCodeFoundError(ServiceError):
    def __init__(self):
        super().__init__("no referral code found", 404)


# --- 409 ---

class ConflictError(ServiceError):
    """A uniqueness constraint in the store rejected the write."""

    def __init__(self, message: str = "resource already exists"):
        super().__init__(message, 409)


# --- 500 ---

class HashingError(InternalServiceError):
    pass


class TokenIssuanceError(InternalServiceError):
    pass


class PersistenceError(InternalServiceError):
    pass
