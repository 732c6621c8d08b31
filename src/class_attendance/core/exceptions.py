from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations.

    Every error carries a stable ``code`` so callers can tell "not allowed"
    from "not found" from "already done" without parsing messages.
    """

    code = "error"
    status_code = 400

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        if code:
            self.code = code


class UnauthorizedError(DomainError):
    """Raised when no usable credential was presented."""

    code = "unauthorized"
    status_code = 401


class AuthenticationError(UnauthorizedError):
    """Raised when login credentials are invalid."""

    code = "invalid_credentials"


class ForbiddenError(DomainError):
    """Raised when the policy denies an action."""

    code = "forbidden"
    status_code = 403


class InvalidCredentialError(ForbiddenError):
    """Raised for a malformed, expired or badly signed bearer token."""

    code = "invalid_credential"


class ConflictError(DomainError):
    code = "conflict"
    status_code = 409


class DuplicateIdentityError(ConflictError):
    code = "duplicate_identity"


class AlreadyCheckedInError(ConflictError):
    code = "already_checked_in"


class AlreadyCheckedOutError(ConflictError):
    code = "already_checked_out"


class NoOpenCheckInError(ConflictError):
    code = "no_open_check_in"


class ClassInUseError(ConflictError):
    code = "class_in_use"


class NotFoundError(DomainError):
    code = "not_found"
    status_code = 404


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "invalid"
    status_code = 400


class NotInClassError(ValidationError):
    code = "not_in_class"


class StoreFailure(DomainError):
    """Underlying storage error, not further classified."""

    code = "store_failure"
    status_code = 500


class DuplicateKeyError(StoreFailure):
    """Unique-key violation reported by the store."""

    code = "duplicate_key"
    status_code = 409
