# cinelist/core/exceptions.py
from __future__ import annotations

"""
Cinelist — Application Exceptions
=================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` that
lets us attach structured metadata and integrate cleanly with the JSON error
shape from `cinelist.core.exception_handlers`.

The same classes are raised on both sides of the wire: the API raises them from
services, and the client core (`cinelist.client.api`) maps non-2xx responses
back onto them, so callers branch on one taxonomy.

Taxonomy
--------
- `AuthError`          401  session establishment / magic-link failures
- `NotAMemberError`    403  caller has no membership row for the list
- `PermissionDenied`   403  caller's role does not allow the mutation
- `NotFoundError`      404  missing list / item / content
- `RateLimitedError`   429  too many magic-link requests
- `MigrationError`     500  atomic ownership transfer failed
- `RemoteWriteError`   502  insert/update/delete failure in the remote store
- `DecodeError`        400  malformed shared-list payload
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "AuthError",
    "NotAMemberError",
    "PermissionDenied",
    "NotFoundError",
    "RateLimitedError",
    "MigrationError",
    "RemoteWriteError",
    "DecodeError",
    "exception_for_status",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code.
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : int
        Optional internal/typed error code. Defaults to `status_code`.
    details : dict | list | str | None
        Machine-readable details (ids, constraints).
    """

    default_status: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        code: Optional[int] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        status_code = int(status_code or self.default_status)
        message = message or self.default_message
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.details: Optional[Any] = details

    def __str__(self) -> str:
        return self.message

    def to_problem(self) -> Dict[str, Any]:
        """Return a dict matching our problem-like JSON shape."""
        body: Dict[str, Any] = {"error": True, "message": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


# ──────────────────────────────────────────────────────────────
# 🔑 Identity
# ──────────────────────────────────────────────────────────────
class AuthError(AppException):
    """No usable session, or a sign-in request could not be issued."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"


class RateLimitedError(AuthError):
    """Magic-link requests for one email are throttled."""

    default_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Please wait before requesting another sign-in link."


# ──────────────────────────────────────────────────────────────
# 🔐 List access
# ──────────────────────────────────────────────────────────────
class NotAMemberError(AppException):
    """Caller holds no membership on the list."""

    default_status = status.HTTP_403_FORBIDDEN
    default_message = "You are not a member of this list"


class PermissionDenied(AppException):
    """Caller's role on the list does not allow this action."""

    default_status = status.HTTP_403_FORBIDDEN
    default_message = "Permission denied"

    def __init__(self, *, action: str, role: Optional[str], **kwargs: Any) -> None:
        super().__init__(
            f"Action '{action}' denied for role '{role or 'none'}'",
            details={"action": action, "role": role},
            **kwargs,
        )


class NotFoundError(AppException):
    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


# ──────────────────────────────────────────────────────────────
# 💾 Remote store / migration / payloads
# ──────────────────────────────────────────────────────────────
class RemoteWriteError(AppException):
    """An insert/update/delete against the remote store failed."""

    default_status = status.HTTP_502_BAD_GATEWAY
    default_message = "Remote write failed"


class MigrationError(AppException):
    """The atomic anonymous → authenticated transfer failed (nothing moved)."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "User data migration failed"


class DecodeError(AppException):
    """A shared-list payload could not be decoded."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid shared list payload"


# ──────────────────────────────────────────────────────────────
# ↩️ Status → exception (client side)
# ──────────────────────────────────────────────────────────────
_BY_STATUS = {
    401: AuthError,
    403: NotAMemberError,
    404: NotFoundError,
    429: RateLimitedError,
}


_BY_TITLE = {
    "PermissionDenied": PermissionDenied,
    "MigrationError": MigrationError,
    "DecodeError": DecodeError,
}


def exception_for_status(
    status_code: int,
    message: str,
    *,
    title: Optional[str] = None,
    details: Any = None,
) -> AppException:
    """Map an HTTP error status (and problem `title`) from the API back onto our taxonomy."""
    by_title = _BY_TITLE.get(title or "")
    if by_title is PermissionDenied:
        d = details if isinstance(details, dict) else {}
        return PermissionDenied(action=str(d.get("action") or "unknown"), role=d.get("role"))
    if by_title is not None:
        return by_title(message, status_code=status_code, details=details)
    cls = _BY_STATUS.get(status_code)
    if cls is not None:
        return cls(message, details=details)
    if status_code == 422:
        return AppException(message, status_code=422, details=details)
    if status_code >= 500 or status_code == 409:
        return RemoteWriteError(message, status_code=status_code, details=details)
    return AppException(message, status_code=status_code, details=details)
