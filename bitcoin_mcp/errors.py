"""Error hierarchy and error classification for the Bitcoin MCP server."""
from __future__ import annotations

import functools
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, NoReturn, Optional, TypeVar

import httpx

logger = logging.getLogger(__name__)

NO_RESPONSE_DETAIL = "No response from server. Please check your internet connection."
UNKNOWN_DETAIL = "Unknown error occurred"

T = TypeVar("T")


class ErrorCategory(str, Enum):
    INPUT_INVALID = "InputInvalid"
    NETWORK_TIMEOUT = "NetworkTimeout"
    NO_RESPONSE = "NoResponse"
    UPSTREAM_STATUS = "UpstreamStatusError"
    MALFORMED = "Malformed"
    UNKNOWN = "Unknown"


class CryptoMCPError(Exception):
    """Base error for the Bitcoin MCP server."""


class InvalidInputError(CryptoMCPError):
    """Raised when a caller-supplied argument fails local validation."""


class NoResponseError(CryptoMCPError):
    """Raised when a request was sent but no response came back."""


class NetworkTimeoutError(NoResponseError):
    """Raised when the upstream did not answer within the configured timeout."""


class UpstreamStatusError(CryptoMCPError):
    """Raised when CoinGecko answers with a non-success HTTP status."""

    def __init__(self, status: int, status_text: str) -> None:
        super().__init__(f"{status} {status_text}")
        self.status = status
        self.status_text = status_text


class MalformedResponseError(CryptoMCPError):
    """Raised when CoinGecko answers 2xx with a body of an unexpected shape."""


class ClassifiedError(CryptoMCPError):
    """The single failure shape every capability surfaces."""

    def __init__(
        self,
        operation: str,
        category: ErrorCategory,
        detail: str,
        *,
        status: Optional[int] = None,
        status_text: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.category = category
        self.status = status
        self.status_text = status_text
        self.message = f"{operation} failed: {detail}"
        super().__init__(self.message)


def _status_of(exc: BaseException) -> Optional[tuple]:
    if isinstance(exc, UpstreamStatusError):
        return exc.status, exc.status_text
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code, exc.response.reason_phrase
    return None


def classify(exc: BaseException, operation: str) -> NoReturn:
    """Re-raise ``exc`` as a ClassifiedError bound to ``operation``.

    First match wins: upstream status, no response, local validation or
    malformed body, then anything else.
    """
    if isinstance(exc, ClassifiedError):
        raise exc

    status = _status_of(exc)
    if status is not None:
        code, text = status
        error = ClassifiedError(
            operation,
            ErrorCategory.UPSTREAM_STATUS,
            f"{code} {text}",
            status=code,
            status_text=text,
        )
    elif isinstance(exc, (NetworkTimeoutError, httpx.TimeoutException)):
        error = ClassifiedError(operation, ErrorCategory.NETWORK_TIMEOUT, NO_RESPONSE_DETAIL)
    elif isinstance(exc, (NoResponseError, httpx.RequestError)):
        error = ClassifiedError(operation, ErrorCategory.NO_RESPONSE, NO_RESPONSE_DETAIL)
    elif isinstance(exc, InvalidInputError):
        error = ClassifiedError(operation, ErrorCategory.INPUT_INVALID, str(exc) or UNKNOWN_DETAIL)
    elif isinstance(exc, MalformedResponseError):
        error = ClassifiedError(operation, ErrorCategory.MALFORMED, str(exc) or UNKNOWN_DETAIL)
    else:
        error = ClassifiedError(operation, ErrorCategory.UNKNOWN, str(exc) or UNKNOWN_DETAIL)

    logger.warning("%s [%s]", error.message, error.category.value)
    raise error from exc


def _render_label(label: str, signature: inspect.Signature, args: tuple, kwargs: dict) -> str:
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        return label
    bound.apply_defaults()
    try:
        return label.format(**bound.arguments)
    except (KeyError, IndexError, ValueError):
        return label


def operation(label: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Build a capability from an async body that fails only with ClassifiedError.

    ``label`` names the operation in error messages and may refer to the
    body's arguments, e.g. ``"Searching for '{name}'"``.
    """

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        signature = inspect.signature(fn)

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            op = _render_label(label, signature, args, kwargs)
            try:
                return await fn(*args, **kwargs)
            except Exception as exc:
                classify(exc, op)

        return wrapper

    return decorator
