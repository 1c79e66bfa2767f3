"""Classification of image backend failures into user-facing guidance.

Rules are evaluated in a fixed order and the first match wins, so the most
actionable kinds (rate limits, outages) take precedence over generic vendor
errors. Each kind maps to exactly one message template; raw error details are
only ever logged, never shown to users.
"""

import re
from dataclasses import dataclass
from enum import Enum

import httpx


class ErrorKind(str, Enum):
    """Fixed set of backend failure kinds."""

    RATE_LIMIT = "RATE_LIMIT"
    SERVER_ERROR = "SERVER_ERROR"
    TIMEOUT = "TIMEOUT"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    AUTH_ERROR = "AUTH_ERROR"
    CAPABILITY_MISMATCH = "CAPABILITY_MISMATCH"
    NETWORK_ERROR = "NETWORK_ERROR"
    SAFETY_REJECTED = "SAFETY_REJECTED"
    BACKEND_ERROR = "BACKEND_ERROR"
    UNKNOWN = "UNKNOWN"


class ImageOperation(str, Enum):
    """Backend operation that failed."""

    GENERATE = "generate"
    EDIT = "edit"


@dataclass(frozen=True)
class ErrorClassification:
    """Classified failure with its user message and retry hint."""

    kind: ErrorKind
    user_message: str
    retryable: bool
    retry_after_seconds: int | None = None


@dataclass(frozen=True)
class _Rule:
    kind: ErrorKind
    retry_after_seconds: int | None
    status_codes: frozenset[int] = frozenset()
    exception_types: tuple[type[BaseException], ...] = ()
    pattern: re.Pattern[str] | None = None

    @property
    def retryable(self) -> bool:
        return self.retry_after_seconds is not None

    def matches(self, exc: BaseException, status: int | None, text: str) -> bool:
        if status is not None and status in self.status_codes:
            return True
        if self.exception_types and isinstance(exc, self.exception_types):
            return True
        return bool(self.pattern and self.pattern.search(text))


def _words(*terms: str) -> re.Pattern[str]:
    return re.compile("|".join(rf"\b{re.escape(term)}\b" for term in terms))


def _phrases(*terms: str) -> re.Pattern[str]:
    return re.compile("|".join(re.escape(term) for term in terms))


_RULES: tuple[_Rule, ...] = (
    _Rule(
        kind=ErrorKind.RATE_LIMIT,
        retry_after_seconds=60,
        status_codes=frozenset({429}),
        pattern=re.compile(
            _words("429").pattern
            + "|"
            + _phrases(
                "quota",
                "rate limit",
                "resource_exhausted",
                "quota_exceeded",
                "too many requests",
            ).pattern
        ),
    ),
    _Rule(
        kind=ErrorKind.SERVER_ERROR,
        retry_after_seconds=120,
        status_codes=frozenset({500, 502, 503, 504}),
        pattern=re.compile(
            _words("500", "502", "503").pattern
            + "|"
            + _phrases(
                "service unavailable",
                "internal server error",
                "unavailable",
                "server_error",
            ).pattern
        ),
    ),
    _Rule(
        kind=ErrorKind.TIMEOUT,
        retry_after_seconds=30,
        exception_types=(TimeoutError, httpx.TimeoutException),
        pattern=_phrases("timeout", "timed out", "etimedout"),
    ),
    _Rule(
        kind=ErrorKind.RESOURCE_NOT_FOUND,
        retry_after_seconds=None,
        status_codes=frozenset({404}),
        pattern=re.compile(_words("404").pattern + "|" + _phrases("not found").pattern),
    ),
    _Rule(
        kind=ErrorKind.AUTH_ERROR,
        retry_after_seconds=None,
        status_codes=frozenset({401, 403}),
        pattern=re.compile(
            _words("401").pattern
            + "|"
            + _phrases(
                "api key",
                "unauthorized",
                "permission denied",
                "invalid_api_key",
                "authentication",
            ).pattern
        ),
    ),
    _Rule(
        kind=ErrorKind.CAPABILITY_MISMATCH,
        retry_after_seconds=None,
        pattern=_phrases(
            "may not support image generation",
            "returned text instead of image",
            "no image data found",
        ),
    ),
    _Rule(
        kind=ErrorKind.NETWORK_ERROR,
        retry_after_seconds=30,
        exception_types=(ConnectionError, httpx.NetworkError),
        pattern=_phrases(
            "network",
            "econnrefused",
            "enotfound",
            "econnreset",
            "connection refused",
            "connection reset",
            "connection error",
        ),
    ),
    _Rule(
        kind=ErrorKind.SAFETY_REJECTED,
        retry_after_seconds=None,
        pattern=_phrases(
            "safety", "content filter", "blocked", "content_policy_violation"
        ),
    ),
    _Rule(
        kind=ErrorKind.BACKEND_ERROR,
        retry_after_seconds=60,
        pattern=_phrases("gemini", "google", "generative", "openai"),
    ),
)

_FALLBACK = _Rule(kind=ErrorKind.UNKNOWN, retry_after_seconds=30)

USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMIT: (
        "The image service is currently busy.\n\n"
        "Please wait a few minutes and try again."
    ),
    ErrorKind.SERVER_ERROR: (
        "The image service is currently unavailable.\n\n"
        "Please wait a few minutes and try again."
    ),
    ErrorKind.TIMEOUT: "Your request timed out.\n\nPlease try again.",
    ErrorKind.RESOURCE_NOT_FOUND: (
        "The requested model is not available.\n\nPlease contact an administrator."
    ),
    ErrorKind.AUTH_ERROR: "Authentication error.\n\nPlease contact an administrator.",
    ErrorKind.CAPABILITY_MISMATCH: (
        "The configured model does not support image generation.\n\n"
        "Please contact an administrator."
    ),
    ErrorKind.NETWORK_ERROR: (
        "Connection error to the image service.\n\nPlease try again shortly."
    ),
    ErrorKind.SAFETY_REJECTED: (
        "Your request was blocked by safety filters.\n\n"
        "Please modify your prompt and try again."
    ),
    ErrorKind.BACKEND_ERROR: (
        "An error occurred with the image service.\n\n"
        "Please wait a few minutes and try again."
    ),
    ErrorKind.UNKNOWN: (
        "An error occurred.\n\nPlease try again or contact an administrator."
    ),
}

RETRY_LATER_HINT = "You can try again later."
NEW_PROMPT_HINT = "You can send a new prompt."
NEW_IMAGE_HINT = "You can send a new image and prompt."


def classify_error(exc: BaseException) -> ErrorClassification:
    """Map a backend failure to its kind, message and retry hint."""
    status = _status_code(exc)
    text = _error_text(exc)
    rule = next(
        (rule for rule in _RULES if rule.matches(exc, status, text)), _FALLBACK
    )
    return ErrorClassification(
        kind=rule.kind,
        user_message=USER_MESSAGES[rule.kind],
        retryable=rule.retryable,
        retry_after_seconds=rule.retry_after_seconds,
    )


def format_failure_message(
    classification: ErrorClassification, operation: ImageOperation
) -> str:
    """Combine the classified message with the retry suffix."""
    if classification.retryable:
        hint = RETRY_LATER_HINT
    elif operation is ImageOperation.EDIT:
        hint = NEW_IMAGE_HINT
    else:
        hint = NEW_PROMPT_HINT
    return f"{classification.user_message}\n\n{hint}"


def _status_code(exc: BaseException) -> int | None:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def _error_text(exc: BaseException) -> str:
    """Collect the searchable text of an error, lower-cased."""
    parts = [str(exc), f"{type(exc).__module__}.{type(exc).__qualname__}"]
    vendor = getattr(exc, "vendor", None)
    if vendor:
        parts.append(str(vendor))
    response = getattr(exc, "response", None)
    if isinstance(response, httpx.Response):
        try:
            parts.append(response.text)
        except httpx.ResponseNotRead:
            pass
    if exc.__cause__ is not None:
        parts.append(str(exc.__cause__))
    return " ".join(parts).lower()
