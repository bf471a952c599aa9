"""Mapping of tracker failures to user-facing messages."""

from __future__ import annotations

from ticketbridge.core.contracts.exceptions import NotFoundError, ProviderError, TicketBridgeError

_MESSAGE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("401", "unauthorized"), "Invalid credentials. Check your API token in settings."),
    (("403", "forbidden"), "You don't have permission for this action."),
    (("404", "not found"), "Resource not found. Check if the issue or project exists."),
    (
        ("net::", "network", "enotfound", "fetch failed", "connecterror", "name or service not known"),
        "Cannot reach Jira. Check your internet connection.",
    ),
    (("429", "rate limit"), "Too many requests. Please wait a moment and try again."),
    (("500", "502", "503", "internal server"), "Jira server error. Please try again later."),
    (("timeout", "timed out", "aborted"), "Request timed out. Check your connection and try again."),
)
_FALLBACK_MESSAGE = "An unexpected error occurred. Please try again."


def is_not_found(exc: BaseException) -> bool:
    """True for remote "not found" failures, including opaque errors carrying a 404 token.

    Local failures (settings, note store) never count, whatever their message says.
    """
    if isinstance(exc, NotFoundError):
        return True
    if isinstance(exc, TicketBridgeError) and not isinstance(exc, ProviderError):
        return False
    return "404" in str(exc)


def describe_error(error: BaseException | str) -> str:
    """User-facing sentence for an exception, or for an error message kept from one."""
    message = (error if isinstance(error, str) else f"{type(error).__name__} {error}").lower()
    for needles, description in _MESSAGE_RULES:
        if any(needle in message for needle in needles):
            return description
    if "invalid" in message and "json" in message:
        return "Invalid response from Jira. Please try again."
    return _FALLBACK_MESSAGE
