from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    BROWSER_LAUNCH_FAILED = "BROWSER_LAUNCH_FAILED"
    NAVIGATION_FAILED = "NAVIGATION_FAILED"
    TIMEOUT = "TIMEOUT"
    BLOCKED = "BLOCKED"
    PARSE_ERROR = "PARSE_ERROR"


_USER_MESSAGES = {
    ErrorCode.BLOCKED: "The property search service detected automated access. Please try again later.",
    ErrorCode.TIMEOUT: "Property search timed out. The Manatee County website may be slow. Please try again.",
    ErrorCode.BROWSER_LAUNCH_FAILED: "Property search service is temporarily unavailable. Please try again later.",
    ErrorCode.NAVIGATION_FAILED: "Could not reach the Manatee County Property Appraiser website. Please try again.",
    ErrorCode.PARSE_ERROR: "The property appraiser page had an unexpected layout. Please try again later.",
}


class PAOScrapeError(Exception):
    """
    Raised by the browser pipeline. Carries enough context (address, page URL
    and pipeline step) to diagnose a failure without blindly retrying.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        address: Optional[str] = None,
        url: Optional[str] = None,
        step: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.address = address
        self.url = url
        self.step = step
        self.cause = cause

    @property
    def retryable(self) -> bool:
        """Transient failures the caller may retry as a whole request."""
        return self.code in (ErrorCode.NAVIGATION_FAILED, ErrorCode.TIMEOUT)

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "address": self.address,
            "url": self.url,
            "step": self.step,
        }

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.step:
            parts.append(f"step={self.step}")
        if self.url:
            parts.append(f"url={self.url}")
        if self.address:
            parts.append(f"address={self.address!r}")
        return " ".join(parts)


def user_message_for(error: Exception) -> str:
    """Maps a pipeline error to text suitable for showing an end user."""
    if isinstance(error, PAOScrapeError):
        return _USER_MESSAGES.get(error.code, error.message)

    text = str(error).lower()
    if "429" in text or "rate limit" in text or "too many requests" in text:
        return "Property search rate limit exceeded. Please wait a few minutes and try again."
    if "timeout" in text or "timed out" in text:
        return _USER_MESSAGES[ErrorCode.TIMEOUT]
    return "An unexpected error occurred while searching for the property."
