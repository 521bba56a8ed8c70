import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# (lowercase marker, reason) pairs. Checked against the raw page HTML.
BLOCKING_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("recaptcha", "CAPTCHA challenge"),
    ("hcaptcha", "CAPTCHA challenge"),
    ("solve this captcha", "CAPTCHA challenge"),
    ("complete the captcha", "CAPTCHA challenge"),
    ("verify you are human", "Human verification"),
    ("prove you're not a robot", "Human verification"),
    ("i'm not a robot", "Human verification"),
    ("checking your browser", "Cloudflare challenge"),
    ("ray id:", "Cloudflare challenge"),
    ("enable javascript and cookies", "Cloudflare challenge"),
    ("access to this page has been denied", "Access denied"),
    ("you have been blocked", "Access denied"),
    ("your ip has been blocked", "Access denied"),
    ("your access has been blocked", "Access denied"),
    ("rate limit exceeded", "Rate limited"),
    ("too many requests", "Rate limited"),
    ("please slow down", "Rate limited"),
    ("automated access", "Bot detected"),
    ("unusual traffic", "Bot detected"),
    ("suspicious activity", "Bot detected"),
)

# Cloudflare interstitial titles
_CHALLENGE_TITLES = ("just a moment", "attention required")


def detect_blocking(content: Optional[str], title: Optional[str] = None) -> Optional[str]:
    """
    Classifies page content as a bot challenge / block page.

    Returns a short reason string when the page is blocked, or None for a
    normal page.
    """
    if title:
        lowered_title = title.strip().lower()
        for marker in _CHALLENGE_TITLES:
            if lowered_title.startswith(marker):
                return "Cloudflare challenge"

    if not content:
        return None

    lowered = content.lower()
    for marker, reason in BLOCKING_PATTERNS:
        if marker in lowered:
            logger.warning(f"Blocking detector: matched '{marker}' ({reason})")
            return reason
    return None


def is_blocked(content: Optional[str], title: Optional[str] = None) -> bool:
    return detect_blocking(content, title) is not None
