import os
import logging
from typing import Optional
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseModel):
    nav_timeout_ms: int = 45000
    operation_timeout_ms: int = 60000
    tab_wait_ms: int = 5000
    scope: str = "full"
    headless: bool = True
    ws_endpoint: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    exa_api_key: Optional[str] = None

    @property
    def operation_timeout_s(self) -> float:
        return self.operation_timeout_ms / 1000.0


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Config: {name}={raw!r} is not an integer, using default {default}")
        return default
    if value <= 0:
        logger.warning(f"Config: {name}={value} must be positive, using default {default}")
        return default
    return value


def load_settings() -> Settings:
    """
    Reads pipeline settings from the environment. Entry points call
    load_dotenv() first so a local .env file is honored.
    """
    scope = (os.getenv("PAO_SCRAPE_SCOPE") or "full").strip().lower()
    if scope not in ("full", "basic"):
        logger.warning(f"Config: unknown PAO_SCRAPE_SCOPE {scope!r}, using 'full'")
        scope = "full"

    return Settings(
        nav_timeout_ms=_int_env("PAO_NAV_TIMEOUT_MS", 45000),
        operation_timeout_ms=_int_env("PAO_SCRAPE_TIMEOUT_MS", 60000),
        tab_wait_ms=_int_env("PAO_TAB_WAIT_MS", 5000),
        scope=scope,
        headless=os.getenv("PLAYWRIGHT_HEADLESS", "true").strip().lower() != "false",
        ws_endpoint=os.getenv("PLAYWRIGHT_WS_ENDPOINT") or None,
        user_agent=os.getenv("PAO_USER_AGENT") or DEFAULT_USER_AGENT,
        exa_api_key=os.getenv("EXA_API_KEY") or None,
    )
