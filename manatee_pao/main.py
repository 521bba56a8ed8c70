from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Query
from dotenv import load_dotenv
import logging
import sys
import asyncio

# MUST be set before any subprocess/playwright calls on Windows
if sys.platform == 'win32':
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

load_dotenv()

from manatee_pao.agents.browser_pool import BrowserPool
from manatee_pao.config import load_settings
from manatee_pao.errors import ErrorCode, PAOScrapeError, user_message_for
from manatee_pao.models.property_record import LookupResult
from manatee_pao.services.property_search import PropertySearchService

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    ErrorCode.BROWSER_LAUNCH_FAILED: 503,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.BLOCKED: 429,
    ErrorCode.NAVIGATION_FAILED: 502,
    ErrorCode.PARSE_ERROR: 502,
}

settings = load_settings()
pool = BrowserPool(settings)
search_service = PropertySearchService(pool, settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await pool.close()


app = FastAPI(title="Manatee PAO Property API", lifespan=lifespan)


@app.get("/")
async def root():
    return {"message": "Manatee PAO Property API is running", "browser_connected": pool.is_connected}


@app.get("/api/property", response_model=LookupResult)
async def get_property(address: str = Query(..., min_length=3)):
    logger.info(f"API: lookup requested for '{address}'")
    try:
        return await search_service.lookup(address)
    except PAOScrapeError as e:
        logger.error(f"API: lookup failed: {e}")
        raise HTTPException(
            status_code=_STATUS_BY_CODE.get(e.code, 500),
            detail={"error": user_message_for(e), **e.to_dict()},
        )
