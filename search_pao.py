import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from manatee_pao.agents.browser_pool import BrowserPool
from manatee_pao.config import load_settings
from manatee_pao.errors import PAOScrapeError, user_message_for
from manatee_pao.services.property_search import PropertySearchService

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("search_pao")


async def search(address: str, scope: str = None) -> int:
    settings = load_settings()
    if scope:
        settings.scope = scope
    pool = BrowserPool(settings)
    service = PropertySearchService(pool, settings)
    try:
        result = await service.lookup(address)
    except PAOScrapeError as e:
        logger.error(f"Lookup failed: {e}")
        print(user_message_for(e), file=sys.stderr)
        return 2
    finally:
        await pool.close()

    print(result.model_dump_json(indent=2))
    return 0 if result.found else 1


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(description="Look up a Manatee County parcel by street address")
    parser.add_argument("address", help='e.g. "4659 56th Ter E, Bradenton, FL 34208"')
    parser.add_argument("--scope", choices=["basic", "full"], help="extraction depth (default from PAO_SCRAPE_SCOPE)")
    args = parser.parse_args()

    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())
    sys.exit(asyncio.run(search(args.address, args.scope)))


if __name__ == "__main__":
    main()
