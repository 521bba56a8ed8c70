import asyncio
import os
import sys
import uvicorn
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("run_backend")

async def main():
    if sys.platform == 'win32':
        logger.info("FORCING ProactorEventLoopPolicy for Windows...")
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

    port = int(os.getenv("PORT", "8000"))
    config = uvicorn.Config("manatee_pao.main:app", host="0.0.0.0", port=port, loop="asyncio")
    server = uvicorn.Server(config)

    logger.info(f"Starting Uvicorn Server on port {port}...")
    await server.serve()

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Server stopped")
