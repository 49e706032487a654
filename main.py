"""
CryptoPulse — Main Entry Point
Serves the dashboard API and its background refresh loop.
"""
import uvicorn
from cryptopulse.config.settings import get_settings
from cryptopulse.utils.logger import setup_logging, get_logger

logger = get_logger("main")


def run_api():
    """Run the FastAPI application."""
    settings = get_settings()
    setup_logging()
    logger.info("starting_cryptopulse", version=settings.version, port=settings.port)
    uvicorn.run(
        "cryptopulse.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run_api()
