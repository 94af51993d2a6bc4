#!/usr/bin/env python3
"""
Bookshelf API - server entry point

Usage:
    ENV=development python serve.py   # auto-reload, /docs enabled
    python serve.py                   # production settings
"""

import uvicorn

from src.core.config import APP_CONFIG
from src.utils.logger import setup_logger

logger = setup_logger()


def main():
    """Run the ASGI app under uvicorn using APP_CONFIG"""
    host, port, debug = APP_CONFIG["host"], APP_CONFIG["port"], APP_CONFIG["debug"]

    logger.info(f"📚 Bookshelf API on {host}:{port} ({APP_CONFIG['env']})")
    if debug:
        logger.info(f"📖 API Documentation: http://{host}:{port}/docs")

    # Reload needs the import string, not the app object
    uvicorn.run(
        "src.app:app",
        host=host,
        port=port,
        reload=debug,
        access_log=debug,
        log_level="info" if debug else "warning",
    )


if __name__ == "__main__":
    main()
