from __future__ import annotations

import asyncio
import logging

import uvicorn

from activid.config import load_settings
from activid.logging_config import setup_logging
from activid.db.engine import Database
from activid.web.app import create_web_app

logger = logging.getLogger("activid.main")

async def run_web(settings, database: Database):
    app = create_web_app(settings=settings, database=database)
    config = uvicorn.Config(app, host=settings.web_host, port=settings.web_port, log_level=settings.log_level.lower())
    server = uvicorn.Server(config)
    await server.serve()

async def main():
    settings = load_settings()
    setup_logging(settings.log_level)

    database = Database(settings.database_url)

    if not settings.session_secret:
        logger.warning("INVITATION_REGISTER_SESSION_SECRET is not set; register sessions are disabled")
    if not settings.imagekit_public_key or not settings.imagekit_private_key:
        logger.warning("ImageKit keys are not set; upload authorization will fail")

    logger.info("Web server listening on %s:%s", settings.web_host, settings.web_port)
    await run_web(settings, database)

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
