import asyncio
import logging
import sys

from bloodlink.api import create_app, start_api_server
from bloodlink.config import settings
from bloodlink.db import SessionLocal, init_db
from bloodlink.services.demo import seed_demo_data


def setup_logging() -> None:
    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = settings.LOG_DIR / "bloodlink.log"

    # Root logger writes both to console and to the log file
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


async def main():
    setup_logging()
    logging.info("BloodLink starting…")

    await init_db()

    if settings.SEED_DEMO_DATA:
        async with SessionLocal() as session:
            await seed_demo_data(session)

    await start_api_server(create_app(SessionLocal))


def run() -> None:
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass


if __name__ == "__main__":
    run()
