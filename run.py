import logging

import uvicorn

import config
from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

from app import app

# Silence SQL loggers after the app import, SQLAlchemy may reset levels on engine creation
for logger_name in ['aiosqlite', 'sqlalchemy', 'sqlalchemy.engine', 'sqlalchemy.pool', 'sqlalchemy.orm']:
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.CRITICAL)
    logger.propagate = False
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(logging.NullHandler())

logging.info("🔇 SQL loggers silenced (aiosqlite, sqlalchemy.*)")


def main() -> None:
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT)


if __name__ == '__main__':
    main()
