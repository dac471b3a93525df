import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Held at WARNING regardless of LOG_LEVEL.
NOISY_LOGGERS = ("aiogram.event", "pymongo", "motor", "spotipy", "urllib3")


def configure_logging(level: str = None):
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("MusicBot").info(f"📝 Logging initialized (level={level})")
