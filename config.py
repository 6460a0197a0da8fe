import logging
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _parse_mapping(raw: str) -> dict:
    mapping = {}
    for pair in raw.split(","):
        if ":" not in pair:
            continue
        locale, code = pair.split(":", 1)
        if locale.strip() and code.strip():
            mapping[locale.strip()] = code.strip().upper()
    return mapping


class Config:
    APP_TITLE = os.environ.get("APP_TITLE", "Cheqii")

    # Locale used when a request does not pass ?locale=
    DEFAULT_LOCALE = os.environ.get("DEFAULT_LOCALE", "en-CA")

    LOCALE_CURRENCIES = {
        "en-CA": "CAD",
        **_parse_mapping(os.environ.get("LOCALE_CURRENCIES", "")),
    }

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", 5000))


config = Config()


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=level or config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
