"""
Runtime configuration, read from the environment (and a .env file if present).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from alertas.models import Bank

DEFAULT_DB_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "alertas.db")
DEFAULT_GMAIL_API_URL = "https://gmail.googleapis.com/gmail/v1"

# Gmail search queries per bank (known alert sender addresses)
BANK_QUERIES: dict[Bank, str] = {
    Bank.BANCOLOMBIA: (
        "from:alertasynotificaciones@an.notificacionesbancolombia.com "
        "OR from:notificaciones@bancolombia.com.co"
    ),
    Bank.NEQUI: "from:noreply@nequi.com.co OR from:notificaciones@nequi.com.co",
    Bank.DAVIPLATA: "from:daviplata@davivienda.com OR from:noreply@davivienda.com",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    owner: str = ""
    max_results: int = 20
    strip_html: bool = False
    split_multiple: bool = False
    gmail_access_token: Optional[str] = None
    gmail_address: Optional[str] = None
    gmail_api_url: str = DEFAULT_GMAIL_API_URL
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build Settings from environment variables."""
    load_dotenv()

    return Settings(
        db_path=os.getenv("ALERTAS_DB_PATH", DEFAULT_DB_PATH),
        owner=os.getenv("ALERTAS_OWNER", ""),
        max_results=int(os.getenv("ALERTAS_MAX_RESULTS", "20")),
        strip_html=_env_flag("ALERTAS_STRIP_HTML"),
        split_multiple=_env_flag("ALERTAS_SPLIT_MULTIPLE"),
        gmail_access_token=os.getenv("GMAIL_ACCESS_TOKEN") or None,
        gmail_address=os.getenv("GMAIL_ADDRESS") or None,
        gmail_api_url=os.getenv("GMAIL_API_URL", DEFAULT_GMAIL_API_URL).rstrip("/"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
