from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

logger = logging.getLogger(__name__)

_REQUIRED_VARS = ("ODOO_HOST", "ODOO_DB", "ODOO_USERNAME")
DEFAULT_TIMEOUT_MS = 20000


def _timeout_ms_from_env() -> int:
    raw = os.getenv("ODOO_TIMEOUT_MS")
    if not raw:
        return DEFAULT_TIMEOUT_MS
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        logger.warning("Invalid ODOO_TIMEOUT_MS %r, using %d", raw, DEFAULT_TIMEOUT_MS)
        return DEFAULT_TIMEOUT_MS
    return value


@dataclass(frozen=True)
class OdooConfig:
    host: str
    db: str
    username: str
    password: str
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    insecure_ssl: bool = False

    @property
    def base_url(self) -> str:
        return self.host.rstrip("/")

    def record_url(self, model: str, record_id: int) -> str:
        return f"{self.base_url}/web#model={model}&id={record_id}&view_type=form"

    @classmethod
    def from_env(cls) -> "OdooConfig | None":
        if not is_odoo_configured():
            return None
        return cls(
            host=os.environ["ODOO_HOST"],
            db=os.environ["ODOO_DB"],
            username=os.environ["ODOO_USERNAME"],
            password=os.getenv("ODOO_API_KEY") or os.environ["ODOO_PASSWORD"],
            timeout_ms=_timeout_ms_from_env(),
            insecure_ssl=os.getenv("ODOO_INSECURE_SSL", "").lower() == "true",
        )


def is_odoo_configured() -> bool:
    """True when every ODOO_* variable needed to authenticate is set."""
    if not all(os.getenv(var) for var in _REQUIRED_VARS):
        return False
    return bool(os.getenv("ODOO_API_KEY") or os.getenv("ODOO_PASSWORD"))
