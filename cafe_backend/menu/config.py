from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

logger = logging.getLogger(__name__)


def _cache_ttl_from_env() -> float:
    raw = os.getenv("MENU_CACHE_TTL_SECONDS")
    if not raw:
        return 0.0
    try:
        value = float(raw)
    except ValueError:
        value = -1.0
    if value < 0:
        logger.warning("Invalid MENU_CACHE_TTL_SECONDS %r, menu caching disabled", raw)
        return 0.0
    return value


@dataclass(frozen=True)
class MenuConfig:
    source: str = "local"
    seed_path: Path = Path(__file__).resolve().parent.parent / "data" / "menu.json"
    cache_ttl_seconds: float = 0.0
    fallback_image: str = "/images/menu/drinks/american.png"

    @classmethod
    def from_env(cls) -> "MenuConfig":
        return cls(
            source=os.getenv("MENU_SOURCE", "local").strip().lower(),
            cache_ttl_seconds=_cache_ttl_from_env(),
        )
