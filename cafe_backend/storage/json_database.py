from __future__ import annotations

import json
import logging
from typing import Any

from ..errors import DatabaseError
from .config import StorageConfig

logger = logging.getLogger(__name__)


def _empty() -> dict[str, Any]:
    return {"carts": {}, "orders": []}


def _initialize(config: StorageConfig) -> dict[str, Any]:
    data = _empty()
    config.db_path.parent.mkdir(parents=True, exist_ok=True)
    config.db_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return data


def read_database(config: StorageConfig | None = None) -> dict[str, Any]:
    """Return the whole database document, creating the file on first use.

    Serverless hosts get an empty document; the stores keep state in memory.
    """
    config = config or StorageConfig.from_env()
    if config.serverless:
        return _empty()

    if not config.db_path.exists():
        return _initialize(config)

    try:
        data = json.loads(config.db_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Database file %s unreadable, reinitialising", config.db_path, exc_info=True)
        return _initialize(config)

    if not isinstance(data, dict):
        return _initialize(config)
    data.setdefault("carts", {})
    data.setdefault("orders", [])
    return data


def write_database(data: dict[str, Any], config: StorageConfig | None = None) -> None:
    config = config or StorageConfig.from_env()
    if config.serverless:
        return

    try:
        config.db_path.parent.mkdir(parents=True, exist_ok=True)
        config.db_path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    except OSError as exc:
        logger.error("Error writing to database %s", config.db_path, exc_info=True)
        raise DatabaseError("Failed to write to database") from exc
