from __future__ import annotations

import json

from .config import MenuConfig
from .models import MenuCategory

_seed: list[MenuCategory] | None = None


def _load(config: MenuConfig) -> list[MenuCategory]:
    raw = json.loads(config.seed_path.read_text(encoding="utf-8"))
    return [MenuCategory.model_validate(entry) for entry in raw]


def get_seed_menu(config: MenuConfig | None = None) -> list[MenuCategory]:
    """Return the bundled menu, loading it on first call."""
    global _seed
    if _seed is None:
        _seed = _load(config or MenuConfig())
    return [category.model_copy(deep=True) for category in _seed]
