from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StorageConfig:
    db_path: Path = Path("data") / "database.json"
    serverless: bool = False

    @classmethod
    def from_env(cls) -> "StorageConfig":
        serverless = (
            os.getenv("NETLIFY") == "true"
            or os.getenv("VERCEL") == "1"
            or os.getenv("AWS_LAMBDA_FUNCTION_NAME") is not None
        )
        return cls(
            db_path=Path(os.getenv("CAFE_DB_PATH", str(cls.db_path))),
            serverless=serverless,
        )
