from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

from .domain import AggregationMode, DuplicatePolicy

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class Settings(BaseModel):
    store_backend: Literal["inmemory", "json", "dynamodb"] = "inmemory"
    snapshot_path: str | None = None
    ddb_table_name: str | None = None
    event_id: str = Field(default="default", min_length=1)
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.BEST
    aggregation_mode: AggregationMode = AggregationMode.RANK_POINTS
    log_level: str = "INFO"


def load_dotenv_file(repo_root: Path) -> None:
    env_path = repo_root / "config" / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ

    def _get(name: str) -> str | None:
        v = env.get(name, "").strip()
        return v or None

    values = {
        "store_backend": (_get("STORE_BACKEND") or "inmemory").lower(),
        "snapshot_path": _get("SNAPSHOT_PATH"),
        "ddb_table_name": _get("DDB_TABLE_NAME"),
        "event_id": _get("FESTIVAL_EVENT_ID") or "default",
        "duplicate_policy": (_get("DUPLICATE_POLICY") or DuplicatePolicy.BEST.value).lower(),
        "aggregation_mode": (_get("AGGREGATION_MODE") or AggregationMode.RANK_POINTS.value).lower(),
        "log_level": (_get("LOG_LEVEL") or "INFO").upper(),
    }
    return Settings(**values)


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)
