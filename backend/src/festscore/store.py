from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Protocol

import boto3
import pydantic
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from .config import Settings
from .domain import Child, ClassGameAssignment, Game, Group, Result, Snapshot
from .errors import SnapshotUnavailableError


class SnapshotProvider(Protocol):
    def load_snapshot(self) -> Snapshot: ...


@dataclass
class InMemorySnapshotProvider(SnapshotProvider):
    snapshot: Snapshot = field(default_factory=Snapshot)

    @classmethod
    def create(cls, snapshot: Snapshot | None = None) -> "InMemorySnapshotProvider":
        return cls(snapshot=snapshot or Snapshot())

    def load_snapshot(self) -> Snapshot:
        return self.snapshot


@dataclass
class JsonFileSnapshotProvider(SnapshotProvider):
    """Reads a JSON document with ``games``, ``groups``, ``children``,
    ``assignments`` and ``results`` lists."""

    path: Path

    def load_snapshot(self) -> Snapshot:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotUnavailableError(f"cannot read snapshot {self.path}: {e}") from e
        try:
            snapshot = Snapshot.model_validate(data)
        except pydantic.ValidationError as e:
            raise SnapshotUnavailableError(f"malformed snapshot {self.path}: {e}") from e
        logger.info(f"loaded snapshot from {self.path}: {len(snapshot.results)} results")
        return snapshot


@dataclass
class DynamoDBSnapshotProvider(SnapshotProvider):
    table_name: str
    event_id: str = "default"

    @classmethod
    def from_settings(cls, settings: Settings) -> "DynamoDBSnapshotProvider":
        if not settings.ddb_table_name:
            raise RuntimeError("DDB_TABLE_NAME is required for dynamodb store")
        return cls(table_name=settings.ddb_table_name, event_id=settings.event_id)

    @property
    def _table(self):
        ddb = boto3.resource("dynamodb")
        return ddb.Table(self.table_name)

    def _query(self, prefix: str) -> list[dict[str, Any]]:
        table = self._table
        condition = Key("pk").eq(f"EVENT#{self.event_id}") & Key("sk").begins_with(prefix)
        kwargs: dict[str, Any] = {"KeyConditionExpression": condition}
        items: list[dict[str, Any]] = []
        while True:
            resp = table.query(**kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def load_snapshot(self) -> Snapshot:
        try:
            raw = {kind: self._query(prefix) for kind, prefix in _SK_PREFIXES.items()}
        except (BotoCoreError, ClientError) as e:
            raise SnapshotUnavailableError(f"cannot query {self.table_name}: {e}") from e

        try:
            snapshot = Snapshot(
                games=tuple(
                    Game(
                        id=_sk_id(it),
                        name=it["name"],
                        scoring_type=it.get("scoring_type", ""),
                        unit=it.get("unit"),
                    )
                    for it in raw["games"]
                ),
                groups=tuple(
                    Group(id=_sk_id(it), name=it["name"], class_label=it["class_label"])
                    for it in raw["groups"]
                ),
                children=tuple(
                    Child(
                        id=_sk_id(it),
                        name=it["name"],
                        gender=it["gender"],
                        class_label=it["class_label"],
                        group_id=it.get("group_id"),
                    )
                    for it in raw["children"]
                ),
                assignments=tuple(
                    ClassGameAssignment(class_label=it["class_label"], game_id=it["game_id"])
                    for it in raw["assignments"]
                ),
                results=tuple(
                    Result(
                        id=_sk_id(it),
                        child_id=it["child_id"],
                        game_id=it["game_id"],
                        group_id=it["group_id"],
                        value=it.get("value"),
                        recorded_at=it.get("recorded_at"),
                    )
                    for it in raw["results"]
                ),
            )
        except (KeyError, pydantic.ValidationError) as e:
            raise SnapshotUnavailableError(f"malformed item in {self.table_name}: {e}") from e

        logger.info(
            f"loaded snapshot for event {self.event_id}: {len(snapshot.children)} children, "
            f"{len(snapshot.results)} results"
        )
        return snapshot


_SK_PREFIXES = {
    "games": "GAME#",
    "groups": "GROUP#",
    "children": "CHILD#",
    "assignments": "CLASSGAME#",
    "results": "RESULT#",
}


def _sk_id(item: dict[str, Any]) -> str:
    # sk: {KIND}#{id}
    return item["sk"].split("#", 1)[1]


def snapshot_to_items(snapshot: Snapshot, event_id: str) -> list[dict[str, Any]]:
    """DynamoDB items for a snapshot, in the layout DynamoDBSnapshotProvider reads."""

    pk = f"EVENT#{event_id}"
    items: list[dict[str, Any]] = []
    for g in snapshot.games:
        item = {"pk": pk, "sk": f"GAME#{g.id}", "name": g.name, "scoring_type": g.scoring_type}
        if g.unit is not None:
            item["unit"] = g.unit
        items.append(item)
    for gr in snapshot.groups:
        items.append({"pk": pk, "sk": f"GROUP#{gr.id}", "name": gr.name, "class_label": gr.class_label})
    for c in snapshot.children:
        item = {
            "pk": pk,
            "sk": f"CHILD#{c.id}",
            "name": c.name,
            "gender": c.gender,
            "class_label": c.class_label,
        }
        if c.group_id is not None:
            item["group_id"] = c.group_id
        items.append(item)
    for a in snapshot.assignments:
        items.append(
            {
                "pk": pk,
                "sk": f"CLASSGAME#{a.class_label}#{a.game_id}",
                "class_label": a.class_label,
                "game_id": a.game_id,
            }
        )
    for r in snapshot.results:
        item = {
            "pk": pk,
            "sk": f"RESULT#{r.id}",
            "child_id": r.child_id,
            "game_id": r.game_id,
            "group_id": r.group_id,
            # DynamoDB rejects floats
            "value": Decimal(str(r.value)),
        }
        if r.recorded_at is not None:
            item["recorded_at"] = r.recorded_at.isoformat()
        items.append(item)
    return items


def build_provider(settings: Settings) -> SnapshotProvider:
    if settings.store_backend == "dynamodb":
        return DynamoDBSnapshotProvider.from_settings(settings)
    if settings.store_backend == "json":
        if not settings.snapshot_path:
            raise RuntimeError("SNAPSHOT_PATH is required for json store")
        return JsonFileSnapshotProvider(path=Path(settings.snapshot_path))
    return InMemorySnapshotProvider.create()
