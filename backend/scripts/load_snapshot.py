from __future__ import annotations

import os
import sys
from pathlib import Path

import boto3
from loguru import logger

from festscore.config import configure_logging
from festscore.store import JsonFileSnapshotProvider, snapshot_to_items


def _required_env(name: str) -> str:
    v = os.environ.get(name, "").strip()
    if not v:
        raise SystemExit(f"{name} is required")
    return v


def _ensure_table(table_name: str) -> None:
    ddb = boto3.client("dynamodb")
    existing = ddb.list_tables().get("TableNames", [])
    if table_name in existing:
        return

    ddb.create_table(
        TableName=table_name,
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
        ],
        KeySchema=[
            {"AttributeName": "pk", "KeyType": "HASH"},
            {"AttributeName": "sk", "KeyType": "RANGE"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    ddb.get_waiter("table_exists").wait(TableName=table_name)
    logger.info(f"created table {table_name}")


def main() -> None:
    """Copy a JSON festival snapshot into the DynamoDB table the API reads."""

    if len(sys.argv) != 2:
        raise SystemExit("usage: load_snapshot.py SNAPSHOT_JSON")

    configure_logging()
    table_name = _required_env("DDB_TABLE_NAME")
    event_id = os.environ.get("FESTIVAL_EVENT_ID", "").strip() or "default"

    snapshot = JsonFileSnapshotProvider(path=Path(sys.argv[1])).load_snapshot()
    items = snapshot_to_items(snapshot, event_id)

    _ensure_table(table_name)
    table = boto3.resource("dynamodb").Table(table_name)
    with table.batch_writer() as batch:
        for item in items:
            batch.put_item(Item=item)
    logger.info(f"wrote {len(items)} items for event {event_id} to {table_name}")


if __name__ == "__main__":
    main()
