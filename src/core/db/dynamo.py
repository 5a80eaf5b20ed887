"""DynamoDB document store: equality-filtered reads, updates, and chunked atomic batches."""

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Iterator, Sequence

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from core.errors import ErrorCode, InternalError

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    """Placeholder resolved to the write time when the document is serialized."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_document_id() -> str:
    return uuid.uuid4().hex


def chunked(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    if size < 1:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _resolve(value: Any, timestamp: str) -> Any:
    """Swap SERVER_TIMESTAMP for the write time and floats for Decimal (DynamoDB numbers)."""
    if value is SERVER_TIMESTAMP:
        return timestamp
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _resolve(v, timestamp) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_resolve(v, timestamp) for v in value]
    return value


def to_attribute_value(value: Any, timestamp: str | None = None) -> dict[str, Any]:
    return _serializer.serialize(_resolve(value, timestamp or utc_now_iso()))


def to_item(document: dict[str, Any], timestamp: str | None = None) -> dict[str, Any]:
    ts = timestamp or utc_now_iso()
    return {k: to_attribute_value(v, ts) for k, v in document.items()}


def from_item(item: dict[str, Any]) -> dict[str, Any]:
    return {k: _deserializer.deserialize(v) for k, v in item.items()}


def to_json_safe(document: Any) -> Any:
    """Convert DynamoDB Decimals back to int/float for JSON responses."""
    return json.loads(json.dumps(document, default=_decimal_default))


def _decimal_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _set_expression(fields: dict[str, Any], timestamp: str) -> dict[str, Any]:
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    clauses = []
    for i, (name, value) in enumerate(fields.items()):
        names[f"#f{i}"] = name
        values[f":v{i}"] = to_attribute_value(value, timestamp)
        clauses.append(f"#f{i} = :v{i}")
    return {
        "UpdateExpression": "SET " + ", ".join(clauses),
        "ExpressionAttributeNames": names,
        "ExpressionAttributeValues": values,
    }


class DocumentStore:
    """Thin document-style facade over the low-level boto3 DynamoDB client.

    Every table is keyed by a single string hash key. Reads return plain dicts
    (numbers come back as Decimal). Writes accept SERVER_TIMESTAMP anywhere in
    a document and stamp it with the UTC write time.
    """

    # TransactWriteItems ceiling
    MAX_BATCH_OPS = 100

    def __init__(self, dynamo_client: Any) -> None:
        self._client = dynamo_client

    def get(self, table: str, key_name: str, key_value: str) -> dict[str, Any] | None:
        try:
            response = self._client.get_item(
                TableName=table,
                Key={key_name: {"S": key_value}},
                ConsistentRead=True,
            )
        except Exception as e:
            raise InternalError(f"Failed to read {table}/{key_value}: {e}", code=ErrorCode.INTERNAL_ERROR) from e
        item = response.get("Item")
        return from_item(item) if item else None

    def put(self, table: str, document: dict[str, Any]) -> None:
        try:
            self._client.put_item(TableName=table, Item=to_item(document))
        except Exception as e:
            raise InternalError(f"Failed to write to {table}: {e}") from e

    def update(self, table: str, key_name: str, key_value: str, fields: dict[str, Any]) -> None:
        if not fields:
            return
        try:
            self._client.update_item(
                TableName=table,
                Key={key_name: {"S": key_value}},
                **_set_expression(fields, utc_now_iso()),
            )
        except Exception as e:
            raise InternalError(f"Failed to update {table}/{key_value}: {e}") from e

    def find(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Scan with an equality filter on every given field, following pagination."""
        scan_kwargs: dict[str, Any] = {"TableName": table}
        if filters:
            names: dict[str, str] = {}
            values: dict[str, Any] = {}
            clauses = []
            for i, (name, value) in enumerate(filters.items()):
                names[f"#k{i}"] = name
                values[f":k{i}"] = to_attribute_value(value)
                clauses.append(f"#k{i} = :k{i}")
            scan_kwargs["FilterExpression"] = " AND ".join(clauses)
            scan_kwargs["ExpressionAttributeNames"] = names
            scan_kwargs["ExpressionAttributeValues"] = values

        documents: list[dict[str, Any]] = []
        last_key = None
        try:
            while True:
                if last_key:
                    scan_kwargs["ExclusiveStartKey"] = last_key
                response = self._client.scan(**scan_kwargs)
                documents.extend(from_item(item) for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
        except Exception as e:
            raise InternalError(f"Failed to query {table}: {e}") from e
        return documents

    def batch_update(
        self,
        table: str,
        key_name: str,
        updates: Iterable[tuple[str, dict[str, Any]]],
    ) -> int:
        """Apply all updates in one all-or-nothing transaction.

        Callers with more than MAX_BATCH_OPS updates split them with chunked().
        """
        timestamp = utc_now_iso()
        transact_items = [
            {
                "Update": {
                    "TableName": table,
                    "Key": {key_name: {"S": key_value}},
                    **_set_expression(fields, timestamp),
                }
            }
            for key_value, fields in updates
        ]
        if not transact_items:
            return 0
        if len(transact_items) > self.MAX_BATCH_OPS:
            raise ValueError(f"batch of {len(transact_items)} exceeds {self.MAX_BATCH_OPS} operations")
        try:
            self._client.transact_write_items(TransactItems=transact_items)
        except Exception as e:
            raise InternalError(f"Batch update on {table} failed: {e}") from e
        logger.debug("Committed batch of %d updates to %s", len(transact_items), table)
        return len(transact_items)
