"""Shared test fixtures for Travexe."""

import os
import sys
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (DynamoDB Local doesn't need it)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from core.db.dynamo import from_item, to_item  # noqa: E402
from core.errors import InternalError  # noqa: E402
from core.models.notification import Notification  # noqa: E402


class FakeDocumentStore:
    """In-memory DocumentStore. Documents round-trip through the DynamoDB
    serializers, so SERVER_TIMESTAMP and Decimal handling match the real store.
    """

    MAX_BATCH_OPS = 100

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict[str, Any]]] = {}
        self.batches: list[int] = []
        # 1-based numbers of batch_update calls that should fail
        self.failing_batches: set[int] = set()
        self.fail_updates = False

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        return self.tables.setdefault(table, {})

    def seed(self, table: str, key_name: str, document: dict[str, Any]) -> None:
        self._table(table)[document[key_name]] = to_item(document)

    def doc(self, table: str, key_value: str) -> dict[str, Any] | None:
        item = self._table(table).get(key_value)
        return from_item(item) if item else None

    def all(self, table: str) -> list[dict[str, Any]]:
        return [from_item(item) for item in self._table(table).values()]

    def get(self, table: str, key_name: str, key_value: str) -> dict[str, Any] | None:
        return self.doc(table, key_value)

    def put(self, table: str, document: dict[str, Any]) -> None:
        key_name = next(iter(document))
        self._table(table)[document[key_name]] = to_item(document)

    def update(self, table: str, key_name: str, key_value: str, fields: dict[str, Any]) -> None:
        if self.fail_updates:
            raise InternalError(f"Failed to update {table}/{key_value}")
        self._table(table).setdefault(key_value, to_item({key_name: key_value})).update(to_item(fields))

    def find(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        return [doc for doc in self.all(table) if all(doc.get(k) == v for k, v in filters.items())]

    def batch_update(self, table: str, key_name: str, updates) -> int:
        updates = list(updates)
        if len(updates) > self.MAX_BATCH_OPS:
            raise ValueError(f"batch of {len(updates)} exceeds {self.MAX_BATCH_OPS} operations")
        self.batches.append(len(updates))
        if len(self.batches) in self.failing_batches:
            raise InternalError(f"Batch update on {table} failed")
        for key_value, fields in updates:
            self.update(table, key_name, key_value, fields)
        return len(updates)


class RecordingSink:
    """NotificationSink stand-in that keeps what was sent."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []
        self.fail = False

    def send(self, notification: Notification) -> str:
        if self.fail:
            raise InternalError("Failed to write to Notifications")
        self.sent.append(notification)
        return f"notif_{len(self.sent)}"

    def send_best_effort(self, notification: Notification) -> str | None:
        try:
            return self.send(notification)
        except InternalError:
            return None


@pytest.fixture
def store():
    return FakeDocumentStore()


@pytest.fixture
def sink():
    return RecordingSink()


# DynamoDB fixtures
@pytest.fixture
def dynamodb_resource():
    """Provide a DynamoDB resource for integration tests."""
    import boto3
    from core.config import get_config

    config = get_config()

    resource = boto3.resource(
        "dynamodb",
        endpoint_url=config.dynamodb_endpoint,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )

    return resource


@pytest.fixture
def dynamodb_client():
    """Low-level client for DocumentStore integration tests."""
    import boto3
    from core.config import get_config

    config = get_config()
    return boto3.client(
        "dynamodb",
        endpoint_url=config.dynamodb_endpoint,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )


def _cleanup(table, key_name: str) -> None:
    response = table.scan()
    with table.batch_writer() as batch:
        for item in response.get("Items", []):
            batch.delete_item(Key={key_name: item[key_name]})


@pytest.fixture
def bookings_table(dynamodb_resource):
    """Provide the Bookings table."""
    from core.config import get_config

    table = dynamodb_resource.Table(get_config().bookings_table)
    yield table
    _cleanup(table, "bookingId")


@pytest.fixture
def trips_table(dynamodb_resource):
    """Provide the Trips table."""
    from core.config import get_config

    table = dynamodb_resource.Table(get_config().trips_table)
    yield table
    _cleanup(table, "tripId")


@pytest.fixture
def notifications_table(dynamodb_resource):
    """Provide the Notifications table."""
    from core.config import get_config

    table = dynamodb_resource.Table(get_config().notifications_table)
    yield table
    _cleanup(table, "notificationId")
