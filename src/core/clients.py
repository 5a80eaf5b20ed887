"""Lazy-initialized clients and services, reused across warm Lambda invocations."""

from functools import lru_cache
from typing import Any

import boto3

from core.config import get_config
from core.db.dynamo import DocumentStore
from core.services.booking import BookingService
from core.services.notification import NotificationSink
from core.supplier import AccessTokenCache, AmadeusGateway, MockSupplierGateway, SupplierGateway


@lru_cache(maxsize=1)
def get_dynamo_client() -> Any:
    config = get_config()
    return boto3.client("dynamodb", endpoint_url=config.dynamodb_endpoint, region_name=config.aws_region)


@lru_cache(maxsize=1)
def get_document_store() -> DocumentStore:
    return DocumentStore(get_dynamo_client())


@lru_cache(maxsize=1)
def get_notification_sink() -> NotificationSink:
    return NotificationSink(get_document_store(), get_config().notifications_table)


@lru_cache(maxsize=1)
def get_booking_service() -> BookingService:
    config = get_config()
    return BookingService(
        get_document_store(),
        get_notification_sink(),
        bookings_table=config.bookings_table,
        trips_table=config.trips_table,
    )


@lru_cache(maxsize=1)
def get_amadeus_gateway() -> AmadeusGateway:
    config = get_config()
    return AmadeusGateway(
        base_url=config.amadeus_base_url,
        client_id=config.amadeus_client_id,
        client_secret=config.amadeus_client_secret,
        token_cache=AccessTokenCache(),
        timeout=config.supplier_timeout_seconds,
    )


def get_hotel_gateway() -> SupplierGateway:
    return MockSupplierGateway() if get_config().mock_hotel_booking else get_amadeus_gateway()


def get_flight_gateway() -> SupplierGateway:
    return MockSupplierGateway() if get_config().mock_flight_booking else get_amadeus_gateway()
