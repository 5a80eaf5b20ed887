#!/usr/bin/env python3
"""Create DynamoDB tables for local development.

Creates the Bookings, Trips and Notifications tables against DynamoDB Local.
Each table has a single string hash key; table names come from the same
environment variables the Lambda functions read.

Usage:
    python scripts/create_local_tables.py
"""

import sys
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

# Add src to path for config import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import get_config


def create_table(dynamodb, table_name: str, key_name: str) -> None:
    try:
        dynamodb.create_table(
            TableName=table_name,
            KeySchema=[{"AttributeName": key_name, "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": key_name, "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        print(f"✓ Created {table_name} table")
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            print(f"✓ {table_name} table already exists")
        else:
            raise


def main():
    """Create all DynamoDB tables."""
    config = get_config()

    endpoint_url = config.dynamodb_endpoint or "http://localhost:8000"

    print(f"Creating DynamoDB tables at {endpoint_url}...")
    print()

    # For DynamoDB Local, use dummy credentials
    dynamodb = boto3.client(
        "dynamodb",
        endpoint_url=endpoint_url,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )

    create_table(dynamodb, config.bookings_table, "bookingId")
    create_table(dynamodb, config.trips_table, "tripId")
    create_table(dynamodb, config.notifications_table, "notificationId")

    print()
    print("✅ All DynamoDB tables ready")


if __name__ == "__main__":
    main()
