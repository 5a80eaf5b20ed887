import json
from os import environ

import boto3
from pydantic import BaseModel, ConfigDict

_cached_clerk_secret: str | None = None
_cached_amadeus_credentials: dict[str, str] | None = None


def _resolve_clerk_secret() -> str:
    """Fetch Clerk secret from Secrets Manager at runtime, with caching."""
    global _cached_clerk_secret
    if _cached_clerk_secret is not None:
        return _cached_clerk_secret

    # Local dev: use env var directly
    direct = environ.get("CLERK_SECRET_KEY", "")
    if direct:
        _cached_clerk_secret = direct
        return direct

    # Deployed: fetch from Secrets Manager by ARN
    arn = environ.get("CLERK_SECRET_ARN", "")
    if not arn:
        return ""

    client = boto3.client("secretsmanager")
    _cached_clerk_secret = client.get_secret_value(SecretId=arn)["SecretString"]
    return _cached_clerk_secret


def _resolve_amadeus_credentials() -> dict[str, str]:
    """Amadeus client credentials from env vars, or a JSON secret in Secrets Manager."""
    global _cached_amadeus_credentials
    if _cached_amadeus_credentials is not None:
        return _cached_amadeus_credentials

    client_id = environ.get("AMADEUS_CLIENT_ID", "")
    client_secret = environ.get("AMADEUS_CLIENT_SECRET", "")
    if client_id and client_secret:
        _cached_amadeus_credentials = {"client_id": client_id, "client_secret": client_secret}
        return _cached_amadeus_credentials

    arn = environ.get("AMADEUS_SECRET_ARN", "")
    if not arn:
        return {"client_id": "", "client_secret": ""}

    client = boto3.client("secretsmanager")
    secret = json.loads(client.get_secret_value(SecretId=arn)["SecretString"])
    _cached_amadeus_credentials = {
        "client_id": secret.get("client_id", ""),
        "client_secret": secret.get("client_secret", ""),
    }
    return _cached_amadeus_credentials


def _env_flag(name: str) -> bool:
    return environ.get(name, "").strip().lower() == "true"


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    dynamodb_endpoint: str | None = None
    bookings_table: str
    trips_table: str
    notifications_table: str
    clerk_secret_key: str = ""
    amadeus_base_url: str
    amadeus_client_id: str = ""
    amadeus_client_secret: str = ""
    mock_hotel_booking: bool = False
    mock_flight_booking: bool = False
    supplier_timeout_seconds: float = 20.0
    environment: str


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config (testing only)."""
    global _cached_config, _cached_clerk_secret, _cached_amadeus_credentials
    _cached_config = None
    _cached_clerk_secret = None
    _cached_amadeus_credentials = None


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    amadeus = _resolve_amadeus_credentials()
    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "us-east-1"),
        dynamodb_endpoint=environ.get("DYNAMODB_ENDPOINT"),
        bookings_table=environ.get("BOOKINGS_TABLE", "Bookings"),
        trips_table=environ.get("TRIPS_TABLE", "Trips"),
        notifications_table=environ.get("NOTIFICATIONS_TABLE", "Notifications"),
        clerk_secret_key=_resolve_clerk_secret(),
        amadeus_base_url=environ.get("AMADEUS_BASE_URL", "https://test.api.amadeus.com"),
        amadeus_client_id=amadeus["client_id"],
        amadeus_client_secret=amadeus["client_secret"],
        mock_hotel_booking=_env_flag("MOCK_AMADEUS_BOOKING"),
        mock_flight_booking=_env_flag("MOCK_AMADEUS_FLIGHT_BOOKING"),
        supplier_timeout_seconds=float(environ.get("SUPPLIER_TIMEOUT_SECONDS", "20")),
        environment=environ.get("ENVIRONMENT", "local"),
    )
    return _cached_config
