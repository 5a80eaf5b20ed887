"""REST API Lambda authorizer: validates the Clerk JWT from the Authorization header."""

import asyncio
import logging
from typing import Any

from core.auth import get_auth_provider
from core.errors import AuthenticationError

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    # AuthProvider methods are async; the Clerk SDK underneath is synchronous,
    # so asyncio.run() bridges them in this sync Lambda handler.
    try:
        header = event.get("authorizationToken") or ""
        if not header.startswith(_BEARER_PREFIX):
            raise AuthenticationError("No bearer token provided")
        token = header[len(_BEARER_PREFIX) :].strip()
        auth_provider = get_auth_provider()
        auth_user = asyncio.run(auth_provider.verify_token(token))
        return _allow_policy(event["methodArn"], auth_user.user_id, auth_user.email)
    except (KeyError, AuthenticationError) as e:
        logger.info("Denied request: %s", e)
        return _deny_policy(event.get("methodArn", "*"))


def _allow_policy(method_arn: str, user_id: str, email: str) -> dict[str, Any]:
    return {
        "principalId": user_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [{"Action": "execute-api:Invoke", "Effect": "Allow", "Resource": method_arn}],
        },
        "context": {"userId": user_id, "email": email},
    }


def _deny_policy(method_arn: str) -> dict[str, Any]:
    return {
        "principalId": "unauthorized",
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [{"Action": "execute-api:Invoke", "Effect": "Deny", "Resource": method_arn}],
        },
    }
