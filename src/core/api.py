"""API Gateway proxy helpers: caller identity, request bodies, and the response envelope.

Every response body carries `success` and `message`; failures add `error`
(the ErrorCode) and any error details.
"""

import functools
import json
import logging
from typing import Any, Callable

from core.errors import AuthenticationError, ErrorCode, InternalError, TravexeError, ValidationError

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any], Any], dict[str, Any]]


def json_response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def success_response(status_code: int, message: str, data: Any = None, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return json_response(status_code, body)


def error_response(error: TravexeError) -> dict[str, Any]:
    # Client errors carry our own wording; server errors never leak internals
    message = error.message if error.status_code < 500 else error.user_message
    body = {"success": False, "message": message, "error": error.code.value, **error.details}
    return json_response(error.status_code, body)


def get_user_id(event: dict[str, Any]) -> str:
    """Caller id placed in the request context by the Lambda authorizer."""
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    user_id = authorizer.get("userId")
    if not user_id:
        raise AuthenticationError("Missing authorizer context", code=ErrorCode.AUTH_FAILED)
    return str(user_id)


def get_path_parameter(event: dict[str, Any], name: str) -> str:
    value = (event.get("pathParameters") or {}).get(name)
    if not value:
        raise ValidationError(f"{name} parameter is required", code=ErrorCode.INVALID_REQUEST)
    return str(value)


def parse_json_body(event: dict[str, Any]) -> Any:
    raw = event.get("body")
    if not raw:
        raise ValidationError("Request body is required", code=ErrorCode.INVALID_REQUEST)
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Request body is not valid JSON: {e.msg}", code=ErrorCode.INVALID_REQUEST) from e


def api_handler(failure_message: str) -> Callable[[Handler], Handler]:
    """Map exceptions escaping a proxy handler onto the response envelope."""

    def decorator(func: Handler) -> Handler:
        @functools.wraps(func)
        def wrapper(event: dict[str, Any], context: Any) -> dict[str, Any]:
            try:
                return func(event, context)
            except TravexeError as e:
                if e.status_code >= 500:
                    logger.error("%s: %s", failure_message, e.message)
                else:
                    logger.info("%s: %s (%s)", failure_message, e.message, e.code.value)
                return error_response(e)
            except Exception:
                logger.exception(failure_message)
                return error_response(InternalError(failure_message))

        return wrapper

    return decorator
