"""RFC 7807 problem responses for every error leaving the API.

Service errors are translated by :meth:`BaseService.translate_exceptions`;
framework, validation and database errors are mapped here. 401 responses
carry an RFC 6750 ``WWW-Authenticate: Bearer`` challenge and 503 responses a
``Retry-After`` hint. Bodies never include internal details: the originating
error class is logged as ``error_type`` instead.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from authcore.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"
RETRY_AFTER_SECONDS = "1"

# Stable machine-readable codes for statuses raised by Flask/Werkzeug.
_STATUS_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


def problem(
    status: int,
    code: str,
    detail: str,
    *,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a Problem Details body for the current request."""
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def problem_response(body: dict[str, Any], headers: dict[str, str] | None = None) -> Response:
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    resp.status_code = body["status"]
    for name, value in (headers or {}).items():
        resp.headers[name] = value
    return resp


def bearer_challenge(error: str | None = None, description: str | None = None) -> str:
    """Format an RFC 6750 ``WWW-Authenticate`` value.

    >>> bearer_challenge()
    'Bearer'
    >>> bearer_challenge("invalid_token", "Token has been revoked")
    'Bearer error="invalid_token", error_description="Token has been revoked"'
    """
    params = []
    if error:
        params.append(f'error="{error}"')
    if description:
        params.append(f'error_description="{description}"')
    return "Bearer" + (" " + ", ".join(params) if params else "")


class APIError(Exception):
    """
    Error with a fixed HTTP status and a client-safe message.

    Subclasses set ``status_code``, ``code`` and ``default_message``.

    :param message: Detail sent to the client; defaults to ``default_message``.
    :param details: Optional structured payload included in the body.
    :param error_type: Class name of the originating service error. Logged
        only, so that e.g. a replayed refresh token and an expired one stay
        distinguishable while sharing a response.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    code: str = "bad_request"
    default_message: str = "Bad request"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        error_type: str | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details or {}
        self.error_type = error_type

    def headers(self) -> dict[str, str]:
        return {}

    def to_problem(self) -> dict[str, Any]:
        return problem(int(self.status_code), self.code, self.message, details=self.details or None)


class BadRequest(APIError):
    """400 for malformed or incomplete input, including bad confirmation tokens."""


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class Conflict(APIError):
    """409 for a username or e-mail that is already registered."""

    status_code = HTTPStatus.CONFLICT
    code = "conflict"
    default_message = "Conflict"


class Unauthorized(APIError):
    """401 for missing credentials, bad credentials and rejected tokens.

    :param bearer_error: RFC 6750 error code (``"invalid_token"``) added to
        the challenge when a presented token was rejected.
    """

    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"
    default_message = "Unauthorized"

    def __init__(self, message: str | None = None, *, bearer_error: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.bearer_error = bearer_error

    def headers(self) -> dict[str, str]:
        if self.bearer_error:
            return {"WWW-Authenticate": bearer_challenge(self.bearer_error, self.message)}
        return {"WWW-Authenticate": bearer_challenge()}


class Forbidden(APIError):
    """403 for valid credentials on an account that is not enabled."""

    status_code = HTTPStatus.FORBIDDEN
    code = "forbidden"
    default_message = "Forbidden"


class ServiceUnavailable(APIError):
    """503 when the token stores are unreachable; clients should retry."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE
    code = "service_unavailable"
    default_message = "Service temporarily unavailable"

    def headers(self) -> dict[str, str]:
        return {"Retry-After": RETRY_AFTER_SECONDS}


def init_app(app: Flask) -> None:
    """
    Register the problem+json error handlers.

    4xx are logged at WARNING, 5xx at ERROR (unexpected ones with the
    traceback).
    """
    from authcore.services._shared.base import BaseService
    from authcore.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        body = err.to_problem()
        log.log(
            logging.ERROR if err.status_code >= 500 else logging.WARNING,
            "api_error code=%s status=%s type=%s detail=%s",
            err.code,
            int(err.status_code),
            err.error_type,
            err.message,
            extra={"error_type": err.error_type, "path": request.path},
        )
        return problem_response(body, err.headers())

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = BaseService.translate_exceptions(err)
        if isinstance(translated, APIError):
            return handle_api_error(translated)
        return handle_unexpected_error(err)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or code.replace("_", " ").capitalize()).strip()
        log.log(
            logging.ERROR if status >= 500 else logging.WARNING,
            "http_error code=%s status=%s detail=%s",
            code,
            status,
            detail,
        )
        return problem_response(problem(status, code, detail))

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        log.warning("validation_error fields=%s", sorted(err.messages))
        body = problem(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            details={"errors": err.messages},
        )
        return problem_response(body)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Duplicates are normally caught by the services; this is the race loser.
        log.error("integrity_error", exc_info=True)
        return handle_api_error(Conflict("Resource conflict", error_type=type(err).__name__))

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("database_unavailable", exc_info=True)
        return handle_api_error(ServiceUnavailable(error_type=type(err).__name__))

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("unhandled_exception", exc_info=err)
        body = problem(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error")
        return problem_response(body)
