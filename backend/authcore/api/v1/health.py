"""Health check endpoint."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authcore.api.deps import json_response, timing
from authcore.core.extensions import db, get_revocation_store

bp = Blueprint("health", __name__)

log = logging.getLogger(__name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return database and revocation-store health."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.exception("healthcheck.db_error")
        db_status = "fail"
    revocation_status = "ok" if get_revocation_store().ping() else "degraded"
    payload = {
        "status": "ok" if db_status == "ok" else "fail",
        "db": db_status,
        "revocation_store": revocation_status,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if db_status == "ok" else 503)
