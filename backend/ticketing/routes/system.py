# Overview: Liveness/readiness endpoint.

import time

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text

from ..extensions import db


system_bp = Blueprint("system", __name__)


@system_bp.get("/health")
def health():
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        database = "healthy"
        status = 200
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Database health check failed")
        database = "unhealthy"
        status = 503

    elapsed_ms = (time.time() - start_time) * 1000
    return jsonify({
        "status": "ok" if status == 200 else "degraded",
        "database": database,
        "latency_ms": round(elapsed_ms, 2),
    }), status
