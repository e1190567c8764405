"""
Health check endpoints for monitoring system status

Public probes return status only; failures are logged, never echoed.
"""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter
import structlog

from smartsearch.search.hints import hint_composer

router = APIRouter()
logger = structlog.get_logger(__name__)

VERSION = "1.0.0"

# Exercises the time, SQL type, intensity and limit extractors at once
_PROBE_QUERY = "최근 1시간 UPDATE 중 매우 느린 쿼리 상위 5개"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_rule_engine() -> str:
    """healthy / degraded / unhealthy for the rule-based extractors"""
    try:
        hints = hint_composer.compose(_PROBE_QUERY)
    except Exception as e:
        logger.error("Rule engine health check failed", error=str(e), exc_info=True)
        return "unhealthy"

    if hints.time_range == "1h" and hints.sql_type == "UPDATE" and hints.limit == 5 and hints.intensity == 3:
        return "healthy"
    logger.warning("Rule engine health check returned unexpected hints", hints=hints.to_dict())
    return "degraded"


@router.get("")
@router.get("/")
async def health_check() -> Dict[str, str]:
    """Overall service status"""
    return {"status": _check_rule_engine()}


@router.get("/liveness")
async def liveness_probe():
    """Kubernetes liveness probe endpoint"""
    return {"status": "alive", "timestamp": _utc_now()}


@router.get("/readiness")
async def readiness_probe():
    """Kubernetes readiness probe endpoint"""
    status = "ready" if _check_rule_engine() != "unhealthy" else "not_ready"
    return {"status": status, "timestamp": _utc_now()}
