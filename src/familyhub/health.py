"""
Health checks for familyhub.

Checks the record store, the object store and the environment, and folds
them into one status: ``healthy``, ``degraded`` (the app can still show
records) or ``unhealthy`` (the record store is down).
"""

import platform
import time
from typing import Any

import streamlit as st

from . import __version__
from .config import get_config
from .logging_config import get_logger
from .services.family_data import get_family_data_service
from .services.storage import get_storage_service

logger = get_logger(__name__)

APP_START_TIME = time.time()

# A failing check with this status takes the whole app down.
CRITICAL_CHECKS = {"database"}


def check_database_health() -> dict[str, Any]:
    """Check that the family database answers queries."""
    try:
        service = get_family_data_service()
        row = service.db.fetch_one("SELECT count(*) AS members FROM family_members")
        return {
            "status": "healthy",
            "message": "Database connection successful",
            "timestamp": time.time(),
            "db_path": service.db.db_path,
            "members": row["members"] if row else 0,
        }
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return {"status": "unhealthy", "message": f"Database check failed: {e}", "timestamp": time.time()}


def check_storage_health() -> dict[str, Any]:
    """Check that the photos bucket is reachable."""
    try:
        storage_service = get_storage_service()
        if not storage_service.check_bucket_exists():
            return {
                "status": "unhealthy",
                "message": f"Bucket not reachable: {storage_service.photos_bucket_name}",
                "timestamp": time.time(),
            }
        return {
            "status": "healthy",
            "message": f"Storage connection successful to bucket: {storage_service.photos_bucket_name}",
            "timestamp": time.time(),
            "bucket": storage_service.photos_bucket_name,
            "database_backup": storage_service.has_database_backup(),
        }
    except Exception as e:
        logger.error("storage_health_check_failed", error=str(e))
        return {"status": "unhealthy", "message": f"Storage check failed: {e}", "timestamp": time.time()}


def check_environment_health() -> dict[str, Any]:
    """Check that required configuration is present."""
    config = get_config()
    required = ["GOOGLE_CLOUD_PROJECT", "GCS_PHOTOS_BUCKET"]
    if config.is_production():
        required.append("GCS_DATABASE_BUCKET")

    missing = [key for key in required if not config.get(key)]
    if missing:
        return {
            "status": "unhealthy",
            "message": f"Missing configuration: {', '.join(missing)}",
            "timestamp": time.time(),
            "missing_vars": missing,
        }
    return {
        "status": "healthy",
        "message": "Environment configuration is valid",
        "timestamp": time.time(),
        "environment": config.get("ENVIRONMENT", "development"),
    }


def get_application_info() -> dict[str, Any]:
    config = get_config()
    return {
        "name": "familyhub",
        "version": __version__,
        "environment": config.get("ENVIRONMENT", "development"),
        "project_id": config.get("GOOGLE_CLOUD_PROJECT", "unknown"),
        "uptime": time.time() - APP_START_TIME,
        "python_version": platform.python_version(),
    }


def get_health_status() -> dict[str, Any]:
    """
    Run every check and summarise the result.

    Returns:
        dict: ``status``, ``duration_ms``, ``application``, ``checks`` and,
        when something failed, ``unhealthy_services``
    """
    start_time = time.time()
    checks = {
        "database": check_database_health(),
        "storage": check_storage_health(),
        "environment": check_environment_health(),
    }

    unhealthy_services = [name for name, result in checks.items() if result["status"] != "healthy"]
    if not unhealthy_services:
        status = "healthy"
    elif CRITICAL_CHECKS & set(unhealthy_services):
        status = "unhealthy"
    else:
        status = "degraded"

    health = {
        "status": status,
        "timestamp": time.time(),
        "duration_ms": round((time.time() - start_time) * 1000, 2),
        "application": get_application_info(),
        "checks": checks,
    }
    if unhealthy_services:
        health["unhealthy_services"] = unhealthy_services

    logger.info(
        "health_check_completed",
        status=status,
        duration_ms=health["duration_ms"],
        unhealthy_services=unhealthy_services,
    )
    return health


def render_health_page() -> None:
    """Render the health check page."""
    st.set_page_config(page_title="Health Check - Family Hub", page_icon="🏥", layout="wide")
    st.title("🏥 Health Check")
    st.markdown("---")

    with st.spinner("Performing health check..."):
        health = get_health_status()

    if health["status"] == "healthy":
        st.success(f"✅ Application is healthy (checked in {health['duration_ms']}ms)")
    elif health["status"] == "degraded":
        st.warning(f"⚠️ Application is degraded: {', '.join(health['unhealthy_services'])}")
    else:
        st.error(f"❌ Application is unhealthy: {', '.join(health['unhealthy_services'])}")

    app_info = health["application"]
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Name", app_info["name"])
    with col2:
        st.metric("Version", app_info["version"])
    with col3:
        st.metric("Environment", app_info["environment"])
    with col4:
        st.metric("Uptime", f"{app_info['uptime']:.1f}s")

    st.subheader("🔍 Service Health Checks")
    for service, result in health["checks"].items():
        with st.expander(f"{service.title()}", expanded=result["status"] != "healthy"):
            if result["status"] == "healthy":
                st.success(f"✅ {result['message']}")
            else:
                st.error(f"❌ {result['message']}")
            st.json(result)

    with st.expander("🔧 Raw Health Data"):
        st.json(health)
