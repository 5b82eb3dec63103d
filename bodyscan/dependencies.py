"""
FastAPI dependencies for shared services and external collaborators
"""
from functools import lru_cache

from fastapi import HTTPException, Request

from .config import settings
from .services.persistence import SupabaseMeasurementStore
from .services.session_manager import SessionManager, session_manager


def get_session_manager() -> SessionManager:
    return session_manager


@lru_cache()
def get_measurement_store() -> SupabaseMeasurementStore:
    """Store built from the configured connection parameters"""
    return SupabaseMeasurementStore(
        url=settings.supabase_url,
        service_key=settings.supabase_service_key,
        timeout=settings.persistence_timeout_seconds,
    )


def get_pose_detector(request: Request):
    """Pose detector cached on the app at startup"""
    detector = getattr(request.app.state, "pose_detector", None)
    if detector is None:
        raise HTTPException(status_code=503, detail="Pose detection model is not loaded")
    return detector
