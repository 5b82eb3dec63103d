"""
FastAPI application for guided body scanning and clothing size recommendation
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bodyscan.config import settings
from bodyscan.middleware.memory_cleanup import MemoryCleanupMiddleware
from bodyscan.routes import capture, measurement
from bodyscan.services.capture_session import POSE_STEPS

logging.basicConfig(level=settings.log_level.upper(),
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Guided five-pose body scan that derives clothing measurements from MediaPipe pose landmarks and maps them to garment sizes",
    version=settings.version,
    license_info={
        "name": "MIT",
    },
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Free decoded frames after each image upload
app.add_middleware(MemoryCleanupMiddleware)

# Include routers
app.include_router(capture.router, prefix="", tags=["capture"])
app.include_router(measurement.router, prefix="", tags=["measurements"])

app.state.pose_detector = None


@app.on_event("startup")
async def load_models():
    """Load the MediaPipe Pose model once at startup to avoid loading per request"""
    if not settings.load_pose_model_on_startup:
        logger.info("Pose model loading disabled; frame uploads are unavailable")
        return

    try:
        logger.info("Loading MediaPipe Pose model at startup...")
        from bodyscan.utils.pose_detection import PoseDetector
        app.state.pose_detector = PoseDetector()
        logger.info("MediaPipe Pose model loaded successfully and cached for reuse")
    except Exception as e:
        logger.warning(f"Failed to load MediaPipe Pose model at startup: {e}")
        logger.warning("Frame uploads are unavailable; landmark frames can still be pushed as JSON")
        app.state.pose_detector = None


@app.on_event("shutdown")
async def release_models():
    detector = app.state.pose_detector
    if detector is not None:
        detector.close()
        app.state.pose_detector = None


@app.get("/")
async def root():
    """
    Root endpoint with API information
    """
    return {
        "message": f"{settings.app_name} is running",
        "version": settings.version,
        "poses": [step.id for step in POSE_STEPS],
        "docs": "/docs",
        "endpoints": {
            "pose_steps": "/pose-steps",
            "create_session": "/sessions",
            "push_frame": "/sessions/{session_id}/frames",
            "upload_frame": "/sessions/{session_id}/frames/image",
            "capture": "/sessions/{session_id}/capture",
            "cancel": "/sessions/{session_id}/cancel",
            "results": "/sessions/{session_id}/results",
            "export": "/sessions/{session_id}/export",
            "save": "/sessions/{session_id}/save",
            "recommendations": "/recommendations",
            "convert": "/measurements/convert",
        },
    }


@app.get("/health")
async def health_check():
    """
    Health check endpoint with pose model and persistence availability
    """
    return {
        "status": "healthy",
        "version": settings.version,
        "capabilities": {
            "pose_detection": app.state.pose_detector is not None,
            "landmark_frames": True,
            "persistence": bool(settings.supabase_url and settings.supabase_service_key),
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
