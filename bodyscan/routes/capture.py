"""
API routes for guided pose capture sessions
"""
import logging
import os

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from ..config import settings
from ..dependencies import get_pose_detector, get_session_manager
from ..exceptions import CalibrationError, SessionStateError, ValidationError
from ..models.schemas import (
    BeginCaptureRequest, CaptureResponse, PoseFrameRequest, PoseStepsResponse, SessionStatusResponse
)
from ..services.capture_session import (
    POSE_STEPS, TIMER_OPTIONS, AwaitingCapture, CaptureFailed, Countdown
)
from ..services.session_manager import SessionContext, SessionManager
from ..utils.pose_detection import encode_data_url

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp'}


def require_session(session_id: str, manager: SessionManager) -> SessionContext:
    context = manager.get(session_id)
    if context is None:
        raise HTTPException(status_code=404, detail=f"Capture session {session_id} not found")
    return context


def session_status(context: SessionContext, response_class=SessionStatusResponse, **extra):
    """Describe a session's state for API responses"""
    state = context.session.state
    if isinstance(state, Countdown):
        state_name = "countdown"
    elif isinstance(state, AwaitingCapture):
        state_name = "awaiting_capture"
    else:
        state_name = "complete"

    return response_class(
        session_id=context.session_id,
        state=state_name,
        step_index=context.session.step_index,
        current_step=context.session.current_step,
        remaining=state.remaining if isinstance(state, Countdown) else None,
        captured_steps=[snapshot.step_id for snapshot in state.snapshots],
        phases=context.phases,
        has_results=context.has_results,
        error=context.error,
        **extra
    )


@router.get("/pose-steps", response_model=PoseStepsResponse)
async def get_pose_steps():
    """
    The five poses a session captures, in order, and the available countdown timers
    """
    return PoseStepsResponse(
        steps=list(POSE_STEPS),
        timer_options=list(TIMER_OPTIONS),
        default_timer_seconds=settings.default_timer_seconds,
    )


@router.post("/sessions", response_model=SessionStatusResponse, status_code=201)
async def create_session(manager: SessionManager = Depends(get_session_manager)):
    """
    Start a new capture session at the front view
    """
    context = manager.create()
    return session_status(context)


@router.get("/sessions/{session_id}", response_model=SessionStatusResponse)
async def get_session(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """
    Current step, countdown, processing phases and last error of a session
    """
    return session_status(require_session(session_id, manager))


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    require_session(session_id, manager)
    manager.remove(session_id)


@router.post("/sessions/{session_id}/restart", response_model=SessionStatusResponse)
async def restart_session(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """
    Discard captures and results and start again from the front view
    """
    context = require_session(session_id, manager)
    context.restart()
    return session_status(context)


@router.post("/sessions/{session_id}/frames", response_model=SessionStatusResponse)
async def push_frame(
    session_id: str,
    frame: PoseFrameRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Replace the session's current pose-detection frame

    An empty landmark list means no person is currently detected.
    """
    context = require_session(session_id, manager)
    context.update_frame(frame.landmarks or None, frame.world_landmarks, frame.image_data)
    return session_status(context)


@router.post("/sessions/{session_id}/frames/image", response_model=SessionStatusResponse)
async def upload_frame(
    session_id: str,
    image: UploadFile = File(..., description="Current camera still"),
    manager: SessionManager = Depends(get_session_manager),
    detector=Depends(get_pose_detector),
):
    """
    Run pose detection on an uploaded still and make it the session's current frame

    The encoded image is kept verbatim and embedded in the snapshot if a capture commits on it.
    """
    context = require_session(session_id, manager)

    extension = os.path.splitext(image.filename or "")[1].lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Only JPG, PNG, and BMP files are allowed")

    content = await image.read()
    try:
        pose = await run_in_threadpool(detector.detect, content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Pose detection failed for session {session_id}")
        raise HTTPException(status_code=500, detail=f"Pose detection failed: {str(e)}")

    if pose is None:
        context.update_frame(None)
        raise HTTPException(status_code=422, detail="No person detected in the image")

    skeleton, world_skeleton = pose
    context.update_frame(skeleton, world_skeleton, encode_data_url(content, image.content_type))
    del content
    return session_status(context)


@router.post("/sessions/{session_id}/capture", response_model=CaptureResponse)
async def begin_capture(
    session_id: str,
    request: BeginCaptureRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Start the countdown for the current step, or capture immediately with a zero timer

    A capture with no detected pose is reported in `captureError` and the same step
    stays current. Capturing the last step runs the measurement pipeline.
    """
    context = require_session(session_id, manager)

    try:
        effects = context.begin_capture(request.timer_seconds, settings.countdown_interval_seconds)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (CalibrationError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=f"Measurement failed: {str(e)}")
    except Exception as e:
        logger.exception(f"Error in begin_capture for session {session_id}")
        raise HTTPException(status_code=500, detail=f"Capture failed: {str(e)}")

    capture_error = next((str(e.error) for e in effects if isinstance(e, CaptureFailed)), None)
    return session_status(context, CaptureResponse, capture_error=capture_error)


@router.post("/sessions/{session_id}/cancel", response_model=SessionStatusResponse)
async def cancel_capture(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """
    Cancel a running countdown; the current step stays the same
    """
    context = require_session(session_id, manager)
    try:
        context.cancel_capture()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session_status(context)
