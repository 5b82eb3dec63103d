"""
In-memory registry of capture sessions and their results
"""
import asyncio
import logging
import uuid
from typing import Dict, List, Optional, Sequence

from ..exceptions import BodyScanError, CalibrationError, ValidationError
from ..models.schemas import (
    CapturedSnapshot, LandmarkPoint, MeasurementRecord, ProcessingPhase, SizingRecommendation
)
from .capture_session import CaptureFailed, CaptureSession, Countdown, SessionEffect
from .measurement import measurement_service
from .recommendation import recommendation_service

logger = logging.getLogger(__name__)


class SessionContext:
    """One capture session with the latest pose frame and, once complete, its results"""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.skeleton: Optional[List[LandmarkPoint]] = None
        self.world_skeleton: Optional[List[LandmarkPoint]] = None
        self.image_data: Optional[str] = None
        self.phases: List[ProcessingPhase] = []
        self.record: Optional[MeasurementRecord] = None
        self.recommendations: List[SizingRecommendation] = []
        self.snapshots: Sequence[CapturedSnapshot] = ()
        self.error: Optional[str] = None
        self.countdown_task: Optional[asyncio.Task] = None
        self.session = self._new_session()

    def _new_session(self) -> CaptureSession:
        return CaptureSession(
            pose_source=self.current_pose,
            frame_source=self.current_image,
            on_complete=self._process,
        )

    def current_pose(self):
        if self.skeleton is None:
            return None
        return self.skeleton, self.world_skeleton

    def current_image(self) -> Optional[str]:
        return self.image_data

    def update_frame(
        self,
        skeleton: Optional[List[LandmarkPoint]],
        world_skeleton: Optional[List[LandmarkPoint]] = None,
        image_data: Optional[str] = None,
    ):
        """Replace the current pose-detection frame; history is not kept"""
        self.skeleton = skeleton
        self.world_skeleton = world_skeleton
        self.image_data = image_data

    @property
    def has_results(self) -> bool:
        return self.record is not None

    def reset(self):
        """Abort back to the first pose with a fresh capture session"""
        self.cancel_countdown()
        self.phases = []
        self.session = self._new_session()

    def restart(self):
        """Discard any results and start over from the first pose"""
        self.reset()
        self.record = None
        self.recommendations = []
        self.snapshots = ()
        self.error = None

    def _process(self, snapshots: Sequence[CapturedSnapshot]):
        self.phases = []
        self.error = None
        try:
            record = measurement_service.process_snapshots(snapshots, on_progress=self.phases.append)
        except (CalibrationError, ValidationError) as e:
            logger.warning(f"Session {self.session_id} measurement failed: {e}")
            self.error = str(e)
            self.reset()
            raise

        self.record = record
        self.recommendations = recommendation_service.recommend(record)
        self.snapshots = snapshots

    def begin_capture(self, timer_seconds: int, interval: float = 1.0) -> List[SessionEffect]:
        """Start a capture; countdowns are ticked by a background task on the running loop"""
        self.error = None
        effects = self.session.begin_capture(timer_seconds)
        if isinstance(self.session.state, Countdown) and self.session.state.remaining > 0:
            self.cancel_countdown()
            self.countdown_task = asyncio.get_running_loop().create_task(
                self._run_countdown(self.session, interval)
            )
        return effects

    def cancel_capture(self) -> List[SessionEffect]:
        effects = self.session.cancel_capture()
        self.cancel_countdown()
        return effects

    def cancel_countdown(self):
        if self.countdown_task and not self.countdown_task.done():
            self.countdown_task.cancel()
        self.countdown_task = None

    async def _run_countdown(self, session: CaptureSession, interval: float):
        while self.session is session and isinstance(session.state, Countdown) and session.state.remaining > 0:
            await asyncio.sleep(interval)
            if self.session is not session:
                break
            try:
                for effect in session.tick():
                    if isinstance(effect, CaptureFailed):
                        self.error = str(effect.error)
            except BodyScanError as e:
                logger.warning(f"Session {self.session_id} countdown ended with error: {e}")
                break


class SessionManager:
    """Keeps capture sessions by id for the lifetime of the process"""

    def __init__(self):
        self.sessions: Dict[str, SessionContext] = {}

    def create(self) -> SessionContext:
        session_id = uuid.uuid4().hex
        context = SessionContext(session_id)
        self.sessions[session_id] = context
        logger.info(f"Created capture session {session_id}")
        return context

    def get(self, session_id: str) -> Optional[SessionContext]:
        return self.sessions.get(session_id)

    def remove(self, session_id: str):
        context = self.sessions.pop(session_id, None)
        if context:
            context.cancel_countdown()


# Global session registry
session_manager = SessionManager()
