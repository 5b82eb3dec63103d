"""
Guided capture sequencing

The session is a finite-state machine: `transition(state, event)` is pure and
returns the next state plus the effects the driver must carry out. The
`CaptureSession` driver owns the current state, samples the pose-detection
collaborator when a commit is due and hands the finished snapshot set over
exactly once.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..exceptions import CaptureError, SessionStateError
from ..models.schemas import CapturedSnapshot, LandmarkPoint, PoseStep
from ..utils.geometry import is_live

logger = logging.getLogger(__name__)


POSE_STEPS: Tuple[PoseStep, ...] = (
    PoseStep(
        id='front',
        title='Front View',
        description='Stand facing the camera',
        instruction='Stand straight with arms at your sides, looking directly at the camera',
        duration_ms=3000,
        target_angle_degrees=0,
    ),
    PoseStep(
        id='side-right',
        title='Right Side',
        description='Turn 90° to your right',
        instruction='Turn to show your right side profile, arms at your sides',
        duration_ms=3000,
        target_angle_degrees=90,
    ),
    PoseStep(
        id='back',
        title='Back View',
        description='Turn to show your back',
        instruction='Turn completely around to show your back, arms at your sides',
        duration_ms=3000,
        target_angle_degrees=180,
    ),
    PoseStep(
        id='side-left',
        title='Left Side',
        description='Turn 90° to your left',
        instruction='Turn to show your left side profile, arms at your sides',
        duration_ms=3000,
        target_angle_degrees=270,
    ),
    PoseStep(
        id='front-arms',
        title='Arms Extended',
        description='Face camera with arms out',
        instruction='Face the camera and extend both arms horizontally',
        duration_ms=3000,
        target_angle_degrees=0,
    ),
)

TIMER_OPTIONS = (0, 3, 5, 10, 15)

Snapshots = Tuple[CapturedSnapshot, ...]


# States

@dataclass(frozen=True)
class AwaitingCapture:
    step_index: int
    snapshots: Snapshots = ()


@dataclass(frozen=True)
class Countdown:
    step_index: int
    remaining: int
    snapshots: Snapshots = ()


@dataclass(frozen=True)
class Complete:
    snapshots: Snapshots


SessionState = Union[AwaitingCapture, Countdown, Complete]


# Events

@dataclass(frozen=True)
class BeginCapture:
    timer_seconds: int


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class CancelCapture:
    pass


@dataclass(frozen=True)
class Commit:
    """The pose and image sampled from the collaborators at commit time"""
    skeleton: Optional[List[LandmarkPoint]]
    world_skeleton: Optional[List[LandmarkPoint]] = None
    image_data: Optional[str] = None
    captured_at: Optional[datetime] = None


SessionEvent = Union[BeginCapture, Tick, CancelCapture, Commit]


# Effects

@dataclass(frozen=True)
class CommitDue:
    step_index: int


@dataclass(frozen=True)
class CaptureFailed:
    error: CaptureError


@dataclass(frozen=True)
class SnapshotRecorded:
    snapshot: CapturedSnapshot


@dataclass(frozen=True)
class SessionCompleted:
    snapshots: Snapshots


SessionEffect = Union[CommitDue, CaptureFailed, SnapshotRecorded, SessionCompleted]


def transition(state: SessionState, event: SessionEvent) -> Tuple[SessionState, List[SessionEffect]]:
    """
    Pure transition function of the capture session

    Raises:
        SessionStateError: the event is a command that is not valid in `state`
        ValueError: negative countdown
    """
    if isinstance(event, Tick):
        return _tick(state)

    if isinstance(state, Complete):
        raise SessionStateError("Capture session is already complete")

    if isinstance(event, BeginCapture):
        if not isinstance(state, AwaitingCapture):
            raise SessionStateError("A capture countdown is already running")
        if event.timer_seconds < 0:
            raise ValueError(f"Timer must be non-negative, got {event.timer_seconds}")
        countdown = Countdown(state.step_index, event.timer_seconds, state.snapshots)
        if event.timer_seconds == 0:
            return countdown, [CommitDue(state.step_index)]
        return countdown, []

    if isinstance(event, CancelCapture):
        if not isinstance(state, Countdown):
            raise SessionStateError("No capture countdown to cancel")
        return AwaitingCapture(state.step_index, state.snapshots), []

    if isinstance(event, Commit):
        if not isinstance(state, Countdown) or state.remaining != 0:
            raise SessionStateError("No capture is due")
        return _commit(state, event)

    raise TypeError(f"Unknown capture event: {event!r}")


def _tick(state: SessionState) -> Tuple[SessionState, List[SessionEffect]]:
    # Ticks arriving late or outside a countdown are ignored
    if not isinstance(state, Countdown) or state.remaining == 0:
        return state, []

    remaining = state.remaining - 1
    countdown = Countdown(state.step_index, remaining, state.snapshots)
    if remaining == 0:
        return countdown, [CommitDue(state.step_index)]
    return countdown, []


def _commit(state: Countdown, event: Commit) -> Tuple[SessionState, List[SessionEffect]]:
    step = POSE_STEPS[state.step_index]

    if not is_live(event.skeleton):
        error = CaptureError(step.id)
        return AwaitingCapture(state.step_index, state.snapshots), [CaptureFailed(error)]

    snapshot = CapturedSnapshot(
        image_data=event.image_data,
        skeleton=list(event.skeleton),
        world_skeleton=list(event.world_skeleton) if event.world_skeleton else None,
        step_id=step.id,
        captured_at=event.captured_at or datetime.now(timezone.utc),
    )
    snapshots = state.snapshots + (snapshot,)
    effects: List[SessionEffect] = [SnapshotRecorded(snapshot)]

    if state.step_index < len(POSE_STEPS) - 1:
        return AwaitingCapture(state.step_index + 1, snapshots), effects

    effects.append(SessionCompleted(snapshots))
    return Complete(snapshots), effects


PoseSource = Callable[[], Optional[Tuple[Sequence[LandmarkPoint], Optional[Sequence[LandmarkPoint]]]]]
FrameSource = Callable[[], Optional[str]]
CompletionCallback = Callable[[Snapshots], None]


class CaptureSession:
    """
    Drives one capture session from the first pose to completion

    Args:
        pose_source: Returns the current (skeleton, world_skeleton) of the pose detector, or None
        frame_source: Returns the current encoded still image, or None
        on_complete: Receives the ordered snapshot set once all steps are captured
    """

    def __init__(
        self,
        pose_source: PoseSource,
        frame_source: Optional[FrameSource] = None,
        on_complete: Optional[CompletionCallback] = None,
    ):
        self.pose_source = pose_source
        self.frame_source = frame_source
        self.on_complete = on_complete
        self.state: SessionState = AwaitingCapture(0)

    @property
    def step_index(self) -> Optional[int]:
        if isinstance(self.state, Complete):
            return None
        return self.state.step_index

    @property
    def current_step(self) -> Optional[PoseStep]:
        index = self.step_index
        return None if index is None else POSE_STEPS[index]

    @property
    def snapshots(self) -> Snapshots:
        return self.state.snapshots

    @property
    def is_complete(self) -> bool:
        return isinstance(self.state, Complete)

    def begin_capture(self, timer_seconds: int) -> List[SessionEffect]:
        return self.dispatch(BeginCapture(timer_seconds))

    def tick(self) -> List[SessionEffect]:
        return self.dispatch(Tick())

    def cancel_capture(self) -> List[SessionEffect]:
        return self.dispatch(CancelCapture())

    def dispatch(self, event: SessionEvent) -> List[SessionEffect]:
        """Apply an event and carry out its effects; returns every effect produced"""
        self.state, effects = transition(self.state, event)
        produced = list(effects)

        for effect in effects:
            if isinstance(effect, CommitDue):
                produced.extend(self.dispatch(self._sample()))
            elif isinstance(effect, CaptureFailed):
                logger.warning(f"Capture failed: {effect.error}")
            elif isinstance(effect, SnapshotRecorded):
                logger.info(f"Captured step '{effect.snapshot.step_id}'")
            elif isinstance(effect, SessionCompleted):
                logger.info(f"All {len(effect.snapshots)} poses captured")
                if self.on_complete:
                    self.on_complete(effect.snapshots)

        return produced

    def _sample(self) -> Commit:
        pose = self.pose_source()
        skeleton, world_skeleton = pose if pose else (None, None)
        image_data = self.frame_source() if self.frame_source else None
        return Commit(
            skeleton=list(skeleton) if skeleton else None,
            world_skeleton=list(world_skeleton) if world_skeleton else None,
            image_data=image_data,
            captured_at=datetime.now(timezone.utc),
        )
