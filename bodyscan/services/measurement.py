"""
Measurement synthesis from captured pose snapshots
"""
import logging
import math
from datetime import datetime, timezone
from typing import Callable, NamedTuple, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..models.schemas import CapturedSnapshot, MeasurementRecord, ProcessingPhase
from ..utils.geometry import PoseLandmark, distance, landmark, midpoint
from .calibration import calibrate, find_snapshot

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.75

PROCESSING_PHASES = (
    'Analyzing pose landmarks...',
    'Calculating body proportions...',
    'Processing depth information...',
    'Generating measurements...',
    'Validating results...',
)

PhaseCallback = Callable[[ProcessingPhase], None]


class SelectedPoses(NamedTuple):
    front: CapturedSnapshot
    side: CapturedSnapshot
    arms: CapturedSnapshot


def select_poses(snapshots: Sequence[CapturedSnapshot]) -> SelectedPoses:
    """
    Pick the snapshots each measurement is taken from

    Side falls back from the right profile to the left one, arms falls back to the front view.

    Raises:
        ValidationError: front or side view missing
    """
    front = find_snapshot(snapshots, 'front')
    side = find_snapshot(snapshots, 'side-right') or find_snapshot(snapshots, 'side-left')
    if front is None or side is None:
        raise ValidationError("Missing required pose data for measurements")

    arms = find_snapshot(snapshots, 'front-arms') or front
    return SelectedPoses(front=front, side=side, arms=arms)


def ellipse_circumference(width: float, depth: float = 0) -> float:
    """
    Estimate a body-part circumference from its width and depth

    With no depth the cross-section is taken as a circle of diameter `width`;
    otherwise Ramanujan's second approximation for an ellipse is used.
    """
    if depth == 0:
        return math.pi * width

    a = width / 2
    b = depth / 2
    return math.pi * (3 * (a + b) - math.sqrt((3 * a + b) * (a + 3 * b)))


class _PhaseReporter:
    """Emits the processing phases in order, each exactly once"""

    def __init__(self, callback: Optional[PhaseCallback]):
        self.callback = callback
        self.completed = 0

    def complete(self, name: str):
        index = self.completed
        if PROCESSING_PHASES[index] != name:
            raise RuntimeError(f"Phase '{name}' reported out of order")
        self.completed += 1
        logger.info(name)
        if self.callback:
            self.callback(ProcessingPhase(
                index=index,
                name=name,
                progress=(index + 1) / len(PROCESSING_PHASES) * 100,
            ))


def synthesize(
    snapshots: Sequence[CapturedSnapshot],
    ratio: float,
    on_phase: Optional[PhaseCallback] = None,
) -> MeasurementRecord:
    """
    Compute the full measurement record for a completed capture session

    Args:
        snapshots: Ordered snapshots of the session
        ratio: Calibration ratio, inches per landmark-space unit
        on_phase: Called with each processing phase as it completes

    Returns:
        Complete measurement record in inches

    Raises:
        ValidationError: required views missing or a skeleton lacks a landmark
    """
    phases = _PhaseReporter(on_phase)
    poses = select_poses(snapshots)
    front = poses.front.skeleton
    arms = poses.arms.skeleton
    phases.complete(PROCESSING_PHASES[0])

    try:
        nose = landmark(front, PoseLandmark.NOSE)
        left_shoulder = landmark(front, PoseLandmark.LEFT_SHOULDER)
        right_shoulder = landmark(front, PoseLandmark.RIGHT_SHOULDER)
        left_hip = landmark(front, PoseLandmark.LEFT_HIP)
        right_hip = landmark(front, PoseLandmark.RIGHT_HIP)
        left_ankle = landmark(front, PoseLandmark.LEFT_ANKLE)
        right_ankle = landmark(front, PoseLandmark.RIGHT_ANKLE)
        arm_elbow = landmark(arms, PoseLandmark.LEFT_ELBOW)
        arm_wrist = landmark(arms, PoseLandmark.LEFT_WRIST)
    except IndexError as e:
        raise ValidationError(f"Incomplete pose data: {e}") from e

    # Primary lengths
    height = distance(nose, midpoint(left_ankle, right_ankle)) * ratio
    shoulder_width = distance(left_shoulder, right_shoulder) * ratio
    hip_distance = distance(left_hip, right_hip)
    # Upper arm starts at the front view shoulder
    arm_length = (distance(left_shoulder, arm_elbow) + distance(arm_elbow, arm_wrist)) * ratio
    inseam = distance(left_hip, left_ankle) * ratio
    phases.complete(PROCESSING_PHASES[1])

    # Circumferences from front widths; no depth is measured so each is circular
    chest_width = shoulder_width * 0.8
    chest_circumference = ellipse_circumference(chest_width, 0)
    waist_width = hip_distance * ratio * 0.9
    waist_circumference = ellipse_circumference(waist_width, 0)
    hip_width = hip_distance * ratio
    hip_circumference = ellipse_circumference(hip_width, 0)
    phases.complete(PROCESSING_PHASES[2])

    thigh_circumference = hip_circumference * 0.6
    knee_circumference = thigh_circumference * 0.7
    calf_circumference = knee_circumference * 0.9
    values = {
        'neck_circumference': height * 0.2,
        'shoulder_width': shoulder_width,
        'chest_circumference': chest_circumference,
        'bust_circumference': chest_circumference * 0.95,
        'underbust_circumference': chest_circumference * 0.85,
        'waist_circumference': waist_circumference,
        'arm_length': arm_length,
        'bicep_circumference': shoulder_width * 0.25,
        'wrist_circumference': height * 0.09,
        'shirt_length': height * 0.4,
        'hip_circumference': hip_circumference,
        'thigh_circumference': thigh_circumference,
        'inseam': inseam,
        'outseam': inseam * 1.15,
        'knee_circumference': knee_circumference,
        'calf_circumference': calf_circumference,
        'ankle_circumference': calf_circumference * 0.6,
        'height': height,
    }
    phases.complete(PROCESSING_PHASES[3])

    try:
        record = MeasurementRecord(
            **values,
            confidence=BASE_CONFIDENCE,
            captured_at=datetime.now(timezone.utc),
            units='inches',
        )
    except PydanticValidationError as e:
        raise ValidationError(f"Calculated measurements are invalid: {e}") from e
    phases.complete(PROCESSING_PHASES[4])

    return record


class MeasurementService:
    """Service class turning a completed snapshot set into a measurement record"""

    def process_snapshots(
        self,
        snapshots: Sequence[CapturedSnapshot],
        on_progress: Optional[PhaseCallback] = None,
    ) -> MeasurementRecord:
        """
        Calibrate and synthesize measurements for one capture session

        Args:
            snapshots: Ordered snapshots handed over by the capture session
            on_progress: Receives each processing phase as it completes

        Returns:
            Measurement record in inches

        Raises:
            ValidationError: front or side view missing
            CalibrationError: head segment cannot be calibrated
        """
        logger.info(f"Processing {len(snapshots)} snapshots: {[s.step_id for s in snapshots]}")

        # Missing views are reported before calibration looks at the front view
        select_poses(snapshots)
        ratio = calibrate(snapshots)
        record = synthesize(snapshots, ratio, on_phase=on_progress)

        logger.info(
            f"Measurements ready: height={record.height:.1f}in "
            f"chest={record.chest_circumference:.1f}in waist={record.waist_circumference:.1f}in"
        )
        return record


# Global service instance
measurement_service = MeasurementService()
