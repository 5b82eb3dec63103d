"""
Scale calibration from the front view's head segment
"""
import logging
from typing import Optional, Sequence

from ..exceptions import CalibrationError
from ..models.schemas import CapturedSnapshot
from ..utils.geometry import PoseLandmark, distance, landmark, midpoint

logger = logging.getLogger(__name__)

# Nose to shoulder-line distance of an average adult
ASSUMED_HEAD_HEIGHT_INCHES = 9.0
CALIBRATION_EPSILON = 1e-9

FRONT_STEP_ID = 'front'


def find_snapshot(snapshots: Sequence[CapturedSnapshot], step_id: str) -> Optional[CapturedSnapshot]:
    """First snapshot captured for step_id, or None"""
    return next((snapshot for snapshot in snapshots if snapshot.step_id == step_id), None)


def calibrate(snapshots: Sequence[CapturedSnapshot]) -> float:
    """
    Derive the landmark-space to inches ratio for a session

    The head segment (nose to the midpoint of the shoulders) on the front view is
    assumed to be ASSUMED_HEAD_HEIGHT_INCHES long. The ratio is a single global
    scale applied to every other landmark distance of the session.

    Raises:
        CalibrationError: front view missing, or head segment degenerate
    """
    front = find_snapshot(snapshots, FRONT_STEP_ID)
    if front is None:
        raise CalibrationError("Front view is required for scale calibration")

    try:
        nose = landmark(front.skeleton, PoseLandmark.NOSE)
        neck_base = midpoint(
            landmark(front.skeleton, PoseLandmark.LEFT_SHOULDER),
            landmark(front.skeleton, PoseLandmark.RIGHT_SHOULDER),
        )
    except IndexError as e:
        raise CalibrationError(f"Front view skeleton is incomplete: {e}") from e

    head_segment = distance(nose, neck_base)
    if head_segment <= CALIBRATION_EPSILON:
        raise CalibrationError(f"Head segment too small to calibrate: {head_segment:.3g}")

    ratio = ASSUMED_HEAD_HEIGHT_INCHES / head_segment
    logger.info(f"Calibrated head segment {head_segment:.5f} -> {ratio:.3f} inches per unit")
    return ratio
