"""
Vector math over 3-D pose landmarks
"""
import math
from enum import IntEnum
from typing import Optional, Sequence

from ..models.schemas import LandmarkPoint


class PoseLandmark(IntEnum):
    """MediaPipe Pose landmark indices"""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


SKELETON_SIZE = len(PoseLandmark)


def distance(p1: LandmarkPoint, p2: LandmarkPoint) -> float:
    """Full 3-D Euclidean distance between two landmarks"""
    dx = p1.x - p2.x
    dy = p1.y - p2.y
    dz = p1.z - p2.z
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def _visibility(point: LandmarkPoint) -> float:
    return 1.0 if point.visibility is None else point.visibility


def midpoint(p1: LandmarkPoint, p2: LandmarkPoint) -> LandmarkPoint:
    """
    Midpoint of two landmarks

    The visibility of the result is the lower of the two, absent visibility counting as 1.0.
    """
    return LandmarkPoint(
        x=(p1.x + p2.x) / 2,
        y=(p1.y + p2.y) / 2,
        z=(p1.z + p2.z) / 2,
        visibility=min(_visibility(p1), _visibility(p2)),
    )


def is_live(skeleton: Optional[Sequence[LandmarkPoint]]) -> bool:
    """True when the pose detector currently reports a skeleton"""
    return bool(skeleton)


def landmark(skeleton: Sequence[LandmarkPoint], index: PoseLandmark) -> LandmarkPoint:
    """Landmark at an anatomical index; raises IndexError on a short skeleton"""
    if index >= len(skeleton):
        raise IndexError(
            f"Skeleton has {len(skeleton)} landmarks, {PoseLandmark(index).name} ({int(index)}) is missing"
        )
    return skeleton[index]
