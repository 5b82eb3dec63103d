"""
Shared fixtures: synthetic skeletons, snapshots and records
"""
import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault("BODYSCAN_LOAD_POSE_MODEL_ON_STARTUP", "false")

from bodyscan.models.schemas import CapturedSnapshot, LandmarkPoint, MeasurementRecord
from bodyscan.utils.geometry import PoseLandmark, SKELETON_SIZE

# Front view used throughout: head segment 0.2 -> 45 inches per unit
FRONT_POINTS = {
    PoseLandmark.NOSE: (0.0, 0.0, 0.0),
    PoseLandmark.LEFT_SHOULDER: (-0.1, 0.2, 0.0),
    PoseLandmark.RIGHT_SHOULDER: (0.1, 0.2, 0.0),
    PoseLandmark.LEFT_ELBOW: (-0.15, 0.4, 0.0),
    PoseLandmark.RIGHT_ELBOW: (0.15, 0.4, 0.0),
    PoseLandmark.LEFT_WRIST: (-0.18, 0.6, 0.0),
    PoseLandmark.RIGHT_WRIST: (0.18, 0.6, 0.0),
    PoseLandmark.LEFT_HIP: (-0.08, 0.6, 0.0),
    PoseLandmark.RIGHT_HIP: (0.08, 0.6, 0.0),
    PoseLandmark.LEFT_KNEE: (-0.08, 0.8, 0.0),
    PoseLandmark.RIGHT_KNEE: (0.08, 0.8, 0.0),
    PoseLandmark.LEFT_ANKLE: (-0.08, 1.0, 0.0),
    PoseLandmark.RIGHT_ANKLE: (0.08, 1.0, 0.0),
}

# Arms extended horizontally
ARMS_POINTS = {
    **FRONT_POINTS,
    PoseLandmark.LEFT_ELBOW: (-0.3, 0.2, 0.0),
    PoseLandmark.RIGHT_ELBOW: (0.3, 0.2, 0.0),
    PoseLandmark.LEFT_WRIST: (-0.5, 0.2, 0.0),
    PoseLandmark.RIGHT_WRIST: (0.5, 0.2, 0.0),
}


def make_skeleton(points=None, visibility=0.9):
    """33-point skeleton; unspecified landmarks sit at the origin"""
    points = points or {}
    skeleton = []
    for index in range(SKELETON_SIZE):
        x, y, z = points.get(index, (0.0, 0.0, 0.0))
        skeleton.append(LandmarkPoint(x=x, y=y, z=z, visibility=visibility))
    return skeleton


def make_snapshot(step_id, points=None):
    return CapturedSnapshot(
        image_data="data:image/jpeg;base64,AAAA",
        skeleton=make_skeleton(points if points is not None else FRONT_POINTS),
        step_id=step_id,
        captured_at=datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc),
    )


def make_record(**overrides):
    values = dict(
        neck_circumference=14.0,
        shoulder_width=17.0,
        chest_circumference=38.0,
        bust_circumference=36.1,
        underbust_circumference=32.3,
        waist_circumference=32.0,
        arm_length=24.0,
        bicep_circumference=4.25,
        wrist_circumference=6.3,
        shirt_length=28.0,
        hip_circumference=38.0,
        thigh_circumference=22.8,
        inseam=30.0,
        outseam=34.5,
        knee_circumference=15.96,
        calf_circumference=14.364,
        ankle_circumference=8.6184,
        height=70.0,
        confidence=0.75,
        captured_at=datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc),
        units="inches",
    )
    values.update(overrides)
    return MeasurementRecord(**values)


@pytest.fixture
def front_skeleton():
    return make_skeleton(FRONT_POINTS)


@pytest.fixture
def full_snapshots():
    """One snapshot per pose step in capture order"""
    return [
        make_snapshot("front"),
        make_snapshot("side-right"),
        make_snapshot("back"),
        make_snapshot("side-left"),
        make_snapshot("front-arms", ARMS_POINTS),
    ]


@pytest.fixture
def record():
    return make_record()
