"""
Pydantic schemas for the capture pipeline, measurement records and API payloads
"""
from datetime import datetime
from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


Units = Literal["inches", "cm"]
Fit = Literal["tight", "regular", "loose"]

# MediaPipe Pose landmarks per skeleton
LANDMARK_COUNT = 33


class CamelModel(BaseModel):
    """Base model exchanged with clients using camelCase field names"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LandmarkPoint(BaseModel):
    """Single normalized, camera-relative pose landmark"""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = Field(None, ge=0.0, le=1.0)


Skeleton = List[LandmarkPoint]


class PoseStep(CamelModel):
    """One guided capture step"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    description: str
    instruction: str
    duration_ms: int = 3000
    target_angle_degrees: int


class CapturedSnapshot(BaseModel):
    """One committed capture: the still image, its skeleton and the step it satisfies"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    image_data: Optional[str] = Field(None, alias="imageData")
    skeleton: Skeleton = Field(..., alias="landmarks")
    world_skeleton: Optional[Skeleton] = Field(None, alias="worldLandmarks")
    step_id: str = Field(..., alias="stepId")
    captured_at: datetime = Field(..., alias="timestamp")


class MeasurementRecord(CamelModel):
    """Body measurements; every length field is expressed in `units`"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    # Upper body
    neck_circumference: float = Field(..., ge=0)
    shoulder_width: float = Field(..., ge=0)
    chest_circumference: float = Field(..., ge=0)
    bust_circumference: Optional[float] = Field(None, ge=0)
    underbust_circumference: Optional[float] = Field(None, ge=0)
    waist_circumference: float = Field(..., ge=0)
    arm_length: float = Field(..., ge=0)
    bicep_circumference: float = Field(..., ge=0)
    wrist_circumference: float = Field(..., ge=0)
    shirt_length: float = Field(..., ge=0)

    # Lower body
    hip_circumference: float = Field(..., ge=0)
    thigh_circumference: float = Field(..., ge=0)
    inseam: float = Field(..., ge=0)
    outseam: float = Field(..., ge=0)
    knee_circumference: float = Field(..., ge=0)
    calf_circumference: float = Field(..., ge=0)
    ankle_circumference: float = Field(..., ge=0)

    # General
    height: float = Field(..., ge=0)
    weight: Optional[float] = Field(None, ge=0)

    # Metadata
    confidence: float = Field(..., ge=0.0, le=1.0)
    captured_at: datetime
    units: Units = "inches"


class SizingRecommendation(CamelModel):
    """Garment size recommendation for one category"""
    category: str
    size: str
    fit: Fit = "regular"
    confidence: float = Field(..., ge=0.0, le=1.0)


class ProcessingPhase(CamelModel):
    """Progress event emitted as a measurement stage completes"""
    index: int
    name: str
    progress: float


class PoseStepsResponse(CamelModel):
    """Capture steps and available countdown timers"""
    steps: List[PoseStep]
    timer_options: List[int]
    default_timer_seconds: int


class PoseFrameRequest(CamelModel):
    """Current pose-detection frame pushed by the capture surface"""
    landmarks: Skeleton = []
    world_landmarks: Optional[Skeleton] = None
    image_data: Optional[str] = None

    @field_validator("landmarks", "world_landmarks")
    @classmethod
    def check_landmark_count(cls, value):
        # An empty frame means no person is in view
        if value and len(value) != LANDMARK_COUNT:
            raise ValueError(f"Expected {LANDMARK_COUNT} pose landmarks, got {len(value)}")
        return value


class BeginCaptureRequest(CamelModel):
    """Request model for starting a capture countdown"""
    timer_seconds: int = Field(3, ge=0, description="Countdown length in seconds, 0 captures immediately")


class SessionStatusResponse(CamelModel):
    """Snapshot of a capture session's progress"""
    session_id: str
    state: str
    step_index: Optional[int] = None
    current_step: Optional[PoseStep] = None
    remaining: Optional[int] = None
    captured_steps: List[str] = []
    phases: List[ProcessingPhase] = []
    has_results: bool = False
    error: Optional[str] = None


class CaptureResponse(SessionStatusResponse):
    """Session status after a capture command, with any local capture failure"""
    capture_error: Optional[str] = None


class ResultsResponse(CamelModel):
    """Measurements and size recommendations for a completed session"""
    measurements: MeasurementRecord
    recommendations: List[SizingRecommendation]
    message: str = "Body measurements calculated successfully"


class SaveMeasurementsRequest(CamelModel):
    """Request model for persisting a session's measurements"""
    profile_id: Optional[str] = None
    name: str = "Anonymous User"
    email: Optional[str] = None
    units: Units = "inches"
    fit: Fit = "regular"


class SaveMeasurementsResponse(CamelModel):
    """Persistence outcome; a failed save keeps the results available for retry"""
    saved: bool
    measurement_id: Optional[str] = None
    profile_id: Optional[str] = None
    warning: Optional[str] = None
