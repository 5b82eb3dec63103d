"""
MediaPipe pose detection for uploaded still frames
"""
import base64
import logging
import threading
from typing import List, Optional, Tuple

from ..models.schemas import LandmarkPoint

logger = logging.getLogger(__name__)

DetectedPose = Tuple[List[LandmarkPoint], Optional[List[LandmarkPoint]]]

# Largest side handed to the model; bigger frames are downscaled first
MAX_DIMENSION = 1920


class PoseDetector:
    """
    Wraps a MediaPipe Pose instance configured for single still images

    Landmarks are returned in MediaPipe's normalized image coordinates so the
    measurement pipeline can calibrate them itself.
    """

    def __init__(self, model_complexity: int = 0, min_detection_confidence: float = 0.5):
        import mediapipe as mp

        self.mp_pose = mp.solutions.pose
        # Lightweight model without segmentation keeps the cached instance small
        self.pose = self.mp_pose.Pose(
            static_image_mode=True,
            model_complexity=model_complexity,
            enable_segmentation=False,
            min_detection_confidence=min_detection_confidence,
        )
        # One graph per instance; uploads are detected on worker threads
        self._lock = threading.Lock()

    def detect(self, image_bytes: bytes) -> Optional[DetectedPose]:
        """
        Detect the pose in an encoded image

        Args:
            image_bytes: JPEG/PNG/BMP encoded image

        Returns:
            (skeleton, world_skeleton), or None when no person is detected

        Raises:
            ValueError: the bytes cannot be decoded as an image
        """
        import cv2
        import numpy as np

        image = cv2.imdecode(np.frombuffer(image_bytes, dtype=np.uint8), cv2.IMREAD_COLOR)
        if image is None:
            raise ValueError("Could not decode image")

        height, width = image.shape[:2]
        if height > MAX_DIMENSION or width > MAX_DIMENSION:
            scale = MAX_DIMENSION / max(height, width)
            image = cv2.resize(image, (int(width * scale), int(height * scale)), interpolation=cv2.INTER_AREA)
            logger.info(f"Resized frame from {width}x{height} for pose detection")

        image_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        try:
            with self._lock:
                results = self.pose.process(image_rgb)
        finally:
            del image_rgb

        if not results.pose_landmarks:
            return None

        skeleton = [_to_point(lm) for lm in results.pose_landmarks.landmark]
        world_skeleton = None
        if results.pose_world_landmarks:
            world_skeleton = [_to_point(lm) for lm in results.pose_world_landmarks.landmark]
        return skeleton, world_skeleton

    def close(self):
        self.pose.close()


def _to_point(lm) -> LandmarkPoint:
    # MediaPipe visibility is a sigmoid output; clamp float noise into [0, 1]
    visibility = min(max(float(lm.visibility), 0.0), 1.0)
    return LandmarkPoint(x=lm.x, y=lm.y, z=lm.z, visibility=visibility)


def encode_data_url(image_bytes: bytes, content_type: Optional[str] = None) -> str:
    """Embed an encoded image verbatim as a base64 data URL"""
    content_type = content_type or 'image/jpeg'
    return f"data:{content_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"
