"""
Error taxonomy for the capture and measurement pipeline
"""


class BodyScanError(Exception):
    """Base class for all body scan errors"""


class CaptureError(BodyScanError):
    """No live skeleton was available when a capture was committed"""

    def __init__(self, step_id: str, message: str = None):
        self.step_id = step_id
        super().__init__(message or f"No pose detected for step '{step_id}', please retake")


class CalibrationError(BodyScanError):
    """The front view is missing or its head segment is degenerate"""


class ValidationError(BodyScanError):
    """Required pose data is missing or malformed at synthesis time"""


class PersistenceError(BodyScanError):
    """The measurement store is unavailable or rejected the write"""


class SessionStateError(BodyScanError):
    """A capture command was issued in a state where it is not valid"""
