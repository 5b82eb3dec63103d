"""
Export document for a completed measurement session
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from ..models.schemas import CapturedSnapshot, MeasurementRecord, SizingRecommendation


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix"""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def build_export(
    record: MeasurementRecord,
    recommendations: Sequence[SizingRecommendation],
    snapshots: Sequence[CapturedSnapshot],
    exported_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the downloadable measurements document

    Args:
        record: Measurement record, in the units it should be exported in
        recommendations: Size recommendations for the record
        snapshots: Raw pose snapshots of the session
        exported_at: Export time, defaults to now

    Returns:
        JSON-serializable document with measurements, recommendations, rawPoseData,
        timestamp and confidence keys
    """
    measurements = record.model_dump(mode='json', by_alias=True, exclude_none=True)
    return {
        'measurements': measurements,
        'recommendations': [r.model_dump(mode='json', by_alias=True) for r in recommendations],
        'rawPoseData': [
            s.model_dump(mode='json', by_alias=True, exclude_none=True) for s in snapshots
        ],
        'timestamp': iso_timestamp(exported_at),
        'confidence': measurements['confidence'],
    }


def export_filename(exported_at: Optional[datetime] = None) -> str:
    moment = exported_at or datetime.now(timezone.utc)
    return f"body-measurements-{moment.astimezone(timezone.utc).date().isoformat()}.json"
