"""
Linear unit conversion over measurement records
"""
from ..models.schemas import MeasurementRecord

CM_PER_INCH = 2.54

LENGTH_FIELDS = (
    'neck_circumference',
    'shoulder_width',
    'chest_circumference',
    'waist_circumference',
    'arm_length',
    'bicep_circumference',
    'wrist_circumference',
    'shirt_length',
    'hip_circumference',
    'thigh_circumference',
    'inseam',
    'outseam',
    'knee_circumference',
    'calf_circumference',
    'ankle_circumference',
    'height',
)

# Converted only when present on the record
OPTIONAL_LENGTH_FIELDS = (
    'bust_circumference',
    'underbust_circumference',
    'weight',
)


def convert(record: MeasurementRecord, target_unit: str) -> MeasurementRecord:
    """
    Express every length field of a record in another unit

    Args:
        record: Measurement record in inches or cm
        target_unit: "inches" or "cm"

    Returns:
        The same record when it is already in target_unit, otherwise a new record
    """
    if target_unit not in ('inches', 'cm'):
        raise ValueError(f"Unsupported unit: {target_unit}")

    if record.units == target_unit:
        return record

    factor = CM_PER_INCH if target_unit == 'cm' else 1 / CM_PER_INCH

    update = {field: getattr(record, field) * factor for field in LENGTH_FIELDS}
    for field in OPTIONAL_LENGTH_FIELDS:
        value = getattr(record, field)
        if value is not None:
            update[field] = value * factor
    update['units'] = target_unit

    return record.model_copy(update=update)
