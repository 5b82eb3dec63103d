"""
Size recommendation service
Maps a measurement record to garment sizes with threshold rules
"""
import math
from typing import Dict, List, Tuple

from ..models.schemas import MeasurementRecord, SizingRecommendation
from ..utils.units import convert

# (upper bound on chest circumference in inches, size, confidence); bounds are inclusive
SizeRule = Tuple[float, str, float]


class SizeRecommendationService:
    """
    Service for providing size recommendations based on body measurements
    """

    def __init__(self):
        """
        Initialize the service with the chest-based size charts
        """
        self.chest_rules: Dict[str, List[SizeRule]] = {
            "Shirt": [
                (36, "Small", 0.85),
                (40, "Medium", 0.92),
                (44, "Large", 0.88),
                (math.inf, "X-Large", 0.83),
            ],
            # Jackets run one size-step larger than shirts
            "Jacket": [
                (38, "Small", 0.82),
                (42, "Medium", 0.89),
                (46, "Large", 0.85),
                (math.inf, "X-Large", 0.80),
            ],
        }
        self.pants_confidence = 0.91

    def get_categories(self) -> List[str]:
        """
        Garment categories in the order recommendations are emitted
        """
        return ["Shirt", "Pants", "Jacket"]

    def size_by_chest(self, category: str, chest: float) -> SizingRecommendation:
        """
        First rule whose upper bound is not below the chest circumference wins
        """
        for upper_bound, size, confidence in self.chest_rules[category]:
            if chest <= upper_bound:
                return SizingRecommendation(category=category, size=size, fit="regular", confidence=confidence)
        raise ValueError(f"No {category} size rule matches chest {chest}")

    def size_pants(self, waist: float, inseam: float) -> SizingRecommendation:
        """
        Pants are labelled waist x inseam, both rounded to whole inches
        """
        return SizingRecommendation(
            category="Pants",
            size=f"{round_half_up(waist)}x{round_half_up(inseam)}",
            fit="regular",
            confidence=self.pants_confidence,
        )

    def recommend(self, record: MeasurementRecord) -> List[SizingRecommendation]:
        """
        Get Shirt, Pants and Jacket recommendations for a measurement record

        Args:
            record: Measurement record in any unit; thresholds are evaluated in inches

        Returns:
            One recommendation per category, ordered Shirt, Pants, Jacket
        """
        inches = convert(record, "inches")
        chest = inches.chest_circumference

        return [
            self.size_by_chest("Shirt", chest),
            self.size_pants(inches.waist_circumference, inches.inseam),
            self.size_by_chest("Jacket", chest),
        ]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up"""
    return int(math.floor(value + 0.5))


# Global service instance
recommendation_service = SizeRecommendationService()


def recommend(record: MeasurementRecord) -> List[SizingRecommendation]:
    """Recommendations for a record using the shared service"""
    return recommendation_service.recommend(record)
