"""Confidence classification of a popularity estimate."""

from typing import Optional

from ..models.config import ConfidenceThresholds
from ..models.popularity import Confidence


def estimate_confidence(
    analyzed_pages: int,
    discovered_pages: int,
    thresholds: Optional[ConfidenceThresholds] = None
) -> Confidence:
    """Classify how reliable an estimate is from discovery and analysis volume.

    Example:
        >>> estimate_confidence(16, 32)
        <Confidence.HIGH: 'high'>
        >>> estimate_confidence(3, 5)
        <Confidence.LOW: 'low'>
    """
    thresholds = thresholds or ConfidenceThresholds()

    if analyzed_pages >= thresholds.high_analyzed and discovered_pages >= thresholds.high_discovered:
        return Confidence.HIGH
    if analyzed_pages >= thresholds.medium_analyzed and discovered_pages >= thresholds.medium_discovered:
        return Confidence.MEDIUM
    return Confidence.LOW
