"""Audit data models package."""

from .config import (
    PopularityConfig,
    ScoringWeights,
    ConfidenceThresholds,
    DEFAULT_USER_AGENT,
)

from .popularity import (
    NavPosition,
    Confidence,
    PageSignals,
    PageRecord,
    RankedPage,
    DiscoveryResult,
    PopularityResult,
    METHODOLOGY,
)

__all__ = [
    # Config models
    'PopularityConfig',
    'ScoringWeights',
    'ConfidenceThresholds',
    'DEFAULT_USER_AGENT',

    # Popularity models
    'NavPosition',
    'Confidence',
    'PageSignals',
    'PageRecord',
    'RankedPage',
    'DiscoveryResult',
    'PopularityResult',
    'METHODOLOGY',
]
