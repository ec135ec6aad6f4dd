"""Scoring package: popularity scores, traffic shares and confidence."""

from .popularity import score_page, score_pages, score_terms
from .traffic import normalize_traffic_share, DEFAULT_HOMEPAGE_CAP
from .confidence import estimate_confidence

__all__ = [
    'score_page',
    'score_pages',
    'score_terms',
    'normalize_traffic_share',
    'DEFAULT_HOMEPAGE_CAP',
    'estimate_confidence'
]
