"""Audit engine package for SitePulse.

This package provides page discovery, page analysis, link graph building
and popularity scoring for estimating which pages of a site matter most.
"""

from .engine import SitePopularityAnalyzer, analyze_site_popularity
from .models.config import PopularityConfig, ScoringWeights, ConfidenceThresholds
from .models.popularity import (
    Confidence,
    NavPosition,
    PageSignals,
    RankedPage,
    PopularityResult
)
from .utils.url_normalizer import canonicalize, canonicalize_domain, InvalidDomainError
from .utils.scope_matcher import PageScope

__all__ = [
    # Main engine
    'SitePopularityAnalyzer',
    'analyze_site_popularity',

    # Models
    'PopularityConfig',
    'ScoringWeights',
    'ConfidenceThresholds',
    'Confidence',
    'NavPosition',
    'PageSignals',
    'RankedPage',
    'PopularityResult',

    # Utilities
    'canonicalize',
    'canonicalize_domain',
    'InvalidDomainError',
    'PageScope'
]
