"""Popularity scoring for analyzed pages."""

from typing import Dict, List, Optional

from ..models.config import ScoringWeights
from ..models.popularity import NavPosition, PageRecord


DEFAULT_WEIGHTS = ScoringWeights()


def score_terms(
    page: PageRecord,
    max_inbound: int,
    max_content_length: int,
    weights: ScoringWeights = DEFAULT_WEIGHTS
) -> Dict[str, float]:
    """Return each weighted score term of a page, keyed by signal name.

    Inbound links and content length are normalized against the maxima of
    the run so that both terms fall within ``[0, weight]``.
    """
    signals = page.signals

    if signals.nav_position == NavPosition.MAIN_NAV:
        navigation = weights.main_nav
    elif signals.nav_position == NavPosition.FOOTER:
        navigation = weights.footer
    else:
        navigation = 0.0

    return {
        "homepage": weights.homepage if signals.is_homepage else 0.0,
        "navigation": navigation,
        "inbound_links": weights.inbound_links * (page.inbound_link_count / max(max_inbound, 1)),
        "depth": -weights.depth_penalty * signals.url_depth,
        "meta_description": weights.meta_description if signals.has_meta_description else 0.0,
        "content_length": weights.content_length * (signals.content_length / max(max_content_length, 1)),
        "sitemap": weights.sitemap if signals.in_sitemap else 0.0,
    }


def score_page(
    page: PageRecord,
    max_inbound: int,
    max_content_length: int,
    weights: ScoringWeights = DEFAULT_WEIGHTS
) -> float:
    """Compute a non-negative popularity score for one page."""
    return max(0.0, sum(score_terms(page, max_inbound, max_content_length, weights).values()))


def score_pages(pages: List[PageRecord], weights: Optional[ScoringWeights] = None) -> None:
    """Score every page in place, normalizing against the maxima of ``pages``."""
    if not pages:
        return

    weights = weights or DEFAULT_WEIGHTS
    max_inbound = max(page.inbound_link_count for page in pages)
    max_content_length = max(page.signals.content_length for page in pages)

    for page in pages:
        page.popularity_score = score_page(page, max_inbound, max_content_length, weights)

