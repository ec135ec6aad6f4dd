"""Traffic share normalization.

Converts popularity scores into percentages of estimated site traffic that
sum to 100, with the homepage capped so it never dominates the estimate.
"""

import logging
from typing import List, Optional

from ..models.popularity import PageRecord


logger = logging.getLogger(__name__)


DEFAULT_HOMEPAGE_CAP = 50.0


def _round_share(value: float) -> float:
    return round(value, 1)


def normalize_traffic_share(
    pages: List[PageRecord],
    homepage_cap: float = DEFAULT_HOMEPAGE_CAP
) -> List[PageRecord]:
    """Assign ``traffic_share_percent`` to every page in place.

    Steps:
    1. A zero total score gives every page a 0% share.
    2. Each share is ``score / total * 100``, rounded to one decimal.
    3. A homepage share above ``homepage_cap`` is clamped and the excess is
       spread evenly over the other pages.
    4. Shares are rescaled by ``100 / sum`` so they total 100. The rounding
       residual left after rescaling goes to the largest uncapped share.

    The cap must run before the rescale, otherwise the total drifts away
    from 100.

    Args:
        pages: Scored pages (typically the top 10)
        homepage_cap: Maximum homepage share in percent

    Returns:
        The same list, for chaining
    """
    if not pages:
        return pages

    total_score = sum(page.popularity_score for page in pages)
    if total_score <= 0:
        for page in pages:
            page.traffic_share_percent = 0.0
        return pages

    for page in pages:
        page.traffic_share_percent = _round_share(page.popularity_score / total_score * 100)

    homepage = _find_homepage(pages)
    others = [page for page in pages if page is not homepage]
    capped = False

    if homepage is not None and others and homepage.traffic_share_percent > homepage_cap:
        excess = homepage.traffic_share_percent - homepage_cap
        homepage.traffic_share_percent = homepage_cap
        capped = True

        redistribution = excess / len(others)
        for page in others:
            page.traffic_share_percent = _round_share(page.traffic_share_percent + redistribution)
        logger.debug(f"Homepage share capped at {homepage_cap}%, redistributed {excess:.1f}%")

    current_total = sum(page.traffic_share_percent for page in pages)
    if current_total > 0 and current_total != 100:
        factor = 100 / current_total
        for page in pages:
            page.traffic_share_percent = _round_share(page.traffic_share_percent * factor)

    # Rescaling can lift the homepage a rounding step above the cap
    if homepage is not None and others and homepage.traffic_share_percent > homepage_cap:
        homepage.traffic_share_percent = homepage_cap
        capped = True

    _absorb_rounding_residual(pages, homepage if capped else None)
    return pages


def _find_homepage(pages: List[PageRecord]) -> Optional[PageRecord]:
    for page in pages:
        if page.signals.is_homepage:
            return page
    return None


def _absorb_rounding_residual(pages: List[PageRecord], capped_page: Optional[PageRecord]) -> None:
    """Move the rounding residual onto the largest share not held at the cap."""
    residual = _round_share(100 - sum(page.traffic_share_percent for page in pages))
    if residual == 0:
        return

    candidates = [page for page in pages if page is not capped_page]
    if not candidates:
        return

    target = max(candidates, key=lambda page: page.traffic_share_percent)
    target.traffic_share_percent = max(0.0, _round_share(target.traffic_share_percent + residual))
