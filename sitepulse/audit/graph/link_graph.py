"""Internal link graph for inbound-link counting.

The graph maps each target page to the distinct analyzed pages linking to
it. It is append-only within a run and is written by a single task after
all page fetches have completed.
"""

import logging
from typing import AbstractSet, Dict, FrozenSet, Iterable, Set

from ..models.popularity import PageRecord


logger = logging.getLogger(__name__)


class LinkGraph:
    """Reverse adjacency map: target canonical URL -> source canonical URLs.

    Invariants:
    - A page is never recorded as its own inbound source
    - Edges are only ever added, never removed
    """

    def __init__(self, analysis_set: AbstractSet[str]):
        """Initialize an empty graph.

        Args:
            analysis_set: Canonical URLs selected for analysis; links to
                anything else are not recorded
        """
        self._analysis_set = frozenset(analysis_set)
        self._inbound: Dict[str, Set[str]] = {}
        self._edge_count = 0

    def add_page(self, source: str, outbound_links: Iterable[str]) -> int:
        """Record the outbound links of one analyzed page.

        Args:
            source: Canonical URL of the linking page
            outbound_links: Canonical URLs the page links to

        Returns:
            Number of new edges added
        """
        added = 0
        for target in outbound_links:
            if target == source or target not in self._analysis_set:
                continue
            sources = self._inbound.setdefault(target, set())
            if source not in sources:
                sources.add(source)
                added += 1

        self._edge_count += added
        return added

    def add_pages(self, pages: Iterable[PageRecord]) -> None:
        """Record the outbound links of every analyzed page."""
        for page in pages:
            self.add_page(page.url, page.outbound_links)
        logger.debug(f"Link graph built: {len(self._inbound)} targets, {self._edge_count} edges")

    def inbound(self, url: str) -> FrozenSet[str]:
        """Distinct sources linking to a page (empty if none)."""
        return frozenset(self._inbound.get(url, ()))

    def apply(self, pages: Iterable[PageRecord]) -> None:
        """Set each page's inbound link set from the graph."""
        for page in pages:
            page.inbound_links = set(self.inbound(page.url))

    @property
    def edge_count(self) -> int:
        return self._edge_count

    def __len__(self) -> int:
        return len(self._inbound)

    def __contains__(self, url: str) -> bool:
        return url in self._inbound

    def to_dict(self) -> Dict[str, list]:
        """Serializable view of the graph with sorted sources."""
        return {target: sorted(sources) for target, sources in self._inbound.items()}
