"""Pydantic models for discovered pages and popularity results.

This module defines the data flowing through a popularity run: the
discovery set, the per-page record that is enriched phase by phase, and
the immutable ranked result handed back to callers.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class NavPosition(str, Enum):
    """Where a page is linked from on the homepage."""
    MAIN_NAV = "main_nav"     # Linked from <nav> or <header>
    FOOTER = "footer"         # Linked from <footer>
    NONE = "none"             # Not linked from either region


class Confidence(str, Enum):
    """Reliability label of a popularity estimate."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


METHODOLOGY = (
    "We analyzed the website structure to identify likely popular pages by examining:\n"
    "- Homepage and main navigation links (usually most visited)\n"
    "- How many internal links point to each page (more links = more important)\n"
    "- Page depth in the site structure (shallower pages typically get more traffic)\n"
    "- Presence in sitemap and content quality signals\n"
    "- Common web patterns (the homepage is capped at half of the estimated traffic)"
)


class PageSignals(BaseModel):
    """Structural and content signals extracted for a page."""

    is_homepage: bool = Field(default=False, description="Whether the page is the site root")
    nav_position: NavPosition = Field(
        default=NavPosition.NONE,
        description="Homepage region linking to this page"
    )
    url_depth: int = Field(default=0, ge=0, description="Number of non-empty path segments")
    has_meta_description: bool = Field(default=False, description="Non-empty meta description present")
    content_length: int = Field(default=0, ge=0, description="Visible text length in characters")
    in_sitemap: bool = Field(default=False, description="Whether the sitemap lists this page")


class PageRecord(BaseModel):
    """A page selected for analysis.

    Created by the page analyzer, then enriched in place by the link graph
    builder (inbound links), the scorer (popularity score) and the traffic
    share normalizer (traffic share).
    """

    url: str = Field(description="Canonical URL of the page")
    title: str = Field(default="", max_length=100, description="Page title, truncated to 100 chars")
    signals: PageSignals = Field(default_factory=PageSignals)
    outbound_links: List[str] = Field(
        default_factory=list,
        description="Canonical internal URLs this page links to (self excluded)"
    )
    inbound_links: Set[str] = Field(
        default_factory=set,
        description="Canonical URLs of analyzed pages linking to this page"
    )
    popularity_score: float = Field(default=0.0, ge=0.0)
    traffic_share_percent: float = Field(default=0.0, ge=0.0)

    @property
    def inbound_link_count(self) -> int:
        """Number of distinct analyzed pages linking here."""
        return len(self.inbound_links)

    def freeze(self) -> 'RankedPage':
        """Snapshot this record into an immutable ranked page."""
        return RankedPage(
            url=self.url,
            title=self.title,
            popularity_score=self.popularity_score,
            traffic_share_percent=self.traffic_share_percent,
            signals=self.signals.model_copy(),
            inbound_link_count=self.inbound_link_count,
            inbound_links=sorted(self.inbound_links),
        )


class RankedPage(BaseModel):
    """A scored page as returned to callers."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    popularity_score: float
    traffic_share_percent: float
    signals: PageSignals
    inbound_link_count: int
    inbound_links: List[str] = Field(default_factory=list)


class DiscoveryResult(BaseModel):
    """Union of canonical URLs found on the sitemap and homepage, in discovery order."""

    homepage: str = Field(description="Canonical homepage URL, always first")
    urls: List[str] = Field(default_factory=list, description="Ordered, de-duplicated discovery set")
    sitemap_urls: List[str] = Field(default_factory=list, description="Admissible URLs from the sitemap")
    homepage_urls: List[str] = Field(
        default_factory=list,
        description="Admissible navigation and footer URLs from the homepage"
    )
    sitemap_source: str = Field(default="", description="Sitemap URL that was used, if any")
    directory_urls: Set[str] = Field(
        default_factory=set,
        description="Canonical URLs that were linked or listed with a trailing slash"
    )

    @property
    def size(self) -> int:
        return len(self.urls)

    def analysis_set(self, budget: int) -> List[str]:
        """Homepage followed by up to ``budget - 1`` other URLs in discovery order."""
        others = [url for url in self.urls if url != self.homepage]
        return [self.homepage] + others[:max(budget - 1, 0)]

    def source_counts(self) -> Dict[str, int]:
        return {
            "sitemap": len(self.sitemap_urls),
            "homepage": len(self.homepage_urls),
        }


class PopularityResult(BaseModel):
    """Immutable outcome of a popularity analysis run."""

    model_config = ConfigDict(frozen=True)

    domain: str = Field(description="Domain or URL that was analyzed")
    pages: List[RankedPage] = Field(default_factory=list, description="Top pages, sorted by score")
    confidence: Confidence = Field(default=Confidence.LOW)
    discovered_pages: int = Field(default=0, ge=0)
    analyzed_pages: int = Field(default=0, ge=0)
    methodology: str = Field(default=METHODOLOGY)
    sources: Dict[str, int] = Field(default_factory=dict, description="Discovery counts per source")
    sitemap_source: Optional[str] = Field(default=None, description="Sitemap URL that was read, if any")
    generated_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def empty(cls, domain: str) -> 'PopularityResult':
        """Result for a run that could not analyze anything."""
        return cls(domain=domain, sources={"sitemap": 0, "homepage": 0})

    @property
    def total_traffic_share(self) -> float:
        return round(sum(page.traffic_share_percent for page in self.pages), 1)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation."""
        return self.model_dump(mode='json')
