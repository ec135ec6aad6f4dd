"""Pydantic models for popularity analysis configuration.

This module defines the tunable parameters of a popularity run: page
budgets, concurrency and timeouts, scoring weights and confidence
thresholds.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_USER_AGENT = "SitePulse/1.0 (+https://github.com/sitepulse)"

DEFAULT_SITEMAP_PATHS = [
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/sitemap.xml.gz",
]


class ScoringWeights(BaseModel):
    """Weights of the popularity score terms.

    The defaults are the reference weights; overriding them changes
    absolute scores, so tests and reports assume the defaults unless
    a configuration says otherwise.
    """

    homepage: float = Field(default=40.0, ge=0.0, description="Bonus for the homepage")
    main_nav: float = Field(default=35.0, ge=0.0, description="Bonus for main navigation links")
    footer: float = Field(default=15.0, ge=0.0, description="Bonus for footer links")
    inbound_links: float = Field(
        default=50.0,
        ge=0.0,
        description="Weight of inbound links, normalized against the most linked page"
    )
    depth_penalty: float = Field(default=10.0, ge=0.0, description="Penalty per URL path segment")
    meta_description: float = Field(default=10.0, ge=0.0, description="Bonus for a meta description")
    content_length: float = Field(
        default=15.0,
        ge=0.0,
        description="Weight of content length, normalized against the longest page"
    )
    sitemap: float = Field(default=15.0, ge=0.0, description="Bonus for sitemap presence")


class ConfidenceThresholds(BaseModel):
    """Minimum analyzed/discovered page counts for each confidence level."""

    high_analyzed: int = Field(default=15, ge=0)
    high_discovered: int = Field(default=30, ge=0)
    medium_analyzed: int = Field(default=10, ge=0)
    medium_discovered: int = Field(default=15, ge=0)

    @model_validator(mode='after')
    def validate_ordering(self):
        """High thresholds must not be looser than medium ones."""
        if self.high_analyzed < self.medium_analyzed or self.high_discovered < self.medium_discovered:
            raise ValueError("high confidence thresholds must be >= medium thresholds")
        return self


class PopularityConfig(BaseModel):
    """Configuration for a page popularity analysis run."""

    # Budgets
    max_analyzed_pages: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Maximum pages fetched and scored, homepage included"
    )

    top_pages: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of highest scoring pages returned"
    )

    # Concurrency and timeouts
    max_concurrency: int = Field(
        default=5,
        ge=1,
        le=8,
        description="Maximum number of concurrent page fetches"
    )

    page_timeout: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        description="Per-page fetch timeout in seconds"
    )

    sitemap_timeout: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        description="Per-sitemap fetch timeout in seconds"
    )

    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent with every request"
    )

    sitemap_paths: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SITEMAP_PATHS),
        description="Sitemap locations tried in order, relative to the site root"
    )

    extra_exclude_patterns: List[str] = Field(
        default_factory=list,
        description="Additional regex patterns for paths that are never analyzed"
    )

    # Traffic share
    homepage_share_cap: float = Field(
        default=50.0,
        gt=0.0,
        le=100.0,
        description="Maximum traffic share percentage assigned to the homepage"
    )

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    confidence: ConfidenceThresholds = Field(default_factory=ConfidenceThresholds)

    @field_validator('sitemap_paths')
    @classmethod
    def validate_sitemap_paths(cls, v):
        """Sitemap paths must be root-relative."""
        for path in v:
            if not path.startswith('/'):
                raise ValueError(f"Sitemap path must start with '/': {path}")
        return v

    @model_validator(mode='after')
    def validate_budgets(self):
        """The returned page count cannot exceed the analysis budget."""
        if self.top_pages > self.max_analyzed_pages:
            raise ValueError("top_pages cannot exceed max_analyzed_pages")
        return self

    def sitemap_candidates(self, base_url: str) -> List[str]:
        """Absolute sitemap URLs to try for a canonical homepage URL."""
        root = base_url.rstrip('/')
        return [f"{root}{path}" for path in self.sitemap_paths]

    @classmethod
    def from_overrides(cls, base: Optional['PopularityConfig'] = None, **overrides) -> 'PopularityConfig':
        """Return a copy of ``base`` (or the defaults) with non-None overrides applied."""
        data = (base or cls()).model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)
