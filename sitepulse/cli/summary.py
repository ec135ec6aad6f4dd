"""Report formatting for popularity results.

This module renders a ``PopularityResult`` as human-readable text, JSON or
YAML, and writes reports to files for the CLI.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..audit.models.popularity import PopularityResult, RankedPage


OUTPUT_FORMATS = ("text", "json", "yaml")


class ReportFormatter:
    """Formats popularity results into various output formats."""

    def __init__(self, format_type: str = "text", verbose: bool = False):
        self.format_type = format_type.lower()
        self.verbose = verbose

        if self.format_type not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output format '{format_type}'. "
                f"Valid formats: {', '.join(OUTPUT_FORMATS)}"
            )

    def format_result(self, result: PopularityResult) -> str:
        """Format a result into the configured format."""
        if self.format_type == "json":
            return self._format_json(result)
        elif self.format_type == "yaml":
            return self._format_yaml(result)
        else:
            return self._format_text(result)

    def _format_json(self, result: PopularityResult) -> str:
        return json.dumps(result.to_dict(), indent=2, default=str)

    def _format_yaml(self, result: PopularityResult) -> str:
        return yaml.dump(result.to_dict(), default_flow_style=False, sort_keys=False)

    def _format_text(self, result: PopularityResult) -> str:
        """Format result as human-readable text."""
        lines = []

        lines.append(f"SITEPULSE POPULARITY REPORT: {result.domain}")
        lines.append("=" * 50)
        lines.append(f"Generated: {result.generated_at.strftime('%Y-%m-%d %H:%M:%S UTC')}")
        lines.append(f"Confidence: {result.confidence.value.upper()}")
        lines.append(f"Pages discovered: {result.discovered_pages}")
        lines.append(f"Pages analyzed: {result.analyzed_pages}")

        if result.sources:
            sources = ", ".join(f"{name}={count}" for name, count in result.sources.items())
            lines.append(f"Sources: {sources}")
        if result.sitemap_source:
            lines.append(f"Sitemap: {result.sitemap_source}")
        lines.append("")

        if not result.pages:
            lines.append("No pages could be analyzed.")
            return "\n".join(lines)

        lines.append("TOP PAGES")
        lines.append("-" * 20)
        for position, page in enumerate(result.pages, start=1):
            lines.extend(self._format_page_text(position, page))

        if self.verbose:
            lines.append("")
            lines.append("METHODOLOGY")
            lines.append("-" * 20)
            lines.append(result.methodology)

        return "\n".join(lines)

    def _format_page_text(self, position: int, page: RankedPage) -> List[str]:
        lines = [
            f"{position:>2}. {page.traffic_share_percent:5.1f}%  {page.url}"
        ]
        if page.title:
            lines.append(f"    {page.title}")

        if self.verbose:
            lines.append(f"    score={page.popularity_score:.2f} {self._signal_summary(page)}")

        return lines

    def _signal_summary(self, page: RankedPage) -> str:
        signals = page.signals
        parts: Dict[str, Any] = {
            "inbound": page.inbound_link_count,
            "depth": signals.url_depth,
            "nav": signals.nav_position.value,
            "sitemap": "yes" if signals.in_sitemap else "no",
            "meta": "yes" if signals.has_meta_description else "no",
            "chars": signals.content_length,
        }
        return " ".join(f"{key}={value}" for key, value in parts.items())


def write_report(text: str, file_path: Path) -> None:
    """Write a formatted report to a file, creating parent directories."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(text, encoding='utf-8')
