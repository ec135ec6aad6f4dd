"""HTML extraction capability package."""

from .html_extractor import (
    HtmlDocument,
    ParseError,
    extract_links,
    extract_region_links,
    extract_title,
    has_meta_description,
    extract_visible_text_length,
)

__all__ = [
    'HtmlDocument',
    'ParseError',
    'extract_links',
    'extract_region_links',
    'extract_title',
    'has_meta_description',
    'extract_visible_text_length'
]
