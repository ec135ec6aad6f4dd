"""Unit tests for popularity scoring."""

import pytest

from sitepulse.audit.models.config import ScoringWeights
from sitepulse.audit.models.popularity import NavPosition, PageRecord, PageSignals
from sitepulse.audit.scoring.popularity import score_page, score_pages, score_terms


def make_record(url="https://example.com/page", inbound=0, **signals):
    record = PageRecord(url=url, signals=PageSignals(**signals))
    record.inbound_links = {f"https://example.com/source-{i}" for i in range(inbound)}
    return record


class TestScoreTerms:
    """Test cases for individual score terms."""

    def test_homepage_in_main_nav_with_everything(self):
        page = make_record(
            inbound=4,
            is_homepage=True,
            nav_position=NavPosition.MAIN_NAV,
            url_depth=0,
            has_meta_description=True,
            content_length=500,
            in_sitemap=True,
        )

        terms = score_terms(page, max_inbound=4, max_content_length=1000)

        assert terms == {
            "homepage": 40.0,
            "navigation": 35.0,
            "inbound_links": 50.0,
            "depth": 0.0,
            "meta_description": 10.0,
            "content_length": 7.5,
            "sitemap": 15.0,
        }
        assert score_page(page, 4, 1000) == pytest.approx(157.5)

    def test_footer_bonus(self):
        page = make_record(nav_position=NavPosition.FOOTER, url_depth=1)

        terms = score_terms(page, max_inbound=0, max_content_length=0)

        assert terms["navigation"] == 15.0
        assert terms["depth"] == -10.0

    def test_zero_maxima_do_not_divide_by_zero(self):
        page = make_record(content_length=0)

        terms = score_terms(page, max_inbound=0, max_content_length=0)

        assert terms["inbound_links"] == 0.0
        assert terms["content_length"] == 0.0

    def test_custom_weights(self):
        weights = ScoringWeights(sitemap=100.0)
        page = make_record(in_sitemap=True)

        assert score_terms(page, 0, 0, weights)["sitemap"] == 100.0


class TestScorePage:
    """Test cases for page scores."""

    def test_score_is_never_negative(self):
        page = make_record(url_depth=8)

        assert score_page(page, max_inbound=1, max_content_length=1) == 0.0

    def test_deeper_pages_never_score_higher(self):
        """With every other signal equal, more path segments never raise the score."""
        scores = [
            score_page(
                make_record(inbound=2, nav_position=NavPosition.MAIN_NAV, url_depth=depth, content_length=300),
                max_inbound=3,
                max_content_length=600
            )
            for depth in range(0, 10)
        ]

        assert all(deeper <= shallower for shallower, deeper in zip(scores, scores[1:]))
        assert scores[2] < scores[1]

    def test_score_pages_normalizes_against_run_maxima(self):
        pages = [
            make_record("https://example.com/a", inbound=4, content_length=1000, url_depth=1),
            make_record("https://example.com/b", inbound=2, content_length=500, url_depth=1),
        ]

        score_pages(pages)

        # a: 50 + 15 - 10, b: 25 + 7.5 - 10
        assert pages[0].popularity_score == pytest.approx(55.0)
        assert pages[1].popularity_score == pytest.approx(22.5)

    def test_score_pages_empty(self):
        score_pages([])
