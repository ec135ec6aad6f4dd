"""Unit tests for traffic share normalization."""

import pytest

from sitepulse.audit.models.popularity import PageRecord, PageSignals
from sitepulse.audit.scoring.traffic import normalize_traffic_share


def make_pages(homepage_score=None, *scores):
    pages = []
    if homepage_score is not None:
        pages.append(PageRecord(
            url="https://example.com/",
            signals=PageSignals(is_homepage=True),
            popularity_score=homepage_score
        ))
    for i, score in enumerate(scores):
        pages.append(PageRecord(
            url=f"https://example.com/page-{i}",
            signals=PageSignals(url_depth=1),
            popularity_score=score
        ))
    return pages


def total(pages):
    return sum(page.traffic_share_percent for page in pages)


class TestNormalizeTrafficShare:
    """Test cases for normalize_traffic_share."""

    def test_proportional_shares(self):
        pages = make_pages(None, 50.0, 30.0, 20.0)

        normalize_traffic_share(pages)

        assert [page.traffic_share_percent for page in pages] == [50.0, 30.0, 20.0]

    def test_shares_are_rounded_to_one_decimal(self):
        pages = make_pages(None, 1.0, 1.0, 1.0)

        normalize_traffic_share(pages)

        for page in pages:
            assert page.traffic_share_percent == round(page.traffic_share_percent, 1)
        assert total(pages) == pytest.approx(100.0, abs=0.1)

    @pytest.mark.parametrize("scores", [
        (90.0, 10.0, 10.0),
        (200.0, 5.0, 3.0, 1.0),
        (157.5, 41.7, 41.7, 41.7, 12.0, 9.9, 0.0),
        (100.0, 33.0, 27.0, 19.0, 11.0, 7.0, 5.0, 3.0, 2.0, 1.0),
    ])
    def test_homepage_cap(self, scores):
        pages = make_pages(*scores)

        normalize_traffic_share(pages)

        assert pages[0].traffic_share_percent <= 50.0
        assert total(pages) == pytest.approx(100.0, abs=0.1)

    def test_capped_excess_is_spread_over_other_pages(self):
        pages = make_pages(80.0, 10.0, 10.0)

        normalize_traffic_share(pages)

        assert [page.traffic_share_percent for page in pages] == [50.0, 25.0, 25.0]

    def test_homepage_below_cap_is_untouched(self):
        pages = make_pages(40.0, 30.0, 30.0)

        normalize_traffic_share(pages)

        assert [page.traffic_share_percent for page in pages] == [40.0, 30.0, 30.0]

    def test_homepage_with_single_other_page(self):
        pages = make_pages(90.0, 10.0)

        normalize_traffic_share(pages)

        assert [page.traffic_share_percent for page in pages] == [50.0, 50.0]

    def test_homepage_alone_takes_everything(self):
        pages = make_pages(42.0)

        normalize_traffic_share(pages)

        assert pages[0].traffic_share_percent == 100.0

    def test_custom_cap(self):
        pages = make_pages(80.0, 10.0, 10.0)

        normalize_traffic_share(pages, homepage_cap=30.0)

        assert pages[0].traffic_share_percent <= 30.0
        assert total(pages) == pytest.approx(100.0, abs=0.1)

    def test_zero_total_score_gives_zero_shares(self):
        pages = make_pages(0.0, 0.0, 0.0)

        normalize_traffic_share(pages)

        assert all(page.traffic_share_percent == 0.0 for page in pages)

    def test_empty_list(self):
        assert normalize_traffic_share([]) == []

    def test_shares_are_non_negative(self):
        pages = make_pages(500.0, 1.0, 0.0, 0.0)

        normalize_traffic_share(pages)

        assert all(page.traffic_share_percent >= 0.0 for page in pages)
        assert total(pages) == pytest.approx(100.0, abs=0.1)
