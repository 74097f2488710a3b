"""Unit tests for sorting, grouping and filtering posts."""

from datetime import datetime

import pytest

from folio.core.listing import (
    all_tags,
    all_years,
    filter_posts,
    group_by_year,
    latest_posts,
    parse_date,
    parse_timestamp,
    sort_by_date,
)
from folio.core.models import BlogPost, DocumentMetadata, FilterSpec


def make_post(slug, date, year=None, title=None, tags=None):
    return BlogPost(
        slug=slug,
        year=year or (date or "2000")[:4],
        content="",
        metadata=DocumentMetadata(title=title or slug.title(), date=date, tags=tags or []),
    )


@pytest.fixture
def posts():
    return [
        make_post("spring", "2023-05-01", title="Spring Python", tags=["python"]),
        make_post("first", "2022-01-01", title="First Post"),
        make_post("new-year", "2024-01-01", title="New Year", tags=["python", "life"]),
        make_post("summer", "2023-06-01", title="Summer Notes", tags=["life"]),
    ]


def flatten(groups):
    return [post.slug for group in groups for post in group.posts]


# ============================================================
# Sorting
# ============================================================


class TestSortByDate:
    def test_newest_first(self, posts):
        assert [p.slug for p in sort_by_date(posts)] == ["new-year", "summer", "spring", "first"]

    def test_equal_dates_ordered_by_slug(self):
        same = [make_post("b", "2024-01-01"), make_post("c", "2024-01-01"), make_post("a", "2024-01-01")]
        assert [p.slug for p in sort_by_date(same)] == ["a", "b", "c"]

    def test_undated_last(self):
        docs = [make_post("nodate", None, year="2024"), make_post("dated", "2020-01-01")]
        assert [p.slug for p in sort_by_date(docs)] == ["dated", "nodate"]

    def test_input_not_mutated(self, posts):
        before = [p.slug for p in posts]
        sort_by_date(posts)
        assert [p.slug for p in posts] == before

    def test_same_day_ordered_by_time(self):
        docs = [make_post("morning", "2024-01-01T09:00"), make_post("evening", "2024-01-01T18:00")]
        assert [p.slug for p in sort_by_date(docs)] == ["evening", "morning"]

    def test_offsets_compared_in_utc(self):
        docs = [
            make_post("utc", "2024-01-01T12:00:00Z"),
            make_post("tokyo", "2024-01-01T20:00:00+09:00"),
            make_post("day", "2024-01-01"),
        ]
        assert [p.slug for p in sort_by_date(docs)] == ["utc", "tokyo", "day"]

    def test_parse_date_accepts_datetimes(self):
        assert parse_date("2024-03-01T10:00:00Z").isoformat() == "2024-03-01"
        assert parse_date("2024-03-01T23:30:00-05:00").isoformat() == "2024-03-01"
        assert parse_date("2024-13-45") is None
        assert parse_date("not a date") is None
        assert parse_date(None) is None

    def test_parse_timestamp(self):
        assert parse_timestamp("2024-01-01") == datetime(2024, 1, 1)
        assert parse_timestamp("2024-01-01T18:00:00Z") == datetime(2024, 1, 1, 18)
        assert parse_timestamp("2024-01-01T18:00:00+02:00") == datetime(2024, 1, 1, 16)
        assert parse_timestamp("2024") is None


# ============================================================
# Grouping
# ============================================================


class TestGroupByYear:
    def test_years_descending_as_integers(self):
        docs = [make_post("a", None, year="999"), make_post("b", "2024-01-01")]
        groups = group_by_year(docs)
        assert [g.year for g in groups] == ["2024", "999"]

    def test_order_within_group_kept(self, posts):
        groups = group_by_year(sort_by_date(posts))
        assert [g.year for g in groups] == ["2024", "2023", "2022"]
        assert [p.slug for p in groups[1].posts] == ["summer", "spring"]

    def test_empty(self):
        assert group_by_year([]) == []


# ============================================================
# Filtering
# ============================================================


class TestFilterPosts:
    def test_default_spec_returns_everything(self, posts):
        groups = filter_posts(posts, FilterSpec())
        assert sorted(flatten(groups)) == sorted(p.slug for p in posts)
        for group in groups:
            dates = [p.date for p in group.posts]
            assert dates == sorted(dates, reverse=True)

    def test_no_spec_is_default(self, posts):
        assert flatten(filter_posts(posts)) == flatten(filter_posts(posts, FilterSpec()))

    def test_by_tag(self, posts):
        groups = filter_posts(posts, FilterSpec(tag="python"))
        assert flatten(groups) == ["new-year", "spring"]

    def test_tag_is_subset_and_union_covers_all(self, posts):
        covered = set()
        for tag in all_tags(posts):
            matched = flatten(filter_posts(posts, FilterSpec(tag=tag)))
            assert all(tag in p.tags for p in posts if p.slug in matched)
            covered.update(matched)
        covered.update(p.slug for p in posts if not p.tags)
        assert covered == {p.slug for p in posts}

    def test_by_year(self, posts):
        groups = filter_posts(posts, FilterSpec(year="2023"))
        assert [g.year for g in groups] == ["2023"]
        assert flatten(groups) == ["summer", "spring"]

    def test_search_title_case_insensitive(self, posts):
        assert flatten(filter_posts(posts, FilterSpec(search="  PYTHON "))) == ["spring"]

    def test_search_ignores_body(self, posts):
        posts[1].content = "python everywhere"
        assert "first" not in flatten(filter_posts(posts, FilterSpec(search="python")))

    def test_combined_filters(self, posts):
        spec = FilterSpec(tag="life", year="2024", search="year")
        assert flatten(filter_posts(posts, spec)) == ["new-year"]

    def test_empty_values_mean_all(self, posts):
        spec = FilterSpec(tag="", year=None, search="")
        assert len(flatten(filter_posts(posts, spec))) == len(posts)

    def test_no_matches(self, posts):
        assert filter_posts(posts, FilterSpec(tag="rust")) == []


# ============================================================
# Latest posts and form options
# ============================================================


class TestLatestPosts:
    def test_most_recent_across_years(self):
        docs = [
            make_post("c", "2023-05-01"),
            make_post("d", "2022-01-01"),
            make_post("a", "2024-01-01"),
            make_post("b", "2023-06-01"),
        ]
        assert [p.date for p in latest_posts(docs, 2)] == ["2024-01-01", "2023-06-01"]

    def test_default_limit_is_six(self):
        docs = [make_post(f"p{i}", f"2020-01-{i + 1:02d}") for i in range(10)]
        latest = latest_posts(docs)
        assert len(latest) == 6
        assert latest[0].slug == "p9"

    def test_fewer_than_limit(self, posts):
        assert len(latest_posts(posts, 10)) == 4


class TestFilterOptions:
    def test_all_tags_sorted(self, posts):
        assert all_tags(posts) == ["life", "python"]

    def test_all_years_descending(self, posts):
        assert all_years(posts) == ["2024", "2023", "2022"]
