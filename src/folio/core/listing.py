"""Sorting, grouping and filtering of loaded documents.

All functions are pure: they never touch the filesystem and never mutate
their input lists.
"""

from datetime import date, datetime, time, timezone
from typing import Sequence, TypeVar

from folio.core.models import BlogPost, Document, FilterSpec, YearGroup

DocumentT = TypeVar("DocumentT", bound=Document)

ALL = "All"
LATEST_POSTS = 6


def _fromisoformat(value: str | None) -> datetime | None:
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(text[:10]), time())
    except ValueError:
        return None


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO date or datetime string into a naive UTC datetime.

    ``2024-01-01`` reads as midnight. A trailing ``Z`` or offset is
    honoured, so two times on the same day still order correctly.
    """
    parsed = _fromisoformat(value)
    if parsed is not None and parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value: str | None) -> date | None:
    """Parse the calendar day of an ISO date or datetime string."""
    parsed = _fromisoformat(value)
    return parsed.date() if parsed else None


def sort_by_date(documents: Sequence[DocumentT]) -> list[DocumentT]:
    """Sort newest first.

    Equal timestamps fall back to slug order; undated documents go last.
    """
    by_slug = sorted(documents, key=lambda d: d.slug)
    dated = [d for d in by_slug if parse_timestamp(d.date) is not None]
    undated = [d for d in by_slug if parse_timestamp(d.date) is None]
    dated.sort(key=lambda d: parse_timestamp(d.date), reverse=True)
    return dated + undated


def group_by_year(posts: Sequence[BlogPost]) -> list[YearGroup]:
    """Bucket posts by year, newest year first, keeping order within a year."""
    groups: dict[str, list[BlogPost]] = {}
    for post in posts:
        groups.setdefault(post.year, []).append(post)
    return [
        YearGroup(year=year, posts=groups[year])
        for year in sorted(groups, key=int, reverse=True)
    ]


def _is_unset(value: str | None) -> bool:
    return value is None or value.strip() == "" or value == ALL


def matches(post: BlogPost, spec: FilterSpec) -> bool:
    """Check a post against every constraint of the filter."""
    if not _is_unset(spec.year) and post.year != spec.year.strip():
        return False
    if not _is_unset(spec.tag) and spec.tag not in post.tags:
        return False
    search = spec.search.strip().lower()
    if search and search not in post.title.lower():
        return False
    return True


def filter_posts(
    posts: Sequence[BlogPost], spec: FilterSpec | None = None
) -> list[YearGroup]:
    """Return matching posts sorted by date and grouped by year."""
    spec = spec or FilterSpec()
    return group_by_year(sort_by_date([p for p in posts if matches(p, spec)]))


def latest_posts(posts: Sequence[BlogPost], limit: int = LATEST_POSTS) -> list[BlogPost]:
    """Return the ``limit`` most recent posts across all years."""
    return sort_by_date(posts)[:limit]


def all_tags(posts: Sequence[BlogPost]) -> list[str]:
    """Every distinct tag, sorted."""
    return sorted({tag for post in posts for tag in post.tags})


def all_years(posts: Sequence[BlogPost]) -> list[str]:
    """Every year that has posts, newest first."""
    return sorted({post.year for post in posts}, key=int, reverse=True)
