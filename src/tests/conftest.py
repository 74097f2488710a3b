"""Shared fixtures for building content trees."""

from pathlib import Path

import pytest


def _write_doc(path: Path, frontmatter: str, body: str = "Body text.") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\n{frontmatter}\n---\n\n{body}\n", encoding="utf-8")
    return path


@pytest.fixture
def write_doc():
    """Write a markdown file with the given frontmatter lines."""
    return _write_doc


@pytest.fixture
def content_dir(tmp_path):
    """A content tree with posts over three years, a draft and a project."""
    blogs = tmp_path / "blogs"
    _write_doc(blogs / "2024" / "new-year.md", "title: New Year\ndate: 2024-01-01\ntags: [python, life]")
    _write_doc(blogs / "2023" / "summer.md", "title: Summer Notes\ndate: 2023-06-01\ntags: [life]")
    _write_doc(blogs / "2023" / "spring.md", "title: Spring Python\ndate: 2023-05-01\ntags: [python]")
    _write_doc(blogs / "2022" / "first.md", "title: First Post\ndate: 2022-01-01")
    _write_doc(blogs / "2022" / "draft.md", "date: 2022-02-01\ntags: [python]")
    _write_doc(
        tmp_path / "projects" / "folio.md",
        "title: folio\ndescription: This site\ndate: '2024-01-20'\nstars: 3\nlanguage: Python",
        "## About\n\nA site.",
    )
    return tmp_path
