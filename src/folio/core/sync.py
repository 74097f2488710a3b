"""Sync GitHub repositories into project markdown files."""

import logging
from pathlib import Path
from typing import Iterable, Literal

import yaml

from folio.core.models import GitHubRepo, ProjectMetadata
from folio.core.storage import parse_frontmatter

logger = logging.getLogger(__name__)

SyncStatus = Literal["created", "updated", "skipped"]

# Frontmatter keys that trigger a rewrite when they drift from GitHub.
TRACKED_FIELDS = ("stars", "description", "repo", "language", "date", "updated")


def _project_fields(repo: GitHubRepo, description: str) -> dict:
    return {
        "title": repo.name,
        "description": description,
        "date": repo.created_at[:10],
        "updated": repo.updated_at[:10],
        "stars": repo.stars,
        "language": repo.language or "",
        "tags": [repo.language] if repo.language else [],
        "repo": repo.full_name,
    }


def build_project_markdown(repo: GitHubRepo, description: str | None = None) -> str:
    """Render a project file for ``repo``.

    Args:
        repo: Repository as fetched from GitHub.
        description: Description to store; defaults to GitHub's.

    Returns:
        Markdown text with YAML frontmatter.
    """
    if description is None:
        description = repo.description or ""
    data = _project_fields(repo, description)
    if repo.homepage:
        data["homepage"] = repo.homepage
    frontmatter = yaml.safe_dump(
        data, default_flow_style=False, sort_keys=False, allow_unicode=True
    )
    lines = [
        "## About",
        "",
        repo.description or "No description provided.",
        "",
        f"- GitHub: {repo.html_url}",
    ]
    if repo.homepage:
        lines.append(f"- Live: {repo.homepage}")
    return f"---\n{frontmatter}---\n\n" + "\n".join(lines) + "\n"


def _needs_update(current: ProjectMetadata, repo: GitHubRepo, description: str) -> bool:
    wanted = _project_fields(repo, description)
    for field in TRACKED_FIELDS:
        have = getattr(current, field)
        want = wanted[field]
        if field == "language":
            have = have or ""
        if have != want:
            return True
    return False


def upsert_project(projects_dir: Path, repo: GitHubRepo) -> SyncStatus:
    """Create or refresh the project file for one repository.

    A description already written by hand is kept when GitHub has none.
    """
    path = projects_dir / f"{repo.name}.md"

    current: ProjectMetadata | None = None
    if path.exists():
        metadata, _ = parse_frontmatter(path.read_text(encoding="utf-8"), ProjectMetadata)
        current = metadata

    existing_description = (current.description if current else None) or ""
    description = repo.description or existing_description

    if current is None:
        path.write_text(build_project_markdown(repo, description), encoding="utf-8")
        logger.info("Created project %s", path.name)
        return "created"

    if not _needs_update(current, repo, description):
        return "skipped"

    path.write_text(build_project_markdown(repo, description), encoding="utf-8")
    logger.info("Updated project %s", path.name)
    return "updated"


def sync_projects(projects_dir: Path, repos: Iterable[GitHubRepo]) -> dict[str, int]:
    """Upsert every repository and count the outcomes."""
    projects_dir.mkdir(parents=True, exist_ok=True)
    results = {"created": 0, "updated": 0, "skipped": 0}
    for repo in repos:
        results[upsert_project(projects_dir, repo)] += 1
    return results
