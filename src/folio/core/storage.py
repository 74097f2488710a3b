"""Storage abstraction for site content."""

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

import yaml
from pydantic import ValidationError

from folio.core.listing import sort_by_date
from folio.core.models import BlogPost, DocumentMetadata, Project, ProjectMetadata

logger = logging.getLogger(__name__)

YEAR_PATTERN = re.compile(r"^\d{4}$")
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)


class FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as the strings the author wrote."""


FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class DocumentNotFound(LookupError):
    """Raised when a single document cannot be served."""

    def __init__(self, partition: str, slug: str):
        self.partition = partition
        self.slug = slug
        super().__init__(f"Document not found: {partition}/{slug}")


class ContentStore(ABC):
    """Abstract base class for read-only content storage."""

    @abstractmethod
    async def load_posts(self) -> list[BlogPost]:
        """Load every blog post that has a title."""
        ...

    @abstractmethod
    async def load_post(self, year: str, slug: str) -> BlogPost:
        """Load one blog post. Raises DocumentNotFound."""
        ...

    @abstractmethod
    async def load_projects(self) -> list[Project]:
        """Load every project that has a title, newest first."""
        ...

    @abstractmethod
    async def load_project(self, slug: str) -> Project:
        """Load one project. Raises DocumentNotFound."""
        ...


def parse_frontmatter(
    content: str, metadata_class: type[DocumentMetadata] = DocumentMetadata
) -> tuple[DocumentMetadata, str]:
    """Parse YAML frontmatter from content.

    Returns (metadata, content_without_frontmatter). A header that is not
    valid YAML, or not a mapping, yields default metadata and the content
    untouched. Fields of the wrong type are dropped one by one so the rest
    of the header survives.
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return metadata_class(), content
    try:
        frontmatter = yaml.load(match.group(1), Loader=FrontmatterLoader) or {}
    except (yaml.YAMLError, ValueError):
        logger.debug("Unparseable frontmatter, using defaults")
        return metadata_class(), content
    if not isinstance(frontmatter, dict):
        logger.debug("Frontmatter is not a mapping, using defaults")
        return metadata_class(), content

    fields = {str(k): v for k, v in frontmatter.items()}
    while True:
        try:
            metadata = metadata_class(**fields)
            break
        except ValidationError as exc:
            invalid = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
            if not invalid & fields.keys():
                metadata = metadata_class()
                break
            logger.debug("Dropping invalid frontmatter fields: %s", sorted(invalid))
            fields = {k: v for k, v in fields.items() if k not in invalid}
    return metadata, content[match.end() :].lstrip("\n")


class UnreadableDocument(Exception):
    """A content file that is not readable UTF-8 text."""


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableDocument(f"{path}: {exc}") from exc


class FileContentStore(ContentStore):
    """File-based content storage.

    Blog posts live in ``<base>/blogs/<year>/<slug>.md`` and projects in
    ``<base>/projects/<slug>.md``. Every call reads the files again.
    """

    def __init__(self, base_path: Path):
        self.base_path = base_path

    @property
    def blogs_path(self) -> Path:
        return self.base_path / "blogs"

    @property
    def projects_path(self) -> Path:
        return self.base_path / "projects"

    def _read_post(self, path: Path, year: str) -> BlogPost:
        raw = _read_text(path)
        metadata, body = parse_frontmatter(raw)
        return BlogPost(slug=path.stem, year=year, content=body, metadata=metadata)

    def _read_project(self, path: Path) -> Project:
        raw = _read_text(path)
        metadata, body = parse_frontmatter(raw, ProjectMetadata)
        return Project(slug=path.stem, content=body, metadata=metadata)

    def _year_dirs(self) -> list[Path]:
        if not self.blogs_path.is_dir():
            return []
        years = [
            p for p in self.blogs_path.iterdir()
            if p.is_dir() and YEAR_PATTERN.match(p.name)
        ]
        return sorted(years, key=lambda p: int(p.name), reverse=True)

    async def load_posts(self) -> list[BlogPost]:
        """Load every titled blog post across all year directories."""
        posts = []
        for year_dir in self._year_dirs():
            for path in sorted(year_dir.glob("*.md")):
                try:
                    post = self._read_post(path, year_dir.name)
                except UnreadableDocument as exc:
                    logger.debug("Skipping unreadable post %s", exc)
                    continue
                if not post.metadata.title:
                    logger.debug("Skipping untitled post %s", path)
                    continue
                posts.append(post)
        return posts

    async def load_post(self, year: str, slug: str) -> BlogPost:
        """Load a single post by year and slug."""
        if not YEAR_PATTERN.match(year) or not SLUG_PATTERN.match(slug):
            raise DocumentNotFound(year, slug)
        path = self.blogs_path / year / f"{slug}.md"
        if not path.is_file():
            raise DocumentNotFound(year, slug)
        try:
            post = self._read_post(path, year)
        except UnreadableDocument as exc:
            raise DocumentNotFound(year, slug) from exc
        if not post.metadata.title:
            raise DocumentNotFound(year, slug)
        return post

    async def load_projects(self) -> list[Project]:
        """Load every titled project, newest first."""
        if not self.projects_path.is_dir():
            return []
        projects = []
        for path in sorted(self.projects_path.glob("*.md")):
            try:
                project = self._read_project(path)
            except UnreadableDocument as exc:
                logger.debug("Skipping unreadable project %s", exc)
                continue
            if not project.metadata.title:
                logger.debug("Skipping untitled project %s", path)
                continue
            projects.append(project)
        return sort_by_date(projects)

    async def load_project(self, slug: str) -> Project:
        """Load a single project by slug."""
        if not SLUG_PATTERN.match(slug):
            raise DocumentNotFound("projects", slug)
        path = self.projects_path / f"{slug}.md"
        if not path.is_file():
            raise DocumentNotFound("projects", slug)
        try:
            project = self._read_project(path)
        except UnreadableDocument as exc:
            raise DocumentNotFound("projects", slug) from exc
        if not project.metadata.title:
            raise DocumentNotFound("projects", slug)
        return project
