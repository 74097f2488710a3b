"""Data models for Folio."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _isoformat(value: object) -> object:
    """YAML turns bare dates into date objects; keep them as ISO strings."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return _scalar_to_str(value)


def _scalar_to_str(value: object) -> object:
    """YAML types bare scalars; ``title: 1984`` is still a title."""
    if isinstance(value, (bool, int, float)):
        return str(value)
    return value


class DocumentMetadata(BaseModel):
    """Metadata extracted from document frontmatter."""

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    description: str | None = None
    date: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _text_to_str(cls, value: object) -> object:
        return _scalar_to_str(value)

    @field_validator("date", mode="before")
    @classmethod
    def _date_to_str(cls, value: object) -> object:
        return _isoformat(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_to_list(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(tag) for tag in value]


class ProjectMetadata(DocumentMetadata):
    """Frontmatter of a project file."""

    updated: str | None = None
    stars: int | None = None
    repo: str | None = None
    homepage: str | None = None
    language: str | None = None

    @field_validator("repo", "homepage", "language", mode="before")
    @classmethod
    def _project_text_to_str(cls, value: object) -> object:
        return _scalar_to_str(value)

    @field_validator("updated", mode="before")
    @classmethod
    def _updated_to_str(cls, value: object) -> object:
        return _isoformat(value)


class Document(BaseModel):
    """A markdown document identified by its slug."""

    slug: str
    content: str
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)

    @property
    def title(self) -> str:
        return self.metadata.title or ""

    @property
    def date(self) -> str | None:
        return self.metadata.date

    @property
    def tags(self) -> list[str]:
        return self.metadata.tags


class BlogPost(Document):
    """A blog post stored under its year partition."""

    year: str

    @property
    def url(self) -> str:
        return f"/articles/{self.year}/{self.slug}"


class Project(Document):
    """A project stored in the flat projects partition."""

    metadata: ProjectMetadata = Field(default_factory=ProjectMetadata)

    @property
    def url(self) -> str:
        return f"/projects/{self.slug}"


class YearGroup(BaseModel):
    """Posts sharing a year, newest first."""

    year: str
    posts: list[BlogPost] = Field(default_factory=list)


class FilterSpec(BaseModel):
    """Blog filter form state. ``"All"`` and empty values match everything."""

    tag: str | None = "All"
    year: str | None = "All"
    search: str = ""


class GitHubRepo(BaseModel):
    """A repository as returned by the GitHub REST API."""

    id: int
    name: str
    full_name: str = ""
    html_url: str = ""
    description: str | None = None
    language: str | None = None
    stars: int = Field(default=0, validation_alias="stargazers_count")
    homepage: str | None = None
    created_at: str = ""
    updated_at: str = ""
    fork: bool = False
    visibility: str = "public"

    model_config = ConfigDict(populate_by_name=True)
