"""Folio FastAPI application."""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from folio import __version__
from folio.config import settings
from folio.core.github import RepoCache
from folio.core.listing import (
    ALL,
    all_tags,
    all_years,
    filter_posts,
    latest_posts,
    parse_date,
)
from folio.core.models import FilterSpec
from folio.core.parser import render_markdown, render_markdown_with_toc
from folio.core.seo import build_robots_txt, build_sitemap
from folio.core.storage import DocumentNotFound, FileContentStore

logger = logging.getLogger(__name__)

# Initialize app
app = FastAPI(
    title=settings.app_title,
    version=__version__,
    debug=settings.debug,
)

# Setup templates and static files
templates_path = Path(__file__).parent / "templates"
static_path = Path(__file__).parent / "static"

templates = Jinja2Templates(directory=str(templates_path))
app.mount("/static", StaticFiles(directory=str(static_path)), name="static")


def longdate_filter(value: str | None) -> str:
    """Format an ISO date as e.g. ``Jan 05, 2024``; pass other text through."""
    parsed = parse_date(value)
    if parsed is None:
        return value or ""
    return parsed.strftime("%b %d, %Y")


templates.env.filters["longdate"] = longdate_filter

# Initialize storage
storage = FileContentStore(settings.content_dir)
repo_cache = RepoCache(ttl=settings.github_cache_ttl)


# Template context helper
def get_context(request: Request, **kwargs) -> dict:
    """Create base context for templates."""
    return {
        "request": request,
        "app_title": settings.app_title,
        **kwargs,
    }


def render_not_found(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "not_found.html",
        get_context(request),
        status_code=404,
    )


@app.exception_handler(DocumentNotFound)
async def document_not_found_handler(request: Request, exc: DocumentNotFound):
    logger.info("%s", exc)
    return render_not_found(request)


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return render_not_found(request)
    return await http_exception_handler(request, exc)


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Home page - intro and latest posts."""
    posts = await storage.load_posts()
    return templates.TemplateResponse(
        request,
        "home.html",
        get_context(
            request,
            latest=latest_posts(posts, settings.latest_posts_count),
        ),
    )


@app.get("/about", response_class=HTMLResponse)
async def about(request: Request):
    """About page."""
    return templates.TemplateResponse(request, "about.html", get_context(request))


# ========== Blog ==========


@app.get("/blog", response_class=HTMLResponse)
async def blog(request: Request, tag: str = ALL, year: str = ALL, q: str = ""):
    """Blog index with tag, year and title filters."""
    posts = await storage.load_posts()
    spec = FilterSpec(tag=tag, year=year, search=q)
    groups = filter_posts(posts, spec)
    context = get_context(
        request,
        groups=groups,
        spec=spec,
        tags=all_tags(posts),
        years=all_years(posts),
    )

    # HTMX filter form swaps only the result list
    if request.headers.get("HX-Request"):
        return templates.TemplateResponse(request, "partials/post_list.html", context)
    return templates.TemplateResponse(request, "blog.html", context)


@app.get("/articles/{year}/{slug}", response_class=HTMLResponse)
async def article(request: Request, year: str, slug: str):
    """Single article page."""
    post = await storage.load_post(year, slug)
    html_content, toc_html = render_markdown_with_toc(post.content)
    return templates.TemplateResponse(
        request,
        "article.html",
        get_context(request, post=post, html_content=html_content, toc_html=toc_html),
    )


@app.get("/api/posts")
async def api_posts(tag: str = ALL, year: str = ALL, q: str = ""):
    """Return the filtered, grouped post listing as JSON."""
    posts = await storage.load_posts()
    groups = filter_posts(posts, FilterSpec(tag=tag, year=year, search=q))
    return [
        {
            "year": group.year,
            "posts": [
                {
                    "title": post.title,
                    "slug": post.slug,
                    "date": post.date,
                    "tags": post.tags,
                    "url": post.url,
                }
                for post in group.posts
            ],
        }
        for group in groups
    ]


# ========== Projects ==========


@app.get("/projects", response_class=HTMLResponse)
async def projects(request: Request):
    """Project cards from markdown plus live GitHub repositories."""
    project_list = await storage.load_projects()
    repos = await repo_cache.get_repos(
        settings.github_username, token=settings.github_token
    )
    return templates.TemplateResponse(
        request,
        "projects.html",
        get_context(request, projects=project_list, repos=repos),
    )


@app.get("/projects/{slug}", response_class=HTMLResponse)
async def project_detail(request: Request, slug: str):
    """Single project page."""
    project = await storage.load_project(slug)
    return templates.TemplateResponse(
        request,
        "project.html",
        get_context(request, project=project, html_content=render_markdown(project.content)),
    )


# ========== SEO ==========


@app.get("/robots.txt", response_class=PlainTextResponse)
async def robots_txt():
    """Crawler directives."""
    return PlainTextResponse(build_robots_txt(settings.site_url))


@app.get("/sitemap.xml")
async def sitemap_xml():
    """Sitemap of static routes and every article."""
    posts = await storage.load_posts()
    return Response(
        content=build_sitemap(settings.site_url, posts),
        media_type="application/xml",
    )
