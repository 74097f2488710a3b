"""CLI entrypoint: project sync, post listing and the dev server."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from folio.config import settings
from folio.core.github import GitHubError, fetch_owned_repos
from folio.core.listing import sort_by_date
from folio.core.storage import FileContentStore
from folio.core.sync import sync_projects

app = typer.Typer(name="folio", no_args_is_help=True, help="Portfolio and blog site tools")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


@app.command(name="sync")
def sync_cmd(
    username: Annotated[Optional[str], typer.Option("--username", "-u", help="GitHub user to sync")] = None,
    content_dir: Annotated[Optional[Path], typer.Option("--content-dir", help="Content root directory")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """Sync public, non-fork GitHub repositories into project files."""
    _configure_logging(verbose)
    username = username or settings.github_username
    projects_dir = content_dir / "projects" if content_dir else settings.projects_dir

    try:
        repos = fetch_owned_repos(username, token=settings.github_token)
    except GitHubError as e:
        _fail("could not fetch repositories", e)

    results = sync_projects(projects_dir, repos)
    typer.echo(
        f"Sync complete. Created: {results['created']}, "
        f"Updated: {results['updated']}, "
        f"Unchanged: {results['skipped']}"
    )


@app.command(name="posts")
def posts_cmd(
    content_dir: Annotated[Optional[Path], typer.Option("--content-dir", help="Content root directory")] = None,
):
    """List blog posts, newest first."""
    store = FileContentStore(content_dir or settings.content_dir)
    posts = sort_by_date(asyncio.run(store.load_posts()))
    if not posts:
        typer.echo("No posts found.")
        return
    for post in posts:
        typer.echo(f"{post.year}/{post.slug}  {post.date or '-'}  {post.title}")


@app.command(name="serve")
def serve_cmd(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Bind port")] = 8000,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
):
    """Run the site with uvicorn."""
    import uvicorn

    uvicorn.run("folio.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
