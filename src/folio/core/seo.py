"""robots.txt and sitemap.xml generation."""

from typing import Sequence
from xml.sax.saxutils import escape

from folio.core.listing import parse_date
from folio.core.models import BlogPost

STATIC_ROUTES = ["", "/about", "/blog", "/projects"]

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"


def build_robots_txt(site_url: str) -> str:
    """Allow every crawler and point it at the sitemap."""
    site_url = site_url.rstrip("/")
    return "\n".join(
        [
            "User-agent: *",
            "Allow: /",
            f"Sitemap: {site_url}/sitemap.xml",
        ]
    )


def _url_entry(loc: str, lastmod: str | None = None) -> str:
    lines = ["  <url>", f"    <loc>{escape(loc)}</loc>"]
    if lastmod:
        lines.append(f"    <lastmod>{escape(lastmod)}</lastmod>")
    lines.append("  </url>")
    return "\n".join(lines)


def build_sitemap(
    site_url: str,
    posts: Sequence[BlogPost] = (),
    static_routes: Sequence[str] = STATIC_ROUTES,
) -> str:
    """Build a sitemap of the static routes plus one entry per article.

    Articles carry a ``<lastmod>`` taken from their date field when it holds
    a valid ISO date.
    """
    site_url = site_url.rstrip("/")
    entries = [_url_entry(f"{site_url}{route}") for route in static_routes]
    for post in posts:
        lastmod = parse_date(post.date)
        entries.append(
            _url_entry(
                f"{site_url}{post.url}",
                lastmod.isoformat() if lastmod else None,
            )
        )
    body = "\n".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">\n'
        f"{body}\n"
        "</urlset>"
    )
