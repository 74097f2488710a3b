"""Markdown rendering with HTML sanitization."""

import nh3
from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor


# Pattern for strikethrough: ~~text~~
# Group 2 must contain the text (SimpleTagInlineProcessor expectation)
STRIKETHROUGH_PATTERN = r"(~~)(.*?)~~"

ALLOWED_TAGS = {
    "a", "abbr", "b", "blockquote", "br", "code", "dd", "del", "details",
    "div", "dl", "dt", "em", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i",
    "img", "input", "ins", "kbd", "li", "ol", "p", "pre", "s", "span",
    "strong", "sub", "summary", "sup", "table", "tbody", "td", "tfoot", "th",
    "thead", "tr", "ul",
}

ALLOWED_ATTRIBUTES = {
    "*": {"class", "id", "title"},
    "a": {"href"},
    "abbr": {"title"},
    "img": {"src", "alt", "width", "height"},
    "input": {"type", "checked", "disabled"},
    "ol": {"start"},
    "td": {"align", "colspan", "rowspan"},
    "th": {"align", "colspan", "rowspan"},
}

ALLOWED_URL_SCHEMES = {"http", "https", "mailto"}


class StrikethroughExtension(Extension):
    """Markdown extension for ~~strikethrough~~ text."""

    def extendMarkdown(self, md: Markdown) -> None:
        """Add strikethrough pattern to markdown parser."""
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"),
            "strikethrough",
            50,
        )


def create_parser() -> Markdown:
    """Create a Markdown parser for article and project bodies.

    Returns:
        Configured Markdown parser instance.
    """
    return Markdown(
        extensions=[
            # Core formatting
            "extra",  # Includes: abbreviations, attr_list, def_list, fenced_code, footnotes, md_in_html, tables
            "sane_lists",  # Better list handling
            "smarty",  # Smart quotes and dashes
            "toc",  # Table of contents
            # PyMdown extensions
            "pymdownx.tasklist",  # Task lists with checkboxes
            # Custom extensions
            StrikethroughExtension(),  # ~~strikethrough~~
        ]
    )


def sanitize_html(html: str) -> str:
    """Strip executable content from HTML.

    Script and style elements are dropped with their content, event handler
    attributes and unknown attributes are removed, and only http(s) and
    mailto links survive. Running it on its own output is a no-op.
    """
    return nh3.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        url_schemes=ALLOWED_URL_SCHEMES,
        link_rel="noopener noreferrer",
    )


def render_markdown(content: str) -> str:
    """Convert markdown to sanitized HTML.

    Args:
        content: Markdown source of a document body.

    Returns:
        Sanitized HTML string.
    """
    return sanitize_html(create_parser().convert(content))


def render_markdown_with_toc(content: str) -> tuple[str, str]:
    """Convert markdown and return sanitized HTML with table of contents.

    Args:
        content: Markdown source of a document body.

    Returns:
        Tuple of (html_content, toc_html).
    """
    parser = create_parser()
    html = parser.convert(content)
    toc_html = getattr(parser, "toc", "")
    return sanitize_html(html), sanitize_html(toc_html)
