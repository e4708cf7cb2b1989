import logging
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from jinja2 import Environment, StrictUndefined, TemplateError

from .config import DEFAULT_CONFIG
from .exceptions import ParseError
from .frontmatter_parser import FrontMatter, split_front_matter
from .image_ext import ImageExtension
from .markdown_engine import MarkdownEngine

logger = logging.getLogger('md2medium')

# Notes are Markdown, not HTML: nothing to autoescape
_NOTE_ENV = Environment(undefined=StrictUndefined, autoescape=False, keep_trailing_newline=True)


@dataclass
class ResolvedAsset:
    """A local image reference and the destination it was replaced with."""

    original: str
    resolved: str


@dataclass
class ConversionResult:
    html: str
    front_matter: FrontMatter
    assets: list = field(default_factory=list)


def base_url(canonical_url):
    """Return 'scheme://host' of a canonical URL ('' when there is none)."""
    if not canonical_url:
        return ''
    try:
        parts = urlsplit(canonical_url)
    except ValueError as e:
        raise ParseError(f"Invalid canonical URL {canonical_url!r}: {e}", section='template') from e
    if not parts.scheme or not parts.netloc:
        return ''
    return f"{parts.scheme}://{parts.netloc}"


def render_note(template_text, canonical_url, front_matter):
    """
    Render the trailing note template.

    Available variables: BaseURL, CanonicalURL, Title, Date.

    Raises:
        ParseError: On template syntax errors or undefined variables
    """
    context = {
        'BaseURL': base_url(canonical_url),
        'CanonicalURL': canonical_url or '',
        'Title': front_matter.title,
        'Date': front_matter.date,
    }
    try:
        return _NOTE_ENV.from_string(template_text).render(**context)
    except TemplateError as e:
        raise ParseError(f"Failed to render original note template: {e}", section='template') from e


def compose_final_markdown(body, front_matter, canonical_url='', original_note=None):
    """
    Build the Markdown that gets published: title heading, body, note.

    Args:
        body: Document body (str) without front matter
        front_matter: FrontMatter of the document
        canonical_url: URL of the original post, exposed to the note template
        original_note: Jinja2 template appended after the body, or None

    Returns:
        Final Markdown string
    """
    parts = []
    if front_matter.title:
        parts.append(f"# {front_matter.title}\n\n")
    parts.append(body)
    if original_note:
        parts.append("\n\n")
        parts.append(render_note(original_note, canonical_url, front_matter))
    return "".join(parts)


class MarkdownToHtml:
    """Front matter -> final Markdown -> AST -> image rewrite -> HTML."""

    @staticmethod
    def convert_to_html(source, resolver, **kwargs):
        """
        Convert a Markdown document to an HTML fragment.

        Args:
            source: Markdown document (bytes or str), may carry front matter
            resolver: Callable mapping a local image path to its new location
            **kwargs: canonical_url, original_note, config, base_dir

        Returns:
            HTML string
        """
        return MarkdownToHtml(resolver, **kwargs).convert(source).html

    def __init__(self, resolver, canonical_url='', original_note=None, config=None, base_dir='.'):
        self.resolver = resolver
        self.canonical_url = canonical_url
        self.original_note = original_note
        self.config = config or DEFAULT_CONFIG
        self.base_dir = base_dir

    def _create_engine(self, resolver):
        extensions = ['gfm'] if self.config.ENABLE_GFM else []
        engine = MarkdownEngine(extensions=extensions)
        ImageExtension(resolver, config=self.config, base_dir=self.base_dir).extend(engine)
        return engine

    def convert(self, source):
        """
        Run the whole pipeline on one document.

        Returns:
            ConversionResult with the HTML, the front matter and the list of
            images the resolver relocated, in document order.

        Raises:
            ParseError: Malformed front matter or note template
            TransformError: The resolver failed for an image
            RenderError: HTML serialization failed
        """
        front_matter, body = split_front_matter(source)
        if isinstance(body, bytes):
            body = body.decode('utf-8')

        markdown = compose_final_markdown(body, front_matter, self.canonical_url, self.original_note)

        assets = []

        def recording_resolver(path):
            resolved = self.resolver(path)
            assets.append(ResolvedAsset(path, resolved))
            return resolved

        html = self._create_engine(recording_resolver).convert(markdown)
        logger.debug("Converted '%s': %d image(s) resolved", front_matter.title, len(assets))
        return ConversionResult(html=html, front_matter=front_matter, assets=assets)
