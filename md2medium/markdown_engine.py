"""
Marko wrapper with two extension points: AST transform passes that run
between parsing and rendering, and render overrides for individual node kinds.

Both are registered with a priority. Transform passes run in ascending
priority order; for a node kind overridden more than once, the override with
the lowest priority value is the one that renders it.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from marko import Markdown
from marko.helpers import MarkoExtension

from .exceptions import Md2MediumError, RenderError

logger = logging.getLogger('md2medium')


class WalkStatus(enum.Enum):
    """What walk() should do after a visitor call."""

    CONTINUE = 'continue'
    SKIP_CHILDREN = 'skip_children'
    STOP = 'stop'


def walk(node, visitor) -> WalkStatus:
    """
    Depth-first walk over a marko element tree.

    The visitor is called as visitor(node, entering) twice per node: once on
    enter, once on exit. Returning SKIP_CHILDREN on enter skips the node's
    children (the exit call still happens); returning STOP ends the whole walk.
    Exceptions raised by the visitor propagate to the caller.

    Returns:
        WalkStatus.STOP if the walk was stopped, else WalkStatus.CONTINUE
    """
    status = visitor(node, True)
    if status is WalkStatus.STOP:
        return status

    if status is not WalkStatus.SKIP_CHILDREN:
        children = getattr(node, 'children', None)
        # Leaf elements (RawText, CodeSpan, ...) keep their text in .children
        if children is not None and not isinstance(children, str):
            for child in children:
                if walk(child, visitor) is WalkStatus.STOP:
                    return WalkStatus.STOP

    if visitor(node, False) is WalkStatus.STOP:
        return WalkStatus.STOP
    return WalkStatus.CONTINUE


@dataclass
class ParseContext:
    """Parse-time information handed to every transform pass."""

    source: str


class MarkdownEngine:
    """Configures marko and drives parse -> transform passes -> render.

    Not thread-safe, and not meant to be shared: create one per conversion.
    """

    def __init__(self, extensions=None):
        """
        Args:
            extensions: marko extensions (names or MarkoExtension objects)
                        applied underneath any registered render overrides
        """
        self._extensions = list(extensions or [])
        self._transformers = []
        self._renderers = []
        self._markdown = None

    def add_transformer(self, transformer, priority: int):
        """Register an object with a transform(document, context) method."""
        self._check_open()
        self._transformers.append((priority, len(self._transformers), transformer))

    def add_renderer(self, mixin: type, priority: int):
        """Register a marko renderer mixin providing render_<kind> methods."""
        self._check_open()
        self._renderers.append((priority, len(self._renderers), mixin))

    def _check_open(self):
        if self._markdown is not None:
            raise Md2MediumError("Unable to register extensions after the engine is set up")

    def _setup(self) -> Markdown:
        if self._markdown is None:
            markdown = Markdown(extensions=self._extensions)
            # marko gives precedence to the extension registered last, so the
            # lowest priority value (earliest registration on ties) goes last
            for _, _, mixin in sorted(self._renderers, key=lambda r: r[:2], reverse=True):
                markdown.use(MarkoExtension(renderer_mixins=[mixin]))
            self._markdown = markdown
        return self._markdown

    def parse(self, text: str):
        """Parse text and run every transform pass over the resulting Document."""
        document = self._setup().parse(text)
        context = ParseContext(source=text)
        for priority, _, transformer in sorted(self._transformers, key=lambda t: t[:2]):
            logger.debug("Running %s (priority %d)", type(transformer).__name__, priority)
            transformer.transform(document, context)
        return document

    def render(self, document) -> str:
        """Render a (transformed) Document to an HTML fragment."""
        markdown = self._setup()
        try:
            return markdown.render(document)
        except Md2MediumError:
            raise
        except Exception as e:
            raise RenderError(f"Failed to render HTML: {e}") from e

    def convert(self, text: str) -> str:
        return self.render(self.parse(text))
