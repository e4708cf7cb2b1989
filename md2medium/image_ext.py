"""
Image handling for the Markdown engine.

- ImageAssetTransform rewrites local image destinations through a resolver
  (typically an uploader returning the hosted URL).
- ImageSizeTransform optionally records the pixel size of local images.
- ImageRendererMixin replaces marko's <img /> output with the tag shape
  Medium expects.
"""

from __future__ import annotations

import html
import logging
import os
import re

from marko import inline
from PIL import Image

from .config import DEFAULT_CONFIG
from .exceptions import TransformError
from .markdown_engine import WalkStatus, walk

logger = logging.getLogger('md2medium')

GLOBAL_ATTRIBUTES = frozenset([
    'accesskey', 'autocapitalize', 'autofocus', 'class', 'contenteditable',
    'dir', 'draggable', 'enterkeyhint', 'hidden', 'id', 'inert', 'inputmode',
    'is', 'itemid', 'itemprop', 'itemref', 'itemscope', 'itemtype', 'lang',
    'part', 'role', 'slot', 'spellcheck', 'style', 'tabindex', 'title',
    'translate',
])

IMAGE_ATTRIBUTES = GLOBAL_ATTRIBUTES | frozenset([
    'align', 'border', 'crossorigin', 'decoding', 'height', 'importance',
    'intrinsicsize', 'ismap', 'loading', 'referrerpolicy', 'sizes', 'srcset',
    'usemap', 'width',
])

# Always written first by render_image
_FIXED_ATTRIBUTES = ('src', 'alt', 'title')


def plain_text(element) -> str:
    """Concatenate the text of every descendant text node."""
    children = getattr(element, 'children', None)
    if isinstance(children, str):
        return children
    if not children:
        return ''
    return ''.join(plain_text(child) for child in children)


# Only semicolon-terminated references count, as in CommonMark
_ENTITY_RE = re.compile(r'&(?:#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6}|[A-Za-z][A-Za-z0-9]{0,31});')


def unescape_entities(text: str) -> str:
    """Decode HTML entity and numeric character references in Markdown text."""
    return _ENTITY_RE.sub(lambda m: html.unescape(m.group(0)), text)


def _is_remote(dest: str, prefixes) -> bool:
    return dest.startswith(tuple(prefixes))


class ImageAssetTransform:
    """Replace the destination of every local image with resolver(dest).

    Entity references in the destination are decoded first, so the resolver
    sees the real path. Images whose destination starts with one of the
    remote prefixes keep it and the resolver is not called for them. The resolver is
    called once per local image, in document order. If it raises, the walk
    stops, the image keeps its original destination and a TransformError is
    raised.
    """

    def __init__(self, resolver, remote_prefixes=DEFAULT_CONFIG.REMOTE_URL_PREFIXES):
        self.resolver = resolver
        self.remote_prefixes = tuple(remote_prefixes)

    def transform(self, document, context):
        walk(document, self._visit)

    def _visit(self, node, entering):
        if not entering or not isinstance(node, inline.Image):
            return WalkStatus.CONTINUE

        # marko keeps entity references in link destinations undecoded
        dest = node.dest = unescape_entities(node.dest)
        if _is_remote(dest, self.remote_prefixes):
            logger.debug("Image already hosted: %s", dest)
            return WalkStatus.CONTINUE

        try:
            new_dest = self.resolver(dest)
        except Exception as e:
            raise TransformError(dest, e) from e

        logger.debug("Resolved image %s -> %s", dest, new_dest)
        node.dest = new_dest
        # Alt text holds no images of its own
        return WalkStatus.SKIP_CHILDREN


class ImageSizeTransform:
    """Add width/height attributes to local images, read with Pillow.

    Must run before ImageAssetTransform, while destinations are still local
    paths. Unreadable images are logged and left without size attributes.
    """

    def __init__(self, base_dir='.', remote_prefixes=DEFAULT_CONFIG.REMOTE_URL_PREFIXES):
        self.base_dir = base_dir
        self.remote_prefixes = tuple(remote_prefixes)

    def transform(self, document, context):
        walk(document, self._visit)

    def _visit(self, node, entering):
        if not entering or not isinstance(node, inline.Image):
            return WalkStatus.CONTINUE
        dest = unescape_entities(node.dest)
        if _is_remote(dest, self.remote_prefixes):
            return WalkStatus.CONTINUE

        path = os.path.join(self.base_dir, dest)
        try:
            with Image.open(path) as im:
                width, height = im.size
        except OSError as e:
            logger.warning("Cannot read image size of %s: %s", path, e)
            return WalkStatus.SKIP_CHILDREN

        attributes = getattr(node, 'attributes', None) or {}
        attributes.setdefault('width', str(width))
        attributes.setdefault('height', str(height))
        node.attributes = attributes
        return WalkStatus.SKIP_CHILDREN


class ImageRendererMixin:
    """marko renderer mixin emitting <img src=".." alt=".." title=".." ...>.

    No self-closing slash and no URL escaping of src: the destination is
    written as given, only HTML-attribute escaped, so html.unescape() of the
    rendered src gives it back exactly. Alt text and title come from the
    Markdown source and have their entity references decoded first.
    """

    def render_image(self, element):
        tag = '<img src="{}" alt="{}" title="{}"'.format(
            html.escape(element.dest),
            html.escape(unescape_entities(plain_text(element))),
            html.escape(unescape_entities(element.title or '')),
        )
        attributes = getattr(element, 'attributes', None)
        if attributes:
            tag += self.render_attributes(attributes, IMAGE_ATTRIBUTES)
        return tag + '>'

    def render_attributes(self, attributes, allowed):
        """Render allowed attributes (plus any data-*) in insertion order."""
        parts = []
        for name, value in attributes.items():
            if name in _FIXED_ATTRIBUTES:
                continue
            if name not in allowed and not name.startswith('data-'):
                continue
            parts.append(f' {name}="{html.escape(str(value))}"')
        return ''.join(parts)


class ImageExtension:
    """Installs the image passes and the renderer override on an engine."""

    def __init__(self, resolver, config=None, base_dir='.'):
        self.resolver = resolver
        self.config = config or DEFAULT_CONFIG
        self.base_dir = base_dir

    def extend(self, engine):
        config = self.config
        if config.IMAGE_DIMENSIONS:
            engine.add_transformer(
                ImageSizeTransform(self.base_dir, config.REMOTE_URL_PREFIXES),
                config.IMAGE_SIZE_TRANSFORM_PRIORITY,
            )
        engine.add_transformer(
            ImageAssetTransform(self.resolver, config.REMOTE_URL_PREFIXES),
            config.IMAGE_ASSET_TRANSFORM_PRIORITY,
        )
        engine.add_renderer(ImageRendererMixin, config.IMAGE_RENDERER_PRIORITY)
