"""
md2medium - Publish Markdown posts on Medium

Converts Markdown with YAML or TOML front matter to an HTML fragment,
rewriting local image references through a caller-supplied resolver
(typically an uploader) on the way.
"""

from .MarkdownToHtml import (
    MarkdownToHtml,
    ConversionResult,
    ResolvedAsset,
    compose_final_markdown,
    render_note,
)
from .markdown_engine import MarkdownEngine, ParseContext, WalkStatus, walk
from .image_ext import ImageExtension, ImageAssetTransform, ImageSizeTransform, ImageRendererMixin
from .frontmatter_parser import (
    FrontMatter,
    split_front_matter,
    parse_markdown_with_frontmatter,
    parse_markdown_string_with_frontmatter,
)
from .config import ConversionConfig, DEFAULT_CONFIG
from .exceptions import (
    Md2MediumError,
    ParseError,
    TransformError,
    RenderError,
    PublishError,
    SecurityError,
)
from .medium_client import MediumClient
from .converter_api import convert_string, convert_file

__version__ = "0.2.0"
__all__ = [
    "MarkdownToHtml",
    "ConversionResult",
    "ResolvedAsset",
    "compose_final_markdown",
    "render_note",
    "MarkdownEngine",
    "ParseContext",
    "WalkStatus",
    "walk",
    "ImageExtension",
    "ImageAssetTransform",
    "ImageSizeTransform",
    "ImageRendererMixin",
    "FrontMatter",
    "split_front_matter",
    "parse_markdown_with_frontmatter",
    "parse_markdown_string_with_frontmatter",
    "ConversionConfig",
    "DEFAULT_CONFIG",
    "Md2MediumError",
    "ParseError",
    "TransformError",
    "RenderError",
    "PublishError",
    "SecurityError",
    "MediumClient",
    "convert_string",
    "convert_file",
]
