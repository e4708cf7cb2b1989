"""
High-level convenience API for md2medium.

Provides simple functions to convert Markdown strings or files to a Medium
ready HTML fragment without needing to understand the internal pipeline.
"""

import os

from .frontmatter_parser import read_markdown_file
from .MarkdownToHtml import MarkdownToHtml


def keep_local_path(path):
    """Resolver that leaves image destinations as they are."""
    return path


def convert_string(markdown_string, resolver=None, canonical_url='', original_note=None,
                   config=None, base_dir='.'):
    """Convert a Markdown string to HTML.

    Args:
        markdown_string: Markdown text (may include YAML or TOML front matter)
        resolver: Callable mapping each local image path to its new location.
                  If None, local paths are kept.
        canonical_url: URL of the original post, available to the note template
        original_note: Jinja2 template appended after the body
        config: Optional ConversionConfig instance. Uses DEFAULT_CONFIG if None.
        base_dir: Directory local image paths are relative to

    Returns:
        ConversionResult (html, front_matter, assets)

    Raises:
        ParseError: If the front matter or note template is malformed.
        TransformError: If the resolver fails.
    """
    converter = MarkdownToHtml(
        resolver or keep_local_path,
        canonical_url=canonical_url,
        original_note=original_note,
        config=config,
        base_dir=base_dir,
    )
    return converter.convert(markdown_string)


def convert_file(input_path, output_path=None, resolver=None, canonical_url='',
                 original_note=None, config=None):
    """Convert a Markdown file to HTML, optionally writing it to output_path.

    Local image paths are relative to the Markdown file's directory.

    Raises:
        SecurityError: If the input file is larger than the configured limit.
        ParseError, TransformError, RenderError: See convert_string.
    """
    raw = read_markdown_file(input_path, config)
    result = convert_string(
        raw,
        resolver=resolver,
        canonical_url=canonical_url,
        original_note=original_note,
        config=config,
        base_dir=os.path.dirname(os.path.abspath(input_path)),
    )
    if output_path:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(result.html)
    return result
