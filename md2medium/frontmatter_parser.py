"""
Front matter splitting for YAML (---) and TOML (+++) metadata blocks.

The metadata block must open on the very first line of the document (after an
optional UTF-8 byte-order mark) and be closed by a second delimiter line.
Everything after the closing delimiter is the document body, verbatim.
"""

from __future__ import annotations

import codecs
import datetime
import logging
import os
import re
import sys
from dataclasses import dataclass, field

import frontmatter
import yaml
from frontmatter import default_handlers

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .config import DEFAULT_CONFIG
from .exceptions import ParseError, SecurityError

logger = logging.getLogger('md2medium')


@dataclass
class FrontMatter:
    """Metadata recognized in the front matter block."""

    title: str = ''
    date: datetime.datetime | None = None
    tags: list[str] = field(default_factory=list)
    extra: dict = field(default_factory=dict)  # every other key, untouched


class YAMLHandler(default_handlers.YAMLHandler):
    """YAML front matter delimited by lines of exactly '---'."""

    name = 'yaml'
    FM_BOUNDARY = re.compile(r'^---[ \t]*\r?$', re.MULTILINE)

    def load(self, fm, **kwargs):
        try:
            return super().load(fm, **kwargs)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML front matter: {e}", section=self.name) from e


# python-frontmatter only defines its TOMLHandler when the 'toml' package is
# installed; decode with tomllib instead
class TOMLHandler(default_handlers.BaseHandler):
    """TOML front matter delimited by lines of exactly '+++'."""

    name = 'toml'
    FM_BOUNDARY = re.compile(r'^\+\+\+[ \t]*\r?$', re.MULTILINE)
    START_DELIMITER = END_DELIMITER = '+++'

    def load(self, fm):
        try:
            return tomllib.loads(fm)
        except tomllib.TOMLDecodeError as e:
            raise ParseError(f"Invalid TOML front matter: {e}", section=self.name) from e


# Detection order matters: YAML first, then TOML
HANDLERS = [YAMLHandler(), TOMLHandler()]


def _split(handler, text):
    try:
        return handler.split(text)
    except ValueError as e:
        raise ParseError(
            f"Unterminated {handler.name.upper()} front matter: "
            f"missing closing '{handler.END_DELIMITER}' line",
            section=handler.name,
        ) from e


def split_front_matter(raw):
    """
    Separate the front matter block from the document body.

    Args:
        raw: Markdown document as bytes or str (UTF-8, optional BOM)

    Returns:
        (FrontMatter, body) where body has the same type as raw

    Raises:
        ParseError: If the metadata block is unterminated or cannot be decoded
    """
    is_bytes = isinstance(raw, (bytes, bytearray))
    if is_bytes:
        raw = bytes(raw)
        if raw.startswith(codecs.BOM_UTF8):
            raw = raw[len(codecs.BOM_UTF8):]
        try:
            text = raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ParseError(f"Document is not valid UTF-8: {e}", section='encoding') from e
    else:
        text = raw[1:] if raw.startswith('\ufeff') else raw

    handler = frontmatter.detect_format(text, HANDLERS)
    if handler is None:
        logger.debug("No front matter found")
        return FrontMatter(), raw if is_bytes else text

    fm_text, content = _split(handler, text)
    front_matter = _build_front_matter(handler.load(fm_text), handler.name)
    logger.debug("Parsed %s front matter: title=%r, tags=%r",
                 handler.name.upper(), front_matter.title, front_matter.tags)
    if is_bytes:
        return front_matter, content.encode('utf-8')
    return front_matter, content


def _build_front_matter(data, section: str) -> FrontMatter:
    """Validate decoded metadata and map it onto FrontMatter."""
    if data is None:
        return FrontMatter()
    if not isinstance(data, dict):
        raise ParseError(
            f"{section.upper()} front matter must be a mapping, got {type(data).__name__}",
            section=section,
        )

    extra = dict(data)
    title = extra.pop('title', None)
    date = extra.pop('date', None)
    tags = extra.pop('tags', None)

    if title is None:
        title = ''
    elif isinstance(title, (int, float)) and not isinstance(title, bool):
        title = str(title)
    elif not isinstance(title, str):
        raise ParseError(f"'title' must be a string, got {type(title).__name__}", section=section)

    if tags is None:
        tags = []
    elif not isinstance(tags, list) or any(isinstance(t, (list, dict)) for t in tags):
        raise ParseError("'tags' must be a list of strings", section=section)
    else:
        tags = [str(t) for t in tags]

    return FrontMatter(title=title, date=_parse_date(date, section), tags=tags, extra=extra)


def _parse_date(value, section: str):
    """Normalize a front matter date to a datetime (or None)."""
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, str):
        text = value.strip()
        # fromisoformat() only accepts the 'Z' suffix from Python 3.11 on
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return datetime.datetime.fromisoformat(text)
        except ValueError as e:
            raise ParseError(f"'date' is not an ISO-8601 timestamp: {value!r}", section=section) from e
    raise ParseError(f"'date' must be a timestamp, got {type(value).__name__}", section=section)


def read_markdown_file(file_path: str, config=None) -> bytes:
    """
    Read a Markdown file as raw bytes, enforcing the input size limit.

    Raises:
        FileNotFoundError: If the file does not exist
        SecurityError: If the file exceeds config.MAX_INPUT_FILE_SIZE
    """
    config = config or DEFAULT_CONFIG
    size = os.path.getsize(file_path)
    if size > config.MAX_INPUT_FILE_SIZE:
        raise SecurityError(
            f"Input file too large: {size} bytes (max {config.MAX_INPUT_FILE_SIZE} bytes)"
        )
    with open(file_path, 'rb') as f:
        return f.read()


def parse_markdown_with_frontmatter(file_path: str, config=None) -> tuple[FrontMatter, str]:
    """
    Parse a Markdown file with YAML or TOML front matter.

    Args:
        file_path: Path to the Markdown file
        config: Optional ConversionConfig instance

    Returns:
        (FrontMatter, markdown_content_without_frontmatter)
    """
    front_matter, body = split_front_matter(read_markdown_file(file_path, config))
    return front_matter, body.decode('utf-8')


def parse_markdown_string_with_frontmatter(markdown_string: str) -> tuple[FrontMatter, str]:
    """
    Parse a Markdown string with YAML or TOML front matter.

    Args:
        markdown_string: Markdown text

    Returns:
        (FrontMatter, markdown_content_without_frontmatter)
    """
    return split_front_matter(markdown_string)
