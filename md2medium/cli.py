"""
md2medium - Markdown to Medium publisher

Converts a Markdown file (with YAML or TOML front matter) to HTML, uploads its
local images and publishes it as a Medium post.
"""

import argparse
import mimetypes
import os
import sys
import logging

from . import __version__
from .config import ConversionConfig, DEFAULT_CONFIG
from .converter_api import convert_file
from .exceptions import Md2MediumError
from .medium_client import MediumClient

logger = logging.getLogger('md2medium')


def setup_logging(verbose=False, quiet=False):
    """Configure logging based on CLI flags.

    Args:
        verbose: If True, show DEBUG level messages
        quiet: If True, suppress all non-error output
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger = logging.getLogger('md2medium')
    for old in list(root_logger.handlers):
        root_logger.removeHandler(old)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)


def make_image_uploader(client, markdown_path, dry_run=False):
    """Build the resolver that uploads local images to Medium.

    Image paths are taken relative to the Markdown file. On a dry run nothing
    is uploaded and the original path is kept.
    """
    base_path = os.path.dirname(markdown_path)

    def upload(origin_path):
        img_path = os.path.join(base_path, origin_path)
        if dry_run:
            logger.info("Should upload image file %s", img_path)
            return origin_path
        logger.info("Uploading image file %s", img_path)
        content_type, _ = mimetypes.guess_type(origin_path)
        return client.upload_image(img_path, content_type)['url']

    return upload


def build_config(args):
    """Return a config reflecting --gfm and --image-size."""
    if not (args.gfm or args.image_size):
        return DEFAULT_CONFIG
    config = ConversionConfig()
    config.ENABLE_GFM = args.gfm
    config.IMAGE_DIMENSIONS = args.image_size
    return config


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="md2medium",
        description="Publish a Markdown file as a Medium post.",
        epilog="Examples:\n"
               "  md2medium -i post.md --dry-run --debug\n"
               "  md2medium -i post.md -t TOKEN -c https://blog.example.com/post/\n"
               "  md2medium -i post.md -s public --original-note "
               "'Originally published at [{{ BaseURL }}]({{ CanonicalURL }}).'",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument("-i", "-f", "--markdown-file", dest="input_file", required=True,
                        help="Markdown file to post on Medium (.md, .markdown)")
    parser.add_argument("-t", "--token", default=None,
                        help=f"Medium integration token (default: ${DEFAULT_CONFIG.TOKEN_ENV_VAR})")
    parser.add_argument("-c", "--canonical-url", default="",
                        help="URL of the original post")
    parser.add_argument("-s", "--publish-status", default=DEFAULT_CONFIG.DEFAULT_PUBLISH_STATUS,
                        choices=DEFAULT_CONFIG.PUBLISH_STATUSES,
                        help="Status of the post (default: %(default)s)")
    parser.add_argument("--original-note", default=None,
                        help="Paragraph appended to the post; Jinja2 template with "
                             "BaseURL, CanonicalURL, Title and Date")
    parser.add_argument("--dry-run", action="store_true", default=False,
                        help="Convert the Markdown but upload and publish nothing")
    parser.add_argument("--debug", action="store_true", default=False,
                        help="Write the generated HTML to <file>.html in the current directory")
    parser.add_argument("--gfm", action="store_true", default=False,
                        help="Enable GitHub Flavored Markdown (tables, strikethrough)")
    parser.add_argument("--image-size", action="store_true", default=False,
                        help="Add width/height attributes read from local images")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", default=False,
                        help="Show detailed debug output")
    parser.add_argument("-q", "--quiet", action="store_true", default=False,
                        help="Suppress all non-error output")

    args = parser.parse_args(argv)

    # Set up logging
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    input_file = args.input_file
    logger.info("Processing %s", input_file)

    # Validate input is Markdown
    input_ext = os.path.splitext(input_file)[1].lower()
    if input_ext not in ['.md', '.markdown']:
        logger.error("Only Markdown files are supported. Got: %s", input_ext)
        sys.exit(1)

    if not os.path.exists(input_file):
        logger.error("Input file not found: %s", input_file)
        sys.exit(1)

    token = args.token or os.environ.get(DEFAULT_CONFIG.TOKEN_ENV_VAR)
    if not token and not args.dry_run:
        logger.error("A Medium integration token is required (-t or $%s)",
                     DEFAULT_CONFIG.TOKEN_ENV_VAR)
        sys.exit(1)

    config = build_config(args)
    client = MediumClient(token, config=config) if token else None

    try:
        result = convert_file(
            input_file,
            resolver=make_image_uploader(client, input_file, dry_run=args.dry_run),
            canonical_url=args.canonical_url,
            original_note=args.original_note,
            config=config,
        )

        if args.debug:
            debug_path = os.path.basename(input_file) + ".html"
            with open(debug_path, 'w', encoding='utf-8') as f:
                f.write(result.html)
            logger.info("Wrote HTML to %s", debug_path)

        if args.dry_run:
            print(f"Post {input_file} not published (dry run)")
            return

        user = client.get_user()
        post = client.create_post(
            user['id'],
            title=result.front_matter.title,
            content=result.html,
            tags=result.front_matter.tags,
            publish_status=args.publish_status,
            canonical_url=args.canonical_url,
        )
        print(f"New {post.get('publishStatus')} post published at {post.get('url')}")

    except Md2MediumError as e:
        logger.error("%s", e)
        sys.exit(1)
    except Exception as e:
        logger.error("Unexpected error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
