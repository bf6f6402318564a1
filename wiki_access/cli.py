"""
Command-line access to a wiki.

Usage:
    wiki-access --api-url https://wiki.example.org/w/api.php page "Main Page"
    wiki-access page "Main Page" --section History --with-heading
    wiki-access sections "Main Page"
    wiki-access file Logo.png

Without ``--api-url`` or ``--config`` the endpoint comes from WIKI_API_URL.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import yaml

from .client import WikiClient
from .config import ClientConfig
from .exceptions import WikiCommunicationError
from .logging_utils import configure_structured_logging
from .transport.base import HttpTransport


def _section_arg(value: str) -> int | str:
    """Digits select by index, anything else by name."""
    return int(value) if value.isdigit() else value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wiki-access",
        description="Read pages, sections and file info from a MediaWiki-style wiki",
        epilog="Credentials and retry settings are read from WIKI_* variables or --config.",
    )
    parser.add_argument("--api-url", help="URL of api.php (overrides WIKI_API_URL)")
    parser.add_argument("--config", help="YAML settings file with a 'wiki' section")
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit library logs as JSON lines on stdout",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    page = commands.add_parser("page", help="Print a page's text or one section")
    page.add_argument("title")
    page.add_argument("--section", type=_section_arg, help="Section index or name")
    page.add_argument(
        "--with-heading",
        action="store_true",
        help="Include the section's heading line",
    )

    sections = commands.add_parser("sections", help="List a page's sections")
    sections.add_argument("title")

    wiki_file = commands.add_parser("file", help="Print a file's current revision info")
    wiki_file.add_argument("name")

    return parser


def load_config(args: argparse.Namespace) -> ClientConfig:
    """Build the client config from --config, the environment and --api-url.

    Raises:
        ValueError: If no API URL can be determined
    """
    if args.config:
        config = ClientConfig.from_yaml(args.config)
        if args.api_url:
            config.api_url = args.api_url
        return config

    if args.api_url:
        try:
            config = ClientConfig.from_env()
        except ValueError:
            return ClientConfig(api_url=args.api_url)
        config.api_url = args.api_url
        return config

    return ClientConfig.from_env()


def _report(error: dict | str | None) -> None:
    print(f"Error: {error}", file=sys.stderr)


async def run(
    args: argparse.Namespace,
    config: ClientConfig,
    transport: HttpTransport | None = None,
) -> int:
    """Execute one command; returns the process exit code."""
    async with WikiClient.from_config(config, transport) as wiki:
        if config.has_credentials and not await wiki.login():
            _report(wiki.error)
            return 1

        if args.command == "file":
            wiki_file = await wiki.get_file(args.name)
            if wiki_file.error is not None or not wiki_file.exists:
                _report(wiki_file.error or f"File '{args.name}' does not exist")
                return 1
            info = wiki_file.info
            print(f"File:      {wiki_file.title}")
            print(f"Timestamp: {info.timestamp}")
            print(f"User:      {info.user}")
            print(f"Size:      {info.size}")
            print(f"Mime:      {info.mime}")
            print(f"Size (px): {info.width}x{info.height}")
            print(f"SHA-1:     {info.sha1}")
            print(f"URL:       {info.url}")
            return 0

        page = await wiki.get_page(args.title)
        if page.error is not None or not page.exists:
            _report(page.error or f"Page '{args.title}' does not exist")
            return 1

        if args.command == "sections":
            for entry in page.sections:
                print(f"{entry.index}\t{entry.depth}\t{entry.name}")
            return 0

        if args.section is None:
            print(page.text or "")
            return 0

        text = page.get_section(args.section, include_heading=args.with_heading)
        if text is None:
            _report(page.error)
            return 1
        print(text, end="" if text.endswith("\n") else "\n")
        return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.log_json:
        configure_structured_logging(logging.INFO, "wiki_access")

    try:
        config = load_config(args)
    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        code = asyncio.run(run(args, config))
    except WikiCommunicationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
