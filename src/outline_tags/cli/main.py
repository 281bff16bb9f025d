# Copyright 2024 Heinrich Krupp
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
outline-tags command line interface.

Usage:
    outline-tags [--outline PATH] apply
    outline-tags [--outline PATH] filter TAG
    outline-tags [--outline PATH] clear
    outline-tags [--outline PATH] tree
    outline-tags [--outline PATH] tags
    outline-tags serve
"""

import argparse
import logging
import sys
from typing import List, Optional

from ..models.tag_taxonomy import normalize_tag
from ..services.sidebar import sidebar_items
from .utils import get_outline, get_tag_service

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="outline-tags",
        description="Derive, browse and filter hierarchical #tags in an outline file",
    )
    parser.add_argument("--outline", help="Outline file (.json, or .txt/.md to import)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("apply", help="Re-derive tags for every row")
    filter_parser = subparsers.add_parser("filter", help="Filter rows by a tag and its descendants")
    filter_parser.add_argument("tag", help="Tag to filter by, e.g. '#project/web'")
    subparsers.add_parser("clear", help="Clear the tag filter")
    subparsers.add_parser("tree", help="Print the tag hierarchy")
    subparsers.add_parser("tags", help="Print every tag, one per line")
    subparsers.add_parser("serve", help="Run the MCP server")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), stream=sys.stderr)

    if args.command == "serve":
        from ..mcp_server import main as serve_main
        serve_main()
        return 0

    try:
        document = get_outline(args.outline)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot open outline: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 2

    service = get_tag_service()

    if args.command == "apply":
        changed = service.apply_tags(document)
        print(f"{changed} rows updated")
    elif args.command == "filter":
        target = normalize_tag(args.tag) if args.tag.strip() else None
        if not target:
            print("error: empty tag", file=sys.stderr)
            return 1
        service.filter_by_tag(document, target)
        for row in service.filtered_rows(document):
            print(row.text)
    elif args.command == "clear":
        service.clear_filter(document)
        print("filter cleared")
    elif args.command == "tree":
        roots = service.build_tag_hierarchy(document)
        for item in sidebar_items(roots, lambda tag: (lambda: None)):
            print(item.text)
    elif args.command == "tags":
        for tag in sorted(service.index_all_tags(document)):
            print(tag)
    return 0


if __name__ == "__main__":
    sys.exit(main())
