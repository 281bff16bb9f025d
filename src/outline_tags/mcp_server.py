#!/usr/bin/env python3
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
MCP Server for Outline Tags

Exposes the tag engine over the Model Context Protocol using FastMCP, so an
assistant can apply tags, browse the tag hierarchy and filter an outline file.

Features:
- Native MCP protocol implementation using FastMCP
- One outline document opened for the lifetime of the server
- stdio (default) or streamable HTTP transport
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TypedDict

from mcp.server.fastmcp import FastMCP, Context

from .config import settings, SERVER_HOST, SERVER_NAME, SERVER_PORT, TRANSPORT_MODE, LOG_LEVEL
from .models.tags import TagHierarchyNode
from .services.sidebar import sanitize_id, sidebar_items
from .services.tag_service import TagService
from .storage.base import OutlineDocument
from .storage.factory import create_outline

logger = logging.getLogger(__name__)


@dataclass
class MCPServerContext:
    """Application context for the MCP server with all required components."""

    document: OutlineDocument
    tag_service: TagService


@asynccontextmanager
async def mcp_server_lifespan(server: FastMCP) -> AsyncIterator[MCPServerContext]:
    """Open the configured outline for the lifetime of the server."""
    outline_path = settings.paths.outline_path
    logger.info(f"Opening outline {outline_path}")
    document = create_outline(outline_path)
    tag_service = TagService(settings.tags)
    try:
        yield MCPServerContext(document=document, tag_service=tag_service)
    finally:
        logger.info("Shutting down Outline Tags MCP server")


mcp = FastMCP(
    name="Outline Tags",
    host=SERVER_HOST,
    port=SERVER_PORT,
    lifespan=mcp_server_lifespan,
)

# =============================================================================
# TYPE DEFINITIONS
# =============================================================================


class CommandResult(TypedDict):
    success: bool
    message: str


class TagTreeNode(TypedDict):
    tag: str
    id: str
    children: List["TagTreeNode"]


def _server_context(ctx: Context) -> MCPServerContext:
    return ctx.request_context.lifespan_context


def _tree_to_dict(node: TagHierarchyNode) -> TagTreeNode:
    return TagTreeNode(
        tag=node.tag,
        id=sanitize_id(node.tag),
        children=[_tree_to_dict(child) for child in node.children],
    )


# =============================================================================
# TAG OPERATIONS
# =============================================================================


@mcp.tool()
async def apply_tags(ctx: Context) -> Dict[str, Any]:
    """
    Re-derive the tags of every row in the outline.

    Rows whose trailing tags did not change are left untouched.

    Returns:
        - success: True
        - changed_rows: Number of rows whose tag set changed
    """
    server = _server_context(ctx)
    changed = server.tag_service.apply_tags(server.document)
    return {"success": True, "changed_rows": changed}


@mcp.tool()
async def filter_by_tag(tag: str, ctx: Context) -> Dict[str, Any]:
    """
    Filter the outline to rows tagged with a tag or any of its descendants.

    Args:
        tag: Tag to filter by, with or without the leading "#" (e.g. "#project/web")

    Returns:
        - success: False when the tag is empty
        - tag: The normalized tag that was used
        - matched: Number of matching rows
    """
    server = _server_context(ctx)
    target = server.tag_service.resolve_target(server.document, tag=tag)
    if not target:
        return {"success": False, "message": "No tag given"}
    matched = server.tag_service.filter_by_tag(server.document, target)
    return {"success": True, "tag": target, "matched": matched}


@mcp.tool()
async def clear_filter(ctx: Context) -> CommandResult:
    """Remove the tag filter from every row."""
    server = _server_context(ctx)
    server.tag_service.clear_filter(server.document)
    return CommandResult(success=True, message="Filter cleared")


@mcp.tool()
async def list_tags(ctx: Context) -> Dict[str, Any]:
    """
    List every tag used in the outline, including implied ancestor tags.

    Returns:
        - tags: Sorted list of tags
        - total: Number of tags
    """
    server = _server_context(ctx)
    tags = sorted(server.tag_service.index_all_tags(server.document))
    return {"tags": tags, "total": len(tags)}


@mcp.tool()
async def get_tag_tree(ctx: Context) -> Dict[str, Any]:
    """
    Get the tag hierarchy as a nested tree and as flat sidebar rows.

    Returns:
        - tree: Root nodes with nested children (tag, id, children)
        - items: Depth-first display rows (id, text, tag, level)
    """
    server = _server_context(ctx)
    roots = server.tag_service.build_tag_hierarchy(server.document)
    items = sidebar_items(roots, lambda tag: (lambda: None))
    return {
        "tree": [_tree_to_dict(root) for root in roots],
        "items": [
            {"id": item.id, "text": item.text, "tag": item.tag, "level": item.level}
            for item in items
        ],
    }


@mcp.tool()
async def get_row_tags(row_id: str, ctx: Context) -> Dict[str, Any]:
    """
    Get the stored tag set of one row.

    Args:
        row_id: Identifier of the row

    Returns:
        - found: False if no row has this id
        - text: The row text
        - tags: The row's derived tags (empty when untagged)
    """
    server = _server_context(ctx)
    row = server.document.get_row(row_id)
    if row is None:
        return {"found": False, "row_id": row_id}
    return {
        "found": True,
        "row_id": row_id,
        "text": row.text,
        "tags": server.tag_service.read_row_tags(row) or [],
    }


@mcp.tool()
async def list_filtered_rows(ctx: Context, limit: Optional[int] = None) -> Dict[str, Any]:
    """
    List the rows matched by the active tag filter.

    Args:
        limit: Optional maximum number of rows to return

    Returns:
        - filter: Active filter expression ("" when none)
        - rows: Matching rows (id, text)
    """
    server = _server_context(ctx)
    rows = server.tag_service.filtered_rows(server.document)
    if limit is not None:
        rows = rows[:max(limit, 0)]
    return {
        "filter": server.document.filter,
        "rows": [{"id": row.id, "text": row.text} for row in rows],
    }


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


def main():
    """Main entry point for the Outline Tags MCP server."""
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
    logger.info(f"Starting {SERVER_NAME} MCP server ({TRANSPORT_MODE})")

    if TRANSPORT_MODE == "streamable-http":
        logger.info(f"Listening on {SERVER_HOST}:{SERVER_PORT}")
        mcp.run("streamable-http")
    else:
        mcp.run("stdio")


if __name__ == "__main__":
    main()
