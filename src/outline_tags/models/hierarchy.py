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
Tag Hierarchy

Builds a forest of TagHierarchyNode from a flat set of ``/``-delimited tag
paths. Parents that were never written as tags on their own are synthesized
as containers so every node hangs under a single-segment root.

Usage:
    from outline_tags.models.hierarchy import build_hierarchy

    roots = build_hierarchy({"#a", "#a/b", "#x"})
    [root.tag for root in roots]   # ["#a", "#x"]
"""

import logging
from typing import Dict, Iterable, Iterator, List, Tuple

from .tag_taxonomy import expand_ancestors, segment_count
from .tags import TagHierarchyNode

logger = logging.getLogger(__name__)


def hierarchy_sort_key(tag: str) -> Tuple[int, str]:
    """Shallower tags first, then code-point order."""
    return (segment_count(tag), tag)


def build_hierarchy(tags: Iterable[str]) -> List[TagHierarchyNode]:
    """
    Build the tag forest.

    Tags are processed shallow-first so a parent is linked before any of its
    children. Each tag is linked along its full ancestor chain, creating
    missing parents on the way; linking is idempotent so a node is never
    added to the same parent twice.

    Args:
        tags: Normalized tags, in any order, duplicates allowed

    Returns:
        Root nodes in first-seen order
    """
    nodes: Dict[str, TagHierarchyNode] = {}
    roots: List[TagHierarchyNode] = []

    def ensure_node(tag: str) -> TagHierarchyNode:
        node = nodes.get(tag)
        if node is None:
            node = TagHierarchyNode(tag=tag)
            nodes[tag] = node
        return node

    for tag in sorted(set(tags), key=hierarchy_sort_key):
        chain = [ensure_node(t) for t in expand_ancestors(tag)]
        root = chain[0]
        if not any(r is root for r in roots):
            roots.append(root)
        for parent, child in zip(chain, chain[1:]):
            if not any(c is child for c in parent.children):
                parent.children.append(child)

    logger.debug(f"Built hierarchy with {len(roots)} root nodes from {len(nodes)} nodes")
    return roots


def walk_hierarchy(roots: List[TagHierarchyNode], level: int = 0) -> Iterator[Tuple[TagHierarchyNode, int]]:
    """Depth-first (pre-order) traversal yielding ``(node, level)`` pairs."""
    for node in roots:
        yield node, level
        yield from walk_hierarchy(node.children, level + 1)
