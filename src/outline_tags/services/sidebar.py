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
Tags sidebar.

Turns the tag hierarchy into ordered sidebar items and keeps them in sync
with the document. Sidebar failures are logged and never stop tag
derivation.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Set

from ..models.hierarchy import build_hierarchy, walk_hierarchy
from ..models.tag_taxonomy import TAG_PREFIX, short_name
from ..models.tags import SidebarItem, TagHierarchyNode
from ..storage.base import OutlineDocument
from .tag_service import TagService

logger = logging.getLogger(__name__)

GROUP_ITEM_ID = "outline-tags:tags"
TAG_ITEM_PREFIX = "outline-tags:tag:"
SIDEBAR_SECTION = "filters"

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9:_-]")


def sanitize_id(tag: str) -> str:
    """
    Stable sidebar identifier for a tag path.

    Examples:
        >>> sanitize_id("#project/web front")
        'outline-tags:tag:project--web-front'
    """
    core = tag[len(TAG_PREFIX):] if tag.startswith(TAG_PREFIX) else tag
    return TAG_ITEM_PREFIX + _UNSAFE_ID_CHARS.sub("-", core.replace("/", "--"))


def display_name(tag: str, level: int) -> str:
    """Full path at the root, indented short name below it."""
    if level == 0:
        return tag
    return "  " * level + short_name(tag)


def sidebar_items(
    roots: List[TagHierarchyNode],
    action_for: Callable[[str], Callable[[], object]],
    after_id: str = GROUP_ITEM_ID,
) -> List[SidebarItem]:
    """
    Flatten the hierarchy into sidebar items in depth-first order.

    Each item is placed after the item emitted before it, the first one after
    ``after_id``.
    """
    items: List[SidebarItem] = []
    previous_id = after_id
    for node, level in walk_hierarchy(roots):
        item_id = sanitize_id(node.tag)
        items.append(
            SidebarItem(
                id=item_id,
                text=display_name(node.tag, level),
                action=action_for(node.tag),
                symbol="tag",
                section=SIDEBAR_SECTION,
                after_id=previous_id,
                tag=node.tag,
                level=level,
            )
        )
        previous_id = item_id
    return items


class SidebarHandle(ABC):
    @abstractmethod
    def dispose(self) -> None:
        pass


class SidebarHost(ABC):
    """Host sidebar of one window."""

    @abstractmethod
    def add_item(self, item: SidebarItem) -> SidebarHandle:
        """Add an item; hosts may raise if the item or its ordering is rejected."""
        pass


class SidebarController:
    """
    Keeps one window's tag items in sync with the attached document.

    Rebuilds replace every item: old handles are disposed and a fresh
    hierarchy is built from the committed tag index.
    """

    def __init__(self, window_id: str, sidebar: SidebarHost, tag_service: TagService):
        self.window_id = window_id
        self.sidebar = sidebar
        self.tag_service = tag_service
        self.document: Optional[OutlineDocument] = None
        self.items: List[SidebarItem] = []
        self._handles: List[SidebarHandle] = []
        self._group_handle: Optional[SidebarHandle] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._indexed: Optional[Set[str]] = None

    def setup(self) -> None:
        """Add the Tags group item (clicking it clears the filter)."""
        group = SidebarItem(
            id=GROUP_ITEM_ID,
            text="Tags",
            action=self._clear_filter,
            is_group=True,
            section=SIDEBAR_SECTION,
            after_id="outline:headings",
        )
        self._group_handle = self._add(group)
        if self._group_handle is None:
            logger.error(f"Window {self.window_id}: proceeding without Tags group item")

    def attach(self, document: Optional[OutlineDocument]) -> None:
        """Follow a new current document (None when the window has no editor)."""
        self._detach()
        self.document = document
        if document is None:
            logger.debug(f"Window {self.window_id}: no document, sidebar cleared")
            return
        self.rebuild()
        self._unsubscribe = document.subscribe(self._on_document_change)

    def _detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._dispose_items()
        self.document = None

    def rebuild(self) -> bool:
        """Rebuild the tag items. Returns False if there is no document."""
        self._dispose_items()
        if self.document is None:
            return False
        try:
            tags = self.tag_service.index_all_tags(self.document)
            hierarchy = build_hierarchy(tags)
        except Exception as e:
            logger.error(f"Window {self.window_id}: failed to build tag hierarchy: {e}")
            return False
        self._indexed = tags
        self.items = sidebar_items(hierarchy, self._filter_action)
        for item in self.items:
            handle = self._add(item)
            if handle is not None:
                self._handles.append(handle)
        logger.debug(f"Window {self.window_id}: created {len(self._handles)} sidebar items")
        return True

    def _on_document_change(self) -> None:
        """Rebuild only when the committed tag index changed (filter toggles do not)."""
        if self.document is None:
            return
        if self.tag_service.index_all_tags(self.document) == self._indexed:
            return
        self.rebuild()

    def close(self) -> None:
        self._detach()
        if self._group_handle is not None:
            self._safe_dispose(self._group_handle)
            self._group_handle = None

    def _add(self, item: SidebarItem) -> Optional[SidebarHandle]:
        try:
            return self.sidebar.add_item(item)
        except Exception as e:
            logger.error(f"Failed to add sidebar item {item.id} (ordered): {e}")
        try:
            return self.sidebar.add_item(item.without_ordering())
        except Exception as e:
            logger.error(f"Failed to add sidebar item {item.id} (no ordering): {e}")
        return None

    def _dispose_items(self) -> None:
        for handle in self._handles:
            self._safe_dispose(handle)
        self._handles = []
        self.items = []
        self._indexed = None

    @staticmethod
    def _safe_dispose(handle: SidebarHandle) -> None:
        try:
            handle.dispose()
        except Exception as e:
            logger.warning(f"Failed to dispose sidebar item: {e}")

    def _filter_action(self, tag: str) -> Callable[[], object]:
        def action() -> bool:
            if self.document is None:
                return False
            self.tag_service.filter_by_tag(self.document, tag)
            return True
        return action

    def _clear_filter(self) -> bool:
        if self.document is None:
            return False
        self.tag_service.clear_filter(self.document)
        return True


class WindowRegistry:
    """
    Per-window sidebar state, keyed by the host's window identifier.

    ``window_opened`` is idempotent, so hosts may report the same window from
    several notifications.
    """

    def __init__(self, tag_service: TagService):
        self.tag_service = tag_service
        self._controllers: Dict[str, SidebarController] = {}

    def window_opened(self, window_id: str, sidebar: SidebarHost) -> SidebarController:
        controller = self._controllers.get(window_id)
        if controller is not None:
            return controller
        logger.info(f"Setting up tags sidebar for window {window_id}")
        controller = SidebarController(window_id, sidebar, self.tag_service)
        controller.setup()
        self._controllers[window_id] = controller
        return controller

    def window_closed(self, window_id: str) -> None:
        controller = self._controllers.pop(window_id, None)
        if controller is not None:
            controller.close()
            logger.info(f"Released tags sidebar for window {window_id}")

    def document_changed(self, window_id: str, document: Optional[OutlineDocument]) -> bool:
        """Report the window's current document. False for unknown windows."""
        controller = self._controllers.get(window_id)
        if controller is None:
            return False
        controller.attach(document)
        return True

    def get(self, window_id: str) -> Optional[SidebarController]:
        return self._controllers.get(window_id)

    def __contains__(self, window_id: str) -> bool:
        return window_id in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)
