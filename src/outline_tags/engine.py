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
Process-wide tag engine context.

Owns the TagService, the per-window sidebar registry and the command
registry, and hands out selection trackers bound to a document.
"""

import logging
from threading import Lock
from typing import Optional

from .commands import CommandContext, TagCommands
from .config import TagSettings
from .services.selection import SelectionTracker
from .services.sidebar import SidebarController, SidebarHost, WindowRegistry
from .services.tag_service import TagService
from .storage.base import OutlineDocument

logger = logging.getLogger(__name__)


class TagEngine:
    """Wires the tag service into host events."""

    _instance: Optional["TagEngine"] = None
    _lock: Lock = Lock()

    def __init__(self, tag_settings: Optional[TagSettings] = None):
        self.tag_service = TagService(tag_settings)
        self.windows = WindowRegistry(self.tag_service)
        self.commands = TagCommands(self.tag_service, self.windows)

    @classmethod
    def get_instance(cls) -> "TagEngine":
        """Get the shared engine, created from the global settings on first use."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    from .config import settings
                    cls._instance = cls(settings.tags)
                    logger.info("Created TagEngine instance")
        return cls._instance

    def selection_tracker(self, document: OutlineDocument) -> SelectionTracker:
        """Tracker that re-derives a row whenever the editor leaves it."""
        def on_leave(row_id: str) -> None:
            try:
                self.tag_service.apply_tags_to_row_id(document, row_id)
            except Exception as e:
                logger.error(f"Failed to apply tags to row {row_id}: {e}")

        return SelectionTracker(on_leave)

    def window_opened(
        self,
        window_id: str,
        sidebar: SidebarHost,
        document: Optional[OutlineDocument] = None,
    ) -> SidebarController:
        controller = self.windows.window_opened(window_id, sidebar)
        if document is not None and controller.document is not document:
            controller.attach(document)
        return controller

    def window_closed(self, window_id: str) -> None:
        self.windows.window_closed(window_id)

    def run_command(self, name: str, context: CommandContext) -> bool:
        return self.commands.dispatch(name, context)
