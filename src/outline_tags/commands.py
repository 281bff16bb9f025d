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
Editor commands.

Each command takes a CommandContext and returns True on success and False
when there was nothing to do (no document, no tag under the caret, unknown
window). Commands never raise for those conditions.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .models.tags import Selection
from .services.sidebar import WindowRegistry
from .services.tag_service import TagService
from .storage.base import OutlineDocument

logger = logging.getLogger(__name__)

APPLY_TAGS = "outline-tags:apply-tags"
FILTER_BY_TAG = "outline-tags:filter-by-tag"
CLEAR_FILTER = "outline-tags:clear-filter"
REBUILD_SIDEBAR = "outline-tags:rebuild-sidebar"


@dataclass
class CommandContext:
    """What the host knows when a command is invoked."""
    document: Optional[OutlineDocument] = None
    selection: Optional[Selection] = None
    tag: Optional[str] = None
    window_id: Optional[str] = None


CommandHandler = Callable[[CommandContext], bool]


class TagCommands:
    """Command registry bound to a TagService and a WindowRegistry."""

    def __init__(self, tag_service: TagService, windows: WindowRegistry):
        self.tag_service = tag_service
        self.windows = windows
        self.handlers: Dict[str, CommandHandler] = {
            APPLY_TAGS: self.apply_tags,
            FILTER_BY_TAG: self.filter_by_tag,
            CLEAR_FILTER: self.clear_filter,
            REBUILD_SIDEBAR: self.rebuild_sidebar,
        }

    def dispatch(self, name: str, context: CommandContext) -> bool:
        handler = self.handlers.get(name)
        if handler is None:
            logger.warning(f"Unknown command: {name}")
            return False
        return handler(context)

    def apply_tags(self, context: CommandContext) -> bool:
        if context.document is None:
            return False
        self.tag_service.apply_tags(context.document)
        return True

    def filter_by_tag(self, context: CommandContext) -> bool:
        """Filter by the explicit tag, else the tag at the caret, else the row's last tag."""
        if context.document is None:
            return False
        target = self.tag_service.resolve_target(context.document, context.selection, context.tag)
        if not target:
            logger.debug("No tag to filter by")
            return False
        self.tag_service.filter_by_tag(context.document, target)
        return True

    def clear_filter(self, context: CommandContext) -> bool:
        if context.document is None:
            return False
        self.tag_service.clear_filter(context.document)
        return True

    def rebuild_sidebar(self, context: CommandContext) -> bool:
        if context.window_id is None:
            return False
        controller = self.windows.get(context.window_id)
        if controller is None:
            return False
        try:
            if context.document is not None and context.document is not controller.document:
                controller.attach(context.document)
                return controller.document is not None
            return controller.rebuild()
        except Exception as e:
            logger.error(f"Failed to rebuild sidebar for window {context.window_id}: {e}")
            return False
