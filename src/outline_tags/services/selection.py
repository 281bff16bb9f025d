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
Selection state machine.

Tags are not re-derived while the user types. A row is re-derived when the
editor leaves it: the caret moves to another row, the row becomes block
selected, or the selection goes away.

States::

    NO_SELECTION --caret/text--> EDITING(row, kind) --block--> BLOCK_SELECTED
         ^                           |    ^
         +------- none --------------+    +-- caret/text on same row (no call)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..models.tags import Selection, SelectionKind

logger = logging.getLogger(__name__)


class SelectionState(str, Enum):
    NO_SELECTION = "no-selection"
    EDITING = "editing"
    BLOCK_SELECTED = "block-selected"


@dataclass(frozen=True)
class TrackerState:
    state: SelectionState
    row_id: Optional[str] = None
    kind: Optional[SelectionKind] = None


NO_SELECTION = TrackerState(SelectionState.NO_SELECTION)


class SelectionTracker:
    """
    Tracks selection changes and reports rows the editor has left.

    Args:
        on_leave: Called with the row id on every transition out of EDITING
    """

    def __init__(self, on_leave: Callable[[str], object]):
        self._on_leave = on_leave
        self.current: TrackerState = NO_SELECTION

    def observe(self, selection: Optional[Selection]) -> Optional[str]:
        """
        Feed a selection change.

        Returns:
            The id of the row that was left, if this event left one
        """
        previous = self.current
        self.current = self._next_state(selection)

        left_row = None
        if previous.state == SelectionState.EDITING and not (
            self.current.state == SelectionState.EDITING and self.current.row_id == previous.row_id
        ):
            left_row = previous.row_id

        if left_row is not None:
            logger.debug(f"Left row {left_row} ({previous.state.value} -> {self.current.state.value})")
            self._on_leave(left_row)
        return left_row

    @staticmethod
    def _next_state(selection: Optional[Selection]) -> TrackerState:
        if selection is None:
            return NO_SELECTION
        if selection.kind == SelectionKind.BLOCK:
            return TrackerState(SelectionState.BLOCK_SELECTED, selection.row_id, selection.kind)
        return TrackerState(SelectionState.EDITING, selection.row_id, selection.kind)

    def reset(self) -> None:
        self.current = NO_SELECTION
