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

"""Tag data types shared by the tokenizer, the tag service and the sidebar."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional


@dataclass(frozen=True)
class TagToken:
    """
    A tag exactly as written in a row, with its half-open span ``[start, end)``.

    Tokens are recomputed on every parse and never persisted.
    """
    tag: str
    start: int
    end: int


@dataclass
class TagHierarchyNode:
    """One node of the tag forest; ``children`` are ordered shallow-first."""
    tag: str
    children: List["TagHierarchyNode"] = field(default_factory=list)

    @property
    def depth(self) -> int:
        """Number of ``/`` separators in the tag path."""
        return self.tag.count("/")


class SelectionKind(str, Enum):
    """Kinds of editor selection reported by the host."""
    CARET = "caret"
    TEXT = "text"
    BLOCK = "block"


@dataclass(frozen=True)
class Selection:
    """
    Host selection snapshot.

    ``char`` is the caret offset for caret selections, ``head_char`` the moving
    end of a text selection. Block selections carry neither.
    """
    row_id: str
    kind: SelectionKind
    char: Optional[int] = None
    head_char: Optional[int] = None

    @property
    def caret_index(self) -> Optional[int]:
        if self.kind == SelectionKind.CARET:
            return self.char
        if self.kind == SelectionKind.TEXT:
            return self.head_char
        return None

    @property
    def is_editing(self) -> bool:
        return self.kind in (SelectionKind.CARET, SelectionKind.TEXT)


@dataclass
class SidebarItem:
    """Display node handed to the host sidebar."""
    id: str
    text: str
    action: Callable[[], object]
    symbol: Optional[str] = None
    is_group: bool = False
    section: Optional[str] = None
    after_id: Optional[str] = None
    tag: Optional[str] = None
    level: int = 0

    def without_ordering(self) -> "SidebarItem":
        """Copy of this item with no placement hints."""
        return SidebarItem(
            id=self.id,
            text=self.text,
            action=self.action,
            symbol=self.symbol,
            is_group=self.is_group,
            tag=self.tag,
            level=self.level,
        )
