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
In-memory outline document.

Keeps rows in a list and records every write in a mutation log, which makes
write counts observable to callers and tests.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .base import OutlineDocument, OutlineRow

logger = logging.getLogger(__name__)

Span = Tuple[int, int]
Mutation = Tuple[str, Optional[str], str]


def _edit_region(old: str, new: str) -> Tuple[int, int, int]:
    """
    Smallest region replaced by an edit.

    Returns:
        (start, old_end, new_end): ``old[start:old_end]`` became ``new[start:new_end]``
    """
    limit = min(len(old), len(new))
    start = 0
    while start < limit and old[start] == new[start]:
        start += 1
    suffix = 0
    while suffix < limit - start and old[-1 - suffix] == new[-1 - suffix]:
        suffix += 1
    return start, len(old) - suffix, len(new) - suffix


def remap_span(span: Span, start: int, old_end: int, new_end: int) -> Optional[Span]:
    """
    Move a marker span across a text edit the way attributed text does.

    Replacement text takes the markers of the first replaced character; pure
    insertions take those of the character before them. Returns None when
    every marked character was deleted.
    """
    s, e = span
    delta = new_end - old_end

    if s >= old_end:
        new_s = s + delta
    elif s <= start:
        new_s = s
    else:
        new_s = new_end

    if e >= old_end:
        new_e = e + delta
    elif e <= start:
        new_e = e
    else:
        # Span ends inside the replaced text: keep the replacement only if it
        # inherited the span.
        new_e = new_end if s <= start else start

    if new_s >= new_e:
        return None
    return new_s, new_e


class InMemoryRow(OutlineRow):
    """Row with a dict attribute bag and named marker spans."""

    def __init__(
        self,
        document: "InMemoryOutline",
        row_id: str,
        text: str,
        attributes: Optional[Dict[str, str]] = None,
        markers: Optional[Dict[str, List[Span]]] = None,
    ):
        self._document = document
        self._id = row_id
        self._text = text
        self.attributes: Dict[str, str] = dict(attributes or {})
        self.markers: Dict[str, List[Span]] = {
            name: [tuple(span) for span in spans] for name, spans in (markers or {}).items()
        }

    @property
    def id(self) -> str:
        return self._id

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._document._require_transaction()
        start, old_end, new_end = _edit_region(self._text, value)
        self._text = value
        for name in list(self.markers):
            spans = [remap_span(span, start, old_end, new_end) for span in self.markers[name]]
            kept = [span for span in spans if span is not None]
            if kept:
                self.markers[name] = kept
            else:
                del self.markers[name]
        self._document._record("set_text", self._id, "text")

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        self._document._require_transaction()
        self.attributes[name] = value
        self._document._record("set_attribute", self._id, name)

    def remove_attribute(self, name: str) -> None:
        self._document._require_transaction()
        if self.attributes.pop(name, None) is not None:
            self._document._record("remove_attribute", self._id, name)

    def add_text_marker(self, name: str, start: int, end: int) -> None:
        self._document._require_transaction()
        if not 0 <= start <= end <= len(self._text):
            raise ValueError(f"Marker span [{start}, {end}) outside row text of length {len(self._text)}")
        self.markers.setdefault(name, []).append((start, end))
        self._document._record("add_marker", self._id, name)

    def remove_text_marker(self, name: str) -> None:
        self._document._require_transaction()
        if self.markers.pop(name, None) is not None:
            self._document._record("remove_marker", self._id, name)

    def marker_spans(self, name: str) -> List[Span]:
        return list(self.markers.get(name, []))

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "text": self._text,
            "attributes": dict(self.attributes),
            "markers": {name: [list(span) for span in spans] for name, spans in self.markers.items()},
        }

    def __repr__(self) -> str:
        return f"InMemoryRow(id={self._id!r}, text={self._text!r})"


class InMemoryOutline(OutlineDocument):
    """
    List-backed outline document.

    Writes are only accepted inside ``transaction()``. Listeners registered
    with ``subscribe`` are notified once per committed transaction that
    recorded at least one mutation.
    """

    def __init__(self, rows: Optional[Iterable[dict]] = None, filter_expression: str = ""):
        self._rows: List[InMemoryRow] = []
        self._index: Dict[str, InMemoryRow] = {}
        self._filter = filter_expression
        self._depth = 0
        self._pending = 0
        self._listeners: List[Callable[[], None]] = []
        self.mutations: List[Mutation] = []
        for data in rows or []:
            self._append(
                InMemoryRow(
                    self,
                    data.get("id") or uuid.uuid4().hex,
                    data.get("text", ""),
                    data.get("attributes"),
                    data.get("markers"),
                )
            )

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "InMemoryOutline":
        """Create an outline with one row per non-blank line."""
        rows = [
            {"id": f"row-{i}", "text": line.rstrip("\n")}
            for i, line in enumerate(line for line in lines if line.strip())
        ]
        return cls(rows)

    def _append(self, row: InMemoryRow) -> None:
        if row.id in self._index:
            raise ValueError(f"Duplicate row id: {row.id}")
        self._rows.append(row)
        self._index[row.id] = row

    def add_row(self, text: str, row_id: Optional[str] = None) -> InMemoryRow:
        """Append a new row (host-side operation)."""
        with self.transaction():
            row = InMemoryRow(self, row_id or uuid.uuid4().hex, text)
            self._append(row)
            self._record("add_row", row.id, "row")
        return row

    def rows(self) -> Iterator[InMemoryRow]:
        return iter(list(self._rows))

    def get_row(self, row_id: str) -> InMemoryRow | None:
        return self._index.get(row_id)

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def filter(self) -> str:
        return self._filter

    @filter.setter
    def filter(self, expression: str) -> None:
        self._require_transaction()
        if expression != self._filter:
            self._filter = expression
            self._record("set_filter", None, expression)

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self):
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._commit()

    def _commit(self) -> None:
        changed, self._pending = self._pending, 0
        if not changed:
            return
        logger.debug(f"Committed transaction with {changed} mutations")
        self.on_commit()
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Change listener failed: {e}")

    def on_commit(self) -> None:
        """Hook for subclasses that persist committed state."""

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _require_transaction(self) -> None:
        if self._depth == 0:
            raise RuntimeError("Outline writes require an open transaction")

    def _record(self, operation: str, row_id: Optional[str], key: str) -> None:
        self.mutations.append((operation, row_id, key))
        self._pending += 1

    def to_dict(self) -> dict:
        return {"filter": self._filter, "rows": [row.to_dict() for row in self._rows]}
