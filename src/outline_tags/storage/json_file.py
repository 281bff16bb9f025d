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
JSON file backed outline.

File layout::

    {"filter": "", "rows": [{"id": "...", "text": "...",
                             "attributes": {...}, "markers": {"name": [[s, e]]}}]}

The file is rewritten atomically after every committed transaction.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..config import validate_and_create_path
from .memory import InMemoryOutline

logger = logging.getLogger(__name__)


class JsonOutline(InMemoryOutline):
    """InMemoryOutline persisted to a JSON file."""

    def __init__(self, path: str, rows: Optional[list] = None, filter_expression: str = ""):
        super().__init__(rows, filter_expression)
        self.path = Path(path)

    @classmethod
    def load(cls, path: str) -> "JsonOutline":
        """
        Open an outline file, or start an empty outline if it does not exist.

        Raises:
            ValueError: If the file is not a valid outline document
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.info(f"Outline file {file_path} does not exist, starting empty outline")
            return cls(str(file_path))

        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Outline file {file_path} is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("rows", []), list):
            raise ValueError(f"Outline file {file_path} must contain an object with a 'rows' list")

        if not isinstance(data.get("filter", ""), str):
            raise ValueError(f"Outline file {file_path}: 'filter' must be a string")
        for position, row in enumerate(data.get("rows", [])):
            _validate_row(file_path, position, row)

        outline = cls(str(file_path), data.get("rows", []), data.get("filter", ""))
        logger.info(f"Loaded outline {file_path} with {len(outline)} rows")
        return outline

    @classmethod
    def import_text(cls, source: str, path: Optional[str] = None) -> "JsonOutline":
        """
        Import a plain text file, one row per non-blank line.

        The outline is saved next to the source as ``<name>.json`` unless a
        target path is given.
        """
        source_path = Path(source)
        lines = source_path.read_text(encoding="utf-8").splitlines()
        target = Path(path) if path else source_path.with_suffix(".json")
        plain = InMemoryOutline.from_lines(lines)
        outline = cls(str(target), [row.to_dict() for row in plain.rows()])
        outline.save()
        logger.info(f"Imported {len(outline)} rows from {source_path}")
        return outline

    def on_commit(self) -> None:
        self.save()

    def save(self) -> None:
        """Write the outline to disk via a temp file and atomic rename."""
        directory = validate_and_create_path(str(self.path.parent))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".outline-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug(f"Saved outline to {self.path}")


def _validate_row(file_path: Path, position: int, row: object) -> None:
    """Reject rows the in-memory outline cannot be built from."""
    where = f"Outline file {file_path}, row {position}"
    if not isinstance(row, dict):
        raise ValueError(f"{where}: expected an object, got {type(row).__name__}")
    if not isinstance(row.get("text", ""), str):
        raise ValueError(f"{where}: 'text' must be a string")
    if row.get("id") is not None and not isinstance(row["id"], str):
        raise ValueError(f"{where}: 'id' must be a string")
    attributes = row.get("attributes") or {}
    if not isinstance(attributes, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in attributes.items()
    ):
        raise ValueError(f"{where}: 'attributes' must map strings to strings")
    markers = row.get("markers") or {}
    if not isinstance(markers, dict):
        raise ValueError(f"{where}: 'markers' must be an object")
    for name, spans in markers.items():
        if not isinstance(spans, list) or not all(
            isinstance(span, list) and len(span) == 2 and all(isinstance(i, int) for i in span)
            for span in spans
        ):
            raise ValueError(f"{where}: marker {name!r} must be a list of [start, end] pairs")
