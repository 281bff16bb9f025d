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
Tag Service - business logic for deriving, indexing and filtering row tags.

Every outward surface (editor commands, sidebar clicks, MCP tools, CLI) goes
through this service so that tag derivation and filter matching behave the
same everywhere.
"""

import json
import logging
from typing import List, Optional, Set

from ..config import TagSettings
from ..models.hierarchy import build_hierarchy
from ..models.tag_taxonomy import derive_tag_set, matches, normalize_tag
from ..models.tags import Selection, TagHierarchyNode, TagToken
from ..storage.base import OutlineDocument, OutlineRow
from ..utils.hashing import color_slot
from ..utils.tokenizer import find_trailing_tags, tag_at_offset

logger = logging.getLogger(__name__)


class TagService:
    """
    Shared service for tag operations on an outline document.

    The service keeps no per-document state; everything it needs is read
    from the rows themselves.
    """

    def __init__(self, tag_settings: Optional[TagSettings] = None):
        self.tag_settings = tag_settings or TagSettings()

    # =========================================================================
    # Persisted tag set
    # =========================================================================

    def raw_row_tags(self, row: OutlineRow) -> Optional[str]:
        """Read the persisted tag set, preferring the current key over the legacy one."""
        for name in self.tag_settings.tags_attributes:
            value = row.get_attribute(name)
            if value is not None:
                return value
        return None

    def read_row_tags(self, row: OutlineRow) -> Optional[List[str]]:
        """
        Parse a row's persisted tag set.

        Returns:
            The stored tags, or None when the attribute is missing or malformed
        """
        raw = self.raw_row_tags(row)
        if raw is None:
            return None
        try:
            tags = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring malformed tag data on row {row.id}: {e}")
            return None
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            logger.warning(f"Ignoring tag data on row {row.id}: expected a list of strings")
            return None
        return tags

    def _write_row_tags(self, row: OutlineRow, tags: List[str]) -> None:
        value = json.dumps(tags)
        for name in self.tag_settings.tags_attributes:
            row.set_attribute(name, value)

    def _remove_row_tags(self, row: OutlineRow) -> None:
        for name in self.tag_settings.tags_attributes:
            row.remove_attribute(name)

    def _clear_tag_markers(self, row: OutlineRow) -> None:
        row.remove_text_marker(self.tag_settings.tag_marker)
        for name in self.tag_settings.color_markers:
            row.remove_text_marker(name)

    # =========================================================================
    # Change-gated row update
    # =========================================================================

    def compute_row_tags(self, row: OutlineRow) -> List[str]:
        """Candidate derived tag set for a row's current text."""
        return derive_tag_set(token.tag for token in find_trailing_tags(row.text))

    def apply_tags_to_row(self, row: OutlineRow) -> bool:
        """
        Re-derive a row's tags, writing only when the tag set changed.

        Must be called inside a document transaction. Only the given row's
        attributes and text markers are touched.

        Args:
            row: The row to update

        Returns:
            True if the row was modified, False if it was already up to date
        """
        tokens = find_trailing_tags(row.text)

        if not tokens:
            if self.raw_row_tags(row) is None:
                return False
            logger.debug(f"Row {row.id} lost its trailing tags, clearing tag state")
            self._remove_row_tags(row)
            self._clear_tag_markers(row)
            return True

        new_tags = derive_tag_set(token.tag for token in tokens)
        existing = self.read_row_tags(row)
        if existing is not None and sorted(existing) == new_tags:
            return False

        self._clear_tag_markers(row)
        self._mark_tokens(row, tokens)
        self._write_row_tags(row, new_tags)
        logger.debug(f"Applied tags {new_tags} to row {row.id}")
        return True

    def _mark_tokens(self, row: OutlineRow, tokens: List[TagToken]) -> None:
        palette_size = self.tag_settings.palette_size
        for token in tokens:
            slot = color_slot(normalize_tag(token.tag), palette_size)
            row.add_text_marker(self.tag_settings.tag_marker, token.start, token.end)
            row.add_text_marker(self.tag_settings.color_marker(slot), token.start, token.end)

    def apply_tags_to_row_id(self, document: OutlineDocument, row_id: str) -> bool:
        """Re-derive a single row in its own transaction. False for unknown rows."""
        row = document.get_row(row_id)
        if row is None:
            logger.debug(f"Row {row_id} no longer exists, skipping tag update")
            return False
        with document.transaction():
            return self.apply_tags_to_row(row)

    def apply_tags(self, document: OutlineDocument) -> int:
        """
        Re-derive every row in one transaction.

        A failure on one row is logged and does not stop the others.

        Returns:
            Number of rows that changed
        """
        changed = 0
        failed = 0
        with document.transaction():
            for row in document.rows():
                try:
                    if self.apply_tags_to_row(row):
                        changed += 1
                except Exception as e:
                    failed += 1
                    logger.error(f"Failed to apply tags to row {row.id}: {e}")
        if failed:
            logger.warning(f"Tag update skipped {failed} rows after errors")
        logger.info(f"Applied tags: {changed} rows changed")
        return changed

    # =========================================================================
    # Index and hierarchy
    # =========================================================================

    def index_all_tags(self, document: OutlineDocument) -> Set[str]:
        """Union of every row's persisted tag set; malformed rows are skipped."""
        tags: Set[str] = set()
        for row in document.rows():
            row_tags = self.read_row_tags(row)
            if row_tags:
                tags.update(row_tags)
        logger.debug(f"Found {len(tags)} unique tags")
        return tags

    def build_tag_hierarchy(self, document: OutlineDocument) -> List[TagHierarchyNode]:
        return build_hierarchy(self.index_all_tags(document))

    # =========================================================================
    # Filtering
    # =========================================================================

    def resolve_target(
        self,
        document: OutlineDocument,
        selection: Optional[Selection] = None,
        tag: Optional[str] = None,
    ) -> Optional[str]:
        """
        Work out which tag to filter by.

        An explicit tag wins. Otherwise the tag under the caret is used, and
        failing that the last trailing tag of the selected row.
        """
        if tag and tag.strip():
            return normalize_tag(tag)
        if selection is None:
            return None
        row = document.get_row(selection.row_id)
        if row is None:
            return None
        tokens = find_trailing_tags(row.text)
        if not tokens:
            return None
        token = tag_at_offset(tokens, selection.caret_index) or tokens[-1]
        return normalize_tag(token.tag)

    def row_matches(self, row: OutlineRow, target: str) -> bool:
        row_tags = self.read_row_tags(row)
        return bool(row_tags) and matches(row_tags, target)

    def filter_by_tag(self, document: OutlineDocument, target: str) -> int:
        """
        Mark rows matching ``target`` (or a descendant) and activate the filter.

        Returns:
            Number of matching rows
        """
        settings = self.tag_settings
        matched = 0
        with document.transaction():
            for row in document.rows():
                if self.row_matches(row, target):
                    matched += 1
                    for name in settings.filter_attributes:
                        if row.get_attribute(name) != settings.filter_value:
                            row.set_attribute(name, settings.filter_value)
                else:
                    for name in settings.filter_attributes:
                        row.remove_attribute(name)
            document.filter = settings.filter_expression
        logger.info(f"Filtered by {target}: {matched} rows match")
        return matched

    def clear_filter(self, document: OutlineDocument) -> None:
        with document.transaction():
            for row in document.rows():
                for name in self.tag_settings.filter_attributes:
                    row.remove_attribute(name)
            document.filter = ""
        logger.info("Cleared tag filter")

    def filtered_rows(self, document: OutlineDocument) -> List[OutlineRow]:
        """Rows currently carrying the filter marker."""
        return [
            row for row in document.rows()
            if any(row.has_attribute(name) for name in self.tag_settings.filter_attributes)
        ]
