"""
Unit tests for editor commands and the TagEngine wiring.
"""

import pytest

from outline_tags.commands import (
    APPLY_TAGS,
    CLEAR_FILTER,
    FILTER_BY_TAG,
    REBUILD_SIDEBAR,
    CommandContext,
)
from outline_tags.config import TagSettings
from outline_tags.engine import TagEngine
from outline_tags.models.tags import Selection, SelectionKind


@pytest.fixture
def engine():
    return TagEngine(TagSettings())


@pytest.fixture
def outline(make_outline):
    return make_outline("Do something important #this #that/nested", "Other #this", "plain")


class TestCommands:

    def test_every_command_is_registered(self, engine):
        assert set(engine.commands.handlers) == {APPLY_TAGS, FILTER_BY_TAG, CLEAR_FILTER, REBUILD_SIDEBAR}

    def test_unknown_command(self, engine, outline):
        assert engine.run_command("outline-tags:nope", CommandContext(document=outline)) is False

    def test_commands_without_document_fail(self, engine):
        for name in (APPLY_TAGS, FILTER_BY_TAG, CLEAR_FILTER):
            assert engine.run_command(name, CommandContext()) is False

    def test_apply_tags(self, engine, outline):
        assert engine.run_command(APPLY_TAGS, CommandContext(document=outline)) is True
        assert engine.tag_service.index_all_tags(outline) == {"#this", "#that", "#that/nested"}

    def test_filter_by_tag_at_caret(self, engine, outline):
        engine.run_command(APPLY_TAGS, CommandContext(document=outline))
        selection = Selection("row-0", SelectionKind.CARET, char=24)

        assert engine.run_command(FILTER_BY_TAG, CommandContext(document=outline, selection=selection)) is True
        assert [r.id for r in engine.tag_service.filtered_rows(outline)] == ["row-0", "row-1"]

    def test_filter_by_last_trailing_tag(self, engine, outline):
        engine.run_command(APPLY_TAGS, CommandContext(document=outline))
        selection = Selection("row-0", SelectionKind.BLOCK)

        assert engine.run_command(FILTER_BY_TAG, CommandContext(document=outline, selection=selection)) is True
        assert [r.id for r in engine.tag_service.filtered_rows(outline)] == ["row-0"]

    def test_filter_by_explicit_tag(self, engine, outline):
        engine.run_command(APPLY_TAGS, CommandContext(document=outline))

        assert engine.run_command(FILTER_BY_TAG, CommandContext(document=outline, tag="that")) is True
        assert [r.id for r in engine.tag_service.filtered_rows(outline)] == ["row-0"]

    def test_filter_without_resolvable_tag(self, engine, outline):
        selection = Selection("row-2", SelectionKind.CARET, char=1)

        assert engine.run_command(FILTER_BY_TAG, CommandContext(document=outline, selection=selection)) is False
        assert outline.filter == ""

    def test_clear_filter(self, engine, outline):
        engine.run_command(APPLY_TAGS, CommandContext(document=outline))
        engine.run_command(FILTER_BY_TAG, CommandContext(document=outline, tag="#this"))

        assert engine.run_command(CLEAR_FILTER, CommandContext(document=outline)) is True
        assert engine.tag_service.filtered_rows(outline) == []

    def test_rebuild_sidebar(self, engine, outline, sidebar):
        engine.run_command(APPLY_TAGS, CommandContext(document=outline))
        engine.window_opened("w1", sidebar)

        assert engine.run_command(REBUILD_SIDEBAR, CommandContext(window_id="w1")) is False
        assert engine.run_command(REBUILD_SIDEBAR, CommandContext(document=outline, window_id="w1")) is True
        assert [i.text for i in sidebar.items] == ["Tags", "#that", "  nested", "#this"]
        assert engine.run_command(REBUILD_SIDEBAR, CommandContext(window_id="w1")) is True

    def test_rebuild_sidebar_unknown_window(self, engine, outline):
        assert engine.run_command(REBUILD_SIDEBAR, CommandContext(document=outline)) is False
        assert engine.run_command(REBUILD_SIDEBAR, CommandContext(document=outline, window_id="nope")) is False


class TestEngine:

    def test_leaving_a_row_applies_its_tags(self, engine, make_outline):
        outline = make_outline("first", "second")
        tracker = engine.selection_tracker(outline)
        row = outline.get_row("row-0")

        tracker.observe(Selection("row-0", SelectionKind.CARET, char=5))
        with outline.transaction():
            row.text = "first #typed"
        assert row.get_attribute("ot-tags") is None

        tracker.observe(Selection("row-1", SelectionKind.CARET, char=0))
        assert row.get_attribute("ot-tags") == "[\"#typed\"]"

    def test_leaving_a_deleted_row_is_harmless(self, engine, make_outline):
        outline = make_outline("first")
        tracker = engine.selection_tracker(outline)
        tracker.observe(Selection("ghost", SelectionKind.CARET, char=0))

        assert tracker.observe(None) == "ghost"

    def test_window_opened_with_document(self, engine, outline, sidebar):
        engine.run_command(APPLY_TAGS, CommandContext(document=outline))
        controller = engine.window_opened("w1", sidebar, outline)

        assert controller.document is outline
        assert len(sidebar.items) == 4

        engine.window_closed("w1")
        assert sidebar.items == []

    def test_shared_instance(self, monkeypatch):
        monkeypatch.setattr(TagEngine, "_instance", None)
        assert TagEngine.get_instance() is TagEngine.get_instance()
