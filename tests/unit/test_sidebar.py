"""
Unit tests for the tags sidebar: display items, controller and window registry.
"""

import pytest

from outline_tags.models.hierarchy import build_hierarchy
from outline_tags.services.sidebar import (
    GROUP_ITEM_ID,
    SidebarController,
    WindowRegistry,
    display_name,
    sanitize_id,
    sidebar_items,
)



class TestDisplayItems:

    def test_sanitize_id(self):
        assert sanitize_id("#project") == "outline-tags:tag:project"
        assert sanitize_id("#project/web") == "outline-tags:tag:project--web"
        assert sanitize_id("#café/a.b") == "outline-tags:tag:caf---a-b"

    def test_display_name(self):
        assert display_name("#project/web/frontend", 0) == "#project/web/frontend"
        assert display_name("#project/web", 1) == "  web"
        assert display_name("#project/web/frontend", 2) == "    frontend"

    def test_items_are_depth_first_and_chained(self):
        roots = build_hierarchy({"#a", "#a/b", "#a/b/c", "#x"})
        items = sidebar_items(roots, lambda tag: (lambda: tag))

        assert [i.tag for i in items] == ["#a", "#a/b", "#a/b/c", "#x"]
        assert [i.text for i in items] == ["#a", "  b", "    c", "#x"]
        assert [i.level for i in items] == [0, 1, 2, 0]
        assert items[0].after_id == GROUP_ITEM_ID
        for previous, item in zip(items, items[1:]):
            assert item.after_id == previous.id
        assert items[1].action() == "#a/b"


@pytest.fixture
def outline(tag_service, make_outline):
    document = make_outline("Plan #work/q3", "Chores #home", "Notes")
    tag_service.apply_tags(document)
    return document


@pytest.fixture
def controller(tag_service, sidebar):
    controller = SidebarController("w1", sidebar, tag_service)
    controller.setup()
    return controller


class TestSidebarController:

    def test_setup_adds_group(self, controller, sidebar):
        assert [i.id for i in sidebar.items] == [GROUP_ITEM_ID]
        assert sidebar.items[0].is_group

    def test_attach_populates_immediately(self, controller, sidebar, outline):
        controller.attach(outline)

        assert [i.text for i in sidebar.items] == ["Tags", "#home", "#work", "  q3"]

    def test_clicking_a_node_filters(self, controller, sidebar, outline, tag_service):
        controller.attach(outline)
        sidebar.item("outline-tags:tag:work").action()

        assert [r.id for r in tag_service.filtered_rows(outline)] == ["row-0"]
        assert outline.filter == "//@ot-filter"

    def test_clicking_group_clears_filter(self, controller, sidebar, outline, tag_service):
        controller.attach(outline)
        sidebar.item("outline-tags:tag:home").action()
        sidebar.item(GROUP_ITEM_ID).action()

        assert tag_service.filtered_rows(outline) == []
        assert outline.filter == ""

    def test_filtering_does_not_rebuild(self, controller, sidebar, outline):
        controller.attach(outline)
        calls = len(sidebar.calls)
        sidebar.item("outline-tags:tag:work").action()

        assert len(sidebar.calls) == calls

    def test_tag_changes_rebuild(self, controller, sidebar, outline, tag_service):
        controller.attach(outline)
        row = outline.get_row("row-2")
        with outline.transaction():
            row.text = "Notes #home/garden"
        tag_service.apply_tags_to_row_id(outline, "row-2")

        assert [i.text for i in sidebar.items] == ["Tags", "#home", "  garden", "#work", "  q3"]

    def test_detach_disposes_items(self, controller, sidebar, outline):
        controller.attach(outline)
        controller.attach(None)

        assert [i.id for i in sidebar.items] == [GROUP_ITEM_ID]
        assert controller.rebuild() is False

    def test_rebuild_replaces_items(self, controller, sidebar, outline):
        controller.attach(outline)
        controller.rebuild()
        controller.rebuild()

        assert len(sidebar.items) == 4

    def test_falls_back_to_unordered_items(self, tag_service, outline, make_sidebar):
        sidebar = make_sidebar(reject_ordered=True)
        controller = SidebarController("w1", sidebar, tag_service)
        controller.setup()
        controller.attach(outline)

        assert len(sidebar.items) == 4
        assert all(i.after_id is None for i in sidebar.items)

    def test_rejected_items_are_skipped(self, tag_service, outline, make_sidebar):
        sidebar = make_sidebar(reject_ids={GROUP_ITEM_ID, "outline-tags:tag:home"})
        controller = SidebarController("w1", sidebar, tag_service)
        controller.setup()
        controller.attach(outline)

        assert [i.id for i in sidebar.items] == ["outline-tags:tag:work", "outline-tags:tag:work--q3"]

    def test_sidebar_failure_does_not_block_tagging(self, tag_service, outline, make_sidebar):
        sidebar = make_sidebar(reject_all=True)
        controller = SidebarController("w1", sidebar, tag_service)
        controller.setup()
        controller.attach(outline)

        with outline.transaction():
            outline.get_row("row-2").text = "Notes #new"
        assert tag_service.apply_tags_to_row_id(outline, "row-2") is True
        assert sidebar.items == []


class TestWindowRegistry:

    def test_window_opened_is_idempotent(self, tag_service, sidebar):
        registry = WindowRegistry(tag_service)
        first = registry.window_opened("w1", sidebar)
        second = registry.window_opened("w1", sidebar)

        assert first is second
        assert len(registry) == 1
        assert [i.id for i in sidebar.items] == [GROUP_ITEM_ID]

    def test_windows_are_independent(self, tag_service, outline, make_sidebar):
        registry = WindowRegistry(tag_service)
        left, right = make_sidebar(), make_sidebar()
        registry.window_opened("left", left)
        registry.window_opened("right", right)

        assert registry.document_changed("left", outline) is True

        assert len(left.items) == 4
        assert len(right.items) == 1

    def test_window_closed_releases_everything(self, tag_service, sidebar, outline):
        registry = WindowRegistry(tag_service)
        registry.window_opened("w1", sidebar)
        registry.document_changed("w1", outline)
        registry.window_closed("w1")

        assert "w1" not in registry
        assert sidebar.items == []
        assert registry.document_changed("w1", outline) is False

        with outline.transaction():
            outline.get_row("row-2").text = "Notes #late"
        tag_service.apply_tags_to_row_id(outline, "row-2")
        assert sidebar.items == []
