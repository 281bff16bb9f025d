import os
import sys

import pytest

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

from outline_tags.config import TagSettings  # noqa: E402
from outline_tags.services.sidebar import SidebarHandle, SidebarHost  # noqa: E402
from outline_tags.services.tag_service import TagService  # noqa: E402
from outline_tags.storage.memory import InMemoryOutline  # noqa: E402


class RecordingHandle(SidebarHandle):
    def __init__(self, sidebar, item):
        self.sidebar = sidebar
        self.item = item
        self.disposed = False

    def dispose(self):
        self.disposed = True
        self.sidebar.live.remove(self)


class RecordingSidebar(SidebarHost):
    """Sidebar host that keeps live items in insertion order."""

    def __init__(self, reject_ordered=False, reject_all=False, reject_ids=()):
        self.live = []
        self.calls = []
        self.reject_ordered = reject_ordered
        self.reject_all = reject_all
        self.reject_ids = set(reject_ids)

    def add_item(self, item):
        self.calls.append(item)
        if self.reject_all or item.id in self.reject_ids:
            raise RuntimeError(f"sidebar rejected {item.id}")
        if self.reject_ordered and item.after_id is not None:
            raise RuntimeError("ordering not supported")
        handle = RecordingHandle(self, item)
        self.live.append(handle)
        return handle

    @property
    def items(self):
        return [h.item for h in self.live]

    def item(self, item_id):
        return next(h.item for h in self.live if h.item.id == item_id)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests independent of the developer's environment and .env file."""
    for key in list(os.environ):
        if key.startswith("OUTLINE_TAGS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OUTLINE_TAGS_BASE_DIR", str(tmp_path / "data"))


@pytest.fixture
def tag_settings():
    return TagSettings()


@pytest.fixture
def tag_service(tag_settings):
    return TagService(tag_settings)


@pytest.fixture
def make_outline():
    """Build an InMemoryOutline from row texts; rows get ids row-0, row-1, ..."""
    def factory(*texts):
        return InMemoryOutline([{"id": f"row-{i}", "text": text} for i, text in enumerate(texts)])
    return factory


@pytest.fixture
def sidebar():
    return RecordingSidebar()


@pytest.fixture
def make_sidebar():
    """RecordingSidebar factory for tests that need rejecting hosts."""
    return RecordingSidebar
