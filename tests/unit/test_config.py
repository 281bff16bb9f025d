"""
Unit tests for pydantic-settings configuration.
"""

import pytest
from pydantic import ValidationError

from outline_tags import config
from outline_tags.config import PathSettings, Settings, TagSettings


class TestTagSettings:

    def test_defaults(self):
        tags = TagSettings()

        assert tags.palette_size == 8
        assert tags.tags_attributes == ["ot-tags", "data-ot-tags"]
        assert tags.filter_attributes == ["ot-filter", "data-ot-filter"]
        assert tags.filter_expression == "//@ot-filter"
        assert tags.color_markers[0] == "ot-color-0"
        assert len(tags.color_markers) == 8

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("OUTLINE_TAGS_PALETTE_SIZE", "12")
        monkeypatch.setenv("OUTLINE_TAGS_TAGS_ATTRIBUTE", "my-tags")

        tags = TagSettings()

        assert tags.palette_size == 12
        assert tags.legacy_tags_attribute == "data-my-tags"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("OUTLINE_TAGS_PALETTE_SIZE=4\n", encoding="utf-8")
        assert TagSettings().palette_size == 4

    def test_invalid_palette_size(self):
        with pytest.raises(ValidationError):
            TagSettings(palette_size=0)

    def test_blank_attribute_rejected(self):
        with pytest.raises(ValidationError):
            TagSettings(tags_attribute="  ")


class TestSettings:

    def test_outline_path_defaults_into_base_dir(self, tmp_path):
        paths = PathSettings(base_dir=str(tmp_path))
        assert paths.outline_path == str(tmp_path / "outline.json")

    def test_colliding_attributes_rejected(self):
        with pytest.raises(ValidationError):
            Settings(tags=TagSettings(tags_attribute="same", filter_attribute="same"))

    def test_module_constants_are_lazy(self, monkeypatch):
        monkeypatch.setenv("OUTLINE_TAGS_PALETTE_SIZE", "5")
        monkeypatch.setenv("OUTLINE_TAGS_LOG_LEVEL", "debug")
        config.settings.reset()
        try:
            assert config.PALETTE_SIZE == 5
            assert config.LOG_LEVEL == "DEBUG"
        finally:
            config.settings.reset()

    def test_unknown_constant(self):
        with pytest.raises(AttributeError):
            config.NOT_A_SETTING
