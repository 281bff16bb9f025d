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
Outline Tags Configuration using Pydantic Settings

All configuration is type-safe, validated, and loaded from environment variables
(prefix ``OUTLINE_TAGS_``) or a local ``.env`` file.
"""

import os
import logging
from typing import Optional, List, Literal

from platformdirs import user_data_dir
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# =============================================================================
# Path Utilities
# =============================================================================

def validate_and_create_path(path: str) -> str:
    """Validate and create a directory path, ensuring it's a directory."""
    try:
        abs_path = os.path.abspath(os.path.expanduser(path))
        logger.debug(f"Validating path: {abs_path}")

        os.makedirs(abs_path, exist_ok=True)

        if not os.path.isdir(abs_path):
            raise PermissionError(f"Path is not a directory: {abs_path}")

        return abs_path
    except Exception as e:
        logger.error(f"Error validating path {path}: {e}")
        raise


def get_default_base_directory() -> str:
    """Get platform-specific default data directory."""
    return user_data_dir("outline-tags", appauthor=False)


# =============================================================================
# Settings Models
# =============================================================================

class TagSettings(BaseSettings):
    """Attribute keys, marker names and palette used by the tag engine."""

    model_config = SettingsConfigDict(
        env_prefix='OUTLINE_TAGS_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    palette_size: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Number of color slots tags are hashed into"
    )

    tags_attribute: str = Field(
        default='ot-tags',
        description="Row attribute holding the JSON encoded derived tag set"
    )

    filter_attribute: str = Field(
        default='ot-filter',
        description="Row attribute marking rows that match the active tag filter"
    )

    legacy_prefix: str = Field(
        default='data-',
        description="Prefix of the legacy attribute names that are dual-written"
    )

    filter_value: str = Field(default='1')

    tag_marker: str = Field(
        default='ot-tag',
        description="Text marker attached over every trailing tag"
    )

    color_marker_prefix: str = Field(
        default='ot-color-',
        description="Prefix of the per-tag color slot marker"
    )

    @field_validator('tags_attribute', 'filter_attribute', 'tag_marker', 'color_marker_prefix')
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Attribute and marker names must be usable keys."""
        v = v.strip()
        if not v:
            raise ValueError("attribute and marker names must not be empty")
        return v

    @property
    def legacy_tags_attribute(self) -> str:
        return f"{self.legacy_prefix}{self.tags_attribute}"

    @property
    def legacy_filter_attribute(self) -> str:
        return f"{self.legacy_prefix}{self.filter_attribute}"

    @property
    def tags_attributes(self) -> List[str]:
        """Current key first, legacy key second (read precedence order)."""
        return [self.tags_attribute, self.legacy_tags_attribute]

    @property
    def filter_attributes(self) -> List[str]:
        return [self.filter_attribute, self.legacy_filter_attribute]

    @property
    def filter_expression(self) -> str:
        """Host filter query selecting rows that carry the filter attribute."""
        return f"//@{self.filter_attribute}"

    def color_marker(self, slot: int) -> str:
        return f"{self.color_marker_prefix}{slot}"

    @property
    def color_markers(self) -> List[str]:
        return [self.color_marker(slot) for slot in range(self.palette_size)]


class PathSettings(BaseSettings):
    """File system paths configuration."""

    model_config = SettingsConfigDict(
        env_prefix='OUTLINE_TAGS_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    base_dir: str = Field(
        default_factory=get_default_base_directory,
        description="Base directory for outline-tags data"
    )

    outline_path: Optional[str] = Field(
        default=None,
        description="Outline file opened by the MCP server and the CLI"
    )

    @model_validator(mode='after')
    def default_outline_path(self) -> 'PathSettings':
        """Place the default outline inside the base directory."""
        if not self.outline_path:
            self.outline_path = os.path.join(self.base_dir, 'outline.json')
        return self


class ServerSettings(BaseSettings):
    """MCP server identification and transport."""

    model_config = SettingsConfigDict(
        env_prefix='OUTLINE_TAGS_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    name: str = Field(default="outline-tags", description="Server name")

    transport: Literal['stdio', 'streamable-http'] = Field(default='stdio')

    host: str = Field(default='127.0.0.1')

    port: int = Field(default=8000, ge=1, le=65535)

    @property
    def version(self) -> str:
        """Get version from package."""
        try:
            from . import __version__
            return __version__
        except ImportError:
            return "unknown"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix='OUTLINE_TAGS_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    log_level: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR'] = Field(default='INFO')

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


# =============================================================================
# Main Settings Class
# =============================================================================

class Settings(BaseSettings):
    """
    Main outline-tags settings.

    Combines all configuration sections into a single, validated settings object.
    Automatically loads from .env file and environment variables.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
        validate_default=True
    )

    tags: TagSettings = Field(default_factory=TagSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    log: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode='after')
    def validate_attribute_names(self) -> 'Settings':
        """Tag-set and filter attributes must not collide."""
        if self.tags.tags_attribute == self.tags.filter_attribute:
            error_msg = f"Tag and filter attributes must differ (both '{self.tags.tags_attribute}')"
            logger.error(error_msg)
            raise ValueError(error_msg)
        return self

    def log_configuration(self):
        """Log current configuration."""
        logger.info("=" * 80)
        logger.info("Outline Tags Configuration")
        logger.info("=" * 80)
        logger.info(f"Server: {self.server.name} v{self.server.version} ({self.server.transport})")
        logger.info(f"Outline Path: {self.paths.outline_path}")
        logger.info(f"Tag Attributes: {', '.join(self.tags.tags_attributes)}")
        logger.info(f"Filter Attributes: {', '.join(self.tags.filter_attributes)}")
        logger.info(f"Palette Size: {self.tags.palette_size}")
        logger.info("=" * 80)


# =============================================================================
# Global Settings Instance
# =============================================================================

class _SettingsProxy:
    """
    Lazy settings proxy that defers Settings instantiation until first access.

    Environment variables are read at runtime, not import time.
    """
    _instance: Optional[Settings] = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = Settings()
            self._instance.log_configuration()
        return getattr(self._instance, name)

    def reset(self) -> None:
        """Drop the cached instance so the next access re-reads the environment."""
        self._instance = None


settings = _SettingsProxy()


def __getattr__(name: str):
    """
    Module-level __getattr__ providing constant-style access to settings values.
    """
    mapping = {
        'PALETTE_SIZE': lambda: settings.tags.palette_size,
        'OUTLINE_PATH': lambda: settings.paths.outline_path,
        'SERVER_NAME': lambda: settings.server.name,
        'TRANSPORT_MODE': lambda: settings.server.transport,
        'SERVER_HOST': lambda: settings.server.host,
        'SERVER_PORT': lambda: settings.server.port,
        'LOG_LEVEL': lambda: settings.log.log_level,
    }
    if name in mapping:
        return mapping[name]()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
