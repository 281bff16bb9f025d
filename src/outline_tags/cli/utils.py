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
CLI utilities for Outline Tags.
"""

from ..config import TagSettings
from ..services.tag_service import TagService
from ..storage.base import OutlineDocument
from ..storage.factory import create_outline


def get_outline(path: str | None = None) -> OutlineDocument:
    """
    Open the outline for CLI operations.

    Args:
        path: Outline file; defaults to OUTLINE_TAGS_OUTLINE_PATH

    Returns:
        The opened outline document
    """
    return create_outline(path)


def get_tag_service() -> TagService:
    from ..config import settings

    tag_settings: TagSettings = settings.tags
    return TagService(tag_settings)
