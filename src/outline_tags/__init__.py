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

"""Outline Tags: hierarchical trailing-tag engine for outline documents."""

__version__ = "0.3.0"

from .models import TagHierarchyNode, TagToken, build_hierarchy, expand_ancestors, matches, normalize_tag  # noqa: E402
from .services import TagService  # noqa: E402
from .engine import TagEngine  # noqa: E402
from .storage import InMemoryOutline, JsonOutline, OutlineDocument, OutlineRow  # noqa: E402
from .utils import color_slot, find_trailing_tags  # noqa: E402

__all__ = [
    "InMemoryOutline",
    "JsonOutline",
    "OutlineDocument",
    "OutlineRow",
    "TagHierarchyNode",
    "TagEngine",
    "TagService",
    "TagToken",
    "build_hierarchy",
    "color_slot",
    "expand_ancestors",
    "find_trailing_tags",
    "matches",
    "normalize_tag",
]
