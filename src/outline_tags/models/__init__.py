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

from .tags import Selection, SelectionKind, SidebarItem, TagHierarchyNode, TagToken
from .tag_taxonomy import derive_tag_set, expand_ancestors, matches, normalize_tag, parent_tag
from .hierarchy import build_hierarchy, walk_hierarchy

__all__ = [
    "Selection",
    "SelectionKind",
    "SidebarItem",
    "TagHierarchyNode",
    "TagToken",
    "build_hierarchy",
    "derive_tag_set",
    "expand_ancestors",
    "matches",
    "normalize_tag",
    "parent_tag",
    "walk_hierarchy",
]
