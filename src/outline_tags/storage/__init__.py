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
Outline hosts for the tag engine.

Provides:
- OutlineDocument / OutlineRow: ABCs defining the host interface
- InMemoryOutline: list-backed document with a mutation log
- JsonOutline: InMemoryOutline persisted to a JSON file
"""

from .base import OutlineDocument, OutlineRow
from .factory import create_outline
from .json_file import JsonOutline
from .memory import InMemoryOutline, InMemoryRow

__all__ = [
    "InMemoryOutline",
    "InMemoryRow",
    "JsonOutline",
    "OutlineDocument",
    "OutlineRow",
    "create_outline",
]
