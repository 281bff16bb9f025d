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
Outline factory.

Creates the outline document for a file path based on its extension.
"""

import logging
from pathlib import Path
from typing import Optional

from .base import OutlineDocument
from .json_file import JsonOutline

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".txt", ".md", ".taskpaper")


def create_outline(path: Optional[str] = None) -> OutlineDocument:
    """
    Open the outline at ``path``.

    Args:
        path: Outline file; defaults to the configured OUTLINE_PATH

    Returns:
        A JsonOutline. Plain text sources are imported into a sibling
        ``.json`` file.

    Raises:
        ValueError: If the file type is not supported
    """
    if path is None:
        from ..config import OUTLINE_PATH
        path = OUTLINE_PATH

    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        logger.info(f"Using JSON outline {path}")
        return JsonOutline.load(path)
    if suffix in TEXT_SUFFIXES:
        json_path = Path(path).with_suffix(".json")
        if json_path.exists():
            logger.info(f"Using previously imported outline {json_path}")
            return JsonOutline.load(str(json_path))
        logger.info(f"Importing text outline {path}")
        return JsonOutline.import_text(path, str(json_path))

    raise ValueError(f"Unsupported outline file: {path}. Use a .json or {'/'.join(TEXT_SUFFIXES)} file.")
