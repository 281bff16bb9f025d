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
Stable color slot hashing.

Colors are never persisted, so the slot must be reproducible from the tag
text alone: across restarts, across Python versions and across other
implementations of the same engine. Python's built-in ``hash()`` is
randomized per process and must not be used here.
"""

from typing import Final

DEFAULT_PALETTE_SIZE: Final[int] = 8

DJB2_SEED: Final[int] = 5381

_UINT32 = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    value &= _UINT32
    return value - 0x100000000 if value & _INT32_SIGN else value


def djb2_hash(text: str) -> int:
    """
    djb2 string hash over UTF-16 code units with a signed 32-bit accumulator.

    Examples:
        >>> djb2_hash("")
        5381
        >>> djb2_hash("a")
        177670
    """
    value = DJB2_SEED
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        value = _to_int32((value << 5) + value + code_unit)
    return value


def color_slot(tag: str, palette_size: int = DEFAULT_PALETTE_SIZE) -> int:
    """
    Map a normalized tag to a color slot in ``[0, palette_size)``.

    Args:
        tag: Normalized tag text
        palette_size: Number of available color slots

    Returns:
        The slot index

    Raises:
        ValueError: If palette_size is not positive
    """
    if palette_size <= 0:
        raise ValueError(f"palette_size must be positive, got {palette_size}")
    return abs(djb2_hash(tag)) % palette_size
