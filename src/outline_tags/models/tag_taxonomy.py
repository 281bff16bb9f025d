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
Hierarchical Tag Taxonomy

Canonical tag form and the path rules derived from it. Tags are
``#``-prefixed paths whose segments are separated by ``/``
(e.g. ``#project/web/frontend``).

Usage:
    from outline_tags.models.tag_taxonomy import normalize_tag, expand_ancestors

    tag = normalize_tag("project//web")        # "#project/web"
    chain = expand_ancestors(tag)              # ["#project", "#project/web"]
    matches(chain, "#project")                 # True
"""

import re
from typing import Final, Iterable, List, Optional


TAG_PREFIX: Final[str] = "#"
SEGMENT_SEPARATOR: Final[str] = "/"

_SLASH_RUN = re.compile(r"/{2,}")


def normalize_tag(raw_tag: str) -> str:
    """
    Canonicalize a raw tag token.

    Surrounding whitespace is trimmed, a missing ``#`` is prepended and every
    run of slashes collapses into one. Segment casing is preserved, so
    ``#Work`` and ``#work`` stay distinct tags.

    Args:
        raw_tag: Tag text as written by the user

    Returns:
        The normalized tag

    Examples:
        >>> normalize_tag("  #a//b ")
        '#a/b'
        >>> normalize_tag("todo")
        '#todo'
        >>> normalize_tag("#Work")
        '#Work'
    """
    tag = raw_tag.strip()
    if not tag.startswith(TAG_PREFIX):
        tag = TAG_PREFIX + tag
    return _SLASH_RUN.sub(SEGMENT_SEPARATOR, tag)


def tag_segments(tag: str) -> List[str]:
    """Split a normalized tag into its path segments (without the ``#``)."""
    return tag[len(TAG_PREFIX):].split(SEGMENT_SEPARATOR)


def segment_count(tag: str) -> int:
    return tag.count(SEGMENT_SEPARATOR) + 1


def expand_ancestors(tag: str) -> List[str]:
    """
    Expand a normalized tag into its ancestor chain, shallow to deep.

    The tag itself is always the last element.

    Examples:
        >>> expand_ancestors("#a/b/c")
        ['#a', '#a/b', '#a/b/c']
        >>> expand_ancestors("#solo")
        ['#solo']
    """
    parts = tag_segments(tag)
    return [
        TAG_PREFIX + SEGMENT_SEPARATOR.join(parts[:i])
        for i in range(1, len(parts) + 1)
    ]


def parent_tag(tag: str) -> Optional[str]:
    """
    Get the parent path of a tag, or None for a single-segment tag.

    Examples:
        >>> parent_tag("#a/b/c")
        '#a/b'
        >>> parent_tag("#a")
    """
    last_slash = tag.rfind(SEGMENT_SEPARATOR)
    if last_slash <= 0:
        return None
    return tag[:last_slash]


def short_name(tag: str) -> str:
    """Final path segment, e.g. ``frontend`` for ``#project/web/frontend``."""
    return tag.rsplit(SEGMENT_SEPARATOR, 1)[-1]


def derive_tag_set(raw_tags: Iterable[str]) -> List[str]:
    """
    Build the sorted, deduplicated tag set (tags plus all ancestors).

    Examples:
        >>> derive_tag_set(["#this", "#that/nested"])
        ['#that', '#that/nested', '#this']
    """
    derived = set()
    for raw_tag in raw_tags:
        derived.update(expand_ancestors(normalize_tag(raw_tag)))
    return sorted(derived)


def matches(tag_set: Iterable[str], target: str) -> bool:
    """
    Decide whether a row's tag set matches a filter target.

    A row matches when it carries the target itself or any descendant of it.
    A plain string prefix is not enough: ``#project`` does not match
    ``#projectx``.

    Args:
        tag_set: The row's derived tag set
        target: Normalized tag to filter by

    Returns:
        True if the target or a descendant is present, False otherwise
    """
    if not target:
        return False
    descendant_prefix = target + SEGMENT_SEPARATOR
    return any(tag == target or tag.startswith(descendant_prefix) for tag in tag_set)
