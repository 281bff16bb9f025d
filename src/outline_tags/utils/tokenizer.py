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
Trailing tag tokenizer.

Only the run of tags at the very end of a row counts as tags; ``#words``
inside a sentence are ordinary prose.
"""

import re
from typing import List, Optional

from ..models.tags import TagToken

# A tag preceded by start-of-text or whitespace and anchored at the end.
# Tag characters are ASCII word characters and hyphens; whitespace is Unicode.
TAG_CHARS = r"[A-Za-z0-9_-]"
TRAILING_TAG_PATTERN = re.compile(rf"(?:^|\s)(#{TAG_CHARS}+(?:/{TAG_CHARS}+)*)$")


def find_trailing_tags(text: str) -> List[TagToken]:
    """
    Extract the trailing run of tags from a row's text.

    Scans leftward from the end of the text (ignoring trailing whitespace),
    matching one tag at a time until the pattern no longer matches.

    Args:
        text: The row's full text

    Returns:
        Tokens in left-to-right order, with offsets into ``text``

    Examples:
        >>> [t.tag for t in find_trailing_tags("Do it #this #that/nested")]
        ['#this', '#that/nested']
        >>> find_trailing_tags("Review the #draft document")
        []
    """
    tokens: List[TagToken] = []
    tail = text.rstrip()
    while True:
        match = TRAILING_TAG_PATTERN.search(tail)
        if match is None:
            break
        start, end = match.span(1)
        tokens.append(TagToken(tag=match.group(1), start=start, end=end))
        tail = tail[:match.start()].rstrip()
    tokens.reverse()
    return tokens


def tag_at_offset(tokens: List[TagToken], index: Optional[int]) -> Optional[TagToken]:
    """
    Find the token under a caret position.

    A caret inside a token, at its end boundary or right after its last
    character selects it.
    """
    if index is None:
        return None
    for token in tokens:
        if token.start <= index < token.end or index == token.end:
            return token
    return None


def last_trailing_tag(text: str) -> Optional[TagToken]:
    tokens = find_trailing_tags(text)
    return tokens[-1] if tokens else None
