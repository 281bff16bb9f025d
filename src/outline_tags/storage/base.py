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
Host document interface.

The tag engine never owns rows. It reads row text and attributes and writes
attributes and text markers through these interfaces, always inside a
document transaction.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Callable, Iterator


class OutlineRow(ABC):
    """A single row of a host outline document."""

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable row identifier."""
        pass

    @property
    @abstractmethod
    def text(self) -> str:
        """The row's full plain text."""
        pass

    @abstractmethod
    def get_attribute(self, name: str) -> str | None:
        """Read a row attribute as a string, or None when absent."""
        pass

    @abstractmethod
    def set_attribute(self, name: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_attribute(self, name: str) -> None:
        """Remove a row attribute. Removing a missing attribute is a no-op."""
        pass

    @abstractmethod
    def add_text_marker(self, name: str, start: int, end: int) -> None:
        """Attach a named marker over the text range ``[start, end)``."""
        pass

    @abstractmethod
    def remove_text_marker(self, name: str) -> None:
        """Remove every span of the named marker from the row's text."""
        pass

    def has_attribute(self, name: str) -> bool:
        return self.get_attribute(name) is not None


class OutlineDocument(ABC):
    """A host outline: ordered rows, a transaction boundary and a filter."""

    @abstractmethod
    def rows(self) -> Iterator[OutlineRow]:
        """Iterate all rows in document traversal order."""
        pass

    @abstractmethod
    def get_row(self, row_id: str) -> OutlineRow | None:
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """
        Scoped write access to the document.

        The transaction is committed and released on exit, also when the body
        raises. Nested transactions join the outermost one.
        """
        pass

    @property
    @abstractmethod
    def filter(self) -> str:
        """Active filter expression ("" when unfiltered)."""
        pass

    @filter.setter
    @abstractmethod
    def filter(self, expression: str) -> None:
        pass

    @abstractmethod
    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """
        Register a content-change listener.

        Listeners fire after a transaction that changed the document has been
        committed.

        Returns:
            A callable that unregisters the listener
        """
        pass
