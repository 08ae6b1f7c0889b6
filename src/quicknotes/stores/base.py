"""Defines the API for persisting strings by key.

The most important class is :class:`Store`.
"""

from typing import Optional


class StoreError(Exception):
    """Raised when a :class:`Store` cannot read or write its underlying storage."""
    def __init__(self, message: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class Store:
    """Base class for stores, which durably map string keys to string values.

    Stores know nothing about notes; :class:`quicknotes.repository.NoteRepository` keeps its whole
    collection under a single key.
    """
    async def get(self, key: str) -> Optional[str]:
        """Returns the value most recently stored for the key, or None if it was never set.

        May raise :exc:`StoreError`.
        """
        raise NotImplementedError()

    async def set(self, key: str, value: str) -> bool:
        """Stores the value under the key, replacing any previous value.

        Returns False if the store refused the write. May raise :exc:`StoreError`.
        """
        raise NotImplementedError()

    def close(self) -> None:
        """Release any resources associated with the store."""
        pass
