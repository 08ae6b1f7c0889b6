"""Provides the :class:`MemoryStore` class."""

from typing import Dict, Optional
from quicknotes.stores.base import Store


class MemoryStore(Store):
    """Keeps values in a dict. Nothing survives the process.

    .. attribute:: values
       :type: Dict[str, str]

    .. attribute:: read_only
       :type: bool

       If True, :meth:`set` rejects every write by returning False.
    """
    def __init__(self, values: Dict[str, str] = None, read_only: bool = False):
        self.values = values if values is not None else {}
        self.read_only = read_only

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> bool:
        if self.read_only:
            return False
        self.values[key] = value
        return True
