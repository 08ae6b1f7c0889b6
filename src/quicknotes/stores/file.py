"""Provides the :class:`FileStore` class."""

import asyncio
import json
import logging
import os
import os.path
import threading
from tempfile import mkstemp
from typing import Dict, Optional
from quicknotes.stores.base import Store, StoreError


logger = logging.getLogger(__name__)


class FileStore(Store):
    """Keeps all keys in a single json file containing one object.

    File access runs in a worker thread. Every :meth:`set` reads and rewrites the whole file while holding a lock,
    so concurrent writes cannot lose each other's keys. The new contents are written to a temporary file in the
    same folder, which then replaces the old file, so an interrupted write leaves the previous contents intact.

    .. attribute:: path
       :type: str
    """
    def __init__(self, path: str):
        self.path = path
        self._update_lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as file:
                values = json.load(file)
        except (OSError, ValueError) as e:
            raise StoreError(f'Cannot read store file: {self.path}', e) from e
        if not isinstance(values, dict):
            raise StoreError(f'Store file does not contain a json object: {self.path}')
        return values

    def _write(self, values: Dict[str, str]) -> None:
        parent = os.path.dirname(self.path) or '.'
        try:
            os.makedirs(parent, exist_ok=True)
            fd, tmp = mkstemp(dir=parent, prefix='.quicknotes-', suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as file:
                    json.dump(values, file)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.remove(tmp)
                raise
        except OSError as e:
            raise StoreError(f'Cannot write store file: {self.path}', e) from e

    def _update(self, key: str, value: str) -> None:
        with self._update_lock:
            values = self._read()
            values[key] = value
            self._write(values)

    def _lookup(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        if value is not None and not isinstance(value, str):
            raise StoreError(f'Value for key [{key}] is not a string in {self.path}')
        return value

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._lookup, key)

    async def set(self, key: str, value: str) -> bool:
        await asyncio.to_thread(self._update, key, value)
        logger.debug('Wrote %d characters for key %s to %s', len(value), key, self.path)
        return True
