"""Provides :class:`NoteRepository`, the owner of the note collection."""

import asyncio
from datetime import datetime, timezone
from dataclasses import replace
import json
import logging
from typing import Callable, List, Optional
from quicknotes.models import Note, MalformedRecordError
from quicknotes.stores.base import Store, StoreError


logger = logging.getLogger(__name__)

NOTES_KEY = 'quicknotes_notes'
"""The store key under which the whole collection is kept."""


class PersistenceError(Exception):
    """Raised when the collection could not be written to the store."""
    def __init__(self, message: str, key: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.key = key
        self.cause = cause


class LoadError(Exception):
    """Raised when the collection could not be read from the store or could not be decoded."""
    def __init__(self, message: str, key: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.key = key
        self.cause = cause


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NoteRepository:
    """Holds the authoritative list of notes and keeps the store in sync with it.

    Notes are kept newest first. Every change rewrites the entire collection to the store as a json array.
    The in-memory list is always changed before the store is written, so the list reflects the order in which
    calls were made even if several writes are in flight.

    Observers registered with :meth:`subscribe` are called after every change, and after :meth:`load`.

    .. attribute:: notes
       :type: List[quicknotes.models.Note]

    .. attribute:: query
       :type: str

       The current search string used by :meth:`filtered`. Not persisted.
    """
    def __init__(self, store: Store, key: str = NOTES_KEY, clock: Callable[[], datetime] = None):
        self.store = store
        self.key = key
        self.clock = clock or _utcnow
        self.notes: List[Note] = []
        self.query = ''
        self._listeners: List[Callable[[], None]] = []
        self._write_lock: Optional[asyncio.Lock] = None
        self._write_lock_loop: Optional[asyncio.AbstractEventLoop] = None

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Registers a callback to be invoked with no arguments after each state change.

        Returns a function that unregisters the callback; calling it more than once is harmless.
        """
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    def _lock(self) -> asyncio.Lock:
        # An asyncio.Lock is bound to the loop it is first contended in.
        loop = asyncio.get_running_loop()
        if self._write_lock is None or self._write_lock_loop is not loop:
            self._write_lock = asyncio.Lock()
            self._write_lock_loop = loop
        return self._write_lock

    def _decode(self, raw: str) -> List[Note]:
        try:
            records = json.loads(raw)
        except ValueError as e:
            raise LoadError('Stored notes are not valid json', self.key, e) from e
        if not isinstance(records, list):
            raise LoadError(f'Stored notes are not a json array: {type(records).__name__}', self.key)
        notes = []
        seen = set()
        for i, record in enumerate(records):
            try:
                note = Note.from_json(record)
            except MalformedRecordError as e:
                raise LoadError(f'Stored note at index {i} is malformed: {e.message}', self.key, e) from e
            if note.id in seen:
                raise LoadError(f'Stored notes contain duplicate id: {note.id}', self.key)
            seen.add(note.id)
            notes.append(note)
        return notes

    async def load(self) -> None:
        """Replaces :attr:`notes` with the collection from the store.

        If nothing has been stored yet, the collection is empty.

        If the stored data cannot be read or any part of it cannot be decoded, nothing is loaded: the collection
        is left empty and :exc:`LoadError` is raised. Observers are notified either way.
        """
        notes = []
        try:
            try:
                raw = await self.store.get(self.key)
            except StoreError as e:
                raise LoadError(e.message, self.key, e) from e
            if raw is not None:
                notes = self._decode(raw)
            logger.debug('Loaded %d notes from key %s', len(notes), self.key)
        except LoadError as e:
            logger.error('Failed to load notes, starting empty: %s', e.message)
            raise
        finally:
            self.notes = notes
            self._notify()

    async def save(self) -> None:
        """Writes the entire collection to the store.

        Raises :exc:`PersistenceError` if the store rejects the write or fails.
        """
        raw = json.dumps([note.as_json() for note in self.notes])
        count = len(self.notes)
        async with self._lock():
            try:
                ok = await self.store.set(self.key, raw)
            except StoreError as e:
                raise PersistenceError(f'Cannot save notes: {e.message}', self.key, e) from e
        if not ok:
            raise PersistenceError('Store rejected the write', self.key)
        logger.debug('Saved %d notes to key %s', count, self.key)

    async def _save_and_notify(self) -> None:
        try:
            await self.save()
        except PersistenceError:
            try:
                self._notify()
            except Exception:
                logger.exception('An observer failed after a failed save')
            raise
        self._notify()

    def set_query(self, query: str) -> None:
        """Changes the search string used by :meth:`filtered` and notifies observers."""
        self.query = query
        self._notify()

    def filtered(self) -> List[Note]:
        """Returns the notes matching :attr:`query`, in collection order. All notes if the query is empty."""
        if not self.query:
            return list(self.notes)
        return [note for note in self.notes if note.matches(self.query)]

    def index_of(self, note_id: str) -> Optional[int]:
        """Returns the position of the note with the given id in :attr:`notes`, or None."""
        for i, note in enumerate(self.notes):
            if note.id == note_id:
                return i
        return None

    def get(self, note_id: str) -> Optional[Note]:
        index = self.index_of(note_id)
        return None if index is None else self.notes[index]

    async def add_or_update(self, note: Note) -> Note:
        """Stores the note, stamping :attr:`Note.updated_at` with the current time.

        A note with a new id is placed first. A note whose id is already present replaces the old version
        at the same position.

        The title is stored as given; normalizing blank titles is up to the caller.

        Raises :exc:`PersistenceError` if saving fails. The in-memory change is kept in that case,
        and observers are still notified. An observer that fails at that point is logged, and the
        :exc:`PersistenceError` is still raised. Returns the note as stored.
        """
        note = replace(note, updated_at=self.clock())
        index = self.index_of(note.id)
        if index is None:
            self.notes.insert(0, note)
        else:
            self.notes[index] = note
        await self._save_and_notify()
        return note

    async def delete_note(self, note_id: str) -> bool:
        """Removes the note with the given id, if any, then saves.

        Returns True if a note was removed. Saving and notification happen even if nothing matched.
        Raises :exc:`PersistenceError` like :meth:`add_or_update`.
        """
        remaining = [note for note in self.notes if note.id != note_id]
        removed = len(remaining) < len(self.notes)
        self.notes = remaining
        await self._save_and_notify()
        return removed
