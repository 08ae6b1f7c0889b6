"""Provides the main entry point for using the library, :class:`QuickNotes`"""

from __future__ import annotations
from dataclasses import replace
from glob import glob
import logging
import os.path
from typing import Dict, List, Optional
from mako.template import Template
from quicknotes.conf import QuickNotesConf
from quicknotes.models import Note, TemplateDirectives
from quicknotes.repository import NoteRepository


logger = logging.getLogger(__name__)

UNTITLED = 'Untitled'


class Error(Exception):
    pass


def normalize_title(title: str) -> str:
    """Strips surrounding whitespace, and substitutes "Untitled" if nothing is left."""
    title = (title or '').strip()
    return title if title else UNTITLED


class QuickNotes:
    """Main entry point for working programmatically with your notes.

    Generally, you should get an instance using the :meth:`QuickNotes.for_user` method, then ``await``
    :meth:`load` before doing anything else. Call :meth:`close` when you're done with it, or else use it as
    a context manager.

    The methods here behave like the note editor: titles are normalized and colors defaulted before notes are
    handed to :attr:`repo`. The repository itself, an instance of
    :class:`quicknotes.repository.NoteRepository`, accepts notes as given.

    .. attribute:: conf
       :type: quicknotes.conf.QuickNotesConf

    .. attribute:: store
       :type: quicknotes.stores.base.Store

    .. attribute:: repo
       :type: quicknotes.repository.NoteRepository

    Here's an example of how to use this class. This would recolor every note mentioning "urgent".

    .. code-block:: python

       import asyncio
       from quicknotes.api import QuickNotes

       async def recolor():
           with QuickNotes.for_user() as qn:
               await qn.load()
               for note in qn.search('urgent'):
                   await qn.edit(note.id, color_value=0xFFFFF9C4)

       asyncio.run(recolor())
    """

    @staticmethod
    def for_user() -> QuickNotes:
        """Creates an instance using the user's ``~/.quicknotes.conf.py`` file, or the defaults."""
        return QuickNotesConf.for_user().instantiate()

    def __init__(self, conf: QuickNotesConf):
        self.conf = conf
        self.store = conf.store_conf.instantiate()
        self.repo = NoteRepository(self.store, key=conf.notes_key)

    async def load(self) -> None:
        """Loads the notes from the store. See :meth:`quicknotes.repository.NoteRepository.load`."""
        await self.repo.load()

    async def new(self, title: str = '', content: str = '', color_value: int = None) -> Note:
        """Creates and saves a new note, returning it.

        May raise :exc:`quicknotes.repository.PersistenceError`; the note is kept in memory regardless.
        """
        if color_value is None:
            color_value = self.conf.default_color
        note = Note.create(normalize_title(title), content, color_value)
        note = await self.repo.add_or_update(note)
        logger.info('Created note %s', note.id)
        return note

    async def edit(self, note_id: str, title: Optional[str] = None, content: Optional[str] = None,
                   color_value: Optional[int] = None) -> Note:
        """Changes the given fields of an existing note and saves it.

        Fields left as None are unchanged. Raises :exc:`Error` if there is no note with that id.
        """
        note = self.repo.get(note_id)
        if not note:
            raise Error(f'No note with id: {note_id}')
        changes = {}
        if title is not None:
            changes['title'] = title
        if content is not None:
            changes['content'] = content
        if color_value is not None:
            changes['color_value'] = color_value
        note = replace(note, **changes)
        note.title = normalize_title(note.title)
        return await self.repo.add_or_update(note)

    async def delete(self, note_id: str) -> bool:
        """Deletes the note if it exists. Returns True if it did."""
        return await self.repo.delete_note(note_id)

    def find(self, id_or_prefix: str) -> Note:
        """Returns the note with the given id, or else the only note whose id starts with the given string.

        Raises :exc:`Error` if there is no such note, or if the prefix matches more than one.
        """
        note = self.repo.get(id_or_prefix)
        if note:
            return note
        matches = [n for n in self.repo.notes if n.id.startswith(id_or_prefix)] if id_or_prefix else []
        if not matches:
            raise Error(f'No note with id: {id_or_prefix}')
        if len(matches) > 1:
            raise Error(f'Ambiguous id prefix [{id_or_prefix}] matches: {", ".join(n.id for n in matches)}')
        return matches[0]

    def search(self, query: str) -> List[Note]:
        """Sets the repository's query and returns the matching notes."""
        self.repo.set_query(query)
        return self.repo.filtered()

    def templates_by_name(self) -> Dict[str, str]:
        """Returns paths of note templates that are known based on the config.

        The name is the part of the filename before any `.` character. If multiple templates
        have the same name, the one whose path is lexicographically first will appear in the dict.
        """
        paths = [p for g in self.conf.template_globs for p in glob(g, recursive=True) if os.path.isfile(p)]
        paths.sort(reverse=True)
        return {os.path.split(p)[1].split('.')[0].lower(): p for p in paths}

    def template_for_name(self, name: str) -> Optional[str]:
        """Returns the path to the template for the given name, if one is found.

        If treating the name as a relative or absolute path leads to a file, that file is used.
        Otherwise, the name is looked up from :meth:`QuickNotes.templates_by_name`, case-insensitively.
        Returns None if a matching template cannot be found.
        """
        if os.path.isfile(name):
            return name
        return self.templates_by_name().get(name.lower())

    async def new_from_template(self, template_name: str, title: str = None, color_value: int = None) -> Note:
        """Creates a new note whose content is rendered from the specified Mako template.

        The template name will be looked up using :meth:`template_for_name`.
        Raises :exc:`FileNotFoundError` if the template cannot be found.

        The following names are defined in the template's namespace:

        * ``qn``: this instance of :class:`QuickNotes`
        * ``directives``: an instance of :class:`quicknotes.models.TemplateDirectives`, pre-filled with
          the title and color passed to this method
        * ``template_path``: the path of the template being rendered

        Values the template assigns to ``directives`` are used for the new note.
        """
        template_path = self.template_for_name(template_name)
        if not (template_path and os.path.isfile(template_path)):
            raise FileNotFoundError(f'Template does not exist: {template_name}')
        template = Template(filename=os.path.abspath(template_path))
        td = TemplateDirectives(title=title, color_value=color_value)
        content = template.render(qn=self, directives=td, template_path=template_path)
        return await self.new(td.title or '', content, td.color_value)

    def close(self):
        """Closes the associated store."""
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
