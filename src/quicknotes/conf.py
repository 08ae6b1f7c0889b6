from __future__ import annotations
from dataclasses import dataclass, field, replace
import os.path
from typing import Dict, Set
from quicknotes.models import DEFAULT_COLOR
from quicknotes.repository import NOTES_KEY


DEFAULT_STORE_PATH = os.path.join('~', '.quicknotes.json')


@dataclass
class StoreConf:
    """Base class for store config. Use a subclass such as :class:`FileStoreConf`."""

    def instantiate(self):
        raise NotImplementedError("Please use a subclass like FileStoreConf instead!")

    def standardize(self):
        return self


@dataclass
class MemoryStoreConf(StoreConf):
    """Configures quicknotes to keep notes in memory only, via :class:`quicknotes.stores.memory.MemoryStore`.

    Mostly useful for trying things out; nothing is saved when the process exits.
    """

    initial: Dict[str, str] = field(default_factory=dict)
    """Values the store starts out with."""

    def instantiate(self):
        from quicknotes.stores.memory import MemoryStore
        return MemoryStore(dict(self.initial))


@dataclass
class FileStoreConf(StoreConf):
    """Configures quicknotes to keep notes in a json file, via :class:`quicknotes.stores.file.FileStore`."""

    path: str = None
    """Required. Path of the file. It will be created on the first save if it does not exist."""

    def instantiate(self):
        if not self.path:
            raise ValueError('`path` must be set in FileStoreConf.')
        from quicknotes.stores.file import FileStore
        return FileStore(self.standardize().path)

    def standardize(self):
        return replace(self, path=os.path.realpath(os.path.expanduser(self.path)) if self.path else self.path)


@dataclass
class QuickNotesConf:
    store_conf: StoreConf = field(default_factory=lambda: FileStoreConf(path=DEFAULT_STORE_PATH))
    """Configures where notes are persisted. By default, ``~/.quicknotes.json``."""

    notes_key: str = NOTES_KEY
    """The key under which the collection is kept in the store."""

    default_color: int = DEFAULT_COLOR
    """Color given to new notes when none is specified."""

    template_globs: Set[str] = field(default_factory=set)
    """A set of path globs such as ``{"/notes/templates/*.mako"}`` to search for note templates.

    This is used for the CLI command ``new --template``, and template-related methods of
    :class:`quicknotes.api.QuickNotes`.
    """

    date_format: str = '%Y-%m-%d %H:%M'
    """strftime format used by the CLI to show when a note was last updated."""

    @classmethod
    def user_config_path(cls) -> str:
        return os.path.expanduser(os.path.join('~', '.quicknotes.conf.py'))

    @classmethod
    def for_user(cls) -> QuickNotesConf:
        """Loads the config from ``~/.quicknotes.conf.py``, or returns the defaults if there is no such file.

        The file is a Python script that must assign a QuickNotesConf instance to the variable ``conf``.
        """
        path = cls.user_config_path()
        if not os.path.exists(path):
            return cls()
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise Exception('You need to assign an instance of QuickNotesConf to the variable `conf` '
                            f'in your config file: {path}')
        return context['conf']

    def standardize(self):
        return replace(
            self,
            store_conf=self.store_conf.standardize()
        )

    def instantiate(self):
        from quicknotes.api import QuickNotes
        return QuickNotes(self.standardize())
