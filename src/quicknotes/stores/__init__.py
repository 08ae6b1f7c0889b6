"""Key-value storage that notes are persisted to.

:class:`quicknotes.stores.base.Store` defines the API.
:class:`quicknotes.stores.file.FileStore` is the durable implementation you usually want, while
:class:`quicknotes.stores.memory.MemoryStore` keeps everything in memory.
"""
