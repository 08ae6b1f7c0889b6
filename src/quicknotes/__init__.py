"""Keeps short, color-tagged text notes on the local device.

If you installed via ``pip``, run ``quicknotes -h`` to get help.

To use the Python API, look at :class:`quicknotes.api.QuickNotes`
"""
