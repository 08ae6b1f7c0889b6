"""Defines the :class:`Note` entity and its record format.

Records are plain dicts suitable for serializing as json; see :meth:`Note.as_json` and :meth:`Note.from_json`.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
import re
from typing import Any, Dict, Optional
import shortuuid


DEFAULT_COLOR = 0xFFFFFFFF
"""Opaque white, used when a record has no color."""

PALETTE = {
    'white': 0xFFFFFFFF,
    'yellow': 0xFFFFF9C4,
    'green': 0xFFE8F5E9,
    'blue': 0xFFE3F2FD,
}
"""Named colors offered when editing a note, in display order."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MalformedRecordError(Exception):
    """Raised when a record cannot be converted to a :class:`Note`."""
    def __init__(self, message: str, record: Any = None):
        super().__init__(message)
        self.message = message
        self.record = record


def _require_str(record: Dict[str, Any], key: str) -> str:
    value = record.get(key)
    if not isinstance(value, str):
        raise MalformedRecordError(f'Field [{key}] must be a string, got: {value!r}', record)
    return value


def parse_timestamp(value: str) -> datetime:
    """Parses an ISO-8601 timestamp. A trailing ``Z`` is treated as UTC.

    Raises :exc:`ValueError` if the string cannot be parsed.
    """
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)


@dataclass
class Note:
    """A single user note.

    The :attr:`id` is the only thing used to identify a note; two instances with the same id
    are different versions of the same note.
    """

    id: str
    """Unique within a collection and never changed once assigned."""

    title: str = ''
    """May be empty. Blank titles are replaced with "Untitled" by the editor, not by the repository."""

    content: str = ''

    color_value: int = DEFAULT_COLOR
    """Display color as a 32-bit ARGB integer. Not interpreted by the repository."""

    updated_at: datetime = field(default_factory=_now)
    """When the note was last created or changed."""

    @classmethod
    def create(cls, title: str = '', content: str = '', color_value: int = DEFAULT_COLOR) -> Note:
        """Returns a new note with a freshly generated id."""
        return cls(id=shortuuid.uuid(), title=title, content=content, color_value=color_value)

    def matches(self, query: str) -> bool:
        """Returns True if the query is empty or occurs in the title or content, ignoring case."""
        if not query:
            return True
        query = query.lower()
        return query in self.title.lower() or query in self.content.lower()

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'colorValue': self.color_value,
            'updatedAt': self.updated_at.isoformat(),
        }

    @classmethod
    def from_json(cls, record: Any) -> Note:
        """Converts a dict produced by :meth:`as_json` back into a Note.

        ``colorValue`` may be missing or null, in which case :data:`DEFAULT_COLOR` is used.
        Raises :exc:`MalformedRecordError` if any other field is missing or has the wrong type,
        or if ``updatedAt`` is not an ISO-8601 timestamp.
        """
        if not isinstance(record, dict):
            raise MalformedRecordError(f'Expected an object, got: {record!r}', record)
        note_id = _require_str(record, 'id')
        title = _require_str(record, 'title')
        content = _require_str(record, 'content')

        color_value = record.get('colorValue')
        if color_value is None:
            color_value = DEFAULT_COLOR
        elif isinstance(color_value, bool) or not isinstance(color_value, int):
            raise MalformedRecordError(f'Field [colorValue] must be an integer, got: {color_value!r}', record)

        updated_at = _require_str(record, 'updatedAt')
        try:
            updated_at = parse_timestamp(updated_at)
        except ValueError as e:
            raise MalformedRecordError(f'Field [updatedAt] is not a valid timestamp: {updated_at!r}', record) from e

        return cls(id=note_id, title=title, content=content, color_value=color_value, updated_at=updated_at)


@dataclass
class TemplateDirectives:
    """Passed to note templates as ``directives``, so a template can adjust the note it produces."""

    title: Optional[str] = None
    """If set, used as the title of the new note."""

    color_value: Optional[int] = None
    """If set, used as the color of the new note."""


def parse_color(text: str) -> int:
    """Converts user input to a color value.

    Accepts a name from :data:`PALETTE` (case-insensitive), ``#RRGGBB`` (made fully opaque),
    ``#AARRGGBB``, or an integer literal such as ``0xFFFFF9C4``.

    Raises :exc:`ValueError` for anything else.
    """
    text = text.strip()
    named = PALETTE.get(text.lower())
    if named is not None:
        return named
    if re.fullmatch(r'#[0-9a-fA-F]{6}', text):
        return 0xFF000000 | int(text[1:], 16)
    if re.fullmatch(r'#[0-9a-fA-F]{8}', text):
        return int(text[1:], 16)
    value = int(text, 0)
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f'Color out of range: {text}')
    return value


def format_color(value: int) -> str:
    """Returns the palette name for the color if it has one, otherwise ``#AARRGGBB``."""
    for name, named in PALETTE.items():
        if named == value:
            return name
    return f'#{value:08X}'
