"""Plain-text rendering of note list entries."""

from .models import Note
from .utils import first_line, format_timestamp, host_from_url

EXCERPT_LENGTH = 80


def display_title(note: Note) -> str:
    """Note title, or the page host when the title is missing or blank."""
    if note.title and note.title.strip():
        return note.title.strip()
    return host_from_url(note.url_sample)


def format_excerpt(note: Note, max_length: int = EXCERPT_LENGTH) -> str:
    line = first_line(note.content).strip()
    if len(line) > max_length:
        line = line[: max_length - 1].rstrip() + "…"
    if line:
        return f"{line} — {note.url_sample}"
    return note.url_sample


def format_list_entry(note: Note) -> str:
    """Two-line entry: title, scope and time, then the excerpt."""
    header = f"{display_title(note)} [{note.scope}] {format_timestamp(note.updated_at)}"
    return f"{header}\n    {format_excerpt(note)}"


def format_list(notes: list[Note]) -> str:
    if not notes:
        return "No notes."
    return "\n".join(format_list_entry(n) for n in notes)
