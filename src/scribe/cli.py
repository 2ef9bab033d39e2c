#!/usr/bin/env python3
"""
CLI interface for scribe.
"""

import argparse
import logging
import os
import subprocess
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .codec import NotesImportError, read_import_file, write_export
from .config import load_config
from .datamodel import Note
from .intake import TranscriptionIntake
from .permission import log_permission_message
from .search import filter_notes
from .storage import JsonKeyValueStore, NotesStorage
from .store import NoteStore
from .tags import clean_tags
from .transcription import TranscriptionError, WhisperTranscriber
from .versions import VersionManager

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def _fmt_ms(value: int) -> str:
    return datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M:%S")


class ScribeCLI:
    """Command-line front end; owns selection and list-visibility state."""

    def __init__(self, base_path: Optional[Path] = None):
        if base_path is None:
            base_path = Path.home() / ".scribe"
        self.base_path = Path(base_path)

        self.config = load_config(self.base_path)
        self.storage = NotesStorage(
            JsonKeyValueStore(self.base_path), key=self.config.get("storage_key", "notes")
        )
        self.store = NoteStore(self.storage)
        self.versions = VersionManager(self.store)
        self.intake = TranscriptionIntake(self.store, on_reveal=self._reveal_note)
        self.transcriber = WhisperTranscriber.from_config(self.config)

        self.selected_note_id: Optional[str] = None
        self.show_note_list = False

    def _reveal_note(self, note_id: str):
        self.show_note_list = True
        self.selected_note_id = note_id

    def on_permission_message(self, message) -> bool:
        """Permission frame messages are acknowledged in the log only."""
        return log_permission_message(message)

    # -----------------------------
    # Notes
    # -----------------------------
    def create_note(self, title: Optional[str] = None, content: str = "", tags: list = None) -> str:
        """Create a new note."""
        note_id = self.store.create(
            title=title or self.config.get("new_note_title", "New Note"), content=content
        )
        if tags:
            self.store.update_tags(note_id, clean_tags(tags))
        self.selected_note_id = note_id

        print(f"Created note: {note_id}")
        return note_id

    def get_note(self, note_id: str) -> Optional[Note]:
        """Display a note."""
        note = self.store.get(note_id)

        if not note:
            print(f"Note not found: {note_id}")
            return None

        self.selected_note_id = note.id
        print(f"\nID: {note.id}")
        print(f"Title: {note.title}")
        print(f"Created: {_fmt_ms(note.created)}")
        print(f"Modified: {_fmt_ms(note.last_edited)}")

        if note.tags:
            print(f"Tags: {', '.join(note.tags)}")

        print(f"\nContent:\n{'-' * 80}")
        print(note.content)
        print("-" * 80)

        if note.versions:
            print(f"\nVersions: {len(note.versions)}")
        return note

    def edit_note(self, note_id: str, title: Optional[str] = None, content: Optional[str] = None):
        """Edit a note in place, or in $EDITOR when no fields are given."""
        note = self.store.get(note_id)

        if not note:
            print(f"Note not found: {note_id}")
            return

        if title is None and content is None:
            title, content = self._edit_in_editor(note)

        if title is not None:
            note.title = title
        if content is not None:
            note.content = content
        self.store.update(note)

        print(f"Updated note: {note_id}")

    @staticmethod
    def _edit_in_editor(note: Note):
        with tempfile.NamedTemporaryFile(
            "w", suffix=".md", delete=False, encoding="utf-8"
        ) as fh:
            fh.write(f"# {note.title}\n\n{note.content}")
            path = Path(fh.name)

        try:
            editor = os.environ.get("EDITOR", "vim")
            subprocess.run([editor, str(path)])

            lines = path.read_text(encoding="utf-8").splitlines(keepends=True)
        finally:
            path.unlink(missing_ok=True)

        # Extract title from first line if it's a header
        new_title = note.title
        new_content = "".join(lines)
        if lines and lines[0].startswith("# "):
            new_title = lines[0][2:].strip()
            new_content = "".join(lines[2:]) if len(lines) > 2 else ""
        return new_title, new_content

    def list_notes(self, sort_by: str = "position", query: str = "") -> List[Note]:
        """List notes, optionally narrowed by a search query."""
        notes = filter_notes(self.store.all(), query)

        if not notes:
            print("No notes found.")
            return []

        if sort_by == "created":
            notes.sort(key=lambda n: n.created, reverse=True)
        elif sort_by == "modified":
            notes.sort(key=lambda n: n.last_edited, reverse=True)
        elif sort_by == "title":
            notes.sort(key=lambda n: n.title.lower())

        print(f"\nTotal notes: {len(notes)}\n")

        for note in notes:
            print(f"{note.title}")
            print(f"  ID: {note.id}")
            print(f"  Modified: {_fmt_ms(note.last_edited)}")
            if note.tags:
                print(f"  Tags: {', '.join(note.tags)}")
            print()
        return notes

    def search_notes(self, query: str) -> List[Note]:
        """Search notes by title, content and tags."""
        results = filter_notes(self.store.all(), query)

        if not results:
            print("No results found.")
            return []

        print(f"\nFound {len(results)} results:\n")
        for i, note in enumerate(results, 1):
            snippet = note.content[:80].replace("\n", " ")
            print(f"{i}. {note.title}")
            print(f"   ID: {note.id}")
            print(f"   {snippet}")
            print()
        return results

    def delete_note(self, note_id: str, confirm: bool = True):
        """Delete a note."""
        note = self.store.get(note_id)

        if note and confirm:
            print(f"Delete note: {note.title} ({note_id})?")
            answer = input("Type 'yes' to confirm: ")
            if answer.lower() != "yes":
                print("Cancelled.")
                return

        self.store.delete(note_id)
        if self.selected_note_id == note_id:
            self.selected_note_id = None

        if note:
            print(f"Deleted note: {note_id}")
        else:
            print(f"Note not found: {note_id}")

    def set_tags(self, note_id: str, tags: list):
        """Replace a note's tags."""
        note = self.store.update_tags(note_id, clean_tags(tags))
        if not note:
            print(f"Note not found: {note_id}")
            return
        print(f"Tags for {note_id}: {', '.join(note.tags) or '(none)'}")

    # -----------------------------
    # Versions
    # -----------------------------
    def save_version(self, note_id: str, description: str):
        note = self.versions.save_version(note_id, description)
        if not note:
            print(f"Note not found: {note_id}")
            return
        print(f"Saved version {len(note.versions) - 1} of {note_id}: {description}")

    def show_versions(self, note_id: str):
        note = self.store.get(note_id)
        if not note:
            print(f"Note not found: {note_id}")
            return
        if not note.versions:
            print("No versions saved.")
            return
        for i, version in enumerate(note.versions):
            print(f"{i}. {_fmt_ms(version.timestamp)}  {version.description}")

    def restore_version(self, note_id: str, index: int):
        if not self.store.get(note_id):
            print(f"Note not found: {note_id}")
            return
        note = self.versions.restore_version(note_id, index)
        if not note:
            print(f"Version not found: {index}")
            return
        print(f"Restored {note_id} to version {index}")

    # -----------------------------
    # Backup
    # -----------------------------
    def export_notes(self, directory: Optional[Path] = None) -> Path:
        path = write_export(self.store.all(), directory or Path.cwd())
        print(f"Exported {len(self.store)} notes to {path}")
        return path

    def import_notes(self, file_path: Path) -> bool:
        try:
            notes = read_import_file(file_path)
        except NotesImportError as exc:
            print(f"Error: {exc}")
            return False

        self.store.replace_all(notes)
        self.selected_note_id = None
        print(f"Imported {len(notes)} notes")
        return True

    # -----------------------------
    # Transcription
    # -----------------------------
    def dictate(self, text: str) -> Optional[str]:
        """Feed already-transcribed text through the intake."""
        note_id = self.intake.on_transcription_complete(text)
        if note_id:
            print(f"Created note: {note_id}")
        else:
            print("Duplicate transcription skipped.")
        return note_id

    def transcribe(self, paths: List[Path]) -> List[str]:
        """Transcribe audio files and create one note per new result."""
        if not self.transcriber:
            print("Error: no transcriber is configured.")
            return []

        created = []
        for path in paths:
            try:
                text = self.transcriber.transcribe_file(Path(path))
            except TranscriptionError as exc:
                logger.error("Transcription of %s failed: %s", path, exc)
                print(f"Failed to transcribe {path}: {exc}")
                continue
            note_id = self.dictate(text)
            if note_id:
                created.append(note_id)
        return created


def main():
    parser = argparse.ArgumentParser(description="Scribe notes CLI")
    parser.add_argument("--base-path", type=Path, help="Base path for notes storage")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Create
    create_parser = subparsers.add_parser("new", aliases=["create"], help="Create a new note")
    create_parser.add_argument("title", nargs="?", help="Note title")
    create_parser.add_argument("-c", "--content", default="", help="Note content")
    create_parser.add_argument("-t", "--tags", nargs="+", help="Tags")

    # Show
    show_parser = subparsers.add_parser("show", aliases=["get"], help="Display a note")
    show_parser.add_argument("note_id", help="Note ID")

    # Edit
    edit_parser = subparsers.add_parser("edit", help="Edit a note")
    edit_parser.add_argument("note_id", help="Note ID")
    edit_parser.add_argument("--title", help="New title")
    edit_parser.add_argument("--content", help="New content")

    # List
    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List all notes")
    list_parser.add_argument(
        "-s",
        "--sort",
        choices=["position", "modified", "created", "title"],
        default="position",
        help="Sort by",
    )

    # Search
    search_parser = subparsers.add_parser("search", aliases=["find"], help="Search notes")
    search_parser.add_argument("query", help="Search query")

    # Delete
    delete_parser = subparsers.add_parser("delete", aliases=["rm"], help="Delete a note")
    delete_parser.add_argument("note_id", help="Note ID")
    delete_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    # Tags
    tag_parser = subparsers.add_parser("tag", help="Replace a note's tags")
    tag_parser.add_argument("note_id", help="Note ID")
    tag_parser.add_argument("tags", nargs="*", help="Tags (none clears)")

    # Versions
    save_version_parser = subparsers.add_parser("save-version", help="Snapshot note content")
    save_version_parser.add_argument("note_id", help="Note ID")
    save_version_parser.add_argument("description", help="Version label")

    versions_parser = subparsers.add_parser("versions", help="List a note's versions")
    versions_parser.add_argument("note_id", help="Note ID")

    restore_parser = subparsers.add_parser("restore", help="Restore content from a version")
    restore_parser.add_argument("note_id", help="Note ID")
    restore_parser.add_argument("index", type=int, help="Version index (see 'versions')")

    # Backup
    export_parser = subparsers.add_parser("export", help="Export all notes to JSON")
    export_parser.add_argument("-o", "--output-dir", type=Path, help="Target directory")

    import_parser = subparsers.add_parser("import", help="Replace all notes from an export")
    import_parser.add_argument("file_path", type=Path, help="Export file")

    # Transcription
    dictate_parser = subparsers.add_parser("dictate", help="Create a note from transcribed text")
    dictate_parser.add_argument("text", help="Transcript text, or '-' for stdin")

    transcribe_parser = subparsers.add_parser(
        "transcribe", help="Transcribe audio files into notes"
    )
    transcribe_parser.add_argument("paths", nargs="+", type=Path, help="Audio files")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    if not args.command:
        parser.print_help()
        return

    cli = ScribeCLI(args.base_path)

    if args.command in ["new", "create"]:
        cli.create_note(args.title, args.content, args.tags)
    elif args.command in ["show", "get"]:
        cli.get_note(args.note_id)
    elif args.command == "edit":
        cli.edit_note(args.note_id, args.title, args.content)
    elif args.command in ["list", "ls"]:
        cli.list_notes(args.sort)
    elif args.command in ["search", "find"]:
        cli.search_notes(args.query)
    elif args.command in ["delete", "rm"]:
        cli.delete_note(args.note_id, confirm=not args.yes)
    elif args.command == "tag":
        cli.set_tags(args.note_id, args.tags)
    elif args.command == "save-version":
        cli.save_version(args.note_id, args.description)
    elif args.command == "versions":
        cli.show_versions(args.note_id)
    elif args.command == "restore":
        cli.restore_version(args.note_id, args.index)
    elif args.command == "export":
        cli.export_notes(args.output_dir)
    elif args.command == "import":
        if not cli.import_notes(args.file_path):
            sys.exit(1)
    elif args.command == "dictate":
        text = sys.stdin.read() if args.text == "-" else args.text
        cli.dictate(text.strip())
    elif args.command == "transcribe":
        cli.transcribe(args.paths)


if __name__ == "__main__":
    main()
