from __future__ import annotations

from pathlib import Path, PurePosixPath

from .domain.entities import DOCUMENT_EXTENSION, DocumentRef
from .domain.exceptions import DocumentIOError, PathError
from .util import atomic_write_text


def normalize_note_path(path: str) -> str:
    if "\x00" in path:
        raise PathError("path_contains_nul")

    cleaned = path.strip().replace("\\", "/")
    if not cleaned:
        raise PathError("path_empty")

    p = PurePosixPath(cleaned)
    if p.is_absolute():
        raise PathError("path_absolute_not_allowed")
    if ".." in p.parts:
        raise PathError("path_traversal_not_allowed")
    if any(part.startswith(".") for part in p.parts):
        raise PathError("path_hidden")

    if p.suffix.lower() != DOCUMENT_EXTENSION:
        p = p.with_suffix(DOCUMENT_EXTENSION)

    return p.as_posix()


class FileVault:
    """Document store over a directory of Markdown files."""

    def __init__(self, vault_dir: Path) -> None:
        self.vault_dir = vault_dir.resolve()

    def _abs_path(self, note_path: str) -> Path:
        return (self.vault_dir / PurePosixPath(note_path)).resolve()

    def _ensure_under_vault(self, abs_path: Path) -> None:
        if self.vault_dir not in abs_path.parents and abs_path != self.vault_dir:
            raise PathError("path_outside_vault")

    def list_paths(self) -> list[str]:
        if not self.vault_dir.exists():
            return []
        paths: list[str] = []
        for p in self.vault_dir.rglob(f"*{DOCUMENT_EXTENSION}"):
            rel = p.relative_to(self.vault_dir)
            if any(part.startswith(".") for part in rel.parts):
                continue
            if p.is_file():
                paths.append(rel.as_posix())
        return sorted(paths)

    def list_documents(self) -> list[DocumentRef]:
        refs: list[DocumentRef] = []
        for note_path in self.list_paths():
            try:
                mtime = self._abs_path(note_path).stat().st_mtime
            except OSError:
                mtime = 0.0
            refs.append(DocumentRef(path=note_path, mtime=mtime))
        return refs

    def read_document(self, ref: DocumentRef) -> str:
        abs_path = self._abs_path(normalize_note_path(ref.path))
        self._ensure_under_vault(abs_path)
        try:
            with abs_path.open("r", encoding="utf-8", newline="") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentIOError(ref.path, f"read_failed: {e}") from e

    def write_document(self, ref: DocumentRef, content: str) -> None:
        abs_path = self._abs_path(normalize_note_path(ref.path))
        self._ensure_under_vault(abs_path)
        try:
            atomic_write_text(abs_path, content)
        except OSError as e:
            raise DocumentIOError(ref.path, f"write_failed: {e}") from e
