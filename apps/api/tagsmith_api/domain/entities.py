from __future__ import annotations

from dataclasses import dataclass

DOCUMENT_EXTENSION = ".md"


@dataclass(frozen=True)
class DocumentRef:
    path: str
    mtime: float = 0.0

    @property
    def is_document(self) -> bool:
        return self.path.endswith(DOCUMENT_EXTENSION)


@dataclass(frozen=True)
class ChangeRecord:
    path: str
    old_tags: tuple[str, ...]
    new_tags: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "old_tags", tuple(self.old_tags))
        object.__setattr__(self, "new_tags", tuple(self.new_tags))


@dataclass(frozen=True)
class BatchResult:
    changed: tuple[ChangeRecord, ...] = ()
    considered: int = 0
    dry_run: bool = True
    cancelled: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "changed", tuple(self.changed))
