from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Union

from .domain.entities import DOCUMENT_EXTENSION, DocumentRef
from .domain.exceptions import NoTargetsError


@dataclass(frozen=True)
class EntireCollection:
    pass


@dataclass(frozen=True)
class PathPrefix:
    path: str


@dataclass(frozen=True)
class ExplicitList:
    paths: list[str] = field(default_factory=list)


Scope = Union[EntireCollection, PathPrefix, ExplicitList]

_PATH_LIST_SPLIT_RE = re.compile(r"[,\n]+")


def strip_slashes(path: str) -> str:
    return path.strip().strip("/")


def split_path_list(raw: str | Iterable[str] | None) -> list[str]:
    if raw is None:
        return []
    parts = _PATH_LIST_SPLIT_RE.split(raw) if isinstance(raw, str) else list(raw)
    return [p.strip() for p in parts if p and p.strip()]


def build_scope(folder: str | None = None, files: str | Iterable[str] | None = None) -> Scope:
    paths = split_path_list(files)
    if paths:
        return ExplicitList(paths=paths)
    prefix = strip_slashes(folder or "")
    if prefix:
        return PathPrefix(path=prefix)
    return EntireCollection()


def is_vault_wide(scope: Scope) -> bool:
    if isinstance(scope, EntireCollection):
        return True
    if isinstance(scope, PathPrefix):
        return not strip_slashes(scope.path)
    return False


def describe_scope(scope: Scope) -> str:
    if isinstance(scope, ExplicitList):
        n = len(scope.paths)
        return f"in {n} specified file{'s' if n != 1 else ''}"
    if isinstance(scope, PathPrefix) and strip_slashes(scope.path):
        shown = strip_slashes(scope.path)
        if len(shown) > 40:
            shown = "..." + shown[-37:]
        return f'in "{shown}"'
    return "(entire vault)"


def resolve_scope(scope: Scope, index: Iterable[DocumentRef]) -> list[DocumentRef]:
    documents = [ref for ref in index if ref.is_document]

    if isinstance(scope, ExplicitList):
        by_path = {ref.path: ref for ref in documents}
        targets: list[DocumentRef] = []
        seen: set[str] = set()
        for raw in scope.paths:
            ref = by_path.get(strip_slashes(raw))
            if ref is None or ref.path in seen:
                continue
            seen.add(ref.path)
            targets.append(ref)
    elif isinstance(scope, PathPrefix) and strip_slashes(scope.path):
        prefix = strip_slashes(scope.path)
        exact = next(
            (ref for ref in documents if ref.path in (prefix, prefix + DOCUMENT_EXTENSION)),
            None,
        )
        if exact is not None:
            targets = [exact]
        else:
            targets = [ref for ref in documents if ref.path.startswith(prefix)]
    elif isinstance(scope, (EntireCollection, PathPrefix)):
        targets = documents
    else:
        raise TypeError(f"unknown scope: {scope!r}")

    if not targets:
        raise NoTargetsError()
    return targets
