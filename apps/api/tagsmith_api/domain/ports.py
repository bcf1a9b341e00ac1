from __future__ import annotations

from typing import Protocol, runtime_checkable

from tagsmith_api.domain.entities import DocumentRef


@runtime_checkable
class DocumentStore(Protocol):
    def list_documents(self) -> list[DocumentRef]:
        ...

    def read_document(self, ref: DocumentRef) -> str:
        ...

    def write_document(self, ref: DocumentRef, content: str) -> None:
        ...
