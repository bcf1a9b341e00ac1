from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from tagsmith_api.scope import Scope, build_scope
from tagsmith_api.transform import AddTags, RemoveTags, ReplaceTags, TagOperation, split_tag_input


def _as_tag_list(value) -> list[str]:
    if value is None or isinstance(value, str):
        return split_tag_input(value)
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected a list of tags or a comma-separated string")
    items: list[str] = []
    for item in value:
        if item is None:
            continue
        if isinstance(item, (dict, list)):
            raise ValueError("tags must be strings")
        # JSON numbers and booleans are accepted as their text, e.g. 2024.
        items.append(str(item).lower() if isinstance(item, bool) else str(item))
    return split_tag_input(items)


class TagOperationIn(BaseModel):
    operation: Literal["add", "remove", "replace"]
    tags: list[str] = Field(default_factory=list)
    find: list[str] = Field(default_factory=list)
    replacement: list[str] = Field(default_factory=list)
    replace_all: bool = False

    @field_validator("tags", "find", "replacement", mode="before")
    @classmethod
    def split_comma_separated(cls, value):
        return _as_tag_list(value)

    def to_operation(self) -> TagOperation:
        if self.operation == "add":
            return AddTags(tags=list(self.tags))
        if self.operation == "remove":
            return RemoveTags(tags=list(self.tags))
        return ReplaceTags(find=list(self.find), replacement=list(self.replacement), replace_all=self.replace_all)


class ScopeIn(BaseModel):
    folder: Optional[str] = None
    files: Union[str, list[str], None] = None

    def to_scope(self) -> Scope:
        return build_scope(self.folder, self.files)


class TagUpdateIn(TagOperationIn):
    scope: ScopeIn = Field(default_factory=ScopeIn)
    dry_run: Optional[bool] = None


class ChangeRecordOut(BaseModel):
    path: str
    old_tags: list[str] = Field(default_factory=list)
    new_tags: list[str] = Field(default_factory=list)


class BatchResultOut(BaseModel):
    changed: list[ChangeRecordOut] = Field(default_factory=list)
    considered: int
    dry_run: bool
    cancelled: bool = False
    summary: str = ""


class DocumentOut(BaseModel):
    path: str
    updated_at: str


class DocumentListOut(BaseModel):
    items: list[DocumentOut] = Field(default_factory=list)
