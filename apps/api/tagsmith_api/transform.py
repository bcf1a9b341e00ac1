from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Union

from .domain.exceptions import EmptyTagListError
from .frontmatter import Frontmatter, Scalar, Sequence

TAGS_KEY = "tags"


@dataclass(frozen=True)
class AddTags:
    tags: list[str]


@dataclass(frozen=True)
class RemoveTags:
    tags: list[str]


@dataclass(frozen=True)
class ReplaceTags:
    find: list[str]
    replacement: list[str] = field(default_factory=list)
    replace_all: bool = False


TagOperation = Union[AddTags, RemoveTags, ReplaceTags]


@dataclass(frozen=True)
class TagTransform:
    old: list[str]
    new: list[str]

    @property
    def changed(self) -> bool:
        return self.old != self.new


def tag_key(tag: str) -> str:
    return tag.casefold()


def clean_tags(values: Iterable[str]) -> list[str]:
    return [t for t in (v.strip() for v in values) if t]


def dedupe_tags(tags: Iterable[str]) -> list[str]:
    """Drop entries equal to an earlier one under case folding."""
    seen: set[str] = set()
    out: list[str] = []
    for tag in tags:
        key = tag_key(tag)
        if key in seen:
            continue
        seen.add(key)
        out.append(tag)
    return out


def split_tag_input(raw: str | Iterable[str] | None) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return clean_tags(raw.split(","))
    return clean_tags(raw)


def extract_tags(frontmatter: Frontmatter | None) -> list[str]:
    if not frontmatter or TAGS_KEY not in frontmatter:
        return []
    raw = frontmatter[TAGS_KEY]
    if isinstance(raw, Scalar):
        values = [raw.text]
    else:
        values = list(raw.items)
    return dedupe_tags(clean_tags(values))


def add_tags(current: list[str], tags: list[str]) -> list[str]:
    return dedupe_tags(list(current) + clean_tags(tags))


def remove_tags(current: list[str], tags: list[str]) -> list[str]:
    doomed = {tag_key(t) for t in clean_tags(tags)}
    return [t for t in current if tag_key(t) not in doomed]


def replace_tags(current: list[str], find: list[str], replacement: list[str]) -> list[str]:
    """Pairwise replacement: find[i] -> replacement[i].

    A single replacement stands in for every find tag without its own pair;
    otherwise an unpaired find tag is deleted. Rules run in order, so when
    several rules hit the same tag the last one wins.
    """
    result = list(current)
    for i, needle in enumerate(find):
        if i < len(replacement):
            substitute: str | None = replacement[i]
        elif len(replacement) == 1:
            substitute = replacement[0]
        else:
            substitute = None

        wanted = tag_key(needle)
        if substitute is None:
            result = [t for t in result if tag_key(t) != wanted]
        else:
            result = [substitute if tag_key(t) == wanted else t for t in result]
    return dedupe_tags(result)


def replace_all_tags(current: list[str], find: list[str], replacement: list[str]) -> list[str]:
    wanted = {tag_key(f) for f in find}
    if not any(tag_key(t) in wanted for t in current):
        return list(current)
    return dedupe_tags(replacement)


def validate_operation(operation: TagOperation) -> None:
    if isinstance(operation, ReplaceTags):
        if not clean_tags(operation.find):
            raise EmptyTagListError("no_find_tags")
    elif not clean_tags(operation.tags):
        raise EmptyTagListError("no_tags")


def transform_tags(current: list[str], operation: TagOperation) -> TagTransform:
    old = dedupe_tags(clean_tags(current))
    if isinstance(operation, AddTags):
        new = add_tags(old, operation.tags)
    elif isinstance(operation, RemoveTags):
        new = remove_tags(old, operation.tags)
    elif isinstance(operation, ReplaceTags):
        find = clean_tags(operation.find)
        replacement = clean_tags(operation.replacement)
        if operation.replace_all:
            new = replace_all_tags(old, find, replacement)
        else:
            new = replace_tags(old, find, replacement)
    else:
        raise TypeError(f"unknown tag operation: {operation!r}")
    return TagTransform(old=old, new=new)


def apply_tags(frontmatter: Frontmatter | None, tags: list[str]) -> Frontmatter:
    updated = frontmatter.copy() if frontmatter is not None else Frontmatter()
    if tags:
        updated[TAGS_KEY] = Sequence(tuple(tags))
    elif TAGS_KEY in updated:
        del updated[TAGS_KEY]
    return updated
