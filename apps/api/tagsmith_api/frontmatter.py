from __future__ import annotations

import re
from collections.abc import Iterator, MutableMapping
from dataclasses import dataclass
from typing import Union

import yaml

from .domain.exceptions import FrontmatterSyntaxError

FENCE = "---"

_KEY_LINE_RE = re.compile(r"^([^\s:#][^:]*):(.*)$")
_ITEM_LINE_RE = re.compile(r"^\s*-(?:\s+(.*))?$")


@dataclass(frozen=True)
class Scalar:
    text: str


@dataclass(frozen=True)
class Sequence:
    items: tuple[str, ...] = ()


FrontmatterValue = Union[Scalar, Sequence]


@dataclass
class _Entry:
    value: FrontmatterValue
    # Source lines of an untouched entry; None once the value is reassigned.
    raw: list[str] | None = None
    opaque: bool = False


class Frontmatter(MutableMapping):
    """Ordered key -> value mapping for one frontmatter block.

    Keys stay in first-seen order. Reassigning a key keeps its position and
    drops its source lines, so only mutated entries are re-rendered; the rest
    are written back exactly as they were read.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self.preamble: list[str] = []

    def __getitem__(self, key: str) -> FrontmatterValue:
        return self._entries[key].value

    def __setitem__(self, key: str, value: FrontmatterValue) -> None:
        if not isinstance(value, (Scalar, Sequence)):
            raise TypeError(f"unsupported frontmatter value: {value!r}")
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = _Entry(value=value)
        else:
            entry.value = value
            entry.raw = None
            entry.opaque = False

    def __delitem__(self, key: str) -> None:
        del self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Frontmatter({dict(self.items())!r})"

    def copy(self) -> "Frontmatter":
        clone = Frontmatter()
        clone.preamble = list(self.preamble)
        for key, entry in self._entries.items():
            clone._entries[key] = _Entry(
                value=entry.value,
                raw=list(entry.raw) if entry.raw is not None else None,
                opaque=entry.opaque,
            )
        return clone

    def is_opaque(self, key: str) -> bool:
        """True when the key carried nested content this parser does not model."""
        return self._entries[key].opaque

    def _start(self, key: str, value: FrontmatterValue, line: str) -> None:
        # A repeated key restarts at its original position.
        self._entries[key] = _Entry(value=value, raw=[line])

    def _entry(self, key: str) -> _Entry:
        return self._entries[key]

    def render_lines(self) -> list[str]:
        lines = list(self.preamble)
        for key, entry in self._entries.items():
            if entry.raw is not None:
                lines.extend(entry.raw)
            else:
                lines.extend(_render_entry(key, entry.value))
        return lines


@dataclass(frozen=True)
class ParsedDocument:
    frontmatter: Frontmatter | None
    body: str
    error: str | None = None


def unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] == "'":
        return text[1:-1].replace("''", "'")
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1]
    return text


def _split_inline_list(rest: str) -> tuple[str, ...]:
    inner = rest[1:-1]
    items = (unquote(part.strip()) for part in inner.split(","))
    return tuple(item for item in items if item)


def parse_frontmatter_block(lines: list[str]) -> Frontmatter:
    """Parse the lines between the fences. Raises FrontmatterSyntaxError."""
    fm = Frontmatter()
    current: str | None = None

    for idx, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r")
        if not line.strip():
            # Blank lines belong to the open key; block scalars need them.
            if current is None:
                fm.preamble.append(line)
            else:
                fm._entry(current).raw.append(line)
            continue

        indented = line[0] in (" ", "\t")
        item = _ITEM_LINE_RE.match(line)

        if item:
            if current is None:
                raise FrontmatterSyntaxError(idx, line, "list_item_without_key")
            entry = fm._entry(current)
            entry.raw.append(line)
            if entry.opaque:
                continue
            value = unquote((item.group(1) or "").strip())
            if isinstance(entry.value, Sequence):
                entry.value = Sequence(entry.value.items + (value,))
            else:
                entry.value = Sequence((value,))
            continue

        comment = line.lstrip().startswith("#")
        if indented or comment:
            if current is None:
                fm.preamble.append(line)
            else:
                entry = fm._entry(current)
                entry.raw.append(line)
                entry.opaque = entry.opaque or not comment
            continue

        key_match = _KEY_LINE_RE.match(line)
        if not key_match:
            raise FrontmatterSyntaxError(idx, line, "unrecognized_line")

        key = key_match.group(1).strip()
        rest = key_match.group(2).strip()
        if rest == "":
            value: FrontmatterValue = Sequence()
        elif rest.startswith("[") and rest.endswith("]"):
            value = Sequence(_split_inline_list(rest))
        else:
            value = Scalar(unquote(rest))
        fm._start(key, value, line)
        current = key

    return fm


def _find_block(content: str) -> tuple[list[str], str] | None:
    first_newline = content.find("\n")
    if first_newline == -1:
        return None
    if content[:first_newline].rstrip("\r") != FENCE:
        return None

    search_from = first_newline + 1
    while search_from <= len(content):
        next_newline = content.find("\n", search_from)
        end = len(content) if next_newline == -1 else next_newline
        if content[search_from:end].rstrip("\r") == FENCE:
            block = content[first_newline + 1 : search_from]
            body = "" if next_newline == -1 else content[next_newline + 1 :]
            # Only "\n" ends a line; values may carry other Unicode separators.
            return block.split("\n")[:-1], body
        if next_newline == -1:
            return None
        search_from = next_newline + 1
    return None


def parse_document(content: str) -> ParsedDocument:
    found = _find_block(content)
    if found is None:
        return ParsedDocument(frontmatter=None, body=content)

    block_lines, body = found
    try:
        fm = parse_frontmatter_block(block_lines)
    except FrontmatterSyntaxError as e:
        return ParsedDocument(frontmatter=None, body=content, error=f"frontmatter_syntax_error: {e}")
    return ParsedDocument(frontmatter=fm, body=body)


def _needs_quotes(text: str) -> bool:
    if text == "" or text != text.strip():
        return True
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError:
        return True
    return loaded != text


def format_value(text: str) -> str:
    if not _needs_quotes(text):
        return text
    if "'" in text and '"' not in text and "\\" not in text:
        return f'"{text}"'
    return "'" + text.replace("'", "''") + "'"


def _render_entry(key: str, value: FrontmatterValue) -> list[str]:
    if isinstance(value, Scalar):
        return [f"{key}: {format_value(value.text)}"]
    if not value.items:
        return [f"{key}: []"]
    return [f"{key}:"] + [f"  - {format_value(item)}" for item in value.items]


def render_document(frontmatter: Frontmatter | None, body: str) -> str:
    if not frontmatter:
        return body
    lines = frontmatter.render_lines()
    return FENCE + "\n" + "\n".join(lines) + "\n" + FENCE + "\n" + body
