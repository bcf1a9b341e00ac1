import pytest

from tagsmith_api.domain.entities import DocumentRef
from tagsmith_api.domain.exceptions import NoTargetsError
from tagsmith_api.scope import (
    EntireCollection,
    ExplicitList,
    PathPrefix,
    build_scope,
    describe_scope,
    is_vault_wide,
    resolve_scope,
    split_path_list,
)

INDEX = [
    DocumentRef("notes/a.md"),
    DocumentRef("notes/sub/b.md"),
    DocumentRef("notes/image.png"),
    DocumentRef("other/c.md"),
]


def _paths(refs) -> list[str]:
    return [r.path for r in refs]


@pytest.mark.parametrize("prefix", ["notes", "/notes/", "notes/"])
def test_folder_prefix(prefix: str) -> None:
    assert _paths(resolve_scope(PathPrefix(prefix), INDEX)) == ["notes/a.md", "notes/sub/b.md"]


@pytest.mark.parametrize("prefix", ["other/c", "other/c.md", "/other/c.md"])
def test_single_file_scope(prefix: str) -> None:
    assert _paths(resolve_scope(PathPrefix(prefix), INDEX)) == ["other/c.md"]


def test_explicit_list_drops_misses_and_duplicates() -> None:
    scope = ExplicitList(["/other/c.md", "missing.md", "notes/a.md", "other/c.md", "notes/image.png"])
    assert _paths(resolve_scope(scope, INDEX)) == ["other/c.md", "notes/a.md"]


def test_entire_collection_only_documents() -> None:
    assert _paths(resolve_scope(EntireCollection(), INDEX)) == ["notes/a.md", "notes/sub/b.md", "other/c.md"]


@pytest.mark.parametrize(
    "scope",
    [PathPrefix("nope"), ExplicitList(["nope.md"]), PathPrefix("notes/image.png")],
)
def test_empty_resolution_raises(scope) -> None:
    with pytest.raises(NoTargetsError):
        resolve_scope(scope, INDEX)


def test_entire_collection_of_empty_vault_raises() -> None:
    with pytest.raises(NoTargetsError):
        resolve_scope(EntireCollection(), [])


def test_build_scope_precedence() -> None:
    assert build_scope("notes", "a.md\nb.md, c.md") == ExplicitList(["a.md", "b.md", "c.md"])
    assert build_scope("/notes/", None) == PathPrefix("notes")
    assert build_scope("", "  ") == EntireCollection()
    assert build_scope(None, []) == EntireCollection()


def test_split_path_list() -> None:
    assert split_path_list("a.md,\n\n b.md ,") == ["a.md", "b.md"]
    assert split_path_list(["a.md", " "]) == ["a.md"]


def test_vault_wide_and_description() -> None:
    assert is_vault_wide(EntireCollection())
    assert is_vault_wide(PathPrefix("/"))
    assert not is_vault_wide(PathPrefix("notes"))
    assert not is_vault_wide(ExplicitList(["a.md"]))

    assert describe_scope(EntireCollection()) == "(entire vault)"
    assert describe_scope(PathPrefix("notes")) == 'in "notes"'
    assert describe_scope(ExplicitList(["a.md"])) == "in 1 specified file"
    assert describe_scope(ExplicitList(["a.md", "b.md"])) == "in 2 specified files"
    assert describe_scope(PathPrefix("x" * 50)) == 'in "...' + "x" * 37 + '"'
