import pytest

from tagsmith_api.domain.exceptions import EmptyTagListError
from tagsmith_api.frontmatter import Sequence, parse_document
from tagsmith_api.transform import (
    AddTags,
    RemoveTags,
    ReplaceTags,
    apply_tags,
    dedupe_tags,
    extract_tags,
    split_tag_input,
    transform_tags,
    validate_operation,
)


def test_add_merges_and_keeps_order() -> None:
    t = transform_tags(["alpha", "beta"], AddTags(["beta", "gamma"]))
    assert t.changed
    assert t.new == ["alpha", "beta", "gamma"]


def test_add_is_case_insensitive_and_idempotent() -> None:
    assert not transform_tags(["alpha"], AddTags(["ALPHA"])).changed

    once = transform_tags(["a"], AddTags(["b", "c"])).new
    twice = transform_tags(once, AddTags(["b", "c"]))
    assert not twice.changed
    assert twice.new == once


def test_add_to_empty_document() -> None:
    t = transform_tags([], AddTags(["x", "X", "y"]))
    assert t.old == []
    assert t.new == ["x", "y"]


def test_remove_matches_any_casing() -> None:
    t = transform_tags(["alpha", "Beta", "gamma"], RemoveTags(["beta"]))
    assert t.new == ["alpha", "gamma"]
    assert not transform_tags(t.new, RemoveTags(["beta"])).changed


def test_remove_without_match_is_no_change() -> None:
    assert not transform_tags(["a", "b"], RemoveTags(["z"])).changed


def test_replace_pairwise() -> None:
    op = ReplaceTags(find=["old1", "old2"], replacement=["new1", "new2"])
    t = transform_tags(["old1", "old2"], op)
    assert t.new == ["new1", "new2"]
    assert not transform_tags(t.new, op).changed


def test_replace_single_replacement_is_reused() -> None:
    t = transform_tags(["a", "b", "c"], ReplaceTags(find=["a", "b"], replacement=["z"]))
    assert t.new == ["z", "c"]


def test_replace_unpaired_find_tags_are_deleted() -> None:
    t = transform_tags(["a", "b", "c", "d"], ReplaceTags(find=["a", "b", "c"], replacement=["x", "y"]))
    assert t.new == ["x", "y", "d"]


def test_replace_with_nothing_deletes() -> None:
    t = transform_tags(["a", "b"], ReplaceTags(find=["A"], replacement=[]))
    assert t.new == ["b"]


def test_replace_last_matching_rule_wins() -> None:
    t = transform_tags(["a"], ReplaceTags(find=["a", "b"], replacement=["b", "c"]))
    assert t.new == ["c"]


def test_replace_into_existing_tag_dedupes() -> None:
    t = transform_tags(["old", "new"], ReplaceTags(find=["old"], replacement=["NEW"]))
    assert t.new == ["NEW"]


def test_replace_all() -> None:
    op = ReplaceTags(find=["y"], replacement=["fresh", "Fresh"], replace_all=True)
    t = transform_tags(["x", "y", "z"], op)
    assert t.new == ["fresh"]
    assert not transform_tags(["a", "b"], op).changed
    assert not transform_tags(t.new, op).changed


def test_output_never_holds_case_duplicates() -> None:
    ops = [
        AddTags(["A", "b", "B"]),
        RemoveTags(["c"]),
        ReplaceTags(find=["a"], replacement=["B"]),
        ReplaceTags(find=["a"], replacement=["q", "Q"], replace_all=True),
    ]
    for op in ops:
        new = transform_tags(["a", "A", "b", "c"], op).new
        assert len({t.casefold() for t in new}) == len(new)


def test_extract_tags_from_scalar_and_sequence() -> None:
    assert extract_tags(parse_document("---\ntags:  solo \n---\n").frontmatter) == ["solo"]
    assert extract_tags(parse_document("---\ntags: [A, a, b]\n---\n").frontmatter) == ["A", "b"]
    assert extract_tags(parse_document("---\ntitle: x\n---\n").frontmatter) == []
    assert extract_tags(None) == []


def test_apply_tags_sets_or_deletes_key() -> None:
    fm = parse_document("---\ntitle: x\ntags: [a]\n---\n").frontmatter
    assert "tags" not in apply_tags(fm, [])
    assert apply_tags(fm, ["b"])["tags"] == Sequence(("b",))
    assert list(apply_tags(None, ["b"])) == ["tags"]
    assert fm["tags"] == Sequence(("a",))


def test_split_tag_input() -> None:
    assert split_tag_input("a, b,,c ") == ["a", "b", "c"]
    assert split_tag_input([" a ", ""]) == ["a"]
    assert split_tag_input(None) == []
    assert dedupe_tags(["x", "X", "y"]) == ["x", "y"]


@pytest.mark.parametrize(
    "op",
    [
        AddTags([]),
        RemoveTags([" "]),
        ReplaceTags(find=[], replacement=["x"]),
    ],
)
def test_empty_requests_are_rejected(op) -> None:
    with pytest.raises(EmptyTagListError):
        validate_operation(op)
