# ABOUTME: Unit tests for merging local metadata with an online lookup result.
# ABOUTME: Checks blank filling, tag union, conflict prompts and edited values.

from bookwarden.metadata.merge import merge_metadata
from bookwarden.metadata.types import BookMetadata


class ScriptedChoices:
    """Answers each conflict from a field -> answer mapping and records prompts."""

    def __init__(self, answers: dict[str, str]) -> None:
        self.answers = answers
        self.asked: list[tuple[str, str, str]] = []

    def accept(self, question: str, default: bool = False) -> bool:
        return default

    def choose(self, field_name: str, local: str, remote: str) -> str:
        self.asked.append((field_name, local, remote))
        return self.answers.get(field_name, local)

    def edit(self, field_name: str, current: str) -> str:
        return current


def _local() -> BookMetadata:
    return BookMetadata(
        title="Dune",
        authors=["Frank Herbert"],
        year="1965",
        tags=["classic"],
        identifiers={"uuid": "abc"},
    )


def _remote() -> BookMetadata:
    return BookMetadata(
        title="Dune",
        authors=["Frank Herbert"],
        year="1990",
        publisher="Ace",
        isbn="9780441172719",
        tags=["fiction", "classic"],
        identifiers={"uuid": "other", "google": "B1"},
    )


class TestMergeMetadata:
    """merge_metadata should fill blanks and settle conflicts through the user."""

    def test_blanks_filled_from_remote(self) -> None:
        merged = merge_metadata(_local(), _remote())
        assert merged.publisher == "Ace"
        assert merged.isbn == "9780441172719"

    def test_local_wins_without_interaction(self) -> None:
        assert merge_metadata(_local(), _remote()).year == "1965"

    def test_tags_unioned_in_order(self) -> None:
        assert merge_metadata(_local(), _remote()).tags == ["classic", "fiction"]

    def test_identifiers_prefer_local(self) -> None:
        merged = merge_metadata(_local(), _remote())
        assert merged.identifiers == {"uuid": "abc", "google": "B1"}

    def test_inputs_untouched(self) -> None:
        local = _local()
        merge_metadata(local, _remote())
        assert local.publisher is None
        assert local.tags == ["classic"]

    def test_only_conflicts_are_asked(self) -> None:
        choices = ScriptedChoices({})
        merge_metadata(_local(), _remote(), choices)
        assert choices.asked == [("year", "1965", "1990")]

    def test_case_only_difference_not_asked(self) -> None:
        remote = _remote()
        remote.title = "DUNE"
        choices = ScriptedChoices({})
        merged = merge_metadata(_local(), remote, choices)
        assert merged.title == "Dune"
        assert all(name != "title" for name, _, _ in choices.asked)

    def test_remote_choice(self) -> None:
        merged = merge_metadata(_local(), _remote(), ScriptedChoices({"year": "1990"}))
        assert merged.year == "1990"

    def test_edited_value_is_validated(self) -> None:
        merged = merge_metadata(_local(), _remote(), ScriptedChoices({"year": "1966"}))
        assert merged.year == "1966"

    def test_invalid_edit_keeps_local(self) -> None:
        merged = merge_metadata(_local(), _remote(), ScriptedChoices({"year": "soon"}))
        assert merged.year == "1965"
