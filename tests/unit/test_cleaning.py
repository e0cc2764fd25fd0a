# ABOUTME: Unit tests for metadata cleaning and alias resolution.
# ABOUTME: Covers HTML stripping, tag normalization and author/tag/publisher aliases.

from bookwarden.metadata.cleaning import AliasTable, clean_metadata, clean_tags, strip_html
from bookwarden.metadata.types import BookMetadata


class TestStripHtml:
    """strip_html should reduce markup to plain text."""

    def test_removes_tags_and_entities(self) -> None:
        assert strip_html("<p>Fish &amp; <b>chips</b></p>") == "Fish & chips"

    def test_keeps_paragraph_breaks(self) -> None:
        assert strip_html("<p>One</p><p>Two</p>") == "One\nTwo"

    def test_plain_text_unchanged(self) -> None:
        assert strip_html("Just text") == "Just text"


class TestAliasTable:
    """AliasTable should map aliases onto canonical names."""

    def test_resolves_case_insensitively(self) -> None:
        table = AliasTable({"Iain M. Banks": ["Iain Banks", "banks, iain"]})
        assert table.resolve("IAIN BANKS") == "Iain M. Banks"

    def test_unknown_value_is_unchanged(self) -> None:
        assert AliasTable({}).resolve("Anyone") == "Anyone"


class TestCleanTags:
    """clean_tags should normalize and deduplicate tags."""

    def test_lowercases_and_deduplicates(self) -> None:
        assert clean_tags(["Fiction", "fiction", " Science  Fiction "]) == [
            "fiction",
            "science fiction",
        ]

    def test_applies_aliases(self) -> None:
        aliases = AliasTable({"science fiction": ["sf", "scifi"]})
        assert clean_tags(["SF", "scifi", "horror"], aliases) == ["science fiction", "horror"]


class TestCleanMetadata:
    """clean_metadata should tidy every field in place."""

    def test_normalizes_fields(self) -> None:
        meta = BookMetadata(
            title="  The   Player of Games ",
            authors=["Iain Banks", " Iain M. Banks"],
            language="EN ",
            publisher="Orbit Books",
            description="<p>A game.</p>",
            tags=["SF"],
        )
        clean_metadata(
            meta,
            author_aliases=AliasTable({"Iain M. Banks": ["Iain Banks"]}),
            tag_aliases=AliasTable({"science fiction": ["sf"]}),
            publisher_aliases=AliasTable({"Orbit": ["Orbit Books"]}),
        )
        assert meta.title == "The Player of Games"
        assert meta.authors == ["Iain M. Banks"]
        assert meta.language == "en"
        assert meta.publisher == "Orbit"
        assert meta.description == "A game."
        assert meta.tags == ["science fiction"]
