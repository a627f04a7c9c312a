"""Tests for the content store — front-matter parsing and ordering."""

from __future__ import annotations

import datetime as dt
from pathlib import Path, PurePosixPath

import pytest

from pagesmith.core.content_store import (
    ContentStore,
    FrontMatterError,
    parse_document,
    split_front_matter,
)


class TestSplitFrontMatter:
    def test_yaml(self):
        fmt, meta, body = split_front_matter("---\ntitle: X\n---\nBody\n")
        assert fmt == "yaml"
        assert meta == "title: X\n"
        assert body == "Body\n"

    def test_toml(self):
        fmt, meta, _ = split_front_matter('+++\ntitle = "X"\n+++\nBody\n')
        assert fmt == "toml"
        assert meta == 'title = "X"\n'

    def test_no_front_matter(self):
        assert split_front_matter("Just text\n") == (None, "", "Just text\n")

    def test_unterminated_block(self):
        with pytest.raises(FrontMatterError, match="unterminated"):
            split_front_matter("---\ntitle: X\nBody\n")

    def test_leading_bom_is_ignored(self):
        fmt, _, _ = split_front_matter("\ufeff---\ntitle: X\n---\n")
        assert fmt == "yaml"


class TestParseDocument:
    def test_yaml_fields(self):
        doc = parse_document(
            "---\ntitle: X\ndate: 2023-06-06\ntags: [a]\n---\nBody\n",
            PurePosixPath("posts/x.md"),
        )
        assert doc.title == "X"
        assert doc.date == dt.date(2023, 6, 6)
        assert doc.draft is False
        assert doc.front_matter["tags"] == ["a"]
        assert doc.slug == "x"

    def test_toml_datetime(self):
        doc = parse_document(
            '+++\ntitle = "T"\ndate = 2023-06-06T10:00:00Z\ndraft = true\n+++\n',
            PurePosixPath("t.md"),
        )
        assert doc.date == dt.date(2023, 6, 6)
        assert doc.draft is True

    def test_string_date(self):
        doc = parse_document(
            "---\ntitle: X\ndate: '2023-06-06T08:30:00+02:00'\n---\n", PurePosixPath("x.md")
        )
        assert doc.date == dt.date(2023, 6, 6)

    def test_title_falls_back_to_file_name(self):
        assert parse_document("Body", PurePosixPath("posts/hello.md")).title == "hello"

    def test_bundle_index_uses_directory_name(self):
        doc = parse_document("Body", PurePosixPath("posts/trip/index.md"))
        assert doc.title == "trip"
        assert doc.slug == "trip"

    def test_invalid_yaml(self):
        with pytest.raises(FrontMatterError):
            parse_document("---\ntitle: [unclosed\n---\n", PurePosixPath("x.md"))

    def test_non_mapping_front_matter(self):
        with pytest.raises(FrontMatterError, match="mapping"):
            parse_document("---\n- a\n- b\n---\n", PurePosixPath("x.md"))

    def test_bad_date(self):
        with pytest.raises(FrontMatterError, match="date"):
            parse_document("---\ndate: someday\n---\n", PurePosixPath("x.md"))

    def test_bad_date_lenient_is_undated(self, caplog):
        doc = parse_document(
            "---\ndate: someday\n---\n", PurePosixPath("x.md"), strict_dates=False
        )
        assert doc.date is None
        assert "someday" in caplog.text

    @pytest.mark.parametrize(
        "raw",
        [
            "'Tue, 06 Jun 2023 10:00:00 UTC'",
            "'June 6, 2023'",
            "'6 Jun 2023'",
        ],
    )
    def test_non_iso_dates(self, raw):
        doc = parse_document(f"---\ndate: {raw}\n---\n", PurePosixPath("x.md"))
        assert doc.date == dt.date(2023, 6, 6)

    @pytest.mark.parametrize("raw,expected", [("'false'", False), ("'true'", True), ("'no'", False)])
    def test_string_draft_flag(self, raw, expected):
        doc = parse_document(f"---\ndraft: {raw}\n---\n", PurePosixPath("x.md"))
        assert doc.draft is expected

    def test_unrecognised_draft_string(self):
        with pytest.raises(FrontMatterError, match="boolean"):
            parse_document("---\ndraft: 'maybe'\n---\n", PurePosixPath("x.md"))


class TestContentStore:
    def test_missing_root_is_empty(self, tmp_path: Path):
        assert ContentStore(tmp_path / "nope").documents() == []

    def test_newest_first_and_undated_last(self, site_dir, write_post):
        write_post("old", title="Old", date="2020-01-01")
        write_post("new", title="New", date="2024-05-01")
        write_post("undated", title="Undated", date=None)
        docs = ContentStore(site_dir / "content").documents()
        assert [d.title for d in docs] == ["New", "Old", "Undated"]

    def test_drafts_hidden_by_default(self, site_dir, write_post):
        write_post("draft", title="Draft", draft=True)
        write_post("live", title="Live")
        store = ContentStore(site_dir / "content")
        assert [d.title for d in store.documents()] == ["Live"]
        assert len(store.documents(include_drafts=True)) == 2

    def test_section_index_skipped(self, site_dir, write_post):
        write_post("a", title="A")
        (site_dir / "content" / "posts" / "_index.md").write_text("---\ntitle: Posts\n---\n")
        assert [d.title for d in ContentStore(site_dir / "content").documents()] == ["A"]

    def test_error_names_the_file(self, site_dir):
        bad = site_dir / "content" / "posts" / "broken.md"
        bad.write_text("---\ntitle: X\n")
        with pytest.raises(FrontMatterError, match="posts/broken.md"):
            ContentStore(site_dir / "content").documents()

    def test_paths_are_relative_posix(self, site_dir, write_post):
        write_post("a")
        (doc,) = ContentStore(site_dir / "content").documents()
        assert doc.path == PurePosixPath("posts/a.md")
