"""Tests for the JSON document store."""

import json

import pytest

from reading_tracker.core.errors import (
    StoreFailureError,
    StoreUnavailableError,
    SubtopicNotFoundError,
)
from reading_tracker.core import json_store as json_store_module
from reading_tracker.core.json_store import JsonProgressStore


class TestInitialize:
    """Tests for seeding the progress document."""

    def test_copies_seed_when_missing(self, tmp_path, seed_file, seed_data):
        """First start copies the seed outline into place."""
        store = JsonProgressStore(path=tmp_path / "data" / "progress.json", seed_path=seed_file)
        store.initialize()

        assert store.path.exists()
        assert json.loads(store.path.read_text(encoding="utf-8")) == seed_data

    def test_keeps_existing_document(self, json_store, seed_file):
        """Existing progress is never replaced by the seed."""
        json_store.set_completion("Khare", "1.1", True)
        json_store.initialize()

        assert json_store.load_all().get_subtopic("1.1").is_completed("Khare") is True

    def test_no_seed_is_noop(self, tmp_path):
        """Without a seed the document stays missing."""
        store = JsonProgressStore(path=tmp_path / "progress.json")
        store.initialize()
        assert not store.path.exists()


class TestLoadAll:
    """Tests for reading the document."""

    def test_loads_book(self, json_store):
        book = json_store.load_all()
        assert [c.title for c in book.chapters] == ["Intro", "Basics"]
        assert book.users == ["Khare", "Roy"]

    def test_missing_file(self, tmp_path):
        """Missing document is StoreUnavailable."""
        store = JsonProgressStore(path=tmp_path / "nope.json")
        with pytest.raises(StoreUnavailableError):
            store.load_all()

    def test_malformed_json(self, tmp_path):
        """Unparseable document is StoreUnavailable."""
        path = tmp_path / "progress.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreUnavailableError):
            JsonProgressStore(path=path).load_all()

    def test_missing_book_key(self, tmp_path):
        """Document without a book list is StoreUnavailable."""
        path = tmp_path / "progress.json"
        path.write_text(json.dumps({"users": ["Khare"]}), encoding="utf-8")
        with pytest.raises(StoreUnavailableError):
            JsonProgressStore(path=path).load_all()

    @pytest.mark.parametrize(
        "document",
        [
            {"book": [{"chapter": "A", "subtopics": ["oops"]}]},
            {"book": ["A"]},
            {"book": [{"chapter": "A", "subtopics": "oops"}]},
            {"users": "Khare", "book": []},
        ],
    )
    def test_malformed_entries(self, tmp_path, document):
        """Entries of the wrong shape are StoreUnavailable."""
        path = tmp_path / "progress.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        with pytest.raises(StoreUnavailableError):
            JsonProgressStore(path=path).load_all()

    def test_reserved_user_in_document(self, tmp_path):
        """A document tracking a user named like a subtopic key is rejected."""
        path = tmp_path / "progress.json"
        path.write_text(json.dumps({"users": ["id"], "book": []}), encoding="utf-8")
        with pytest.raises(StoreUnavailableError):
            JsonProgressStore(path=path).load_all()

    def test_default_users_when_document_has_none(self, tmp_path):
        """Configured users apply to documents without a users list."""
        path = tmp_path / "progress.json"
        path.write_text(json.dumps({"book": []}), encoding="utf-8")
        store = JsonProgressStore(path=path, users=["Ana", "Luis"])
        assert store.load_all().users == ["Ana", "Luis"]


class TestSave:
    """Tests for writing the document."""

    def test_save_overwrites_whole_document(self, json_store):
        """Saved document is indented JSON and no temp file is left behind."""
        book = json_store.load_all()
        book.get_subtopic("1.2").set_completed("Roy", True)
        json_store.save(book)

        text = json_store.path.read_text(encoding="utf-8")
        assert text.startswith("{\n  ")
        assert json.loads(text)["book"][0]["subtopics"][1]["Roy"] is True
        assert list(json_store.path.parent.glob("*.tmp")) == []

    def test_save_failure(self, tmp_path, json_store):
        """Unwritable target raises StoreFailure."""
        # A directory in place of the file makes the rename fail
        target = tmp_path / "blocked"
        target.mkdir()
        (target / "child").write_text("x")
        store = JsonProgressStore(path=target)

        with pytest.raises(StoreFailureError):
            store.save(json_store.load_all())

        assert list(tmp_path.glob("*.tmp")) == []

    def test_each_save_uses_its_own_temp_file(self, json_store, monkeypatch):
        """Concurrent writers never share a temp path."""
        sources = []
        real_replace = json_store_module.os.replace

        def recording_replace(src, dst):
            sources.append(str(src))
            real_replace(src, dst)

        monkeypatch.setattr(json_store_module.os, "replace", recording_replace)

        book = json_store.load_all()
        json_store.save(book)
        json_store.save(book)

        assert len(sources) == 2
        assert sources[0] != sources[1]
        assert all(s.endswith(".tmp") for s in sources)
        assert list(json_store.path.parent.glob("*.tmp")) == []


class TestSetCompletion:
    """Tests for single-flag updates."""

    def test_persists_flag(self, json_store):
        json_store.set_completion("Khare", "2.3", True)
        assert json_store.load_all().get_subtopic("2.3").is_completed("Khare") is True

    def test_unknown_subtopic_leaves_file_untouched(self, json_store):
        """Unknown id raises and writes nothing."""
        before = json_store.path.read_bytes()

        with pytest.raises(SubtopicNotFoundError):
            json_store.set_completion("Khare", "9.9", True)

        assert json_store.path.read_bytes() == before
