"""Tests for book/chapter/subtopic models."""

import pytest

from reading_tracker.core.models import Book, Chapter, Subtopic


class TestSubtopic:
    """Tests for Subtopic parsing and flag lookup."""

    def test_from_dict_reads_boolean_user_keys(self):
        """Every non-reserved boolean key is a user flag."""
        subtopic = Subtopic.from_dict(
            {"id": "1.1", "title": "Overview", "Khare": True, "Roy": False, "note": "x"}
        )
        assert subtopic.completion == {"Khare": True, "Roy": False}

    def test_missing_user_reads_false(self):
        """Lookup defaults to False for users without a flag."""
        subtopic = Subtopic(id="1.1", title="Overview")
        assert subtopic.is_completed("Khare") is False

    def test_to_dict_flattens_completion(self):
        """Wire format puts user flags beside id and title."""
        subtopic = Subtopic(id="1.1", title="Overview", completion={"Khare": True})
        assert subtopic.to_dict() == {"id": "1.1", "title": "Overview", "Khare": True}

    def test_to_dict_keeps_id_and_title_over_same_named_flags(self):
        subtopic = Subtopic(
            id="1.1", title="Overview", completion={"id": True, "title": False}
        )
        data = subtopic.to_dict()
        assert data["id"] == "1.1"
        assert data["title"] == "Overview"

    @pytest.mark.parametrize("data", ["1.1", ["1.1"], None])
    def test_from_dict_rejects_non_object(self, data):
        with pytest.raises(TypeError):
            Subtopic.from_dict(data)


class TestBook:
    """Tests for Book parsing and chapter lookup."""

    def test_from_dict_fills_missing_user_flags(self):
        """Users absent from a subtopic get an explicit False."""
        book = Book.from_dict(
            {"users": ["Khare", "Roy"], "book": [
                {"chapter": "Intro", "subtopics": [{"id": "1.1", "title": "Overview", "Khare": True}]}
            ]}
        )
        subtopic = book.get_subtopic("1.1")
        assert subtopic.completion == {"Khare": True, "Roy": False}

    def test_from_dict_uses_default_users(self):
        """Documents without a users list track the default users."""
        book = Book.from_dict({"book": []}, default_users=["Ana", "Luis"])
        assert book.users == ["Ana", "Luis"]

    def test_from_dict_requires_book_list(self):
        """Missing or non-list 'book' is rejected."""
        with pytest.raises(KeyError):
            Book.from_dict({"users": ["Khare"]})
        with pytest.raises(TypeError):
            Book.from_dict({"book": {"chapter": "Intro"}})

    def test_from_dict_rejects_malformed_chapters(self):
        """Chapters and subtopic lists of the wrong type raise TypeError."""
        with pytest.raises(TypeError):
            Book.from_dict({"book": ["Intro"]})
        with pytest.raises(TypeError):
            Book.from_dict({"book": [{"chapter": "Intro", "subtopics": "1.1"}]})
        with pytest.raises(TypeError):
            Book.from_dict({"book": [{"chapter": "Intro", "subtopics": ["1.1"]}]})

    @pytest.mark.parametrize("users", [["id"], ["Khare", "title"]])
    def test_from_dict_rejects_reserved_users(self, users):
        """User names may not collide with subtopic keys."""
        with pytest.raises(ValueError):
            Book.from_dict({"users": users, "book": []})

    def test_to_dict_shape(self, seed_data):
        """Serialized book matches the document it was parsed from."""
        assert Book.from_dict(seed_data).to_dict() == seed_data

    def test_find_chapter_for(self, seed_data):
        """Locates the chapter owning a subtopic id."""
        book = Book.from_dict(seed_data)
        assert book.find_chapter_for("2.2").title == "Basics"
        assert book.find_chapter_for("9.9") is None

    def test_merge_chapter_replaces_by_title(self, seed_data):
        """Merge swaps the chapter with the matching title in place."""
        book = Book.from_dict(seed_data)
        updated = Chapter(title="Basics", subtopics=[Subtopic(id="2.1", title="Variables")])

        assert book.merge_chapter(updated) is True
        assert [c.title for c in book.chapters] == ["Intro", "Basics"]
        assert book.chapters[1] is updated

    def test_merge_chapter_unknown_title(self, seed_data):
        """Merging an unknown chapter changes nothing."""
        book = Book.from_dict(seed_data)
        assert book.merge_chapter(Chapter(title="Appendix")) is False
        assert len(book.chapters) == 2

    def test_subtopic_count(self, seed_data):
        assert Book.from_dict(seed_data).subtopic_count() == 5
