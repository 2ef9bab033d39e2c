import pytest

from scribe.datamodel import Note
from scribe.search import filter_notes


@pytest.fixture
def notes():
    return [
        Note(id="1", title="Meeting Notes", content="discuss budget", tags=["work"]),
        Note(id="2", title="Groceries", content="milk, eggs", tags=["home"]),
        Note(id="3", title="Ideas", content="Budget app", tags=[]),
    ]


@pytest.mark.parametrize("query", ["budget", "MEETING", "Work", "notes"])
def test_matches_title_content_or_tag(notes, query):
    assert notes[0] in filter_notes(notes, query)


def test_preserves_collection_order(notes):
    assert [n.id for n in filter_notes(notes, "budget")] == ["1", "3"]


def test_no_match(notes):
    assert filter_notes(notes, "xyz") == []


def test_empty_query_returns_all(notes):
    assert filter_notes(notes, "") == notes


def test_partial_tag_match(notes):
    assert [n.id for n in filter_notes(notes, "hom")] == ["2"]
