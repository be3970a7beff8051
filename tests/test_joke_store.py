"""Unit tests for jokes/store.py.

Covers:
- create_joke() assigns an id and stores the owner verbatim
- delete_joke() only removes a joke when the owner id matches
- list_jokes() is newest first and honours the limit
- random_joke() / count_jokes() on empty and populated stores
"""

import pytest

import jokes.store as store_module
from jokes.models import Joke


def _joke(owner="u-1", name="Frogs", content="It gets toad away, every time."):
    return Joke(jokester_id=owner, name=name, content=content)


class TestCreateAndGet:
    def test_create_returns_id(self, joke_store):
        joke_id = joke_store.create_joke(_joke())
        assert isinstance(joke_id, str)
        assert len(joke_id) == 32

    def test_get_round_trip(self, joke_store):
        joke_id = joke_store.create_joke(_joke())
        joke = joke_store.get_joke(joke_id)
        assert joke is not None
        assert joke.id == joke_id
        assert joke.jokester_id == "u-1"
        assert joke.name == "Frogs"
        assert joke.created_at

    def test_get_missing(self, joke_store):
        assert joke_store.get_joke("nope") is None


class TestDelete:
    def test_owner_can_delete(self, joke_store):
        joke_id = joke_store.create_joke(_joke(owner="alice"))
        assert joke_store.delete_joke(joke_id, jokester_id="alice") is True
        assert joke_store.get_joke(joke_id) is None

    def test_other_user_cannot_delete(self, joke_store):
        joke_id = joke_store.create_joke(_joke(owner="alice"))
        assert joke_store.delete_joke(joke_id, jokester_id="bob") is False
        assert joke_store.get_joke(joke_id) is not None

    def test_delete_missing(self, joke_store):
        assert joke_store.delete_joke("nope", jokester_id="alice") is False

    def test_delete_is_not_repeatable(self, joke_store):
        joke_id = joke_store.create_joke(_joke(owner="alice"))
        joke_store.delete_joke(joke_id, jokester_id="alice")
        assert joke_store.delete_joke(joke_id, jokester_id="alice") is False


class TestListing:
    def test_newest_first_with_limit(self, joke_store, monkeypatch: pytest.MonkeyPatch):
        stamps = iter(f"2026-01-0{day}T00:00:00+00:00" for day in range(1, 8))
        monkeypatch.setattr(store_module, "_now_iso", lambda: next(stamps))
        ids = [joke_store.create_joke(_joke(name=f"joke {i}")) for i in range(7)]

        listed = joke_store.list_jokes()
        assert [j.id for j in listed] == list(reversed(ids))[:5]
        assert len(joke_store.list_jokes(limit=2)) == 2

    def test_count(self, joke_store):
        assert joke_store.count_jokes() == 0
        joke_store.create_joke(_joke())
        joke_store.create_joke(_joke(owner="u-2"))
        assert joke_store.count_jokes() == 2


class TestRandom:
    def test_empty_store(self, joke_store):
        assert joke_store.random_joke() is None

    def test_single_joke(self, joke_store):
        joke_id = joke_store.create_joke(_joke())
        assert joke_store.random_joke().id == joke_id

    def test_picks_existing_joke(self, joke_store):
        ids = {joke_store.create_joke(_joke(name=f"joke {i}")) for i in range(4)}
        for _ in range(10):
            assert joke_store.random_joke().id in ids
