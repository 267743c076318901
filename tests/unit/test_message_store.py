"""Unit tests for the bounded message store.

Covers front insertion, oldest-first eviction, snapshots and clearing.
"""

import threading

import pytest

from mailsink.services.message_store import MessageStore
from tests.conftest import make_message


class TestInsertFront:
    """Test insertion order and the capacity bound."""

    def test_newest_message_comes_first(self):
        store = MessageStore(capacity=5)
        first = make_message(subject="first")
        second = make_message(subject="second")

        store.insert_front(first)
        store.insert_front(second)

        assert store.snapshot() == (second, first)

    def test_capacity_two_keeps_last_two(self):
        """Inserting A, B, C into a store of two leaves [C, B]."""
        store = MessageStore(capacity=2)
        a, b, c = (make_message(subject=s) for s in "ABC")

        store.insert_front(a)
        store.insert_front(b)
        evicted = store.insert_front(c)

        assert store.snapshot() == (c, b)
        assert evicted == [a]

    def test_size_never_exceeds_capacity(self):
        store = MessageStore(capacity=3)

        for i in range(20):
            store.insert_front(make_message(subject=str(i)))
            assert len(store) <= 3

    def test_retains_exactly_the_newest_messages(self):
        store = MessageStore(capacity=4)
        messages = [make_message(subject=str(i)) for i in range(10)]

        for message in messages:
            store.insert_front(message)

        assert list(store.snapshot()) == list(reversed(messages[-4:]))

    def test_no_eviction_below_capacity(self):
        store = MessageStore(capacity=3)

        assert store.insert_front(make_message()) == []
        assert len(store) == 1

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            MessageStore(capacity=0)

    def test_concurrent_inserts_respect_capacity(self):
        store = MessageStore(capacity=50)

        def writer():
            for i in range(200):
                store.insert_front(make_message(subject=str(i)))

        threads = [threading.Thread(target=writer) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store) == 50


class TestEvictOverflow:
    """Test explicit overflow eviction."""

    def test_noop_when_within_capacity(self):
        store = MessageStore(capacity=2)
        store.insert_front(make_message())

        assert store.evict_overflow() == []
        assert len(store) == 1


class TestSnapshot:
    """Test snapshot isolation."""

    def test_snapshot_is_not_affected_by_later_writes(self):
        store = MessageStore(capacity=5)
        store.insert_front(make_message(subject="old"))

        snapshot = store.snapshot()
        store.insert_front(make_message(subject="new"))
        store.clear()

        assert [m.subject for m in snapshot] == ["old"]

    def test_snapshot_is_immutable(self):
        store = MessageStore(capacity=5)
        store.insert_front(make_message())

        assert isinstance(store.snapshot(), tuple)

    def test_stored_message_contents_cannot_change(self):
        store = MessageStore(capacity=5)
        store.insert_front(make_message(headers={"subject": "Hello"}))
        [message] = store.snapshot()

        with pytest.raises(TypeError):
            message.headers["subject"] = "Changed"
        with pytest.raises(AttributeError):
            message.attachments.append(None)
        with pytest.raises(AttributeError):
            message.to.value.append(None)

        assert store.snapshot()[0].headers == {"subject": "Hello"}

    def test_headers_are_copied_on_insert(self):
        headers = {"subject": "Hello"}
        store = MessageStore(capacity=5)
        store.insert_front(make_message(headers=headers))

        headers["subject"] = "Changed"

        assert store.snapshot()[0].headers["subject"] == "Hello"


class TestClear:
    """Test clearing the store."""

    def test_clear_empties_store(self):
        store = MessageStore(capacity=5)
        store.insert_front(make_message())
        store.insert_front(make_message())

        assert store.clear() == 2
        assert store.snapshot() == ()

    def test_clear_is_idempotent(self):
        store = MessageStore(capacity=5)
        store.insert_front(make_message())

        store.clear()
        assert store.snapshot() == ()
        assert store.clear() == 0
        assert store.snapshot() == ()
        assert len(store) == 0
