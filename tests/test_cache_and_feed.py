"""
Tests for the change feed and the query cache it invalidates.
"""

from queue_desk.services.change_feed import ChangeEvent, ChangeFeed, publish_change
from queue_desk.services.query_cache import QueryCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_subscribers_only_receive_their_table():
    feed = ChangeFeed()
    bookings, branches = [], []
    feed.subscribe("bookings", bookings.append)
    feed.subscribe("branches", branches.append)

    publish_change(feed, "bookings", "update", 7, {"status": "confirmed"})

    assert bookings == [ChangeEvent("bookings", "update", 7, {"status": "confirmed"})]
    assert branches == []


def test_unsubscribe_stops_delivery():
    feed = ChangeFeed()
    received = []
    unsubscribe = feed.subscribe("bookings", received.append)

    unsubscribe()
    unsubscribe()
    publish_change(feed, "bookings", "insert", 1)

    assert received == []
    assert feed.subscriber_count("bookings") == 0


def test_broken_subscriber_does_not_stop_others():
    feed = ChangeFeed()
    received = []

    def broken(event):
        raise RuntimeError("listener down")

    feed.subscribe("bookings", broken)
    feed.subscribe("bookings", received.append)

    publish_change(feed, "bookings", "delete", 3)

    assert [event.record_id for event in received] == [3]


def test_publish_without_feed_is_a_no_op():
    publish_change(None, "bookings", "insert", 1)


def test_cache_entries_expire_after_ttl():
    clock = FakeClock()
    cache = QueryCache(ttl_seconds=30, clock=clock)
    cache.set("bookings", "all", ["a"])

    clock.now += 29
    assert cache.get("bookings", "all") == ["a"]

    clock.now += 1
    assert cache.get("bookings", "all") is None


def test_get_or_load_only_loads_on_miss():
    cache = QueryCache(ttl_seconds=30, clock=FakeClock())
    calls = []

    def loader():
        calls.append(1)
        return ["row"]

    assert cache.get_or_load("branches", "active", loader) == ["row"]
    assert cache.get_or_load("branches", "active", loader) == ["row"]
    assert len(calls) == 1


def test_purge_expired_drops_only_stale_entries():
    clock = FakeClock()
    cache = QueryCache(ttl_seconds=10, clock=clock)
    cache.set("bookings", "old", 1)
    clock.now += 5
    cache.set("bookings", "new", 2)
    clock.now += 6

    assert cache.purge_expired() == 1
    assert len(cache) == 1


def test_feed_changes_invalidate_only_the_changed_table():
    feed = ChangeFeed()
    cache = QueryCache(ttl_seconds=30, clock=FakeClock())
    cache.attach(feed, ("bookings", "branches"))
    cache.set("bookings", ("mine", 1), ["b"])
    cache.set("bookings", ("all", None, None), ["b", "c"])
    cache.set("branches", "active", ["main"])

    publish_change(feed, "bookings", "update", 1)

    assert cache.get("bookings", ("mine", 1)) is None
    assert cache.get("bookings", ("all", None, None)) is None
    assert cache.get("branches", "active") == ["main"]


def test_detach_stops_invalidation():
    feed = ChangeFeed()
    cache = QueryCache(ttl_seconds=30, clock=FakeClock())
    cache.attach(feed, ("bookings",))
    cache.detach()
    cache.set("bookings", "all", ["b"])

    publish_change(feed, "bookings", "update", 1)

    assert cache.get("bookings", "all") == ["b"]
    assert feed.subscriber_count("bookings") == 0


def test_dependent_tables_are_invalidated_with_their_source():
    feed = ChangeFeed()
    cache = QueryCache(ttl_seconds=30, clock=FakeClock())
    cache.attach(feed, ("bookings", "branches"), {"branches": ("bookings",)})
    cache.set("bookings", ("all", None, None), [{"branch_name": "Main Branch"}])
    cache.set("branches", ("active",), ["main"])

    publish_change(feed, "branches", "update", 1, {"name": "Downtown"})

    assert cache.get("bookings", ("all", None, None)) is None
    assert cache.get("branches", ("active",)) is None
