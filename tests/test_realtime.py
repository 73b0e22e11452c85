import threading

from services.realtime_service import ChangeFeedHub, order_channel


def test_active_subscriber_receives_published_snapshots_in_order():
    hub = ChangeFeedHub()
    with hub.subscribe(order_channel("o1")) as sub:
        assert hub.publish(order_channel("o1"), {"status": "confirmed"}) == 1
        hub.publish(order_channel("o1"), {"status": "shipped"})
        assert sub.poll(timeout=1) == {"status": "confirmed"}
        assert sub.poll(timeout=1) == {"status": "shipped"}


def test_channels_are_isolated():
    hub = ChangeFeedHub()
    with hub.subscribe(order_channel("o1")) as sub:
        hub.publish(order_channel("o2"), {"status": "shipped"})
        assert sub.poll(timeout=0.05) is None


def test_closed_subscription_receives_nothing_and_releases_channel():
    hub = ChangeFeedHub()
    sub = hub.subscribe(order_channel("o1"))
    assert hub.subscriber_count(order_channel("o1")) == 1
    sub.close()

    assert hub.subscriber_count(order_channel("o1")) == 0
    assert hub.publish(order_channel("o1"), {"status": "shipped"}) == 0
    assert sub.poll(timeout=0.05) is None
    assert list(sub) == []


def test_subscription_released_when_consumer_raises():
    hub = ChangeFeedHub()
    try:
        with hub.subscribe(order_channel("o1")):
            raise RuntimeError("view crashed")
    except RuntimeError:
        pass
    assert hub.subscriber_count(order_channel("o1")) == 0


def test_iterator_blocks_until_snapshot_and_stops_on_close():
    hub = ChangeFeedHub()
    sub = hub.subscribe(order_channel("o1"))
    received = []

    def consume():
        for snapshot in sub:
            received.append(snapshot)
            if len(received) == 2:
                sub.close()

    t = threading.Thread(target=consume)
    t.start()
    hub.publish(order_channel("o1"), 1)
    hub.publish(order_channel("o1"), 2)
    t.join(timeout=5)

    assert not t.is_alive()
    assert received == [1, 2]


def test_multiple_viewers_observe_same_order():
    hub = ChangeFeedHub()
    with hub.subscribe(order_channel("o1")) as buyer_view, hub.subscribe(order_channel("o1")) as seller_view:
        assert hub.publish(order_channel("o1"), "snap") == 2
        assert buyer_view.poll(timeout=1) == "snap"
        assert seller_view.poll(timeout=1) == "snap"


class _Snap:
    def __init__(self, version, status):
        self.version = version
        self.status = status


def test_older_versioned_snapshot_is_dropped():
    hub = ChangeFeedHub()
    channel = order_channel("o1")
    with hub.subscribe(channel) as sub:
        assert hub.publish(channel, _Snap(3, "shipped")) == 1
        # a writer that committed v2 earlier but published late
        assert hub.publish(channel, _Snap(2, "confirmed")) == 0
        assert hub.publish(channel, _Snap(3, "shipped")) == 0
        hub.publish(channel, _Snap(4, "delivered"))

        assert sub.poll(timeout=1).status == "shipped"
        assert sub.poll(timeout=1).status == "delivered"
        assert sub.poll(timeout=0.05) is None


def test_version_floor_survives_resubscription():
    hub = ChangeFeedHub()
    channel = order_channel("o1")
    hub.publish(channel, _Snap(5, "shipped"))
    with hub.subscribe(channel) as sub:
        hub.publish(channel, _Snap(4, "processing"))
        assert sub.poll(timeout=0.05) is None
