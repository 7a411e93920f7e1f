import threading

from sitecrawl.hosts import MAX_HOST_DELAY, HostStateTracker


def test_unknown_host_is_not_slow():
    hosts = HostStateTracker()
    assert hosts.delay_for("a.test") is None
    assert not hosts.is_slow("a.test")
    assert hosts.slow_hosts() == []


def test_mark_slow_caps_delay():
    hosts = HostStateTracker()
    assert hosts.mark_slow("a.test", 16.0) == MAX_HOST_DELAY
    assert hosts.delay_for("a.test") == MAX_HOST_DELAY
    assert hosts.mark_slow("b.test", 2.5) == 2.5
    assert hosts.slow_hosts() == ["a.test", "b.test"]


def test_slow_is_monotonic_and_last_write_wins():
    hosts = HostStateTracker()
    hosts.mark_slow("a.test", 4.0)
    hosts.mark_slow("a.test", 3.0)
    assert hosts.is_slow("a.test")
    assert hosts.delay_for("a.test") == 3.0
    snap = hosts.snapshot()
    assert snap["a.test"].slow and snap["a.test"].delay == 3.0


def test_concurrent_marks_stay_capped():
    hosts = HostStateTracker(max_delay=5.0)

    def mark(i):
        hosts.mark_slow("a.test", float(i))

    threads = [threading.Thread(target=mark, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert 0.0 <= hosts.delay_for("a.test") <= 5.0
