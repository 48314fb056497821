import logging

from diskview.traverser import Traverser


def test_message_counts_and_logs(caplog):
    tr = Traverser()
    with caplog.at_level(logging.DEBUG, logger="diskview.traverser"):
        tr.message("/a")
        tr.message("/a/b")
    assert tr.messages == 2
    assert [r.getMessage() for r in caplog.records] == ["/a", "/a/b"]


def test_progress_callback_unthrottled():
    calls = []
    tr = Traverser(progress=lambda p, n: calls.append((p, n)), min_interval=0)
    for p in ("/x", "/y", "/z"):
        tr.message(p)
    assert calls == [("/x", 1), ("/y", 2), ("/z", 3)]


def test_progress_callback_throttled():
    calls = []
    tr = Traverser(progress=lambda p, n: calls.append(p), min_interval=3600)
    for i in range(50):
        tr.message(f"/d{i}")
    assert calls == ["/d0"]
    assert tr.messages == 50


def test_failing_callback_does_not_propagate(caplog):
    def bad(path, n):
        raise RuntimeError("ui gone")

    tr = Traverser(progress=bad, min_interval=0)
    with caplog.at_level(logging.ERROR, logger="diskview.traverser"):
        tr.message("/a")
    assert tr.messages == 1
    assert any("/a" in r.getMessage() for r in caplog.records)
