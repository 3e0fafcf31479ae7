"""
Tests for the Settlement primitive.
"""

import threading
import time
import pytest

from hostfs.settlement import Settlement, settle_from_callback


def test_resolve_and_wait():
    """Test that wait returns the resolved value."""
    settlement = Settlement()
    assert not settlement.done()

    assert settlement.resolve(42)
    assert settlement.done()
    assert settlement.wait() == 42


def test_reject_and_wait():
    """Test that wait raises the rejection error."""
    settlement = Settlement.rejected(FileNotFoundError(2, "missing", "/nope"))

    with pytest.raises(FileNotFoundError) as excinfo:
        settlement.wait()

    assert excinfo.value.errno == 2


def test_second_settle_is_ignored():
    """Test that a settled outcome is never overwritten."""
    settlement = Settlement()
    assert settlement.resolve("first")

    assert not settlement.resolve("second")
    assert not settlement.reject(RuntimeError("late"))
    assert settlement.wait() == "first"

    rejected = Settlement()
    assert rejected.reject(ValueError("first"))
    assert not rejected.resolve("late")
    with pytest.raises(ValueError, match="first"):
        rejected.wait()


def test_reject_requires_exception():
    """Test that reject refuses non-exception values."""
    with pytest.raises(TypeError):
        Settlement().reject("not an exception")


def test_racing_settlers_settle_once():
    """Test that exactly one of many concurrent settle calls wins."""
    settlement = Settlement()
    barrier = threading.Barrier(16)
    winners = []

    def settle(i):
        barrier.wait()
        if i % 2:
            won = settlement.resolve(i)
        else:
            won = settlement.reject(RuntimeError(str(i)))
        if won:
            winners.append(i)

    threads = [threading.Thread(target=settle, args=(i,)) for i in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(winners) == 1
    winner = winners[0]
    if winner % 2:
        assert settlement.wait() == winner
    else:
        with pytest.raises(RuntimeError, match=str(winner)):
            settlement.wait()


def test_wait_blocks_until_settled():
    """Test that wait suspends only the waiting thread."""
    settlement = Settlement()

    def later():
        time.sleep(0.05)
        settlement.resolve("done")

    threading.Thread(target=later).start()
    assert settlement.wait(timeout=5) == "done"


def test_wait_timeout():
    """Test that a timed-out wait leaves the settlement pending."""
    settlement = Settlement()

    with pytest.raises(TimeoutError):
        settlement.wait(timeout=0.01)

    assert not settlement.done()


def test_spawn():
    """Test running work on a background thread."""
    assert Settlement.spawn(lambda a, b: a + b, 1, 2).wait() == 3

    def fail():
        raise KeyError("boom")

    with pytest.raises(KeyError):
        Settlement.spawn(fail).wait()


def test_callbacks_and_map():
    """Test done callbacks and derived settlements."""
    seen = []
    settlement = Settlement()
    settlement.add_done_callback(lambda s: seen.append(s.wait()))
    doubled = settlement.map(lambda value: value * 2)

    settlement.resolve(21)

    assert seen == [21]
    assert doubled.wait() == 42

    # callbacks added after settlement run immediately
    settlement.add_done_callback(lambda s: seen.append("late"))
    assert seen == [21, "late"]


def test_map_propagates_rejection():
    """Test that map forwards errors without calling the mapper."""
    mapped = Settlement.rejected(OSError("bad")).map(lambda value: pytest.fail())

    with pytest.raises(OSError, match="bad"):
        mapped.wait()


def test_settle_from_callback():
    """Test adapting an (error, result) callback."""
    settlement, callback = settle_from_callback()
    callback(None, "value")
    assert settlement.wait() == "value"

    settlement, callback = settle_from_callback()
    callback(PermissionError("denied"))
    assert isinstance(settlement.exception(), PermissionError)
