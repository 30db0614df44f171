import asyncio
import pytest
import pytest_asyncio
from unittest.mock import MagicMock

from space_storage.events import EventEmitter, AddItemsResponse
from space_storage.models import AddItemsResultSummary


def test_on_receives_every_emit():
    emitter = EventEmitter()
    listener = MagicMock()
    emitter.on("data", listener)

    assert emitter.emit("data", 1) is True
    emitter.emit("data", 2)

    assert [c.args[0] for c in listener.call_args_list] == [1, 2]


def test_once_listener_called_once():
    emitter = EventEmitter()
    listener = MagicMock()
    emitter.once("done", listener)

    emitter.emit("done", "summary")
    emitter.emit("done", "again")

    listener.assert_called_once_with("summary")
    assert emitter.listener_count("done") == 0


def test_off_removes_listener():
    emitter = EventEmitter()
    listener = MagicMock()
    emitter.on("data", listener)
    emitter.off("data", listener)

    assert emitter.emit("data", 1) is False
    listener.assert_not_called()


def test_listener_errors_are_contained():
    emitter = EventEmitter()
    good = MagicMock()
    emitter.on("data", MagicMock(side_effect=ValueError("boom")))
    emitter.on("data", good)

    emitter.emit("data", "x")

    good.assert_called_once_with("x")


@pytest.mark.asyncio
async def test_add_items_response_finish():
    response = AddItemsResponse()
    done = MagicMock()
    response.once("done", done)
    summary = AddItemsResultSummary(bucket="personal")

    assert response.finished is False
    response._finish(summary)

    assert response.finished is True
    done.assert_called_once_with(summary)
    assert await response.wait() is summary


@pytest.mark.asyncio
async def test_add_items_response_abort():
    response = AddItemsResponse()
    response._abort(RuntimeError("unexpected"))

    with pytest.raises(RuntimeError):
        await response.wait()


def test_on_and_once_called_in_subscription_order():
    emitter = EventEmitter()
    calls = []
    emitter.once("data", lambda d: calls.append("once-first"))
    emitter.on("data", lambda d: calls.append("on-second"))

    emitter.emit("data")
    emitter.emit("data")

    assert calls == ["once-first", "on-second", "on-second"]
    assert emitter.listener_count("data") == 1


def test_off_removes_once_listener():
    emitter = EventEmitter()
    listener = MagicMock()
    emitter.once("done", listener)
    emitter.off("done", listener)

    assert emitter.emit("done", "summary") is False
    listener.assert_not_called()
