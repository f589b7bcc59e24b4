"""
Tests for the tool dispatcher's exactly-once result guarantee.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from receptionist.bot.dispatcher import GENERIC_FAILURE, ToolDispatcher
from receptionist.exceptions import ToolExecutionError
from receptionist.models.conversation import ToolInvocation


def invocation(call_id="call_1", name="check_availability", arguments='{"date": "2024-06-10"}'):
    return ToolInvocation(callId=call_id, name=name, argumentsJson=arguments)


@pytest.mark.asyncio
async def test_successful_call_is_answered():
    executor = AsyncMock(return_value={"slots": ["9:00 AM"], "message": "Available slots: 9:00 AM"})
    respond = AsyncMock()
    dispatcher = ToolDispatcher(executor, respond)

    result = await dispatcher.dispatch(invocation())

    executor.assert_awaited_once_with("check_availability", {"date": "2024-06-10"})
    respond.assert_awaited_once_with(result)
    assert result.callId == "call_1"
    assert result.payload["slots"] == ["9:00 AM"]
    assert result.is_error is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure,expected",
    [
        (ToolExecutionError("Tool endpoint returned 500 for book_appointment"), "Tool endpoint returned 500 for book_appointment"),
        (RuntimeError("boom"), GENERIC_FAILURE),
        (KeyError("slots"), GENERIC_FAILURE),
    ],
)
async def test_failures_still_produce_one_result(failure, expected):
    respond = AsyncMock()
    dispatcher = ToolDispatcher(AsyncMock(side_effect=failure), respond)

    result = await dispatcher.dispatch(invocation())

    assert result.payload == {"error": expected}
    respond.assert_awaited_once()


@pytest.mark.asyncio
async def test_malformed_arguments_are_answered_without_calling_backend():
    executor = AsyncMock()
    respond = AsyncMock()
    dispatcher = ToolDispatcher(executor, respond)

    result = await dispatcher.dispatch(invocation(arguments="{not json"))

    executor.assert_not_awaited()
    assert result.payload == {"error": "Invalid function arguments"}
    respond.assert_awaited_once()


@pytest.mark.asyncio
async def test_non_dict_payload_is_a_failure():
    dispatcher = ToolDispatcher(AsyncMock(return_value=["9:00 AM"]), AsyncMock())

    result = await dispatcher.dispatch(invocation())

    assert result.payload == {"error": GENERIC_FAILURE}


@pytest.mark.asyncio
async def test_duplicate_call_ids_get_one_result():
    executor = AsyncMock(return_value={"info": "Open daily"})
    respond = AsyncMock()
    dispatcher = ToolDispatcher(executor, respond)

    first = await dispatcher.dispatch(invocation(call_id="call_7"))
    second = await dispatcher.dispatch(invocation(call_id="call_7"))

    assert first is not None
    assert second is None
    assert respond.await_count == 1


@pytest.mark.asyncio
async def test_submit_runs_calls_concurrently():
    release = asyncio.Event()

    async def slow_executor(name, args):
        await release.wait()
        return {"ok": name}

    respond = AsyncMock()
    dispatcher = ToolDispatcher(slow_executor, respond)

    first = dispatcher.submit(invocation(call_id="a"))
    second = dispatcher.submit(invocation(call_id="b", name="get_business_info", arguments='{"info_type": "hours"}'))
    assert dispatcher.submit(invocation(call_id="a")) is None
    await asyncio.sleep(0)
    assert dispatcher.pending == 2

    release.set()
    await asyncio.gather(first, second)

    answered = sorted(call.args[0].callId for call in respond.await_args_list)
    assert answered == ["a", "b"]
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_aclose_cancels_in_flight_calls():
    async def never_returns(name, args):
        await asyncio.Event().wait()

    respond = AsyncMock()
    dispatcher = ToolDispatcher(never_returns, respond)
    task = dispatcher.submit(invocation())
    await asyncio.sleep(0)

    await dispatcher.aclose()

    assert task.cancelled()
    respond.assert_not_awaited()
