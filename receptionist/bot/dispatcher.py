"""
Tool dispatcher.

Runs the backend action for each tool call and sends exactly one result back
into the conversation for every call id. Failures are converted into an
``{"error": ...}`` payload so the model is never left waiting on a call.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from receptionist.config.constants import LOGGER_NAME
from receptionist.exceptions import ToolExecutionError
from receptionist.models.conversation import ToolInvocation, ToolResult

logger = logging.getLogger(LOGGER_NAME)

ToolExecutor = Callable[[str, Dict[str, Any]], Awaitable[Dict[str, Any]]]
ResultSender = Callable[[ToolResult], Awaitable[None]]

GENERIC_FAILURE = "Failed to execute function"


class ToolDispatcher:
    def __init__(self, executor: ToolExecutor, respond: ResultSender):
        self.executor = executor
        self.respond = respond
        self._seen: Set[str] = set()
        self._tasks: Set[asyncio.Task] = set()

    def submit(self, invocation: ToolInvocation) -> Optional[asyncio.Task]:
        """Schedule a tool call without blocking the caller."""
        if not self._claim(invocation):
            return None
        task = asyncio.create_task(self._answer(invocation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def dispatch(self, invocation: ToolInvocation) -> Optional[ToolResult]:
        """
        Execute one tool call and send its result.

        Returns None if a result for this call id was already produced.
        """
        if not self._claim(invocation):
            return None
        return await self._answer(invocation)

    def _claim(self, invocation: ToolInvocation) -> bool:
        if invocation.callId in self._seen:
            logger.warning(f"Duplicate tool call ignored: {invocation.callId}")
            return False
        self._seen.add(invocation.callId)
        return True

    async def _answer(self, invocation: ToolInvocation) -> ToolResult:
        payload = await self._execute(invocation)
        result = ToolResult(callId=invocation.callId, payload=payload)
        if result.is_error:
            logger.warning(f"Tool {invocation.name} failed: {payload['error']}")
        else:
            logger.info(f"Tool {invocation.name} completed ({invocation.callId})")
        await self.respond(result)
        return result

    async def _execute(self, invocation: ToolInvocation) -> Dict[str, Any]:
        try:
            arguments = invocation.arguments()
        except ValueError as e:
            logger.warning(f"Malformed arguments for {invocation.name}: {e}")
            return {"error": "Invalid function arguments"}

        try:
            payload = await self.executor(invocation.name, arguments)
        except ToolExecutionError as e:
            return {"error": e.message}
        except Exception as e:
            # Any failure still has to answer the call
            logger.error(f"Unexpected error running {invocation.name}: {e}", exc_info=True)
            return {"error": GENERIC_FAILURE}

        if not isinstance(payload, dict):
            return {"error": GENERIC_FAILURE}
        return payload

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def aclose(self):
        """Cancel tool calls still in flight."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
