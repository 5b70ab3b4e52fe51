"""
Application service base.

Application services are the boundary between callers (HTTP routes, jobs)
and the dispatchers. They build commands and queries from plain arguments
and always return a result envelope: every exception, including one raised
while building the message, is translated with ``from_error``.
"""

from collections.abc import Callable
from uuid import uuid4

from buildops.core.cqrs.base import Command, CommandResult, Query, QueryResult
from buildops.core.cqrs.dispatchers import CommandDispatcher, QueryDispatcher


class ApplicationService:
    def __init__(self, command_dispatcher: CommandDispatcher, query_dispatcher: QueryDispatcher):
        self.command_dispatcher = command_dispatcher
        self.query_dispatcher = query_dispatcher

    async def execute_command(self, build: Callable[[], Command]) -> CommandResult:
        try:
            command = build()
        except Exception as e:
            return CommandResult.from_error(str(uuid4()), e)

        try:
            return await self.command_dispatcher.dispatch(command)
        except Exception as e:
            return CommandResult.from_error(command.command_id, e)

    async def execute_query(self, build: Callable[[], Query]) -> QueryResult:
        try:
            query = build()
        except Exception as e:
            return QueryResult.from_error(str(uuid4()), e)

        try:
            return await self.query_dispatcher.dispatch(query)
        except Exception as e:
            return QueryResult.from_error(query.query_id, e)


__all__ = ["ApplicationService"]
