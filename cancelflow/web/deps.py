# cancelflow/web/deps.py
from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Request

from cancelflow.container import build_db_service, build_memory_service
from cancelflow.services.cancellation_service import CancellationService


async def get_cancellation_service(request: Request) -> AsyncGenerator[CancellationService, None]:
    """
    Memory backend: one shared set of stores on app.state.
    DB backend: a fresh AsyncSession per request, closed afterwards.
    """
    state = request.app.state
    if state.memory is not None:
        yield build_memory_service(state.memory, state.settings)
        return
    async with state.sessionmaker() as session:
        yield build_db_service(session, state.settings)
