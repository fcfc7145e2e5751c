"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.routing import RoutingProvider
from src.infrastructure.database import async_session_factory


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_routing_provider(request: Request) -> Optional[RoutingProvider]:
    """Provider built in the app lifespan; ``None`` means Haversine only."""
    return getattr(request.app.state, "routing_provider", None)
