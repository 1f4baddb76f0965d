"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends

from backend.app.config import Settings, get_settings
from backend.app.db.engine import get_async_engine
from backend.app.db.repositories import Repositories, RepositoryProvider
from backend.app.db.sql_repositories import SqlRepositoryProvider
from backend.app.services.generation import DocumentGenerator, build_document_generator


def get_repository_provider() -> RepositoryProvider:
    """Repository provider backed by the global async engine."""
    return SqlRepositoryProvider(get_async_engine())


async def get_repositories(
    provider: Annotated[RepositoryProvider, Depends(get_repository_provider)],
) -> AsyncGenerator[Repositories, None]:
    """FastAPI dependency yielding one unit of work per request.

    Yields:
        Repositories sharing one session
    """
    async with provider.session() as repos:
        yield repos


def get_document_generator(
    repos: Annotated[Repositories, Depends(get_repositories)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DocumentGenerator:
    """Document generator bound to the request's catalog repository."""
    return build_document_generator(repos.catalog, settings)
