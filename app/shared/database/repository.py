# -*- coding: utf-8 -*-
"""
backend/app/shared/database/repository.py

Repositorio base para operaciones async con SQLAlchemy.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from typing import Any, Type, TypeVar, Generic, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")  # modelo ORM


class BaseRepository(Generic[T]):
    """Repositorio asincrónico base. Recibe la sesión en cada llamada."""

    def __init__(self, model: Type[T]):
        self.model = model

    async def get(self, session: AsyncSession, obj_id: Any) -> Optional[T]:
        return await session.get(self.model, obj_id)

    async def get_for_update(self, session: AsyncSession, obj_id: Any) -> Optional[T]:
        """SELECT ... FOR UPDATE por PK. Debe llamarse dentro de una transacción."""
        stmt = (
            select(self.model)
            .where(self.model.id == obj_id)  # type: ignore[attr-defined]
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, session: AsyncSession, **kwargs) -> T:
        obj = self.model(**kwargs)
        session.add(obj)
        await session.flush()
        return obj

# Fin del archivo backend/app/shared/database/repository.py
