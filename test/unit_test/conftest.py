"""Shared fixtures for unit tests.

Each test gets its own in-memory SQLite database with every table created,
and a ``seed`` helper that writes rows straight through the session.
"""

from __future__ import annotations

import secrets
from datetime import date, timedelta
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

from bizboard.core.database.base import utc_now
from bizboard.core.database.entities import (
    AuthSession,
    Business,
    BusinessMember,
    ExpenseCategory,
    IncomeSource,
    Invoice,
    ManagedProduct,
    Profile,
    Supplier,
)
from bizboard.core.database.utils import create_all, create_sessionmaker
from bizboard.server.services.auth import hash_password


@pytest.fixture(scope="session")
def password_hash(test_config) -> str:
    """bcrypt is slow on purpose; hash the shared test password once."""
    return hash_password(test_config.password)


@pytest_asyncio.fixture
async def test_engine(test_config):
    """Create a fresh database engine for each test."""
    engine = create_async_engine(
        test_config.database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(test_engine)() as session:
        yield session


class Seed:
    """Writes fixture rows and commits them."""

    def __init__(self, session: AsyncSession, password_hash: str) -> None:
        self.session = session
        self.password_hash = password_hash

    async def add(self, entity: SQLModel) -> SQLModel:
        self.session.add(entity)
        await self.session.commit()
        return entity

    async def user(self, email: str = "owner@example.com", role: str = "owner", is_active: bool = True, **values) -> Profile:
        return await self.add(
            Profile(email=email, role=role, is_active=is_active, password_hash=self.password_hash, **values)
        )

    async def token(self, user: Profile, expires_in: timedelta = timedelta(hours=1)) -> str:
        auth_session = await self.add(
            AuthSession(token=secrets.token_urlsafe(16), user_id=user.id, expires_at=utc_now() + expires_in)
        )
        return auth_session.token

    async def business(self, name: str = "קפה גן", status: str = "active", **values) -> Business:
        return await self.add(Business(name=name, status=status, **values))

    async def member(self, business: Business, user: Profile, role: str = "owner") -> BusinessMember:
        return await self.add(BusinessMember(business_id=business.id, user_id=user.id, role=role))

    async def category(self, business: Business, name: str = "שכירות", **values) -> ExpenseCategory:
        return await self.add(ExpenseCategory(business_id=business.id, name=name, **values))

    async def supplier(self, business: Business, name: str = "ספק", **values) -> Supplier:
        return await self.add(Supplier(business_id=business.id, name=name, **values))

    async def income_source(self, business: Business, name: str = "קופה", **values) -> IncomeSource:
        return await self.add(IncomeSource(business_id=business.id, name=name, **values))

    async def product(self, business: Business, name: str = "קפה", **values) -> ManagedProduct:
        return await self.add(ManagedProduct(business_id=business.id, name=name, **values))

    async def invoice(
        self,
        business: Business,
        supplier: Supplier,
        subtotal: float,
        invoice_date: Optional[date] = None,
        **values,
    ) -> Invoice:
        vat = values.pop("vat_amount", round(subtotal * 0.18, 2))
        return await self.add(
            Invoice(
                business_id=business.id,
                supplier_id=supplier.id,
                invoice_date=invoice_date or date(2026, 3, 10),
                subtotal=subtotal,
                vat_amount=vat,
                total_amount=round(subtotal + vat, 2),
                **values,
            )
        )


@pytest.fixture
def seed(session: AsyncSession, password_hash: str) -> Seed:
    return Seed(session, password_hash)
