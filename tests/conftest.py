from collections.abc import AsyncGenerator
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.core.auth.jwt import create_access_token
from src.core.auth.models import UserRole
from src.core.database.base import Base
from src.core.database import get_db
from src.main import app
from src.modules.inventory.models import Part
from src.modules.procurement.models import PurchaseOrder, PurchaseOrderLine, Vendor

# In-memory SQLite for speed
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Get test database session."""
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Get test HTTP client with overridden database dependency."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer header for an employee with the given role."""

    def _headers(role: UserRole = UserRole.PARTS_MANAGER, employee_id: str = "1001") -> dict:
        token = create_access_token(employee_id, role.value, "Test Employee")
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def create_order(db_session: AsyncSession):
    """
    Factory for a vendor, parts and one purchase order.

    lines is a list of (ordered quantity, on hand, on order) per part; parts
    get ids in list order. Returns (purchase_order, [parts]).
    """

    async def _create(
        lines: list[tuple[int, int, int]],
        *,
        vendor_name: str | None = "Pedal Pushers Supply",
        phone: str | None = "780-555-0141",
        order_date: date | None = date(2026, 3, 2),
        closed: bool = False,
        remove_from_view: bool = False,
    ) -> tuple[PurchaseOrder, list[Part]]:
        vendor = Vendor(name=vendor_name or "", phone=phone)
        db_session.add(vendor)
        await db_session.flush()

        parts = []
        for index, (_, on_hand, on_order) in enumerate(lines, start=1):
            part = Part(
                description=f"Part {index}",
                vendor_part_number=f"VP-{index}",
                quantity_on_hand=on_hand,
                quantity_on_order=on_order,
            )
            db_session.add(part)
            parts.append(part)
        await db_session.flush()

        purchase_order = PurchaseOrder(
            vendor_id=vendor.id,
            order_date=order_date,
            closed=closed,
            remove_from_view=remove_from_view,
            lines=[
                PurchaseOrderLine(part_id=part.id, quantity=quantity)
                for part, (quantity, _, _) in zip(parts, lines)
            ],
        )
        db_session.add(purchase_order)
        await db_session.commit()
        return purchase_order, parts

    return _create
