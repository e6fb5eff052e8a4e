from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import relationship
from sqlalchemy.pool import StaticPool

from fasttable.db.base import Base, RecordModel
from fasttable.db.sqlalchemy_store import SQLAlchemyStore


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)


class Person(RecordModel):
    __tablename__ = "people"

    name = Column(String(100), nullable=False)
    email = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False)
    age = Column(Integer)
    joined_at = Column(DateTime)
    active = Column(Boolean, default=True)
    company_id = Column(Integer, ForeignKey("companies.id"))

    company = relationship(Company)


PEOPLE = [
    # name, email, status, age, joined_at, company
    ("Anna", "anna@example.com", "active", 30, datetime(2024, 1, 10), "Acme"),
    ("Bob", "bob@example.com", "inactive", 25, datetime(2023, 6, 1), "Globex"),
    ("Carla", "carla@sample.org", "active", 41, datetime(2024, 5, 20), "Acme"),
    ("Dan", "dan@example.com", "active", 30, datetime(2022, 11, 11), None),
    ("Eve", "eve@sample.org", "inactive", 35, datetime(2024, 2, 29), "Globex"),
]


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    # Keep settings tests independent from the caller's environment
    for name in (
        "APP_ENV",
        "APP_NAME",
        "DEBUG",
        "DATABASE_URL",
        "LOG_LEVEL",
        "LOG_JSON_FORMAT",
        "DATATABLES_DEFAULT_SORT_FIELD",
        "DATATABLES_COUNT_FILTERED",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest_asyncio.fixture
async def session():
    """Async session on an in-memory SQLite database seeded with PEOPLE."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with SessionLocal() as db_session:
        companies = {
            name: Company(id=index, name=name)
            for index, name in enumerate(("Acme", "Globex"), start=1)
        }
        db_session.add_all(companies.values())
        for index, (name, email, status, age, joined_at, company) in enumerate(
            PEOPLE, start=1
        ):
            db_session.add(
                Person(
                    id=index,
                    name=name,
                    email=email,
                    status=status,
                    age=age,
                    joined_at=joined_at,
                    company=companies.get(company),
                )
            )
        await db_session.commit()
        yield db_session

    await engine.dispose()


@pytest.fixture
def store(session):
    return SQLAlchemyStore(session, Person)


@pytest.fixture
def mock_store():
    """Store double whose pending query records the builder calls."""
    pending = MagicMock(name="pending")
    for name in ("populate", "or_", "and_", "sort", "skip", "limit"):
        getattr(pending, name).return_value = pending
    pending.execute = AsyncMock(return_value=[])

    mock = MagicMock()
    mock.find.return_value = pending
    mock.count_documents = AsyncMock(return_value=0)
    mock.field_kinds.return_value = {}
    mock.pending = pending
    return mock

