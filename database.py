import uuid

from sqlalchemy import Column, Date, DateTime, Float, String, Text, func, text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

from config import DATABASE_URL

_engine_options = {}
if DATABASE_URL.startswith("sqlite"):
    # aiosqlite connections are tied to the event loop that opened them
    _engine_options["poolclass"] = NullPool

engine = create_async_engine(DATABASE_URL, echo=False, future=True, **_engine_options)
async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


class TransactionModel(Base):
    __tablename__ = "transactions"
    id = Column(String(32), primary_key=True, default=new_id)
    type = Column(String(10), nullable=False, index=True)  # expense | saving | income
    category = Column(String(64), nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)
    saving_category = Column(String(32), nullable=True)
    operation = Column(String(8), nullable=True)  # add | deduct, savings only
    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"), onupdate=func.now())


async def get_db() -> AsyncSession:
    async with async_session() as session:
        yield session


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
