import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from domain.menu import MenuItem
from infrastructure import db
from infrastructure.security import JwtTokenIssuer

from fakes import JWT_SECRET


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """File-backed SQLite database with the full schema."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", future=True, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(db.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def app_env(monkeypatch, tmp_path):
    monkeypatch.setenv("APP__JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("APP__UPLOAD_DIR", str(tmp_path / "uploads"))
    return tmp_path


@pytest_asyncio.fixture
async def initialized_app(db_engine, app_env):
    """App wired to the SQLite engine, without running the lifespan."""
    from app import main

    main.engine = db_engine
    yield main.app
    main.engine = None


@pytest.fixture
def token_for():
    def make(role: str, user_id: str = "user-1") -> str:
        return JwtTokenIssuer(JWT_SECRET).issue(user_id, role)
    return make


@pytest.fixture
def auth_headers(token_for):
    def make(role: str = "vendor") -> dict:
        return {"Authorization": f"Bearer {token_for(role)}"}
    return make


@pytest_asyncio.fixture
async def seed_menu_item(db_engine):
    async def seed(name: str = "Pizza", price: float = 12.0, vendor_id: str = "V1", **kwargs) -> MenuItem:
        item = MenuItem.create(
            name=name,
            price=price,
            category=kwargs.pop("category", "Mains"),
            vendor_id=vendor_id,
            **kwargs,
        )
        uow = db.SqlAlchemyUnitOfWork(db_engine)
        async with uow:
            await uow.menu.add(item)
            await uow.commit()
        return item
    return seed
