import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, insert, select
from sqlalchemy.pool import StaticPool

from services.recipes.db import make_engine
from services.recipes.main import create_app
from services.recipes.models import Recipe, RecipeRating, create_tables, drop_tables


@pytest.fixture
def engine():
    engine = make_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    drop_tables(engine)
    engine.dispose()


@pytest.fixture
def client(engine):
    with TestClient(create_app(engine)) as c:
        yield c


@pytest.fixture
def add_recipes(engine):
    """Insert `count` recipes named "Recipe <i>" with preptime (i + 1) * 10."""

    def _add(count):
        with engine.begin() as conn:
            for i in range(max(count, 1)):
                conn.execute(
                    insert(Recipe).values(
                        name=f"Recipe {i}",
                        preptime=(i + 1) * 10.0,
                        difficulty=i % 3 + 1,
                        vegetarian=True,
                    )
                )

    return _add


@pytest.fixture
def count_ratings(engine):
    def _count():
        with engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(RecipeRating)).scalar()

    return _count
