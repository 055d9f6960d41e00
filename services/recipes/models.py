from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Integer,
    SmallInteger,
    Text,
    false,
    text,
)
from sqlalchemy.orm import relationship

from services.framework.logging import Span
from services.recipes.db import Base

# SQLite only autoincrements INTEGER primary keys
Identifier = BigInteger().with_variant(Integer, "sqlite")


class Recipe(Base):
    """
    A recipe for a dish.
    """

    __tablename__ = "recipes"

    id = Column(Identifier, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)

    # minutes
    preptime = Column(Float, nullable=False, default=0.0, server_default=text("0.0"))

    difficulty = Column(SmallInteger, nullable=False)
    vegetarian = Column(Boolean, nullable=False, default=False, server_default=false())

    ratings = relationship(
        "RecipeRating", back_populates="recipe", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "difficulty > 0 AND difficulty < 4", name="ck_recipes_difficulty"
        ),
    )


class RecipeRating(Base):
    """
    A single rating of a recipe. Ratings are only ever inserted; they go away
    with their recipe.
    """

    __tablename__ = "recipe_ratings"

    rating_id = Column(Identifier, primary_key=True, autoincrement=True)
    recipe_id = Column(
        Identifier,
        ForeignKey("recipes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating = Column(SmallInteger, nullable=False)

    recipe = relationship("Recipe", back_populates="ratings")

    __table_args__ = (
        CheckConstraint("rating > 0 AND rating < 6", name="ck_recipe_ratings_rating"),
    )


def create_tables(engine):
    """
    Create the tables if they do not exist yet.
    """
    with Span("db_create_tables"):
        Base.metadata.create_all(bind=engine)


def drop_tables(engine):
    Base.metadata.drop_all(bind=engine)
