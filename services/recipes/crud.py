from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import Float, cast, delete, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from services.framework.logging import Span, log_error, log_event
from services.framework.tracing import traced
from services.shared.schemas import recipe as rs

from .models import Recipe, RecipeRating


def _store_failure(db: Session, exc: SQLAlchemyError) -> HTTPException:
    """
    Roll back the failed statement and turn the driver error into a 500
    carrying the driver's message.
    """
    db.rollback()
    orig = getattr(exc, "orig", None)
    message = str(orig if orig is not None else exc).strip()
    log_error("store_error", error=message, kind=type(exc).__name__)
    return HTTPException(status_code=500, detail=message)


@traced
def list_recipes(db: Session, count: int = 10, start: int = 0) -> List[rs.RecipeOut]:
    """
    Lists recipes ordered by id, skipping `start` and returning at most `count`.
    """
    with Span("db_list_recipes"):
        try:
            items = (
                db.query(Recipe).order_by(Recipe.id).offset(start).limit(count).all()
            )
        except SQLAlchemyError as exc:
            raise _store_failure(db, exc) from exc

        return [rs.RecipeOut.model_validate(r) for r in items]


@traced
def create_recipe(data: rs.RecipeIn, db: Session) -> rs.RecipeOut:
    """
    Creates a new recipe in the database.
    """
    with Span("db_create_recipe"):
        recipe = Recipe(**data.model_dump())

        db.add(recipe)
        try:
            db.commit()
            db.refresh(recipe)
        except SQLAlchemyError as exc:
            raise _store_failure(db, exc) from exc

        log_event("recipe_created", recipe_id=recipe.id)
        return rs.RecipeOut.model_validate(recipe)


@traced
def get_recipe(recipe_id: int, db: Session) -> rs.RecipeOut:
    """
    Retrieves a single recipe by its ID.
    """
    with Span("db_query_recipe"):
        try:
            recipe = db.get(Recipe, recipe_id)
        except SQLAlchemyError as exc:
            raise _store_failure(db, exc) from exc

        if recipe is None:
            raise HTTPException(404, "Recipe not found")
        return rs.RecipeOut.model_validate(recipe)


@traced
def update_recipe(recipe_id: int, data: rs.RecipeIn, db: Session) -> rs.RecipeOut:
    """
    Overwrites every mutable field of a recipe.

    An unknown id updates nothing and the input is still echoed back with a
    200; callers relying on a 404 here will not get one.
    """
    with Span("db_update_recipe"):
        values = data.model_dump()
        try:
            result = db.execute(
                update(Recipe).where(Recipe.id == recipe_id).values(**values)
            )
            db.commit()
        except SQLAlchemyError as exc:
            raise _store_failure(db, exc) from exc

        log_event("recipe_updated", recipe_id=recipe_id, rows=result.rowcount)
        return rs.RecipeOut(id=recipe_id, **values)


@traced
def delete_recipe(recipe_id: int, db: Session):
    """
    Deletes a recipe by its ID. Its ratings are removed by the foreign key cascade.
    """
    with Span("db_delete_recipe"):
        try:
            result = db.execute(delete(Recipe).where(Recipe.id == recipe_id))
            db.commit()
        except SQLAlchemyError as exc:
            raise _store_failure(db, exc) from exc

        log_event("recipe_deleted", recipe_id=recipe_id, rows=result.rowcount)
        return {"result": "success"}


@traced
def add_rating(recipe_id: int, data: rs.RatingIn, db: Session) -> rs.RatingOut:
    """
    Stores one rating for a recipe.
    """
    with Span("db_create_rating"):
        rating = RecipeRating(recipe_id=recipe_id, rating=data.rating)

        db.add(rating)
        try:
            db.commit()
            db.refresh(rating)
        except SQLAlchemyError as exc:
            raise _store_failure(db, exc) from exc

        return rs.RatingOut.model_validate(rating)


@traced
def search_recipes(
    db: Session,
    count: int = 10,
    start: int = 0,
    preptime: Optional[float] = None,
) -> List[rs.RatedRecipeOut]:
    """
    Lists recipes with their average rating, optionally limited to those
    ready in `preptime` minutes or less. Grouping by recipe keeps one row per
    recipe, so `start`/`count` paginate recipes rather than ratings.
    """
    with Span("db_search_recipes"):
        avg_rating = cast(func.avg(RecipeRating.rating), Float).label("avg_rating")

        query = db.query(Recipe, avg_rating).outerjoin(Recipe.ratings)

        # ---- PREPTIME FILTER
        if preptime is not None:
            query = query.filter(Recipe.preptime <= preptime)

        query = query.group_by(Recipe.id).order_by(Recipe.id)

        # ---- PAGINATION
        try:
            rows = query.offset(start).limit(count).all()
        except SQLAlchemyError as exc:
            raise _store_failure(db, exc) from exc

        return [
            rs.RatedRecipeOut(
                **rs.RecipeOut.model_validate(recipe).model_dump(),
                avg_rating=avg,
            )
            for recipe, avg in rows
        ]
