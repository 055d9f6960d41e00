from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RecipeIn(BaseModel):
    """
    Payload for creating or replacing a recipe.
    Range checks on difficulty are left to the database.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    name: str = Field(..., min_length=1, examples=["test recipe"])
    preptime: float = Field(0.0, description="Preparation time in minutes")
    difficulty: int = Field(..., description="1 (easy) to 3 (hard)", examples=[2])
    vegetarian: bool = False


class RecipeOut(BaseModel):
    """
    Model for outputting a recipe.
    """

    id: int
    name: str
    preptime: float
    difficulty: int
    vegetarian: bool

    model_config = {
        "from_attributes": True,
    }


class RatedRecipeOut(RecipeOut):
    """
    A recipe together with the mean of its ratings, null when unrated.
    """

    avg_rating: Optional[float] = None


class RatingIn(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    rating: int = Field(..., description="1 to 5", examples=[3])


class RatingOut(BaseModel):
    recipe_id: int
    rating_id: int
    rating: int

    model_config = {
        "from_attributes": True,
    }
