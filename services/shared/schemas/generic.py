from pydantic import BaseModel


class ResultResponse(BaseModel):
    """
    A generic response for operations without a resource body
    """

    result: str
