# roombook/schemas/errors.py
from pydantic import BaseModel, Field


class FieldError(BaseModel):
    """
    A single validation failure, tied to the input field that caused it.
    """

    field: str = Field(..., description="Name of the offending input field.", examples=["end_time"])
    message: str = Field(
        ...,
        description="Human-readable explanation of the failure.",
        examples=["End time must be after start time."],
    )
