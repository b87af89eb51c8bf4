"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class CamelSchema(BaseSchema):
    """
    Base for API responses serialized with camelCase keys.

    Fields are declared in snake_case; FastAPI dumps them by alias
    (uploaded_at -> uploadedAt). Construction accepts either form.
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=False,
        validate_assignment=True,
        alias_generator=to_camel,
        populate_by_name=True
    )
