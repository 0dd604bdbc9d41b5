from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Wire model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def collapse_whitespace(value: object) -> object:
    """Trim and collapse inner runs of whitespace before length checks run."""
    if isinstance(value, str):
        return " ".join(value.split())
    return value
