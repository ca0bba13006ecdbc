from typing import Annotated, ClassVar

from pydantic import BaseModel, ConfigDict, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

# ids and counts live in 32-bit INTEGER columns
MAX_INT = 2**31 - 1

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class APIModel(BaseModel):
    """Wire models speak camelCase; Python code uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(APIModel):
    model_config = ConfigDict(extra="forbid")


class UpdateModel(RequestModel):
    """
    Partial update body.

    Every field is optional and absent by default. Only fields the client
    actually sent end up in ``changes()``, so an explicit ``null`` clears a
    nullable column while an omitted field is left alone. Fields listed in
    ``nullable_fields`` may be sent as ``null``; the rest may not.
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def check_fields(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")

        nulled = sorted(
            name
            for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.nullable_fields
        )
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
