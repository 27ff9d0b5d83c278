from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from sqlitehelper.errors import InvalidInputError
from sqlitehelper.models.base import ensure_row_mapping


class RowIntent(BaseModel):
    """A single write: the columns to store and an optional equality match.

    Without ``where`` the intent is an INSERT; with it, an UPDATE of every row
    matching all ``where`` pairs.
    """

    columns: dict[str, Any]
    where: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("columns", mode="before")
    @classmethod
    def _validate_columns(cls, value: Any) -> dict[str, Any]:
        return ensure_row_mapping(value, "columns")

    @field_validator("where", mode="before")
    @classmethod
    def _validate_where(cls, value: Any) -> dict[str, Any] | None:
        if value is None:
            return None
        return ensure_row_mapping(value, "where")

    @property
    def is_update(self) -> bool:
        return self.where is not None

    @classmethod
    def from_input(cls, value: Any) -> "RowIntent":
        """Normalize a caller payload into a RowIntent.

        A mapping with a ``columns`` key is read as ``{columns, where}``; any
        other mapping is taken as the columns of an insert.

        Raises:
            InvalidInputError: If the payload is not a mapping or fails validation.
        """
        if isinstance(value, RowIntent):
            return value
        if not isinstance(value, Mapping):
            raise InvalidInputError(f"row must be a mapping or RowIntent, got {type(value).__name__}")

        payload = dict(value) if "columns" in value else {"columns": value}
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise InvalidInputError(str(exc)) from exc


__all__ = ["RowIntent"]
