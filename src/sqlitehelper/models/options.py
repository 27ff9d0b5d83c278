from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sqlitehelper.models.base import ensure_column_types, ensure_identifier


class TableOptions(BaseModel):
    """Construction-time options for a table handle.

    Accepts the camelCase keys (``tableName``, ``dir``, ``fetchAll``) as well
    as the snake_case field names.
    """

    table_name: str = Field(default="database", alias="tableName")
    directory: Path = Field(default=Path("./data"), alias="dir")
    filename: str = "sqlite.db"
    columns: dict[str, str] = Field(default_factory=dict)
    caching: bool = True
    fetch_all: bool = Field(default=False, alias="fetchAll")
    wal: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @field_validator("table_name")
    @classmethod
    def _validate_table_name(cls, value: str) -> str:
        return ensure_identifier(value, "table_name")

    @field_validator("filename")
    @classmethod
    def _validate_filename(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("filename cannot be empty")
        return value

    @field_validator("columns", mode="before")
    @classmethod
    def _normalize_columns(cls, value: Any) -> dict[str, str]:
        return ensure_column_types(value)

    @property
    def database_path(self) -> Path:
        """Absolute path of the database file, resolved against the working directory."""
        return (Path.cwd() / self.directory / self.filename).resolve()
