from typing import Any

from pydantic import BaseModel, ConfigDict


class QueryDescriptor(BaseModel):
    """A built statement with its positional parameters.

    ``values`` binds the INSERT or SET clause and ``where_values`` the WHERE
    clause, in placeholder order.
    """

    statement: str
    values: tuple[Any, ...] = ()
    where_values: tuple[Any, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def parameters(self) -> tuple[Any, ...]:
        return self.values + self.where_values

    @property
    def is_update(self) -> bool:
        return self.statement.startswith("UPDATE")


__all__ = ["QueryDescriptor"]
