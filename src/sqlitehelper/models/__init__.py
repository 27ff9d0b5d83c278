from sqlitehelper.models.enums import HandleState
from sqlitehelper.models.options import TableOptions
from sqlitehelper.models.query import QueryDescriptor
from sqlitehelper.models.row_intent import RowIntent

__all__ = [
    "HandleState",
    "QueryDescriptor",
    "RowIntent",
    "TableOptions",
]
