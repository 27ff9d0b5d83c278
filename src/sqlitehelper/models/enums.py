from enum import StrEnum


class HandleState(StrEnum):
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"
