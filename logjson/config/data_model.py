import logging
from enum import Enum

from pydantic import BaseModel, field_validator


class ArrayMergeHandling(str, Enum):
    CONCAT = "concat"
    UNION = "union"


class FormatterSettings(BaseModel, frozen=True):
    array_merge: ArrayMergeHandling = ArrayMergeHandling.CONCAT
    ignore_null_on_merge: bool = True
    inner_exception_depth: int = 1
    utc_timestamps: bool = False
    hostname: str | None = None
    process_name: str | None = None
    composite_message_types: tuple[str, ...] = ("BraceMessage", "DollarMessage")
    log_level: int = logging.INFO

    @field_validator("array_merge", mode="before")
    @classmethod
    def _lower_array_merge(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("composite_message_types", mode="before")
    @classmethod
    def _split_type_names(cls, value):
        if isinstance(value, str):
            return tuple(name.strip() for name in value.split(",") if name.strip())
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _level_from_name(cls, value):
        if isinstance(value, str) and not value.strip().isdigit():
            level = logging.getLevelName(value.strip().upper())
            if not isinstance(level, int):
                raise ValueError(f"Unknown log level: {value}")
            return level
        return value

    @field_validator("inner_exception_depth")
    @classmethod
    def _non_negative_depth(cls, value: int) -> int:
        if value < 0:
            raise ValueError("inner_exception_depth must be >= 0")
        return value
