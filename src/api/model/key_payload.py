import re
from typing import Any

from pydantic import BaseModel, field_validator

KEY_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{0,128}$")
INVALID_KEY_ID_MESSAGE = "Key ID may only contain letters, digits, '.', '_' and '-'"


class KeyPayload(BaseModel):
    id: str | None = None
    key: str | None = None

    # noinspection PyNestedDecorators
    @field_validator("id", "key", mode = "before")
    @classmethod
    def trim_strings(cls, v: Any) -> Any:
        """Trim whitespace from string values, preserve None and empty strings"""
        if v is None:
            return None
        if isinstance(v, str):
            return v.strip()
        return v

    # noinspection PyNestedDecorators
    @field_validator("id")
    @classmethod
    def check_id(cls, v: str | None) -> str | None:
        """Restricts ids to a markup-safe character set"""
        if v is not None and not KEY_ID_PATTERN.fullmatch(v):
            raise ValueError(INVALID_KEY_ID_MESSAGE)
        return v
