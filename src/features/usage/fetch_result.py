from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


class UsageRecord(BaseModel):
    model_config = ConfigDict(frozen = True)

    kind: Literal["usage"] = "usage"
    id: str
    masked_key: str
    window_start: str
    window_end: str
    used: float = 0
    allowance: float = 0
    used_ratio: float = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining(self) -> float:
        return max(0.0, self.allowance - self.used)


class ErrorRecord(BaseModel):
    model_config = ConfigDict(frozen = True)

    kind: Literal["error"] = "error"
    id: str
    masked_key: str
    error: str


FetchResult = Annotated[UsageRecord | ErrorRecord, Field(discriminator = "kind")]
