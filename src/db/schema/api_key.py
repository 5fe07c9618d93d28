from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ApiKeyBase(BaseModel):
    id: str
    key: str
    created_at: datetime = Field(default_factory = datetime.now)


class ApiKeySave(ApiKeyBase):
    pass


class ApiKey(ApiKeyBase):
    model_config = ConfigDict(from_attributes = True)
