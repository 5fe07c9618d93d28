from pydantic import BaseModel


class BatchDeletePayload(BaseModel):
    ids: list[str] | None = None
