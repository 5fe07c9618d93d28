from pydantic import BaseModel


class ExportPayload(BaseModel):
    password: str | None = None
