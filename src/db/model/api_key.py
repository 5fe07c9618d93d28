from sqlalchemy import Column, DateTime, String, Text

from db.model.base import BaseModel


class ApiKeyDB(BaseModel):
    __tablename__ = "api_keys"

    id = Column(String, primary_key = True)
    key = Column(Text, nullable = False, unique = True, index = True)
    created_at = Column(DateTime, nullable = False)
