from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db.model.api_key import ApiKeyDB
from db.schema.api_key import ApiKeySave


class ApiKeyCRUD:
    _db: Session

    def __init__(self, db: Session):
        self._db = db

    def get(self, key_id: str) -> ApiKeyDB | None:
        return self._db.query(ApiKeyDB).filter(
            key_id == ApiKeyDB.id,
        ).first()

    def get_all(self) -> list[ApiKeyDB]:
        # noinspection PyTypeChecker
        return self._db.query(ApiKeyDB).order_by(ApiKeyDB.id).all()

    def get_by_key(self, key: str) -> ApiKeyDB | None:
        return self._db.query(ApiKeyDB).filter(
            key == ApiKeyDB.key,
        ).first()

    def create(self, create_data: ApiKeySave) -> ApiKeyDB:
        api_key = ApiKeyDB(**create_data.model_dump())
        self._db.add(api_key)
        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            raise
        self._db.refresh(api_key)
        return api_key

    def delete(self, key_id: str) -> ApiKeyDB | None:
        api_key = self.get(key_id)
        if api_key:
            self._db.delete(api_key)
            self._db.commit()
        return api_key

    def delete_all(self, key_ids: list[str]) -> int:
        if not key_ids:
            return 0
        deleted = self._db.query(ApiKeyDB).filter(
            ApiKeyDB.id.in_(key_ids),
        ).delete(synchronize_session = False)
        self._db.commit()
        return deleted
