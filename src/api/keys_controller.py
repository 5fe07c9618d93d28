import secrets
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from api.model.key_payload import INVALID_KEY_ID_MESSAGE, KeyPayload
from db.schema.api_key import ApiKey, ApiKeySave
from di.di import DI
from util import log
from util.config import config
from util.error_codes import (
    DUPLICATE_KEY,
    EMPTY_KEY,
    INVALID_EXPORT_PASSWORD,
    INVALID_KEY_ID,
    INVALID_REQUEST_BODY,
    KEY_STORE_FAILED,
    MISSING_KEY,
    MISSING_KEY_ID,
    MISSING_KEY_IDS,
)
from util.errors import AuthenticationError, ConflictError, StoreError, ValidationError
from util.functions import generate_key_id


class KeysController:

    __di: DI

    def __init__(self, di: DI):
        self.__di = di

    def fetch_keys(self) -> list[dict[str, str]]:
        log.d("Fetching all API keys")
        try:
            keys = [ApiKey.model_validate(key_db) for key_db in self.__di.api_key_crud.get_all()]
        except SQLAlchemyError as e:
            raise StoreError(str(e), KEY_STORE_FAILED) from e
        return [{"id": key.id, "key": key.key} for key in keys]

    def add_key(self, payload: Any) -> ApiKey:
        if not isinstance(payload, dict) or "key" not in payload:
            raise ValidationError("key is required", MISSING_KEY)
        try:
            key_payload = KeyPayload.model_validate(payload)
        except PydanticValidationError as e:
            if any(error["loc"] == ("id",) for error in e.errors()):
                raise ValidationError(INVALID_KEY_ID_MESSAGE, INVALID_KEY_ID) from e
            raise ValidationError("Invalid key payload", INVALID_REQUEST_BODY) from e
        if not key_payload.key:
            raise ValidationError("key cannot be empty", EMPTY_KEY)

        try:
            if self.__di.api_key_crud.get_by_key(key_payload.key):
                raise ConflictError("API key already exists", DUPLICATE_KEY)
            key_id = self.__resolve_id(key_payload.id)
            api_key_db = self.__di.api_key_crud.create(ApiKeySave(id = key_id, key = key_payload.key))
        except IntegrityError as e:
            # a parallel add stored the same key first
            raise ConflictError("API key already exists", DUPLICATE_KEY) from e
        except SQLAlchemyError as e:
            raise StoreError(str(e), KEY_STORE_FAILED) from e
        log.i(f"Added API key '{key_id}'")
        return ApiKey.model_validate(api_key_db)

    def import_keys(self, items: list[Any]) -> tuple[int, int]:
        """
        Adds every valid item and skips the rest.

        Items without a key or with a malformed id are ignored, items whose key is already
        stored (or appeared earlier in the same batch) are counted as skipped.

        Returns:
            A tuple of (added, skipped) counts
        """
        added, skipped = 0, 0
        try:
            known_keys = {key_db.key for key_db in self.__di.api_key_crud.get_all()}
            for item in items:
                if not isinstance(item, dict):
                    continue
                try:
                    key_payload = KeyPayload.model_validate(item)
                except PydanticValidationError:
                    log.d("Skipping an invalid import item")
                    continue
                if not key_payload.key:
                    continue
                if key_payload.key in known_keys:
                    skipped += 1
                    continue
                key_id = self.__resolve_id(key_payload.id)
                known_keys.add(key_payload.key)
                try:
                    self.__di.api_key_crud.create(ApiKeySave(id = key_id, key = key_payload.key))
                except IntegrityError:
                    skipped += 1
                    continue
                added += 1
        except SQLAlchemyError as e:
            raise StoreError(str(e), KEY_STORE_FAILED) from e
        log.i(f"Imported API keys: {added} added, {skipped} skipped")
        return added, skipped

    def delete_key(self, key_id: str) -> bool:
        if not key_id or not key_id.strip():
            raise ValidationError("Key ID is required", MISSING_KEY_ID)
        try:
            deleted = self.__di.api_key_crud.delete(key_id) is not None
        except SQLAlchemyError as e:
            raise StoreError(str(e), KEY_STORE_FAILED) from e
        log.i(f"Deleted API key '{key_id}'" if deleted else f"API key '{key_id}' was already gone")
        return deleted

    def delete_keys(self, key_ids: list[str] | None) -> int:
        if not key_ids:
            raise ValidationError("ids array is required", MISSING_KEY_IDS)
        try:
            deleted = self.__di.api_key_crud.delete_all(key_ids)
        except SQLAlchemyError as e:
            raise StoreError(str(e), KEY_STORE_FAILED) from e
        log.i(f"Deleted {deleted} of {len(key_ids)} requested API keys")
        return deleted

    def export_keys(self, password: str | None) -> list[dict[str, str]]:
        expected = config.export_password.get_secret_value()
        if not password or not secrets.compare_digest(password.encode(), expected.encode()):
            raise AuthenticationError("Invalid export password", INVALID_EXPORT_PASSWORD)
        log.i("Exporting all API keys")
        return self.fetch_keys()

    def __resolve_id(self, requested_id: str | None) -> str:
        if requested_id and not self.__di.api_key_crud.get(requested_id):
            return requested_id
        return generate_key_id()
