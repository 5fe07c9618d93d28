from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

if TYPE_CHECKING:
    from api.keys_controller import KeysController
    from api.usage_controller import UsageController
    from db.crud.api_key import ApiKeyCRUD
    from features.usage.refresh_controller import RefreshController
    from features.usage.usage_fetcher import UsageFetcher


class ConstructorDependencyNotMetError(Exception):
    pass


class DI:

    # Dynamic dependencies
    _db: Session | None
    # App-scoped services
    _refresh_controller: "RefreshController | None"
    _usage_fetcher: "UsageFetcher | None"
    # Repositories
    _api_key_crud: "ApiKeyCRUD | None"
    # Controllers
    _keys_controller: "KeysController | None"
    _usage_controller: "UsageController | None"

    def __init__(
        self,
        db: Session | None = None,
        refresh_controller: "RefreshController | None" = None,
        usage_fetcher: "UsageFetcher | None" = None,
    ):
        # Dynamic dependencies
        self._db = db
        # App-scoped services
        self._refresh_controller = refresh_controller
        self._usage_fetcher = usage_fetcher
        # Repositories
        self._api_key_crud = None
        # Controllers
        self._keys_controller = None
        self._usage_controller = None

    # === Dynamic dependencies ===

    @property
    def db(self) -> Session:
        if self._db is None:
            raise ConstructorDependencyNotMetError("Database session not provided")
        return self._db

    # === App-scoped services ===

    @property
    def refresh_controller(self) -> "RefreshController":
        if self._refresh_controller is None:
            raise ConstructorDependencyNotMetError("Refresh controller not provided")
        return self._refresh_controller

    @property
    def usage_fetcher(self) -> "UsageFetcher":
        if self._usage_fetcher is None:
            raise ConstructorDependencyNotMetError("Usage fetcher not provided")
        return self._usage_fetcher

    # === Repositories ===

    @property
    def api_key_crud(self) -> "ApiKeyCRUD":
        if self._api_key_crud is None:
            from db.crud.api_key import ApiKeyCRUD
            self._api_key_crud = ApiKeyCRUD(self.db)
        return self._api_key_crud

    # === Controllers ===

    @property
    def keys_controller(self) -> "KeysController":
        if self._keys_controller is None:
            from api.keys_controller import KeysController
            self._keys_controller = KeysController(self)
        return self._keys_controller

    @property
    def usage_controller(self) -> "UsageController":
        if self._usage_controller is None:
            from api.usage_controller import UsageController
            self._usage_controller = UsageController(self)
        return self._usage_controller
