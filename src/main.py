import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import BackgroundTasks, Body, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from api.model.batch_delete_payload import BatchDeletePayload
from api.model.export_payload import ExportPayload
from db.schema.api_key import ApiKey
from db.sql import get_detached_session, get_session, initialize_db
from di.di import DI
from features.dashboard.dashboard_page import render_dashboard
from features.usage.refresh_controller import RefreshController
from features.usage.usage_aggregator import log_keys_with_balance
from features.usage.usage_fetcher import UsageFetcher
from util import log
from util.config import config
from util.errors import ServiceError


def list_stored_credentials() -> list[ApiKey]:
    with get_detached_session() as db:
        return [ApiKey.model_validate(key_db) for key_db in DI(db).api_key_crud.get_all()]


def create_app(
    db_url: str | None = None,
    usage_fetcher: UsageFetcher | None = None,
    refresh_controller: RefreshController | None = None,
) -> FastAPI:

    # noinspection PyUnusedLocal
    @asynccontextmanager
    async def lifespan(owner: FastAPI):
        log.i("Lifecycle: Starting up...")
        initialize_db(db_url or config.db_url.get_secret_value())
        fetcher = usage_fetcher or UsageFetcher()
        controller = refresh_controller or RefreshController(
            list_credentials = list_stored_credentials,
            fetcher = fetcher,
            audit = log_keys_with_balance if config.log_keys_with_balance else None,
        )
        owner.state.usage_fetcher = fetcher
        owner.state.refresh_controller = controller
        # the first refresh must finish (or fail) before we start serving
        log.i("Performing the initial usage refresh...")
        await controller.refresh()
        controller.start()
        yield  # this holds the app alive until the server is shut down
        log.i("Lifecycle: Shutting down...")
        await controller.stop()
        await fetcher.aclose()

    app = FastAPI(
        docs_url = None,
        redoc_url = None,
        title = "Usage Monitor API",
        description = "Aggregated API key usage with key management.",
        debug = config.log_level in ["local", "trace", "debug"],
        lifespan = lifespan,
    )

    def get_di(request: Request, db = Depends(get_session)) -> DI:
        return DI(
            db,
            refresh_controller = request.app.state.refresh_controller,
            usage_fetcher = request.app.state.usage_fetcher,
        )

    # noinspection PyUnusedLocal
    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        log.d("Rejected an invalid request body", str(exc.errors()))
        return JSONResponse(status_code = 400, content = {"detail": {"message": "Invalid request body"}})

    @app.get("/")
    def root() -> HTMLResponse:
        return HTMLResponse(render_dashboard())

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "version": config.version}

    @app.get("/api/data")
    def get_usage_data(di: DI = Depends(get_di)) -> dict:
        try:
            return di.usage_controller.fetch_usage_snapshot().model_dump(mode = "json")
        except Exception as e:
            raise __http_error("Failed to get usage data", e)

    @app.get("/api/keys")
    def get_keys(di: DI = Depends(get_di)) -> list[dict]:
        try:
            return di.keys_controller.fetch_keys()
        except Exception as e:
            raise __http_error("Failed to get keys", e)

    @app.post("/api/keys")
    def add_keys(
        offloader: BackgroundTasks,
        payload: dict[str, Any] | list[Any] = Body(...),
        di: DI = Depends(get_di),
    ) -> dict:
        try:
            if isinstance(payload, list):
                added, skipped = di.keys_controller.import_keys(payload)
                if added > 0:
                    offloader.add_task(di.refresh_controller.refresh)
                return {"success": True, "added": added, "skipped": skipped}
            di.keys_controller.add_key(payload)
            offloader.add_task(di.refresh_controller.refresh)
            return {"success": True}
        except Exception as e:
            raise __http_error("Failed to add keys", e)

    @app.post("/api/keys/batch-delete")
    def delete_keys(
        payload: BatchDeletePayload,
        offloader: BackgroundTasks,
        di: DI = Depends(get_di),
    ) -> dict:
        try:
            deleted = di.keys_controller.delete_keys(payload.ids)
            if deleted > 0:
                offloader.add_task(di.refresh_controller.refresh)
            return {"success": True, "deleted": deleted}
        except Exception as e:
            raise __http_error("Failed to delete keys", e)

    @app.post("/api/keys/export")
    def export_keys(payload: ExportPayload, di: DI = Depends(get_di)) -> dict:
        try:
            return {"success": True, "keys": di.keys_controller.export_keys(payload.password)}
        except Exception as e:
            raise __http_error("Failed to export keys", e)

    @app.delete("/api/keys/")
    @app.delete("/api/keys/{key_id}")
    def delete_key(offloader: BackgroundTasks, key_id: str = "", di: DI = Depends(get_di)) -> dict:
        try:
            if di.keys_controller.delete_key(key_id):
                offloader.add_task(di.refresh_controller.refresh)
            return {"success": True}
        except Exception as e:
            raise __http_error("Failed to delete key", e)

    @app.post("/api/keys/{key_id}/refresh")
    async def refresh_key(key_id: str, di: DI = Depends(get_di)) -> dict:
        try:
            result = await di.usage_controller.refresh_key(key_id)
            return {"success": True, "data": result.model_dump(mode = "json")}
        except Exception as e:
            raise __http_error("Failed to refresh key", e)

    # noinspection PyUnusedLocal
    @app.api_route("/{path:path}", methods = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"])
    def not_found(path: str) -> PlainTextResponse:
        return PlainTextResponse("Not Found", status_code = 404)

    return app


def __http_error(message: str, e: Exception) -> HTTPException:
    if isinstance(e, ServiceError):
        if e.http_status >= 500:
            log.e(message, e)
        else:
            log.d(message, str(e))
        return HTTPException(status_code = e.http_status, detail = e.to_api_dict())
    return HTTPException(status_code = 500, detail = {"message": str(e), "reason": log.e(message, e)})


app = create_app()

# The main runner
if __name__ == "__main__":
    if "--dev" in sys.argv:  # when running locally...
        config.log_level = "debug"
        reload = True
        print("INFO:     Launching in dev mode...")
    else:
        reload = False
        if config.export_password.get_secret_value() == config.DEFAULT_EXPORT_PASSWORD:
            print("WARN:     Using the default export password, set EXPORT_PASSWORD!", file = sys.stderr)
        print("INFO:     Launching in production mode...")
    uvicorn_log_level = "debug" if config.log_level == "local" else config.log_level
    if (version_file := Path("./.version")).exists():
        if version_name := version_file.read_text().strip():
            config.version = version_name
            print("INFO:     Version file found", f"v{config.version}")
    uvicorn.run(
        "main:app",
        host = "0.0.0.0",
        port = config.port,
        log_level = uvicorn_log_level,
        workers = 1,  # the usage cache lives in-process
        reload = reload,
    )
