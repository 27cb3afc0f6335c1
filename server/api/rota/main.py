import argparse, logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from rota.config import LOG_LEVELS, Settings, configure_logging
from rota.devices.routes import router as devices_router
from rota.devices.store import DeviceRegistry
from rota.errors import RotaError
from rota.firmware.routes import router as firmware_router

log = logging.getLogger(__name__)

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="rota OTA server")
    app.state.settings = settings
    app.state.registry = DeviceRegistry(settings.devices_path)

    @app.exception_handler(RotaError)
    async def _rota_error(request: Request, exc: RotaError):
        if exc.status_code >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            log.info("%s %s refused: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"ok": False, "reason": exc.reason})

    @app.get("/health")
    def health():
        return {"ok": True}

    app.include_router(firmware_router)
    app.include_router(devices_router)
    return app

def run(argv=None) -> None:
    # the app is built here, not at import, so bad ROTA_* values exit cleanly
    try:
        settings = Settings.from_env()
    except ValidationError as e:
        raise SystemExit(f"rota: invalid configuration from ROTA_* environment:\n{e}")

    import uvicorn

    p = argparse.ArgumentParser(prog="rota", description="OTA firmware server for ESP8266/ESP32 devices")
    p.add_argument("--host", default=settings.host)
    p.add_argument("--port", type=int, default=settings.port)
    p.add_argument("--log-level", default=settings.log_level, type=str.upper, choices=LOG_LEVELS)
    args = p.parse_args(argv)

    configure_logging(args.log_level)
    log.info("rota listening on %s:%s (config %s)", args.host, args.port, settings.config_dir)
    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=args.log_level.lower())

if __name__ == "__main__":
    run()
