from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from rota.auth.gate import authorize_key
from rota.config import Settings
from rota.deps import get_registry, get_settings
from rota.devices.store import DeviceRegistry
from rota.errors import MissingHeader
from rota.schemas.device import DeviceListResponse

router = APIRouter(tags=["device"])

def _require(value: str | None, name: str) -> str:
    if not value:
        raise MissingHeader(f"{name} header required", reason=f"missing_{name.replace('-', '_')}")
    return value

@router.post("/register", response_class=PlainTextResponse)
def register(
    request: Request,
    esp_device_id: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    registry: DeviceRegistry = Depends(get_registry),
):
    authorize_key(request.headers, settings.api_keys_path)
    registry.register(_require(esp_device_id, "esp-device-id"))
    return "Wrote device into settings."

@router.post("/assignfirmware", response_class=PlainTextResponse)
def assign_firmware(
    request: Request,
    esp_device_id: str | None = Header(default=None),
    esp_target_firmware: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    registry: DeviceRegistry = Depends(get_registry),
):
    authorize_key(request.headers, settings.api_keys_path)
    registry.assign_firmware(
        _require(esp_device_id, "esp-device-id"),
        _require(esp_target_firmware, "esp-target-firmware"),
    )
    return "Assigned firmware to device."

@router.post("/assignalias", response_class=PlainTextResponse)
def assign_alias(
    request: Request,
    esp_device_id: str | None = Header(default=None),
    esp_alias: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    registry: DeviceRegistry = Depends(get_registry),
):
    authorize_key(request.headers, settings.api_keys_path)
    registry.assign_alias(_require(esp_device_id, "esp-device-id"), _require(esp_alias, "esp-alias"))
    return "Assigned alias to device."

@router.get("/devices", response_model=DeviceListResponse)
def list_devices(
    request: Request,
    settings: Settings = Depends(get_settings),
    registry: DeviceRegistry = Depends(get_registry),
):
    authorize_key(request.headers, settings.api_keys_path)
    return DeviceListResponse(devices=registry.list_devices())
