from fastapi import Request

from rota.config import Settings
from rota.devices.store import DeviceRegistry

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_registry(request: Request) -> DeviceRegistry:
    return request.app.state.registry
