from pydantic import BaseModel, ConfigDict
from typing import List

UNASSIGNED = "UNASSIGNED"

class DeviceRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    device_id: str
    device_alias: str = UNASSIGNED
    target_firmware: str = UNASSIGNED

class DeviceListResponse(BaseModel):
    ok: bool = True
    devices: List[DeviceRecord]
