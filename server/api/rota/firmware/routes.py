import logging
from fastapi import APIRouter, Depends, Request, Response

from rota.auth.gate import authorize_device
from rota.config import Settings
from rota.deps import get_settings
from rota.firmware.decision import Action, negotiate, read_firmware_image

router = APIRouter(tags=["firmware"])
log = logging.getLogger(__name__)

@router.get("/ota")
def ota(request: Request, settings: Settings = Depends(get_settings)):
    req = authorize_device(request.headers, settings.api_keys_path)
    n = negotiate(req, settings.targets_path, settings.firmware_dir)
    if n.action is Action.UP_TO_DATE:
        log.info("%s %s running latest firmware already.", req.device_class.value, req.device_id)
        return Response(status_code=304)
    image = read_firmware_image(n.target_path)
    log.info("Sending firmware dated %s to %s %s running firmware dated %s",
             n.target_build, req.device_class.value, req.device_id, n.claimed)
    return Response(content=image, media_type="application/octet-stream")

@router.get("/checkforupdate")
def check_for_update(request: Request, settings: Settings = Depends(get_settings)):
    req = authorize_device(request.headers, settings.api_keys_path)
    n = negotiate(req, settings.targets_path, settings.firmware_dir)
    if n.action is Action.UP_TO_DATE:
        return Response(status_code=304)
    log.info("%s %s has an update available (%s -> %s).",
             req.device_class.value, req.device_id, n.claimed, n.target_build)
    return Response(status_code=200)
