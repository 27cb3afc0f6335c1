import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from rota.auth.headers import DeviceRequest
from rota.errors import MalformedTimestamp, MissingBuildMarker, MissingFirmwareFile
from rota.firmware.codec import REQUEST_LAYOUT, decode, decode_marker
from rota.firmware.targets import resolve_target

log = logging.getLogger(__name__)

MARKER_SUFFIX = ".ct"
IMAGE_SUFFIX = ".ino.bin"


class Action(str, Enum):
    SERVE_UPDATE = "serve_update"
    UP_TO_DATE = "up_to_date"


@dataclass(frozen=True)
class Negotiation:
    action: Action
    target_path: str
    claimed: datetime
    target_build: datetime


def decide(claimed: datetime, target_build: datetime) -> Action:
    # equal instants are up to date
    if claimed < target_build:
        return Action.SERVE_UPDATE
    return Action.UP_TO_DATE

def read_build_time(target_path: str) -> datetime:
    path = target_path + MARKER_SUFFIX
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        log.error("cannot read build marker %s: %s", path, e)
        raise MissingBuildMarker(f"{path}: {e}") from e
    try:
        return decode_marker(content)
    except MalformedTimestamp as e:
        log.error("build marker %s is malformed: %s", path, e.detail)
        raise MissingBuildMarker(f"{path}: {e.detail}") from e

def read_firmware_image(target_path: str) -> bytes:
    # whole image in memory, fine for ESP sized binaries
    path = target_path + IMAGE_SUFFIX
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        log.error("cannot read firmware image %s: %s", path, e)
        raise MissingFirmwareFile(f"{path}: {e}") from e

def negotiate(req: DeviceRequest, targets_path: str, firmware_dir: str) -> Negotiation:
    claimed = decode(req.version_text, REQUEST_LAYOUT)
    target_path = resolve_target(req.device_id, targets_path, firmware_dir)
    target_build = read_build_time(target_path)
    return Negotiation(decide(claimed, target_build), target_path, claimed, target_build)
