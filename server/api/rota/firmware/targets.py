import logging, os
from typing import Iterator, Tuple

from rota.errors import NoTargetMapping

log = logging.getLogger(__name__)

def iter_targets(path: str) -> Iterator[Tuple[str, str]]:
    """
    targets file: '<device-id>,<relative-path>' per line.
    Lines without a comma are skipped.
    """
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.rstrip("\r\n")
            parts = line.split(",")
            if len(parts) < 2:
                continue
            yield parts[0], parts[1].strip()

def resolve_target(device_id: str, targets_path: str, firmware_dir: str) -> str:
    """
    Base path (no extension) of the firmware assigned to `device_id`.
    First exact match wins.
    """
    try:
        for dev, rel in iter_targets(targets_path):
            if dev == device_id:
                return os.path.join(firmware_dir, rel)
    except (OSError, UnicodeDecodeError) as e:
        log.error("cannot read targets file %s: %s", targets_path, e)
        raise NoTargetMapping(f"targets file unreadable: {e}") from e
    raise NoTargetMapping(f"no target for {device_id}")
