import logging, os, tempfile, threading, tomllib
from typing import List

from rota.errors import DeviceNotFound, InvalidRegistryValue, StoreUnreadable, StoreUnwritable
from rota.schemas.device import DeviceRecord

log = logging.getLogger(__name__)

FIELDS = ("device_id", "device_alias", "target_firmware")
_FORBIDDEN = ("|", "'")

def _storable(c: str) -> bool:
    # toml literal strings take no control characters except tab
    if c != "\t" and (ord(c) < 0x20 or ord(c) == 0x7f):
        return False
    return c not in _FORBIDDEN

def _check_value(field: str, value: str) -> str:
    if not value or not all(_storable(c) for c in value):
        raise InvalidRegistryValue(f"{field} {value!r} cannot be stored", reason=f"invalid_{field}")
    return value

def _split(value: str) -> List[str]:
    return value.split("|") if value else []

def parse_registry(text: str) -> List[DeviceRecord]:
    """
    Three index-aligned, pipe-delimited fields:
        device_id = 'a|b'
        device_alias = 'kitchen|UNASSIGNED'
        target_firmware = 'fw1|UNASSIGNED'
    """
    try:
        doc = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise StoreUnreadable(f"registry is not valid toml: {e}") from e
    cols = []
    for field in FIELDS:
        v = doc.get(field)
        if not isinstance(v, str):
            raise StoreUnreadable(f"registry field {field} missing")
        cols.append(_split(v))
    if len({len(c) for c in cols}) != 1:
        raise StoreUnreadable("registry fields are not aligned")
    out = [DeviceRecord(device_id=i, device_alias=a, target_firmware=t) for i, a, t in zip(*cols)]
    if len({d.device_id for d in out}) != len(out):
        raise StoreUnreadable("registry holds duplicate device ids")
    return out

def render_registry(devices: List[DeviceRecord]) -> str:
    lines = []
    for field in FIELDS:
        lines.append(f"{field} = '{'|'.join(getattr(d, field) for d in devices)}'")
    return "\n".join(lines) + "\n"


class DeviceRegistry:
    """
    Device records persisted as one small file. Every mutation reads the
    whole set, changes it in memory and rewrites the file, all under one lock.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read(self) -> List[DeviceRecord]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StoreUnreadable(f"{self.path}: {e}") from e
        return parse_registry(text)

    def _write(self, devices: List[DeviceRecord]) -> None:
        parent = os.path.dirname(os.path.abspath(self.path))
        tmp = None
        try:
            os.makedirs(parent, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".devices.", dir=parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(render_registry(devices))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            if tmp and os.path.exists(tmp):
                os.unlink(tmp)
            raise StoreUnwritable(f"{self.path}: {e}") from e

    def list_devices(self) -> List[DeviceRecord]:
        with self._lock:
            return self._read()

    def register(self, device_id: str) -> bool:
        """Returns False (and leaves the store alone) if the device is already known."""
        _check_value("device_id", device_id)
        with self._lock:
            devices = self._read()
            if any(d.device_id == device_id for d in devices):
                log.info("Device %s already registered.", device_id)
                return False
            devices.append(DeviceRecord(device_id=device_id))
            self._write(devices)
        log.info("Registered device %s.", device_id)
        return True

    def _replace(self, device_id: str, **changes: str) -> DeviceRecord:
        with self._lock:
            devices = self._read()
            idx = next((i for i, d in enumerate(devices) if d.device_id == device_id), None)
            if idx is None:
                raise DeviceNotFound(f"device {device_id} not registered")
            updated = devices.pop(idx).model_copy(update=changes)
            devices.append(updated)
            self._write(devices)
        return updated

    def assign_firmware(self, device_id: str, firmware: str) -> DeviceRecord:
        rec = self._replace(device_id, target_firmware=_check_value("target_firmware", firmware))
        log.info("Assigned firmware %s to device %s.", firmware, device_id)
        return rec

    def assign_alias(self, device_id: str, alias: str) -> DeviceRecord:
        rec = self._replace(device_id, device_alias=_check_value("device_alias", alias))
        log.info("Assigned alias %s to device %s.", alias, device_id)
        return rec
