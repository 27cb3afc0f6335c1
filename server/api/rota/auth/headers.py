from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from rota.errors import DeviceTypeUnrecognized

REAL_IP_HEADER = "x-real-ip"
FORWARDED_PROTO_HEADER = "x-forwarded-proto"


class DeviceClass(str, Enum):
    ESP8266 = "ESP8266"
    ESP32 = "ESP32"

    @property
    def mac_header(self) -> str:
        return f"x-{self.value.lower()}-sta-mac"

    @property
    def version_header(self) -> str:
        return f"x-{self.value.lower()}-version"


@dataclass(frozen=True)
class DeviceRequest:
    device_class: DeviceClass
    device_id: str
    version_string: str
    real_ip: Optional[str] = None
    forwarded_proto: Optional[str] = None

    @property
    def version_text(self) -> str:
        return split_version_string(self.version_string)[0]

    @property
    def api_key(self) -> Optional[str]:
        return split_version_string(self.version_string)[1]

    @property
    def uses_https(self) -> bool:
        # can't tell means assume plain http
        return (self.forwarded_proto or "").lower() == "https"


def normalize(headers: Mapping[str, str]) -> dict[str, str]:
    return {str(k).lower(): v for k, v in headers.items()}

def split_version_string(value: str) -> tuple[str, Optional[str]]:
    """'<timestamp-text>?<api-key>' -> (timestamp-text, api-key or None)"""
    fields = value.split("?")
    if len(fields) < 2:
        return fields[0], None
    return fields[0], fields[1]

def detect_device_class(headers: Mapping[str, str]) -> Optional[DeviceClass]:
    h = normalize(headers)
    for cls in DeviceClass:
        if cls.mac_header in h:
            return cls
    return None

def find_version_string(headers: Mapping[str, str]) -> Optional[str]:
    """Version header of either class, ESP8266 first."""
    h = normalize(headers)
    for cls in DeviceClass:
        if cls.version_header in h:
            return h[cls.version_header]
    return None

def extract_device_request(headers: Mapping[str, str]) -> DeviceRequest:
    h = normalize(headers)
    cls = detect_device_class(h)
    if cls is None:
        raise DeviceTypeUnrecognized("no station mac header")
    version = h.get(cls.version_header)
    if version is None:
        raise DeviceTypeUnrecognized(f"{cls.value} request without {cls.version_header}")
    return DeviceRequest(
        device_class=cls,
        device_id=h[cls.mac_header],
        version_string=version,
        real_ip=h.get(REAL_IP_HEADER),
        forwarded_proto=h.get(FORWARDED_PROTO_HEADER),
    )
