from typing import Optional


class RotaError(Exception):
    """
    Base for every failure the service turns into an HTTP response.
    `reason` is the snake_case token sent back in {"ok": false, "reason": ...}.
    """
    status_code = 500
    reason = "internal_error"

    def __init__(self, detail: str = "", reason: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(detail or self.reason)
        self.detail = detail
        if reason is not None:
            self.reason = reason
        if status_code is not None:
            self.status_code = status_code


class MissingHeader(RotaError):
    status_code = 400
    reason = "missing_header"


# ---- auth ----

class AuthError(RotaError):
    status_code = 401
    reason = "unauthorized"

class DeviceTypeUnrecognized(AuthError):
    status_code = 403
    reason = "device_type_unrecognized"

class InvalidApiKey(AuthError):
    status_code = 401
    reason = "invalid_api_key"


# ---- parsing ----

class ParseError(RotaError):
    status_code = 400
    reason = "parse_error"

class MalformedTimestamp(ParseError):
    reason = "malformed_timestamp"


# ---- target resolution ----

class ResolutionError(RotaError):
    status_code = 500
    reason = "resolution_error"

class NoTargetMapping(ResolutionError):
    status_code = 404
    reason = "no_target_mapping"

class MissingBuildMarker(ResolutionError):
    reason = "missing_build_marker"

class MissingFirmwareFile(ResolutionError):
    reason = "missing_firmware_file"


# ---- device registry ----

class RegistryError(RotaError):
    status_code = 500
    reason = "registry_error"

class DeviceNotFound(RegistryError):
    status_code = 404
    reason = "device_not_found"

class StoreUnreadable(RegistryError):
    reason = "registry_unreadable"

class StoreUnwritable(RegistryError):
    reason = "registry_unwritable"

class InvalidRegistryValue(RegistryError):
    status_code = 400
    reason = "invalid_registry_value"


# ---- configuration ----

class ConfigError(RotaError):
    reason = "config_error"

class ApiKeysUnavailable(ConfigError):
    reason = "api_keys_unavailable"
