import logging
from typing import Mapping, Optional, Set

from rota.auth.headers import DeviceRequest, REAL_IP_HEADER, extract_device_request, find_version_string, normalize, split_version_string
from rota.errors import ApiKeysUnavailable, AuthError, DeviceTypeUnrecognized, InvalidApiKey

log = logging.getLogger(__name__)
audit = logging.getLogger("rota.audit")

def load_api_keys(path: str) -> Set[str]:
    """
    api_keys file: one key per line. Read on every check so edits apply
    without a restart.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return {line.strip() for line in f if line.strip()}
    except (OSError, UnicodeDecodeError) as e:
        log.error("cannot read api keys from %s: %s", path, e)
        raise ApiKeysUnavailable(str(e)) from e

def check_api_key(key: Optional[str], api_keys_path: str) -> None:
    if not key or key not in load_api_keys(api_keys_path):
        raise InvalidApiKey("api key not recognized")

def audit_rejection(real_ip: Optional[str], err: AuthError) -> None:
    what = "rejected" if isinstance(err, DeviceTypeUnrecognized) else "failed to authenticate"
    if real_ip:
        audit.warning("Device with IP %s %s (%s).", real_ip, what, err.reason)
    else:
        audit.warning("Device with unknown IP %s (%s).", what, err.reason)

def authorize_device(headers: Mapping[str, str], api_keys_path: str) -> DeviceRequest:
    """
    Gate for the update path: device class first (403), then the key
    carried in the version header (401).
    """
    h = normalize(headers)
    try:
        req = extract_device_request(h)
        check_api_key(req.api_key, api_keys_path)
    except AuthError as e:
        audit_rejection(h.get(REAL_IP_HEADER), e)
        raise
    log.info("Device ID %s validated with api key.", req.device_id)
    if not req.uses_https:
        log.warning("Client %s is sending API key over an unencrypted HTTP request.", req.device_id)
    return req

def authorize_key(headers: Mapping[str, str], api_keys_path: str) -> None:
    """Gate for management calls: only the key matters, device class is not checked."""
    h = normalize(headers)
    version = find_version_string(h)
    key = split_version_string(version)[1] if version is not None else None
    try:
        check_api_key(key, api_keys_path)
    except AuthError as e:
        audit_rejection(h.get(REAL_IP_HEADER), e)
        raise
