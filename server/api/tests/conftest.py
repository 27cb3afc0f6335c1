import pytest
from fastapi.testclient import TestClient

from rota.config import Settings
from rota.main import create_app

GOOD_KEY = "goodkey"
ESP32_MAC = "24:0A:C4:00:00:01"
FIRMWARE = b"\xe9\x02\x02\x20firmware-image"

# Marker as the build writes it: date line, then time line
MARKER_2021_03_01 = '"Mar  1 2021"\ntime "08:30:00"\n'


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "api_keys").write_text(f"otherkey\n{GOOD_KEY}\n", encoding="utf-8")
    (tmp_path / "targets").write_text(f"AA:AA:AA:AA:AA:AA,other\n{ESP32_MAC}, fw1 \n", encoding="utf-8")
    (tmp_path / "fw1.ct").write_text(MARKER_2021_03_01, encoding="utf-8")
    (tmp_path / "fw1.ino.bin").write_bytes(FIRMWARE)
    return tmp_path


@pytest.fixture
def settings(config_dir):
    return Settings.for_dir(str(config_dir))


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


def esp32_headers(version, mac=ESP32_MAC, **extra):
    h = {"x-esp32-sta-mac": mac, "x-esp32-version": version}
    h.update(extra)
    return h
