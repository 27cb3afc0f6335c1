from conftest import FIRMWARE, esp32_headers


def test_health(client):
    assert client.get("/health").json() == {"ok": True}

def test_ota_serves_newer_image(client):
    r = client.get("/ota", headers=esp32_headers("Jan  5 2021, 12:00:00?goodkey"))
    assert r.status_code == 200
    assert r.content == FIRMWARE
    assert r.headers["content-type"] == "application/octet-stream"

def test_ota_up_to_date(client):
    r = client.get("/ota", headers=esp32_headers("Jun 15 2021, 12:00:00?goodkey"))
    assert r.status_code == 304
    assert r.content == b""

def test_ota_same_build_is_up_to_date(client):
    r = client.get("/ota", headers=esp32_headers("Mar  1 2021 08:30:00?goodkey"))
    assert r.status_code == 304

def test_ota_bad_key(client):
    r = client.get("/ota", headers=esp32_headers("Jan  5 2021, 12:00:00?badkey"))
    assert r.status_code == 401
    assert r.json() == {"ok": False, "reason": "invalid_api_key"}

def test_ota_unknown_device_class(client, config_dir):
    # key file gone: a 403 must come before any key or version handling
    (config_dir / "api_keys").unlink()
    r = client.get("/ota", headers={"x-esp32-version": "garbage?goodkey", "x-real-ip": "10.1.1.1"})
    assert r.status_code == 403
    assert r.json()["reason"] == "device_type_unrecognized"

def test_ota_esp8266_headers(client, config_dir):
    (config_dir / "targets").write_text("5C:CF:7F:00:00:01,fw1\n", encoding="utf-8")
    r = client.get("/ota", headers={
        "X-ESP8266-STA-MAC": "5C:CF:7F:00:00:01",
        "X-ESP8266-Version": "Jan  5 2021 12:00:00?goodkey",
    })
    assert r.status_code == 200
    assert r.content == FIRMWARE

def test_ota_malformed_version(client):
    r = client.get("/ota", headers=esp32_headers("1.0.0?goodkey"))
    assert r.status_code == 400
    assert r.json()["reason"] == "malformed_timestamp"

def test_ota_unmapped_device(client):
    r = client.get("/ota", headers=esp32_headers("Jan  5 2021 12:00:00?goodkey", mac="11:22:33:44:55:66"))
    assert r.status_code == 404
    assert r.json()["reason"] == "no_target_mapping"

def test_ota_missing_marker(client, config_dir):
    (config_dir / "fw1.ct").unlink()
    r = client.get("/ota", headers=esp32_headers("Jan  5 2021 12:00:00?goodkey"))
    assert r.status_code == 500
    assert r.json()["reason"] == "missing_build_marker"

def test_ota_missing_image(client, config_dir):
    (config_dir / "fw1.ino.bin").unlink()
    r = client.get("/ota", headers=esp32_headers("Jan  5 2021 12:00:00?goodkey"))
    assert r.status_code == 500
    assert r.json()["reason"] == "missing_firmware_file"
    # the server keeps answering
    assert client.get("/health").status_code == 200

def test_ota_missing_api_keys_file(client, config_dir):
    (config_dir / "api_keys").unlink()
    r = client.get("/ota", headers=esp32_headers("Jan  5 2021 12:00:00?goodkey"))
    assert r.status_code == 500
    assert r.json()["reason"] == "api_keys_unavailable"

def test_check_for_update(client):
    r = client.get("/checkforupdate", headers=esp32_headers("Jan  5 2021, 12:00:00?goodkey"))
    assert r.status_code == 200
    assert r.content == b""

def test_check_for_update_none_needed(client):
    r = client.get("/checkforupdate", headers=esp32_headers("Jun 15 2021, 12:00:00?goodkey"))
    assert r.status_code == 304

def test_check_for_update_bad_key(client):
    r = client.get("/checkforupdate", headers=esp32_headers("Jan  5 2021, 12:00:00?nope"))
    assert r.status_code == 401

def test_ota_undecodable_targets_file(client, config_dir):
    (config_dir / "targets").write_bytes(b"\xff\xfe,fw1\n")
    r = client.get("/ota", headers=esp32_headers("Jan  5 2021 12:00:00?goodkey"))
    assert r.status_code == 404
    assert r.json() == {"ok": False, "reason": "no_target_mapping"}

def test_ota_undecodable_api_keys_file(client, config_dir):
    (config_dir / "api_keys").write_bytes(b"goodkey\n\xff\n")
    r = client.get("/ota", headers=esp32_headers("Jan  5 2021 12:00:00?goodkey"))
    assert r.status_code == 500
    assert r.json() == {"ok": False, "reason": "api_keys_unavailable"}
