import json
import logging

import pytest
from pydantic import ValidationError

from skyportal.config.settings import DEFAULT_CONFIG, load_config, load_environment


@pytest.mark.usefixtures("clean_environ")
def test_load_environment_defaults(caplog):
    with caplog.at_level(logging.WARNING):
        env = load_environment(env_file=None)

    assert env.api_token == "b2507058a2c145d60c6d919c0347fe9c"
    assert env.mac_address == "D4CA6DA65E0E"
    assert env.property_id == 1234
    assert env.registration_method_id == 2
    assert env.rateplan_id == 3
    assert "LASTNAME is not set" in caplog.text
    assert "b2507058a2c145d60c6d919c0347fe9c" not in caplog.text


@pytest.mark.usefixtures("clean_environ")
def test_load_environment_reads_variables(monkeypatch):
    monkeypatch.setenv("LASTNAME", "Nakamura")
    monkeypatch.setenv("ROOMNUMBER", "1207")
    monkeypatch.setenv("PROPERTYID", "77")
    monkeypatch.setenv("RATEPLANID", " 9 ")

    env = load_environment(env_file=None)

    assert env.last_name == "Nakamura"
    assert env.room_number == "1207"
    assert env.property_id == 77
    assert env.rateplan_id == 9


@pytest.mark.usefixtures("clean_environ")
@pytest.mark.parametrize("raw", ["abc", "-4", "", "1.5"])
def test_bad_integer_falls_back_to_default(monkeypatch, caplog, raw):
    monkeypatch.setenv("REGMETHODID", raw)

    with caplog.at_level(logging.WARNING):
        env = load_environment(env_file=None)

    assert env.registration_method_id == 2
    assert "REGMETHODID" in caplog.text


@pytest.mark.usefixtures("clean_environ")
def test_environment_is_immutable():
    env = load_environment(env_file=None)

    with pytest.raises(ValidationError):
        env.last_name = "Other"


@pytest.mark.usefixtures("clean_environ")
def test_load_environment_reads_dotenv(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("NSEID=ff00ee\nVLAN=4100\n", encoding="utf-8")

    env = load_environment(env_file=str(env_file))

    assert env.nseid == "ff00ee"
    assert env.vlan == "4100"


def test_load_config_missing_file_uses_defaults(tmp_path):
    config = load_config(tmp_path / "missing.json")

    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_load_config_merges_nested_sections(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"interval_seconds": 60, "http": {"timeout_seconds": 20}}),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config["interval_seconds"] == 60
    assert config["http"]["timeout_seconds"] == 20
    assert config["http"]["retries"] == 3
    assert config["portal_host"] == "splash.skyadmin.io"
    assert DEFAULT_CONFIG["http"]["timeout_seconds"] == 10
