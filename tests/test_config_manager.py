# tests/test_config_manager.py

import uritrack.config.config_manager as cf


def test_load_config_creates_default_file(isolated_config):
    config = cf.load_config()
    assert cf.USER_CONFIG.exists()
    assert config["reports"]["default_period"] == "month"
    assert config["sessions"]["fetch_limit"] == 500
    assert config["location"]["timezone"] == ""


def test_set_get_and_delete_value():
    assert cf.set_config_value("location", "timezone", "Europe/Berlin") is True
    assert cf.get_config_value("location", "timezone") == "Europe/Berlin"
    assert cf.get_timezone_name() == "Europe/Berlin"

    assert cf.delete_config_value("location", "timezone") is True
    assert cf.get_config_value("location", "timezone", "unset") == "unset"
    # deleting a missing key is a no-op
    assert cf.delete_config_value("location", "timezone") is True


def test_get_config_section_missing_is_empty():
    assert cf.get_config_section("nope") == {}
    assert cf.get_config_section("logging") == {"level": "INFO"}


def test_malformed_file_degrades_to_empty(isolated_config):
    isolated_config.mkdir(parents=True, exist_ok=True)
    cf.USER_CONFIG.write_text("this is [not toml", encoding="utf-8")
    assert cf.load_config() == {}
    assert cf.get_fetch_limit() == 500
    assert cf.get_default_report_period() == "month"


def test_default_report_period_validation():
    cf.set_config_value("reports", "default_period", "three_months")
    assert cf.get_default_report_period() == "three_months"
    cf.set_config_value("reports", "default_period", "decade")
    assert cf.get_default_report_period() == "month"


def test_fetch_limit_validation():
    cf.set_config_value("sessions", "fetch_limit", 50)
    assert cf.get_fetch_limit() == 50
    cf.set_config_value("sessions", "fetch_limit", "lots")
    assert cf.get_fetch_limit() == 500
    cf.set_config_value("sessions", "fetch_limit", -3)
    assert cf.get_fetch_limit() == 500


def test_log_level_is_upper_case():
    cf.set_config_value("logging", "level", "debug")
    assert cf.get_log_level() == "DEBUG"
