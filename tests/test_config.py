import pytest

from ezra_e2e import config
from ezra_e2e.config import Config


def test_validate_passes_with_defaults():
    Config.validate()


def test_validate_reports_missing(monkeypatch):
    monkeypatch.setattr(Config, "TEST_USER_EMAIL", "")
    monkeypatch.setattr(Config, "TEST_USER_PASSWORD", "")
    with pytest.raises(ValueError, match="TEST_USER_EMAIL, TEST_USER_PASSWORD"):
        Config.validate()


def test_validate_custom_required(monkeypatch):
    monkeypatch.setattr(Config, "TEST_USER_EMAIL", "")
    Config.validate(required=["BASE_URL"])


def test_unknown_timezone(monkeypatch):
    monkeypatch.setattr(Config, "TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ValueError, match="Unknown TIMEZONE"):
        Config.validate()


def test_url_joins_paths(monkeypatch):
    monkeypatch.setattr(Config, "BASE_URL", "https://staging.example")
    assert Config.url("/sign-in") == "https://staging.example/sign-in"
    assert Config.url("schedule") == "https://staging.example/schedule"
    assert Config.url() == "https://staging.example/"


def test_context_options(monkeypatch):
    monkeypatch.setattr(Config, "RECORD_VIDEO", False)
    monkeypatch.setattr(Config, "TIMEZONE", "America/New_York")
    options = Config.context_options()
    assert options["base_url"] == Config.BASE_URL
    assert options["timezone_id"] == "America/New_York"
    assert options["viewport"] == {"width": Config.VIEWPORT_WIDTH, "height": Config.VIEWPORT_HEIGHT}
    assert "record_video_dir" not in options


def test_context_options_with_video(monkeypatch, tmp_path):
    monkeypatch.setattr(Config, "RECORD_VIDEO", True)
    monkeypatch.setattr(Config, "EVIDENCE_DIR", str(tmp_path))
    options = Config.context_options()
    assert options["record_video_dir"] == str(tmp_path / "videos")


@pytest.mark.parametrize("raw, expected", [("1", True), ("TRUE", True), (" yes ", True), ("0", False), ("off", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("EZRA_FLAG", raw)
    assert config._env_bool("EZRA_FLAG") is expected


def test_env_bool_default(monkeypatch):
    monkeypatch.delenv("EZRA_FLAG", raising=False)
    assert config._env_bool("EZRA_FLAG") is False
    assert config._env_bool("EZRA_FLAG", "true") is True


def test_env_int(monkeypatch):
    monkeypatch.setenv("EZRA_NUMBER", "250")
    assert config._env_int("EZRA_NUMBER", 0) == 250
    monkeypatch.setenv("EZRA_NUMBER", "")
    assert config._env_int("EZRA_NUMBER", 7) == 7


def test_env_int_rejects_garbage(monkeypatch):
    monkeypatch.setenv("EZRA_NUMBER", "fast")
    with pytest.raises(ValueError, match="EZRA_NUMBER must be an integer"):
        config._env_int("EZRA_NUMBER", 0)
