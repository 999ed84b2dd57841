from pathlib import Path

from wordgrid.settings import Settings, EDITABLE_FIELDS, update_settings, get_editable_settings, log_level


def _fresh_settings() -> Settings:
    """Create a fresh Settings instance for testing."""
    return Settings()


def test_editable_fields_exist_on_settings():
    """All editable fields must be actual attributes on Settings."""
    cfg = _fresh_settings()
    for field_name in EDITABLE_FIELDS:
        assert hasattr(cfg, field_name), f"{field_name} not found on Settings"


def test_default_paths():
    cfg = _fresh_settings()
    assert cfg.DICE_PATH == cfg.BASE_DIR / "data" / "en" / "dice.txt"
    assert cfg.WORDS_PATH.parent == cfg.DATA_DIR
    assert cfg.DICE_PATH.exists()


def test_environment_override(monkeypatch, tmp_path):
    monkeypatch.setenv("BOARD_SIZE", "5")
    monkeypatch.setenv("DEBUG", "yes")
    monkeypatch.setenv("CACHE_DIR", str(tmp_path))
    monkeypatch.setenv("TIMER", "allotment")
    cfg = _fresh_settings()
    assert cfg.BOARD_SIZE == 5
    assert cfg.DEBUG is True
    assert cfg.CACHE_DIR == Path(tmp_path)
    assert cfg.TIMER == "allotment"


def test_get_editable_settings():
    cfg = _fresh_settings()
    result = get_editable_settings(cfg)
    assert set(result.keys()) == set(EDITABLE_FIELDS.keys())
    assert result["BOARD_SIZE"] == cfg.BOARD_SIZE
    assert result["DENSITY"] == cfg.DENSITY


def test_update_int_field():
    cfg = _fresh_settings()
    errors = update_settings(cfg, MIN_WORD_LENGTH=5)
    assert errors == {}
    assert cfg.MIN_WORD_LENGTH == 5


def test_update_int_from_string():
    cfg = _fresh_settings()
    errors = update_settings(cfg, BOARD_SIZE="5")
    assert errors == {}
    assert cfg.BOARD_SIZE == 5


def test_update_bool_field():
    cfg = _fresh_settings()
    original = cfg.DEBUG
    errors = update_settings(cfg, DEBUG=not original)
    assert errors == {}
    assert cfg.DEBUG is (not original)


def test_update_bool_from_string():
    cfg = _fresh_settings()
    errors = update_settings(cfg, DEBUG="true")
    assert errors == {}
    assert cfg.DEBUG is True

    errors = update_settings(cfg, DEBUG="false")
    assert errors == {}
    assert cfg.DEBUG is False


def test_update_string_field_is_normalized():
    cfg = _fresh_settings()
    errors = update_settings(cfg, TIMER="Allotment", LOG_LEVEL="debug")
    assert errors == {}
    assert cfg.TIMER == "allotment"
    assert cfg.LOG_LEVEL == "DEBUG"


def test_update_multiple_fields():
    cfg = _fresh_settings()
    errors = update_settings(cfg, BOARD_SIZE=5, MIN_WORD_LENGTH=4, DENSITY=2)
    assert errors == {}
    assert cfg.BOARD_SIZE == 5
    assert cfg.MIN_WORD_LENGTH == 4
    assert cfg.DENSITY == 2


def test_update_out_of_range_values():
    cfg = _fresh_settings()
    errors = update_settings(cfg, BOARD_SIZE=6, DENSITY=4, MIN_WORD_LENGTH=2, TIMER="blitz")
    assert set(errors) == {"BOARD_SIZE", "DENSITY", "MIN_WORD_LENGTH", "TIMER"}
    assert cfg.BOARD_SIZE == 4
    assert cfg.DENSITY == 1


def test_update_bad_type():
    cfg = _fresh_settings()
    errors = update_settings(cfg, BOARD_SIZE="big", DENSITY=True)
    assert set(errors) == {"BOARD_SIZE", "DENSITY"}


def test_update_non_editable_field_returns_error():
    cfg = _fresh_settings()
    errors = update_settings(cfg, DICE_PATH="/tmp/dice")
    assert "DICE_PATH" in errors


def test_update_unknown_field_returns_error():
    cfg = _fresh_settings()
    errors = update_settings(cfg, NONEXISTENT_FIELD=42)
    assert "NONEXISTENT_FIELD" in errors


def test_update_partial_error():
    """Valid fields update even when invalid fields are present."""
    cfg = _fresh_settings()
    errors = update_settings(cfg, DENSITY=0, BAD_FIELD="nope")
    assert "BAD_FIELD" in errors
    assert cfg.DENSITY == 0


def test_debug_forces_debug_log_level():
    cfg = _fresh_settings()
    update_settings(cfg, LOG_LEVEL="warning", DEBUG=False)
    assert log_level(cfg) == "WARNING"
    update_settings(cfg, DEBUG=True)
    assert log_level(cfg) == "DEBUG"
