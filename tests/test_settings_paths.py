from pathlib import Path

from core import settings


def test_linux_data_dir_with_xdg():
    env = {"XDG_DATA_HOME": "/tmp/xdg"}
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="linux",
        env=env,
        home=Path("/home/test"),
    )
    assert result == Path("/tmp/xdg") / settings.APP_NAME


def test_linux_data_dir_default_home():
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="linux",
        env={},
        home=Path("/home/test"),
    )
    assert result == Path("/home/test/.local/share") / settings.APP_NAME


def test_macos_data_dir():
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="darwin",
        env={},
        home=Path("/Users/test"),
    )
    expected = Path("/Users/test/Library/Application Support") / settings.APP_NAME
    assert result == expected


def test_windows_data_dir_appdata():
    env = {"APPDATA": "C:/Users/test/AppData/Roaming"}
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="win32",
        env=env,
        home=Path("C:/Users/test"),
    )
    expected = Path(env["APPDATA"]) / settings.APP_NAME
    assert result == expected


def test_override_wins_over_platform_defaults():
    env = {"FOCUSFLOW_DATA_DIR": "/srv/focus", "XDG_DATA_HOME": "/tmp/xdg"}
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="linux",
        env=env,
        home=Path("/home/test"),
    )
    assert result == Path("/srv/focus")


def test_runtime_paths_inside_data_dir():
    assert settings.DB_PATH.parent == settings.STORAGE_DIR
    assert settings.CONFIG_PATH.parent == settings.DATA_DIR
    assert settings.TOKEN_PATH.parent == settings.DATA_DIR
    assert settings.CLIENT_SECRET_PATH.parent == settings.SECRETS_DIR
    assert settings.LOG_PATH.parent == settings.LOG_DIR


def test_timer_defaults():
    assert settings.TIMER.focus_minutes == 25
    assert settings.TIMER.short_break_minutes == 5
    assert settings.TIMER.long_break_minutes == 15
    assert settings.TIMER.cycles_before_long_break == 4
    assert settings.TIMER.default_custom_preset in settings.TIMER.custom_presets
