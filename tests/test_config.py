import json
import os

from dualsense_gui.config import SETTINGS_VERSION, AppConfig, AppPaths


def test_paths_follow_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'cfg'))
    monkeypatch.setenv('XDG_DATA_HOME', str(tmp_path / 'data'))
    paths = AppPaths()
    assert paths.config == str(tmp_path / 'cfg' / 'dualsensectl-gui')
    assert paths.state_file == str(tmp_path / 'cfg' / 'dualsensectl-gui' / 'state.json')
    assert paths.log_file == str(tmp_path / 'data' / 'dualsensectl-gui' / 'logs' / 'dualsensectl.log')
    assert paths.profiles == str(tmp_path / 'data' / 'dualsensectl-gui' / 'profiles')


def test_paths_fall_back_to_home(monkeypatch, tmp_path):
    monkeypatch.delenv('XDG_CONFIG_HOME', raising=False)
    monkeypatch.delenv('XDG_DATA_HOME', raising=False)
    monkeypatch.setenv('HOME', str(tmp_path))
    paths = AppPaths()
    assert paths.config == str(tmp_path / '.config' / 'dualsensectl-gui')
    assert paths.data == os.path.join(str(tmp_path), '.local', 'share', 'dualsensectl-gui')


def test_paths_overrides_and_ensure(tmp_path):
    paths = AppPaths(config_dir=str(tmp_path / 'c'), data_dir=str(tmp_path / 'd'))
    paths.ensure()
    assert os.path.isdir(paths.config)
    assert os.path.isdir(paths.logs)
    assert os.path.isdir(paths.profiles)


def test_missing_settings_gives_defaults(tmp_path):
    assert AppConfig.load(str(tmp_path / 'settings.json')) == AppConfig()


def test_broken_settings_gives_defaults(tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text('[1, 2')
    assert AppConfig.load(str(path)) == AppConfig()


def test_invalid_values_ignored_per_key(tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({
        'autosave': True,
        'minimize_to_tray': 'yes',
        'log_level': 'LOUD',
        'lock_timeout': -1,
        'command_timeout': 2.5,
        'dualsensectl_path': '',
        'unknown': 1,
    }))
    config = AppConfig.load(str(path))
    assert config.autosave is True
    assert config.minimize_to_tray is False
    assert config.log_level == 'INFO'
    assert config.lock_timeout == 5.0
    assert config.command_timeout == 2.5
    assert config.dualsensectl_path == 'dualsensectl'


def test_save_then_load(tmp_path):
    path = str(tmp_path / 'settings.json')
    config = AppConfig(dualsensectl_path='/opt/bin/dualsensectl', apply_on_startup=True,
                       log_level='DEBUG')
    config.save(path)
    with open(path) as f:
        assert json.load(f)['version'] == SETTINGS_VERSION
    assert AppConfig.load(path) == config
