import logging

from forbid_gps import config


def test_defaults():
    assert config.get_decoder_name() == 'auto'
    assert config.get_reject_unreadable() is False
    assert config.get_log_level() == logging.INFO
    assert config.get_max_content_length() == 16 * 1024 * 1024


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('FORBID_GPS_DECODER', ' Pillow ')
    monkeypatch.setenv('FORBID_GPS_REJECT_UNREADABLE', 'yes')
    monkeypatch.setenv('LOG_LEVEL', 'debug')
    monkeypatch.setenv('MAX_CONTENT_LENGTH', '1024')
    app_config = config.load_app_config()
    assert app_config['FORBID_GPS_DECODER'] == 'pillow'
    assert app_config['FORBID_GPS_REJECT_UNREADABLE'] is True
    assert app_config['LOG_LEVEL'] == logging.DEBUG
    assert app_config['MAX_CONTENT_LENGTH'] == 1024


def test_invalid_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv('FORBID_GPS_REJECT_UNREADABLE', 'maybe')
    monkeypatch.setenv('LOG_LEVEL', 'chatty')
    monkeypatch.setenv('MAX_CONTENT_LENGTH', 'lots')
    assert config.get_reject_unreadable() is False
    assert config.get_log_level() == logging.INFO
    assert config.get_max_content_length() == config.DEFAULT_MAX_CONTENT_LENGTH
