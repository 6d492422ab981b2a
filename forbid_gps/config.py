"""Environment-driven settings for the upload filter, its web app and tools."""
import os
import logging

DEFAULT_DECODER = "auto"
DEFAULT_LOG_FOLDER = os.path.join('data', 'log')
DEFAULT_UPLOAD_FOLDER = os.path.join('data', 'uploads')
DEFAULT_CSV_FOLDER = os.path.join('data', 'csv')
DEFAULT_MAX_CONTENT_LENGTH = 16 * 1024 * 1024

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


def _get_env_bool(key, default):
    value = os.environ.get(key)
    if value is None:
        return default
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def _get_env_int(key, default):
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_decoder_name():
    return os.environ.get('FORBID_GPS_DECODER', DEFAULT_DECODER).strip().lower() or DEFAULT_DECODER


def get_reject_unreadable():
    return _get_env_bool('FORBID_GPS_REJECT_UNREADABLE', False)


def get_log_level():
    level = logging.getLevelName(os.environ.get('LOG_LEVEL', 'INFO').upper())
    # getLevelName returns a "Level X" string for unknown names
    return level if isinstance(level, int) else logging.INFO


def get_log_folder():
    return os.environ.get('LOG_FOLDER', DEFAULT_LOG_FOLDER)


def get_upload_folder():
    return os.environ.get('UPLOAD_FOLDER', DEFAULT_UPLOAD_FOLDER)


def get_csv_folder():
    return os.environ.get('CSV_FOLDER', DEFAULT_CSV_FOLDER)


def get_max_content_length():
    return _get_env_int('MAX_CONTENT_LENGTH', DEFAULT_MAX_CONTENT_LENGTH)


def load_app_config():
    """Collect the Flask settings from the environment."""
    return {
        'FORBID_GPS_DECODER': get_decoder_name(),
        'FORBID_GPS_REJECT_UNREADABLE': get_reject_unreadable(),
        'LOG_LEVEL': get_log_level(),
        'LOG_FOLDER': get_log_folder(),
        'UPLOAD_FOLDER': get_upload_folder(),
        'MAX_CONTENT_LENGTH': get_max_content_length(),
    }
