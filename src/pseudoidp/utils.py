import json
import os

import yaml


def load_json(file_name):
    with open(file_name) as fp:
        js = json.load(fp)
    return js


def load_yaml_config(file_name):
    with open(file_name) as fp:
        c = yaml.safe_load(fp)
    return c


def load_config_file(file_name):
    """
    Load a configuration dictionary from a YAML or a JSON file.

    :param file_name: Path to the file, the extension decides the format
    :return: dictionary
    """
    _ext = os.path.splitext(file_name)[1].lower()
    if _ext == ".json":
        return load_json(file_name)
    return load_yaml_config(file_name)


def first_value(values: dict, key: str, default: str = "") -> str:
    """First value of a multi valued mapping"""
    _vals = values.get(key)
    if not _vals:
        return default
    return _vals[0]


OAUTH2_NOCACHE_HEADERS = [("Pragma", "no-cache"), ("Cache-Control", "no-store")]


def get_header(headers: dict, name: str, default: str = "") -> str:
    """Case insensitive header lookup"""
    _name = name.lower()
    for key, val in headers.items():
        if key.lower() == _name:
            if isinstance(val, list):
                return val[0] if val else default
            return val
    return default
