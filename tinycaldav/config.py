import json
import logging
import os

"""
Configuration file parsing for get_davclient.

The config file is JSON (or YAML, if pyyaml is installed), with one
section per server.  A section may inherit from another one:

    {
        "default": {
            "caldav_url": "https://cloud.example.com/remote.php/dav",
            "caldav_user": "alice",
            "caldav_pass": "secret"
        },
        "work": {
            "inherits": "default",
            "caldav_url": "https://work.example.com/dav"
        }
    }
"""

log = logging.getLogger("tinycaldav")

## config keys that don't stay strings
_INT_KEYS = ("max_response_size",)
_FLOAT_KEYS = ("timeout",)
_BOOL_KEYS = ("ssl_verify_cert",)


def config_section(config, section="default"):
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def _coerce(key, value):
    if not isinstance(value, str):
        return value
    if key in _INT_KEYS:
        return int(value)
    if key in _FLOAT_KEYS:
        return float(value)
    if key in _BOOL_KEYS:
        ## anything else is taken to be the path of a CA bundle
        if value.lower() in ("0", "false", "no", "off"):
            return False
        if value.lower() in ("1", "true", "yes", "on"):
            return True
    return value


def connection_params(section):
    """
    DAVClient parameters from the ``caldav_*`` keys of a config
    section (``caldav_user`` and ``caldav_pass`` are accepted as short
    forms).  Numbers and booleans given as strings, as they are in
    environment variables, are converted.
    """
    conn_params = {}
    for k in section:
        if k.startswith("caldav_") and section[k] not in (None, ""):
            key = k[7:]
            if key == "pass":
                key = "password"
            if key == "user":
                key = "username"
            try:
                conn_params[key] = _coerce(key, section[k])
            except ValueError:
                log.error(f"ignoring {k}, {section[k]!r} is not a valid value")
    return conn_params


def read_config(fn):
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config/"
        for config_file in (
            f"{cfgdir}/caldav/calendar.conf",
            f"{cfgdir}/caldav/calendar.yaml",
            f"{cfgdir}/caldav/calendar.json",
            f"{cfgdir}/calendar.conf",
            "/etc/calendar.conf",
            "/etc/caldav/calendar.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, wrapped in try/except.  yaml is an external module,
            ## and not included in the requirements.
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.SafeLoader)
                except yaml.YAMLError:
                    log.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                log.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        log.debug(f"no config file {fn} found")
    except (OSError, ValueError):
        log.error("error in config file.  It will be ignored", exc_info=True)
    return {}
