"""
=============================================================================
APPLICATION CONFIGURATION
=============================================================================

A string-keyed store. INI files are flattened to "section.key":

    ; app.ini
    [dispatch]
    router = mysite
    views  = ./views

    [cookies]
    secret = change-me

    config.get("dispatch.router")   # "mysite"
    config.get("cookies.secret")    # "change-me"

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   Every source is a series of set() calls: last write wins.         │
    │                                                                     │
    │   1. Defaults (DEFAULTS below)                                      │
    │   2. INI file       config.load("app.ini")                          │
    │   3. Environment    Config.from_env()  (TOLLGATE_CONFIG is loaded   │
    │                     first, then the individual variables)           │
    │   4. Code           config.set("dispatch.router", "mysite")         │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
RECOGNIZED KEYS
=============================================================================

    dispatch.router        base prefix stripped from request paths
    dispatch.url           public site URL, used by site()
    dispatch.views         template directory
    dispatch.layout        layout template wrapped around render() output
    dispatch.flash_cookie  name of the flash cookie
    cookies.secret         secret for encrypted cookies and flash
    log.level              DEBUG, INFO, WARNING, ERROR
    log.format             "text" or "json" access log lines

Any other key may be stored too; the application is free to use the same
store for its own settings.

=============================================================================
"""

from configparser import ConfigParser, Error as ConfigParserError
from typing import Any, Dict, Mapping, Optional, Union
import logging
import os

from .errors import ConfigurationError


logger = logging.getLogger(__name__)


DEFAULTS: Dict[str, Any] = {
    "dispatch.router": "",
    "dispatch.url": "",
    "dispatch.views": "views",
    "dispatch.layout": None,
    "dispatch.flash_cookie": "_F",
    "cookies.secret": None,
    "log.level": "INFO",
    "log.format": "text",
}

ENVIRONMENT = {
    "TOLLGATE_ROUTER": "dispatch.router",
    "TOLLGATE_URL": "dispatch.url",
    "TOLLGATE_VIEWS": "dispatch.views",
    "TOLLGATE_LAYOUT": "dispatch.layout",
    "TOLLGATE_SECRET": "cookies.secret",
    "TOLLGATE_LOG_LEVEL": "log.level",
    "TOLLGATE_LOG_FORMAT": "log.format",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


class Config:
    """
    Configuration store for one application.

    Usage:
        config = Config()
        config.load("app.ini")
        config.set("dispatch.layout", "layout.html")
        config.set({"log.level": "DEBUG", "log.format": "json"})
        config.validate()
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, Any] = dict(DEFAULTS)
        if values:
            self.set(values)

    def get(self, key: str, default: Any = None) -> Any:
        """Value for `key`, or `default` when it is unset or None."""
        value = self._values.get(key)
        return default if value is None else value

    def set(self, key: Union[str, Mapping[str, Any]], value: Any = None) -> None:
        """
        Store one value, or every item of a mapping.

            config.set("dispatch.router", "mysite")
            config.set({"dispatch.router": "mysite", "log.level": "DEBUG"})
        """
        if isinstance(key, Mapping):
            for k, v in key.items():
                self._values[str(k)] = v
            return
        self._values[key] = value

    def load(self, path: Union[str, os.PathLike]) -> None:
        """
        Load an INI file, flattening sections to "section.key".

        Keys in the [DEFAULT] section are stored without a prefix.

        Raises:
            ConfigurationError: If the file is missing or unparseable.
        """
        parser = ConfigParser(interpolation=None)
        try:
            with open(path, encoding="utf-8") as fp:
                parser.read_file(fp)
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}")
        except ConfigParserError as e:
            raise ConfigurationError(f"Invalid config file {path}: {e}")

        for key, value in parser.defaults().items():
            self._values[key] = value
        for section in parser.sections():
            for key in parser.options(section):
                if key in parser.defaults():
                    continue
                self._values[f"{section}.{key}"] = parser.get(section, key)

        logger.debug(f"Loaded configuration from {path}")

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        TOLLGATE_CONFIG      INI file loaded before the variables below
        TOLLGATE_ROUTER      dispatch.router
        TOLLGATE_URL         dispatch.url
        TOLLGATE_VIEWS       dispatch.views
        TOLLGATE_LAYOUT      dispatch.layout
        TOLLGATE_SECRET      cookies.secret
        TOLLGATE_LOG_LEVEL   log.level
        TOLLGATE_LOG_FORMAT  log.format

        =====================================================================
        """
        config = cls()
        path = os.getenv("TOLLGATE_CONFIG")
        if path:
            config.load(path)
        for var, key in ENVIRONMENT.items():
            if var in os.environ:
                config.set(key, os.environ[var])
        return config

    def validate(self) -> None:
        """
        Check recognized keys; called once when the application starts.

        Raises:
            ConfigurationError: On an unknown log level or format.
        """
        level = str(self.get("log.level", "INFO")).upper()
        if level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log.level: {level}. Must be one of {LOG_LEVELS}")

        fmt = self.get("log.format", "text")
        if fmt not in LOG_FORMATS:
            raise ConfigurationError(f"Invalid log.format: {fmt}. Must be 'text' or 'json'")

        if not self.get("dispatch.flash_cookie"):
            raise ConfigurationError("dispatch.flash_cookie must not be empty")

    @property
    def router_prefix(self) -> str:
        """dispatch.router normalized to "/prefix" ("" when unset)."""
        prefix = str(self.get("dispatch.router", "")).strip("/")
        return "/" + prefix if prefix else ""

    @property
    def secret(self) -> Optional[str]:
        return self.get("cookies.secret")

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __contains__(self, key: str) -> bool:
        return self._values.get(key) is not None

    def __repr__(self) -> str:
        return f"Config({len(self._values)} keys)"
