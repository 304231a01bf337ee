"""
This module contains utility functions that do not properly belong to any
class or module: setting up logging, and the host name we put in to the
names of the message files we create.
"""

# system imports
#
import json
import logging
import logging.config
import socket
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from _typeshed import StrPath

DEFAULT_LOG_CONFIG_FILES = [
    Path("~/.mailfolder/log.json").expanduser(),
    Path("~/.mailfolder/log.cfg").expanduser(),
    Path("/etc/mailfolder_log.json"),
    Path("/etc/mailfolder_log.cfg"),
    Path("/usr/local/etc/mailfolder_log.json"),
    Path("/usr/local/etc/mailfolder_log.cfg"),
]


####################################################################
#
def hostname() -> str:
    """
    The host name, made safe for use in a Maildir file name: '/' and ':'
    have special meaning there so they are replaced by their octal escapes
    the same way other Maildir writers do it.
    """
    host = socket.gethostname()
    return host.replace("/", r"\057").replace(":", r"\072")


####################################################################
#
def _load_log_config(log_config: Path) -> None:
    if log_config.suffix == ".json":
        cfg = json.loads(log_config.read_text())
        logging.config.dictConfig(cfg)
    else:
        logging.config.fileConfig(str(log_config))


####################################################################
#
def setup_logging(
    log_config: Optional["StrPath"], debug: bool, json_logs: bool = False
):
    """
    Set up logging. If a logging config file is given, use that. Otherwise
    look in the default locations for one. If none of those work log to
    stderr.

    A config file whose name ends in `.json` is taken to be a logging
    config dictionary. Anything else is read with `fileConfig()`.

    With `json_logs` the default stderr handler writes one JSON object per
    record instead of plain text.
    """
    root_logger = logging.getLogger()
    if debug:
        root_logger.setLevel(logging.DEBUG)

    if log_config is not None:
        log_config = Path(log_config)
        if log_config.exists():
            _load_log_config(log_config)
            return
        print(
            f"WARNING: Logging config '{log_config}' does not exist",
            file=sys.stderr,
        )

    for log_config in DEFAULT_LOG_CONFIG_FILES:
        if log_config.exists():
            _load_log_config(log_config)
            return

    # If no logging config file is found then this is what will be used.
    #
    DEFAULT_LOGGING_CONFIG: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "basic": {
                "format": "[{asctime}] {levelname}:{module}.{funcName}: {message}",
                "style": "{",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if json_logs else "basic",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "mailfolder": {
                "handlers": ["console"],
                "level": "DEBUG" if debug else "WARNING",
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(DEFAULT_LOGGING_CONFIG)
    logger = logging.getLogger("mailfolder.utils")
    logger.debug("Debug enabled")
