#!/usr/bin/env python
#
"""
Look at and store messages in local Maildirs and remote mail folders.

A folder that does not start with '/' is the name of a folder on the remote
server. Remote folders are reached through the proxy listening on the unix
domain socket given by `--socket`.

NOTE: For all command line options that can also be specified via an env. var:
      the command line option will override the env. var if set.

Usage:
  mailfolder [options] count <folder> [--remote]
  mailfolder [options] list <folder> [--new]
  mailfolder [options] save <message> <folder> [--remote]
  mailfolder [options] filename <folder> [--new]
  mailfolder [options] create <folder>
  mailfolder (-h | --help)
  mailfolder --version

Options:
  --version
  -h, --help          Show this text and exit
  --remote            The folder is a folder on the remote server, even if
                      its name starts with '/'. Message counts are
                      not available for remote folders.
  --new               For `list`: only list new messages. For `filename`:
                      generate a name for a new message (in `new/`).
  --socket=<s>        The proxy's unix domain socket. The env. var is
                      `PROXY_SOCKET`. Defaults to `~/.mailfolder/proxy.sock`
  --timeout=<t>       Seconds to wait for the proxy to reply. The env. var is
                      `PROXY_TIMEOUT`. Defaults to 10.
  --trace=<trace>     Write every exchange with the proxy to this file. The
                      env. var is `TRACE_FILE`.
  --debug             Will set the default logging level to `DEBUG`. The env.
                      var is `DEBUG`
  --json-logs         Log JSON records instead of plain text.
  --log-config=<lc>   The log config file. This file may be either a JSON file
                      that follows the python logging configuration dictionary
                      schema or a file that conforms to the python logging
                      configuration file format. The env. var is `LOG_CONFIG`
"""
# system imports
#
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

# 3rd party imports
#
from docopt import docopt
from dotenv import dotenv_values

# Application imports
#
from mailfolder import __version__ as VERSION
from mailfolder import scanner
from mailfolder.exceptions import (
    FilenameCollision,
    FolderException,
    NoSuchFolder,
)
from mailfolder.folder import LocalFolder, looks_remote, open_folder
from mailfolder.message import MessageHandle
from mailfolder.proxy import DEFAULT_TIMEOUT, ProxyClient
from mailfolder.trace import enable_tracing
from mailfolder.utils import setup_logging

logger = logging.getLogger("mailfolder.cli")

DEFAULT_PROXY_SOCKET = "~/.mailfolder/proxy.sock"


####################################################################
#
def _truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ("1", "true", "yes", "on")


#############################################################################
#
def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse the options, set up logging, and run the command. Returns the
    exit code.
    """
    args = docopt(__doc__, argv=argv, version=VERSION)
    socket_path = args["--socket"]
    timeout = args["--timeout"]
    trace_file = args["--trace"]
    debug = args["--debug"]
    log_config = args["--log-config"]

    config = {**dotenv_values(), **os.environ}

    # If docopt is not set, see if the option is set in the config. If it not
    # set there either, then set it to the default value.
    #
    if socket_path is None:
        socket_path = config.get("PROXY_SOCKET") or DEFAULT_PROXY_SOCKET
    if timeout is None:
        timeout = config.get("PROXY_TIMEOUT") or DEFAULT_TIMEOUT
    if trace_file is None:
        trace_file = config.get("TRACE_FILE")
    if not debug:
        debug = _truthy(config.get("DEBUG"))
    if log_config is None:
        log_config = config.get("LOG_CONFIG")

    setup_logging(log_config, debug, json_logs=args["--json-logs"])
    if trace_file:
        enable_tracing(trace_file)

    try:
        timeout = float(timeout)
    except ValueError:
        logger.error("Invalid timeout: '%s'", timeout)
        return 2

    proxy = ProxyClient(Path(socket_path).expanduser(), timeout=timeout)
    folder = open_folder(args["<folder>"], remote=args["--remote"], proxy=proxy)

    try:
        if args["count"]:
            return do_count(folder)
        elif args["list"]:
            return do_list(folder, args["--new"])
        elif args["save"]:
            return do_save(folder, args["<message>"])
        elif args["filename"]:
            return do_filename(folder, args["--new"])
        elif args["create"]:
            return do_create(folder)
    except FolderException as e:
        logger.error("%s: %s", folder, e)
        return 1
    return 2  # pragma: no cover


####################################################################
#
def run():
    """
    The console script entry point.
    """
    try:
        rv = main()
    except KeyboardInterrupt:
        logger.warning("Keyboard interrupt, exiting")
        rv = 1
    finally:
        logging.shutdown()
    sys.exit(rv)


####################################################################
#
def _require_local_folder(folder):
    """
    Raises `NoSuchFolder` if `folder` is local and there is no directory
    at its path.
    """
    if folder.is_local() and not scanner.is_directory(folder.path()):
        raise NoSuchFolder(f"'{folder.path()}' does not exist")


####################################################################
#
def do_count(folder) -> int:
    if folder.is_remote():
        print(f"{folder.path()}: message counts not available")
        return 0
    _require_local_folder(folder)
    print(
        f"{folder.path()}: {folder.total_messages()} messages, "
        f"{folder.unread_messages()} unread"
    )
    return 0


####################################################################
#
def do_list(folder, only_new: bool) -> int:
    _require_local_folder(folder)
    msgs = folder.get_messages()
    if only_new:
        msgs = [m for m in msgs if m.is_new()]
    for msg in sorted(msgs, key=lambda m: m.path):
        print(msg.path)
    return 0


####################################################################
#
def do_save(folder, message: str) -> int:
    msg_path = Path(message).resolve()
    if not msg_path.is_file():
        logger.error("Message file '%s' does not exist", msg_path)
        return 1
    if folder.save_message(MessageHandle(str(msg_path))):
        return 0
    logger.error("Unable to save '%s' to %s", msg_path, folder)
    return 1


####################################################################
#
def do_filename(folder, is_new: bool) -> int:
    if not isinstance(folder, LocalFolder):
        logger.error("%s is not a local folder", folder)
        return 1
    try:
        fname = folder.generate_filename(is_new)
    except FilenameCollision as e:
        logger.error("%s: %s", folder, e)
        return 1
    if fname is None:
        logger.error("%s is not a maildir", folder)
        return 1
    print(fname)
    return 0


####################################################################
#
def do_create(folder) -> int:
    if folder.is_remote() or looks_remote(folder.path()):
        logger.error("Can not create remote folder %s", folder)
        return 1
    try:
        scanner.make_maildir(folder.path())
    except OSError as e:
        logger.error("Can not create %s: %s", folder, e)
        return 1
    return 0


############################################################################
############################################################################
#
# Here is where it all starts
#
if __name__ == "__main__":
    run()
#
#
############################################################################
############################################################################
