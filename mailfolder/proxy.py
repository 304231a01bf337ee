"""
The client side of the proxy process that does the talking to remote mail
servers for us.

The protocol is one command per connection: we connect to the proxy's unix
domain socket, write a single newline terminated ASCII command, shut down our
side of the connection, and read until the proxy closes its side. Whatever it
sent back is the reply.

The only command we currently send is:

    save_message <path to message file> <folder name>\\n

The content of the reply is not interpreted. Getting one back is what counts.
"""

# system imports
#
import logging
import socket
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING, Union

# Project imports
#
from .exceptions import ProxyError
from .trace import trace

if TYPE_CHECKING:
    from _typeshed import StrPath

logger = logging.getLogger("mailfolder.proxy")

LINE_TERMINATOR = "\n"
READ_SIZE = 4096
DEFAULT_TIMEOUT = 10.0


####################################################################
#
def format_command(keyword: str, *args: Union[str, Path]) -> str:
    """
    Build one protocol line: the keyword and its arguments separated by a
    single space, terminated by a newline.

    Arguments are sent as is. The proxy splits on spaces so an argument with
    a space or newline in it would be misread and we refuse to send it.
    """
    parts = [keyword] + [str(x) for x in args]
    for part in parts:
        if not part or any(c in part for c in " \r\n"):
            raise ValueError(f"Invalid argument for '{keyword}': {part!r}")
    return " ".join(parts) + LINE_TERMINATOR


##################################################################
##################################################################
#
class ProxyClient:
    """
    A handle on the proxy process. One instance is meant to be shared by
    every remote folder. The proxy only deals with one request at a time so
    `request()` serializes its callers.
    """

    ##################################################################
    #
    def __init__(
        self, socket_path: "StrPath", timeout: float = DEFAULT_TIMEOUT
    ):
        self.log = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.socket_path = str(socket_path)
        self.timeout = timeout
        self._lock = threading.Lock()
        self.num_requests = 0

    ##################################################################
    #
    def __str__(self):
        return f"<{self.__class__.__name__} '{self.socket_path}'>"

    ##################################################################
    #
    def request(self, command: str) -> str:
        """
        Send `command` to the proxy and return its reply.

        Raises `ProxyError` if we can not reach the proxy, the write fails,
        or it takes longer than `self.timeout` to reply.
        """
        if not command.endswith(LINE_TERMINATOR):
            command += LINE_TERMINATOR
        keyword = command.split(" ", 1)[0].strip()
        try:
            data = command.encode("ascii")
        except UnicodeEncodeError as exc:
            raise ProxyError("command is not ascii", command=keyword) from exc

        with self._lock:
            start = time.monotonic()
            self.num_requests += 1
            trace({"msg_type": "SEND", "data": command})
            chunks = []
            try:
                with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                    sock.settimeout(self.timeout)
                    sock.connect(self.socket_path)
                    sock.sendall(data)
                    sock.shutdown(socket.SHUT_WR)
                    while True:
                        chunk = sock.recv(READ_SIZE)
                        if not chunk:
                            break
                        chunks.append(chunk)
            except socket.timeout as exc:
                trace({"msg_type": "TIMEOUT", "data": command})
                raise ProxyError(
                    f"timed out after {self.timeout}s talking to proxy at "
                    f"'{self.socket_path}'",
                    command=keyword,
                ) from exc
            except OSError as exc:
                trace({"msg_type": "EXCEPTION", "data": str(exc)})
                raise ProxyError(
                    f"unable to talk to proxy at '{self.socket_path}': {exc}",
                    command=keyword,
                ) from exc

            reply = b"".join(chunks).decode("utf-8", "replace")
            trace({"msg_type": "RECEIVED", "data": reply})
            self.log.debug(
                "%s: took %.3fs, reply: %r",
                keyword,
                time.monotonic() - start,
                reply,
            )
            return reply

    ##################################################################
    #
    def save_message(self, msg_path: "StrPath", folder: str) -> str:
        """
        Ask the proxy to store the message file at `msg_path` in the remote
        folder `folder`.
        """
        return self.request(format_command("save_message", msg_path, folder))
