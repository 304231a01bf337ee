"""
Some common code used by more than one test case.
"""

# system imports
#
import os
from pathlib import Path
from typing import List, Optional


##################################################################
##################################################################
#
class FakeProxy:
    """
    Stands in for a `ProxyClient`. Records every command it is asked to
    send and hands back a canned reply (or raises, if `exc` is set.)
    """

    def __init__(self, reply: str = "OK\n", exc: Optional[Exception] = None):
        self.reply = reply
        self.exc = exc
        self.commands: List[str] = []

    def request(self, command: str) -> str:
        self.commands.append(command)
        if self.exc is not None:
            raise self.exc
        return self.reply

    def save_message(self, msg_path, folder) -> str:
        return self.request(f"save_message {msg_path} {folder}\n")


####################################################################
#
def set_folder_mtime(maildir: Path, mtime: int):
    """
    Set the mtime of both `cur/` and `new/` so tests do not depend on
    what second it is.
    """
    for subdir in ("cur", "new"):
        os.utime(maildir / subdir, (mtime, mtime))
