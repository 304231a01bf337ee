"""
A lightweight handle on one stored message.

The handle is nothing more than a path. Whether the message is new is worked
out from that path every time it is asked: where the file lives (`new/` vs
`cur/`) and the Maildir info suffix on its name (`<unique>:2,<flags>`).
"""

# system imports
#
import logging
import os.path
from mailbox import MaildirMessage
from typing import Optional

logger = logging.getLogger("mailfolder.message")

# Everything after this in a Maildir file name is the "info" section. We only
# understand version 2 info, which is a list of single character flags.
#
INFO_SEPARATOR = ":2,"

SEEN_FLAG = "S"
NEW_FLAG = "N"


##################################################################
##################################################################
#
class MessageHandle:
    """
    A reference to a message in a folder. Handles carry no reference back
    to their folder; they are thrown away and rebuilt on every scan.
    """

    ##################################################################
    #
    def __init__(self, path: str):
        self.path = str(path)
        self._msg: Optional[MaildirMessage] = None

    ##################################################################
    #
    def __repr__(self):
        return f"<{self.__class__.__name__} '{self.path}'>"

    ##################################################################
    #
    def __eq__(self, other):
        if not isinstance(other, MessageHandle):
            return NotImplemented
        return self.path == other.path

    ##################################################################
    #
    def __hash__(self):
        return hash(self.path)

    ##################################################################
    #
    @property
    def subdir(self) -> str:
        """
        The name of the directory the message file is in (normally `cur` or
        `new`.)
        """
        return os.path.basename(os.path.dirname(self.path))

    ##################################################################
    #
    def flags(self) -> str:
        """
        The flags from the info section of the file name, or the empty
        string if there is no info section.
        """
        name = os.path.basename(self.path)
        _, sep, flags = name.rpartition(INFO_SEPARATOR)
        return flags if sep else ""

    ##################################################################
    #
    def is_new(self) -> bool:
        """
        A message is new if it has not been moved out of `new/` yet, if it
        was explicitly marked `N` when it was stored, or if it has an info
        section that does not include the seen flag.

        A message in `cur/` with no info section at all is considered read.
        """
        if self.subdir == "new":
            return True
        name = os.path.basename(self.path)
        if INFO_SEPARATOR not in name:
            return False
        flags = self.flags()
        if NEW_FLAG in flags:
            return True
        return SEEN_FLAG not in flags

    ##################################################################
    #
    def message(self) -> MaildirMessage:
        """
        Parse the message file. The result is cached on the handle.

        Raises whatever `open()` raises if the file has gone away.
        """
        if self._msg is None:
            with open(self.path, "rb") as f:
                self._msg = MaildirMessage(f)
            self._msg.set_subdir("new" if self.subdir == "new" else "cur")
            self._msg.set_flags(self.flags().replace(NEW_FLAG, ""))
        return self._msg
