"""
The module that deals with folder objects.

A folder is either a local Maildir (a directory with `cur/`, `new/` and
`tmp/` sub-directories) or a folder on a remote mail server that we can only
reach by asking the proxy process to do things for us. Both look the same
to the caller: a path, message counts, the list of messages, and a way to
store a new message.

Counting messages means scanning the folder, so the counts are cached. For a
local folder the cache is keyed on the most recent mtime of `cur/` and
`new/`: as long as neither directory has been modified since the last scan
the cached counts stand. A remote folder has no directories we can stat so
its cache only moves when we say so (see `RemoteFolder.bump_mtime()`.)
"""

# system imports
#
import logging
import os
import os.path
import random
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

# Project imports
#
from . import scanner
from .exceptions import FilenameCollision, ProxyError
from .message import NEW_FLAG, SEEN_FLAG, MessageHandle
from .utils import hostname

if TYPE_CHECKING:
    from .proxy import ProxyClient

logger = logging.getLogger("mailfolder.folder")

# The mtime a folder starts with, meaning we have never looked at it.
#
NEVER_CHECKED = -1

# The directories inside a Maildir that hold messages, in the order we scan
# them.
#
MESSAGE_SUBDIRS = ("cur", "new")

# How many names we try before giving up on finding one that is not already
# used in the folder.
#
MAX_FILENAME_ATTEMPTS = 1000


####################################################################
#
def looks_remote(path: str) -> bool:
    """
    A folder name that does not start with '/' is taken to be the name of a
    folder on the remote server (ie: 'INBOX.Sent'), not a relative path.
    """
    return bool(path) and not path.startswith("/")


####################################################################
#
def scan_messages(path: str) -> List[MessageHandle]:
    """
    Return a handle for every message in `cur/` and `new/` under
    `path`. Anything that is a directory is skipped; we decide that by
    asking the filesystem, not by looking at the name.
    """
    result: List[MessageHandle] = []
    for subdir in MESSAGE_SUBDIRS:
        for entry in scanner.entries(os.path.join(path, subdir)):
            if not scanner.is_directory(entry):
                result.append(MessageHandle(entry))
    return result


##################################################################
##################################################################
#
class FolderStore(ABC):
    """
    An instance of a folder, local or remote.

    We create one of these when a folder is selected and throw it away when
    the selection changes. Nothing is persisted.

    Instances are not thread safe. Different threads should use different
    instances.
    """

    ##################################################################
    #
    def __init__(self, path: str, proxy: Optional["ProxyClient"] = None):
        """
        Arguments:
        - `path`: For a local folder, the path to the Maildir. For a remote
                  folder, the name of the folder as the proxy knows it.
        - `proxy`: The proxy client used to reach the remote server.
        """
        self._path = str(path)
        self.proxy = proxy
        self.log = logging.getLogger(
            f"{__name__}.{self.__class__.__name__}:'{self._path}'"
        )

        # `mtime` is the last modified time the counts were computed
        # against.
        #
        self.mtime: int = NEVER_CHECKED
        self.total: int = 0
        self.unread: int = 0

    ##################################################################
    #
    def __str__(self):
        return f"<{self.__class__.__name__} '{self._path}'>"

    ##################################################################
    #
    def path(self) -> str:
        """
        The path we were created with. This is only a filesystem path if
        `is_local()` is True.
        """
        return self._path

    ##################################################################
    #
    @abstractmethod
    def is_local(self) -> bool:
        pass

    ##################################################################
    #
    def is_remote(self) -> bool:
        return not self.is_local()

    ##################################################################
    #
    @abstractmethod
    def last_modified(self) -> int:
        pass

    ##################################################################
    #
    @abstractmethod
    def update_cache(self) -> None:
        pass

    ##################################################################
    #
    @abstractmethod
    def bump_mtime(self) -> None:
        pass

    ##################################################################
    #
    @abstractmethod
    def save_message(self, message: MessageHandle) -> bool:
        pass

    ##################################################################
    #
    def unread_messages(self) -> int:
        self.update_cache()
        return self.unread

    ##################################################################
    #
    def total_messages(self) -> int:
        self.update_cache()
        return self.total

    ##################################################################
    #
    def get_messages(self) -> List[MessageHandle]:
        """
        Every message in the folder, in filesystem order. No sorting or
        limiting is done; that is up to the caller.
        """
        return scan_messages(self._path)

    ##################################################################
    #
    def _proxy_save(self, message: MessageHandle) -> bool:
        """
        Have the proxy store `message` in the remote folder named by our
        path. Returns False if there is no proxy or the round trip failed.
        """
        if self.proxy is None:
            self.log.warning(
                "Unable to save '%s': no proxy for remote folder", message.path
            )
            return False
        try:
            reply = self.proxy.save_message(message.path, self._path)
        except (ProxyError, ValueError) as e:
            self.log.warning("Unable to save '%s': %s", message.path, e)
            return False

        self.log.debug("Saved '%s', proxy replied: %r", message.path, reply)
        self.bump_mtime()
        return True


##################################################################
##################################################################
#
class LocalFolder(FolderStore):
    """
    A Maildir on the local filesystem.
    """

    ##################################################################
    #
    def is_local(self) -> bool:
        return True

    ##################################################################
    #
    def last_modified(self) -> int:
        """
        The most recent mtime of the `cur/` and `new/` directories. A
        directory we can not stat counts as 0.
        """
        last = 0
        for subdir in MESSAGE_SUBDIRS:
            try:
                mtime = int(os.stat(os.path.join(self._path, subdir)).st_mtime)
            except OSError:
                continue
            last = max(last, mtime)
        return last

    ##################################################################
    #
    def update_cache(self) -> None:
        """
        Rescan the folder if `cur/` or `new/` has been modified since we
        last counted its messages.

        NOTE: mtimes are compared to the second. If the folder changes
              within the same second as our last scan we will not see it
              until the next change.
        """
        last_mod = self.last_modified()
        if last_mod == self.mtime:
            return

        self.mtime = last_mod
        msgs = self.get_messages()
        self.total = len(msgs)
        self.unread = sum(1 for msg in msgs if msg.is_new())
        self.log.debug(
            "Rescanned, mtime: %d, total: %d, unread: %d",
            self.mtime,
            self.total,
            self.unread,
        )

    ##################################################################
    #
    def bump_mtime(self) -> None:
        """
        Local folders take their mtime from the filesystem, there is
        nothing to bump.
        """
        pass

    ##################################################################
    #
    def generate_filename(self, is_new: bool) -> Optional[str]:
        """
        Come up with the full path for a new message file in this folder,
        one that is not in use. Messages that are new go in `new/`,
        everything else goes in `cur/`.

        The name looks like `<epoch>.<hostname><epoch><random>:2,<flag>`. The
        second run of epoch digits followed by the random number is the way
        existing tools name these files and we stick with it.

        Returns None if this folder is not a Maildir.

        Raises `FilenameCollision` if we can not find an unused name after
        MAX_FILENAME_ATTEMPTS tries.
        """
        if not scanner.is_maildir(self._path):
            self.log.warning("Not a maildir, can not generate a filename")
            return None

        subdir = os.path.join(self._path, "new" if is_new else "cur")
        flag = NEW_FLAG if is_new else SEEN_FLAG
        host = hostname()

        for _ in range(MAX_FILENAME_ATTEMPTS):
            since_epoch = str(int(time.time()))
            digits = since_epoch + str(random.randint(0, 999))
            fname = os.path.join(
                subdir, f"{since_epoch}.{host}{digits}:2,{flag}"
            )
            if not scanner.exists(fname):
                return fname

        raise FilenameCollision(
            f"'{subdir}' has no unused names", attempts=MAX_FILENAME_ATTEMPTS
        )

    ##################################################################
    #
    def save_message(self, message: MessageHandle) -> bool:
        """
        Store a copy of `message` in this folder. The copy goes in to `cur/`
        (ie: it is not new mail, it is something like a sent message.)

        The destination file is created exclusively, so a message some other
        writer delivered under the same name is never overwritten.

        If our path does not start with '/' it is not a path at all but the
        name of a folder on the remote server, and the message is handed to
        the proxy instead.
        """
        if looks_remote(self._path):
            self.log.debug("Treating '%s' as a remote folder", self._path)
            return self._proxy_save(message)

        # Another writer may take the name we generated before we create it.
        # In that case we go around and pick a new one.
        #
        for _ in range(MAX_FILENAME_ATTEMPTS):
            try:
                dest = self.generate_filename(False)
            except FilenameCollision as e:
                self.log.warning("Unable to save '%s': %s", message.path, e)
                return False
            if dest is None:
                return False
            try:
                return scanner.copy(message.path, dest)
            except FileExistsError:
                self.log.debug("'%s' was taken, trying another name", dest)

        self.log.warning(
            "Unable to save '%s': every name we picked was taken",
            message.path,
        )
        return False


##################################################################
##################################################################
#
class RemoteFolder(FolderStore):
    """
    A folder on a remote mail server. All we have of it is its name, and
    the proxy that can talk to the server.
    """

    ##################################################################
    #
    def is_local(self) -> bool:
        return False

    ##################################################################
    #
    def last_modified(self) -> int:
        """
        There is no directory to stat. The mtime is whatever we last set it
        to.
        """
        return self.mtime

    ##################################################################
    #
    def update_cache(self) -> None:
        """
        Nothing to do: a remote folder's counts only change when they are
        set explicitly.
        """
        pass

    ##################################################################
    #
    def bump_mtime(self) -> None:
        """
        Move our mtime forward so that whoever tracks it knows our counts
        no longer reflect the folder.
        """
        self.mtime += 1

    ##################################################################
    #
    def set_counts(self, total: int, unread: int) -> None:
        """
        Record counts for this folder learned from the remote server.
        """
        if total < 0 or unread < 0 or unread > total:
            raise ValueError(f"Invalid counts: total {total}, unread {unread}")
        self.total = total
        self.unread = unread

    ##################################################################
    #
    def save_message(self, message: MessageHandle) -> bool:
        return self._proxy_save(message)


####################################################################
#
def open_folder(
    path: str, remote: bool = False, proxy: Optional["ProxyClient"] = None
) -> FolderStore:
    """
    Return the folder object for `path`.

    Arguments:
    - `path`: The Maildir path, or the remote folder name.
    - `remote`: True if `path` names a folder on the remote server.
    - `proxy`: The proxy client for reaching the remote server. Local
               folders use it only for paths that look like remote folder
               names.
    """
    if remote:
        return RemoteFolder(path, proxy=proxy)
    return LocalFolder(path, proxy=proxy)
