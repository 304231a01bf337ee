"""
The filesystem helpers the folder store is built on: listing the entries in a
directory, classifying them, and copying message files around.

None of the helpers raise for a missing or unreadable path. A folder whose
`new/` directory has not been created yet is simply an empty folder. The one
exception is `copy()`, which raises `FileExistsError` when its destination
is already taken so the caller can pick another name.
"""

# system imports
#
import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from _typeshed import StrPath

logger = logging.getLogger("mailfolder.scanner")

# The sub-directories every Maildir has.
#
MAILDIR_SUBDIRS = ("cur", "new", "tmp")


####################################################################
#
def entries(path: "StrPath") -> List[str]:
    """
    Return the full path of every entry directly inside `path`. This
    includes sub-directories; it is up to the caller to drop the entries it
    does not want.

    Order is whatever order the filesystem hands them back in.

    Arguments:
    - `path`: the directory to list. If it does not exist or can not be read
              the result is the empty list.
    """
    path = str(path)
    try:
        with os.scandir(path) as it:
            return [os.path.join(path, entry.name) for entry in it]
    except OSError as e:
        logger.debug("Unable to list '%s': %s", path, e)
        return []


####################################################################
#
def is_directory(path: "StrPath") -> bool:
    try:
        return os.path.isdir(path)
    except (OSError, ValueError):
        return False


####################################################################
#
def exists(path: "StrPath") -> bool:
    try:
        return os.path.lexists(path)
    except (OSError, ValueError):
        return False


####################################################################
#
def is_maildir(path: "StrPath") -> bool:
    """
    Returns True if `path` looks like a Maildir: it has the `cur`, `new`,
    and `tmp` sub-directories.
    """
    if not path:
        return False
    return all(is_directory(os.path.join(path, d)) for d in MAILDIR_SUBDIRS)


####################################################################
#
def make_maildir(path: "StrPath") -> Path:
    """
    Create the Maildir at `path` (and any parents). It is not an error if
    it already exists.
    """
    path = Path(path)
    for d in MAILDIR_SUBDIRS:
        (path / d).mkdir(parents=True, exist_ok=True)
    return path


####################################################################
#
def copy(src: "StrPath", dst: "StrPath") -> bool:
    """
    Copy the contents of the file `src` to the new file `dst`. `dst` is
    created exclusively: a file another writer put there between us picking
    the name and opening it is never overwritten.

    Returns False if the copy failed for any other reason. A partially
    written `dst` is removed.

    Raises `FileExistsError` if `dst` already exists.
    """
    try:
        with open(src, "rb") as fsrc, open(dst, "xb") as fdst:
            try:
                shutil.copyfileobj(fsrc, fdst)
            except OSError:
                os.unlink(dst)
                raise
    except FileExistsError:
        raise
    except OSError as e:
        logger.warning("Unable to copy '%s' to '%s': %s", src, dst, e)
        return False
    return True
