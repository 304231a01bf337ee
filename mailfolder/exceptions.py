#!/usr/bin/env python
#
# File: $Id$
#
"""
Exceptions shared by the folder, proxy, and command line modules. They are
kept in this module to avoid circular dependencies.
"""


#######################################################################
#
# The base of everything raised by this package. Filesystem checks never
# raise, so these are for conditions the caller is expected to handle.
#
class FolderException(Exception):
    def __init__(self, value="folder exception"):
        self.value = value

    def __str__(self):
        return self.value


##################################################################
##################################################################
#
class NoSuchFolder(FolderException):
    def __init__(self, value="no such folder"):
        self.value = value


##################################################################
##################################################################
#
class FilenameCollision(FolderException):
    """
    Raised when every attempt to find an unused filename in a folder's
    `cur/` or `new/` directory landed on a name that already exists.
    """

    def __init__(self, value="unable to generate unique filename", attempts=0):
        self.value = value
        self.attempts = attempts

    def __str__(self):
        return "%s after %d attempts" % (self.value, self.attempts)


##################################################################
##################################################################
#
class ProxyError(FolderException):
    """
    A round trip to the proxy process did not complete: we could not
    connect, the write failed, or we timed out waiting for the reply.
    """

    def __init__(self, value="proxy error", command=None):
        self.value = value
        self.command = command

    def __str__(self):
        if self.command:
            return "%s (command: '%s')" % (self.value, self.command)
        return self.value
