"""
mailfolder: one uniform view of a mail folder, whether it is a local
Maildir or a folder on a remote server reached through a proxy process.
"""

__version__ = "0.3.0"
