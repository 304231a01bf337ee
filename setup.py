#!/usr/bin/env python
#

from setuptools import find_packages, setup

from mailfolder import __version__

setup(
    name="mailfolder",
    version=__version__,
    description="One view of a mail folder, local Maildir or remote",
    long_description=(
        "mailfolder presents a local Maildir and a folder on a remote mail "
        "server, reached through a proxy process, behind one interface: "
        "cached message counts, message listing, and storing new messages."
    ),
    author="Scanner",
    author_email="scanner@apricot.com",
    packages=find_packages(include=["mailfolder", "mailfolder.*"]),
    python_requires=">=3.9",
    install_requires=[
        "docopt",
        "python-dotenv",
        "python-json-logger>=3.1",
    ],
    extras_require={
        "test": ["pytest", "pytest-mock", "Faker"],
    },
    entry_points={
        "console_scripts": ["mailfolder = mailfolder.cli:run"],
    },
)
