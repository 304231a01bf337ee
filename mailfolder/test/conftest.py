"""
pytest fixtures for testing `mailfolder`
"""
# System imports
#
import logging
import os
import socketserver
import tempfile
import threading
from email.headerregistry import Address
from email.message import EmailMessage
from email.utils import format_datetime
from pathlib import Path
from typing import Optional

# 3rd party imports
#
import pytest

# project imports
#
from ..scanner import make_maildir
from .utils import FakeProxy


##################################################################
##################################################################
#
class ProxyRequestHandler(socketserver.StreamRequestHandler):
    """
    Reads the whole command (the client shuts down its write side when it
    is done), records it on the server, and writes back the server's reply.
    """

    def handle(self):
        data = self.rfile.read()
        self.server.commands.append(data.decode("ascii"))
        if self.server.delay:
            self.server.release.wait(self.server.delay)
        self.wfile.write(self.server.reply.encode("utf-8"))


####################################################################
#
@pytest.fixture(autouse=True)
def reset_mailfolder_logging():
    """
    The command line tests run `setup_logging()`, which attaches its own
    handler to the `mailfolder` logger and stops propagation. Put it back
    the way it was after every test.
    """
    logger = logging.getLogger("mailfolder")
    handlers = logger.handlers[:]
    propagate = logger.propagate
    level = logger.level
    root_level = logging.getLogger().level
    yield
    for h in logger.handlers[:]:
        if h not in handlers:
            logger.removeHandler(h)
    logger.propagate = propagate
    logger.setLevel(level)
    logging.getLogger().setLevel(root_level)


####################################################################
#
@pytest.fixture
def maildir_factory(tmp_path):
    """
    Returns a function that creates a Maildir (cur/new/tmp) under the
    test's tmp dir and returns its path.
    """

    def make(name: str = "Maildir") -> Path:
        return make_maildir(tmp_path / name)

    return make


####################################################################
#
@pytest.fixture
def email_factory(faker):
    """
    Returns a factory that creates email.message.EmailMessages with faker
    generated headers and a plain text body.
    """

    def make_email(**kwargs) -> EmailMessage:
        msg = EmailMessage()
        msg["Date"] = format_datetime(
            faker.date_time_between(start_date="-1y")
        )
        msg["Message-ID"] = f"<{faker.uuid4()}@{faker.domain_name()}>"
        msg["Subject"] = kwargs.get("subject", faker.sentence())
        username, domain_name = faker.email().split("@")
        msg["From"] = Address(faker.name(), username, domain_name)
        username, domain_name = faker.email().split("@")
        msg["To"] = Address(faker.name(), username, domain_name)
        msg.set_content("\n".join(faker.paragraphs(nb=3)))
        return msg

    return make_email


####################################################################
#
@pytest.fixture
def bunch_of_email_in_maildir(faker, email_factory, maildir_factory):
    """
    Returns a function that fills a Maildir with messages: `num_cur` read
    messages in `cur/` (with the seen flag), `num_new` messages in `new/`
    (no info section, as a delivery agent would leave them), and
    `num_unseen` messages in `cur/` that have not had the seen flag set.

    Returns the path to the Maildir.
    """

    def create_emails(
        num_cur: int = 10,
        num_new: int = 5,
        num_unseen: int = 0,
        maildir: Optional[Path] = None,
    ) -> Path:
        maildir = maildir_factory() if maildir is None else maildir
        for i in range(num_cur):
            fname = maildir / "cur" / f"{faker.unix_time():.0f}.c{i}.test:2,S"
            fname.write_bytes(bytes(email_factory()))
        for i in range(num_new):
            fname = maildir / "new" / f"{faker.unix_time():.0f}.n{i}.test"
            fname.write_bytes(bytes(email_factory()))
        for i in range(num_unseen):
            fname = maildir / "cur" / f"{faker.unix_time():.0f}.u{i}.test:2,"
            fname.write_bytes(bytes(email_factory()))
        return maildir

    return create_emails


####################################################################
#
@pytest.fixture
def message_file(tmp_path, email_factory):
    """
    A message file outside of any folder, suitable for saving in to one.
    """
    path = tmp_path / "outgoing.eml"
    path.write_bytes(bytes(email_factory(subject="Outgoing")))
    return path


####################################################################
#
@pytest.fixture
def fake_proxy():
    return FakeProxy()


####################################################################
#
@pytest.fixture
def proxy_server():
    """
    Runs a fake proxy process on a unix domain socket in a separate
    thread. Yields the server; its `socket_path`, `commands` received,
    `reply`, and `delay` (seconds to sit on a request before replying)
    can be inspected and set by the test.

    NOTE: unix socket paths have a short length limit so the socket lives
          in its own short temp dir, not in `tmp_path`.
    """
    with tempfile.TemporaryDirectory(prefix="mf") as sock_dir:
        socket_path = os.path.join(sock_dir, "proxy.sock")
        server = socketserver.ThreadingUnixStreamServer(
            socket_path, ProxyRequestHandler
        )
        server.daemon_threads = True
        server.socket_path = socket_path
        server.commands = []
        server.reply = "OK\n"
        server.delay = 0
        server.release = threading.Event()

        server_thread = threading.Thread(
            target=server.serve_forever, daemon=True
        )
        server_thread.start()
        try:
            yield server
        finally:
            server.release.set()
            server.shutdown()
            server.server_close()
            server_thread.join(timeout=5.0)
