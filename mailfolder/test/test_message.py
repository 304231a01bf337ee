"""
Tests for message handles and how they decide if a message is new.
"""

# 3rd party imports
#
import pytest

# Project imports
#
from ..message import MessageHandle


####################################################################
#
@pytest.mark.parametrize(
    "path,is_new",
    [
        ("/mail/inbox/new/1700000000.123.host", True),
        ("/mail/inbox/new/1700000000.123.host:2,S", True),
        ("/mail/inbox/cur/1700000000.123.host:2,S", False),
        ("/mail/inbox/cur/1700000000.123.host:2,RS", False),
        ("/mail/inbox/cur/1700000000.123.host:2,", True),
        ("/mail/inbox/cur/1700000000.123.host:2,F", True),
        ("/mail/inbox/cur/1700000000.123.host:2,N", True),
        ("/mail/inbox/cur/1700000000.123.host", False),
    ],
)
def test_is_new(path, is_new):
    assert MessageHandle(path).is_new() is is_new


####################################################################
#
def test_flags():
    assert MessageHandle("/m/cur/1.host:2,FRS").flags() == "FRS"
    assert MessageHandle("/m/cur/1.host:2,").flags() == ""
    assert MessageHandle("/m/new/1.host").flags() == ""


####################################################################
#
def test_subdir():
    assert MessageHandle("/m/new/1.host").subdir == "new"
    assert MessageHandle("/m/cur/1.host:2,S").subdir == "cur"


####################################################################
#
def test_equality_by_path():
    a = MessageHandle("/m/cur/1.host:2,S")
    b = MessageHandle("/m/cur/1.host:2,S")
    c = MessageHandle("/m/cur/2.host:2,S")
    assert a == b
    assert a != c
    assert len({a, b, c}) == 2
    assert "/m/cur/1.host:2,S" in repr(a)


####################################################################
#
def test_message_parses_file(tmp_path, email_factory):
    msg = email_factory(subject="Parse me")
    cur = tmp_path / "cur"
    cur.mkdir()
    path = cur / "1700000000.1.host:2,FS"
    path.write_bytes(bytes(msg))

    handle = MessageHandle(str(path))
    parsed = handle.message()

    assert parsed["Subject"] == "Parse me"
    assert parsed.get_subdir() == "cur"
    assert parsed.get_flags() == "FS"

    # Parsed once and cached.
    #
    assert handle.message() is parsed


####################################################################
#
def test_message_missing_file_raises(tmp_path):
    handle = MessageHandle(str(tmp_path / "new" / "gone"))
    with pytest.raises(FileNotFoundError):
        handle.message()
