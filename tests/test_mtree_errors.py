import pytest

from alpmfiles.mtree_errors import (
    InterpreterError,
    InvalidGzipError,
    InvalidUtf8Error,
    MtreeError,
    MtreeIoError,
    MtreeParseError,
    NoInputFileError,
)


def test_no_input_file_message():
    err = NoInputFileError()
    assert str(err) == "No input file given."


def test_io_error_without_path():
    err = MtreeIoError("reading from stdin", OSError("broken pipe"))
    assert str(err) == "I/O error while reading from stdin:\nbroken pipe"
    assert err.path is None
    assert err.context == "reading from stdin"


def test_io_error_with_path():
    err = MtreeIoError("opening file", OSError("denied"), path="/tmp/some.mtree")
    message = str(err)
    assert message.startswith("I/O error at path ")
    assert '"/tmp/some.mtree"' in message
    assert " while opening file:\n" in message
    assert message.endswith("denied")
    assert err.path == "/tmp/some.mtree"


def test_invalid_gzip_message():
    err = InvalidGzipError(OSError("bad header"))
    assert str(err).startswith("Error while unpacking gzip file:\n")
    assert str(err).endswith("bad header")


def test_invalid_utf8_from_decode_error():
    with pytest.raises(UnicodeDecodeError) as info:
        b"ab\xff".decode("utf-8")
    err = InvalidUtf8Error(info.value)
    assert "from index 2" in str(err)
    assert err.source is info.value


def test_parse_error_points_at_offset():
    text = "./foo uid=x\n"
    err = MtreeParseError(text, 10, "user id", "a system id.")
    lines = str(err).split("\n")
    assert lines[0] == "File parsing error:"
    assert lines[1] == "./foo uid=x"
    assert lines[2].index("^") == 10
    assert "invalid user id" in lines
    assert "expected a system id." in lines
    assert err.line == 1
    assert err.column == err.offset + 1


def test_parse_error_on_later_line():
    text = "#mtree\n/set foo\n"
    offset = text.index("foo")
    err = MtreeParseError(text, offset)
    assert err.line == 2
    assert err.detail.split("\n")[0] == "/set foo"
    assert "unexpected input" in err.detail


def test_interpreter_error_message():
    err = InterpreterError(3, "./x uid=0", "Found no type for path.")
    assert str(err) == (
        "Error while interpreting file in line 3:\n"
        "Affected line:\n./x uid=0\n\nReason:\nFound no type for path."
    )
    assert (err.line_nr, err.line, err.reason) == (3, "./x uid=0", "Found no type for path.")


@pytest.mark.parametrize(
    ("err", "prefix"),
    [
        (NoInputFileError(), "No input file given."),
        (MtreeIoError("reading", OSError("x")), "I/O error while reading:"),
        (InvalidGzipError("x"), "Error while unpacking gzip file:"),
        (MtreeParseError("x", 0), "File parsing error:"),
        (InterpreterError(0, "x", "y"), "Error while interpreting file in line 0:"),
    ],
)
def test_all_errors_share_base(err, prefix):
    with pytest.raises(MtreeError) as info:
        raise err
    assert info.value is err
    assert str(info.value).startswith(prefix)


def test_invalid_utf8_caught_as_base():
    with pytest.raises(UnicodeDecodeError) as decode_info:
        b"\xfe".decode("utf-8")
    err = InvalidUtf8Error(decode_info.value)
    with pytest.raises(MtreeError) as info:
        raise err
    assert info.value.source is decode_info.value
    assert "from index 0" in str(info.value)