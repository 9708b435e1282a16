# alpmfiles

Readers for two kinds of metadata found in ALPM (pacman) packages:

- the simple `key = value` INI dialect used by files such as `.BUILDINFO`
- MTREE v2 files (`.MTREE`), plain or gzip compressed

The package uses only the standard library.

## Installation

```sh
pip install .
```

To run the test suite as well:

```sh
pip install ".[test]"
pytest
```

## The INI dialect

`alpmfiles.ini.parse_ini(text)` returns a dictionary sorted by key.

Each line holds one `key = value` pair, with exactly one space on each side
of the `=`. A key may not contain `=`, spaces or newlines. Lines starting
with `#` are comments, and empty lines or lines holding only blanks are
ignored. A key that appears once maps to a single string; a key that appears
several times maps to the list of all its values, in the order they appeared.

```python
from alpmfiles.ini import parse_ini

items = parse_ini("""
pkgname = foo
buildenv = envfoo
buildenv = envbar
""")
# {"buildenv": ["envfoo", "envbar"], "pkgname": "foo"}
```

Malformed input raises `IniParseError`, which carries `offset`, `line`,
`column`, `label` and `expected`, and whose message shows the offending line
with a marker under the failing position. `value_or_error(item)` returns a
single value and raises `IniError` if the item is a list. `IniParseError`
derives from `IniError`.

### Filling a dataclass

`alpmfiles.ini_de.from_str(text, model)` parses the text and builds an
instance of the dataclass `model`:

```python
from dataclasses import dataclass
from alpmfiles.ini_de import from_str

@dataclass
class Data:
    num: int
    text: str
    items: list[str]

data = from_str("num = 42\ntext = foo\nitems = bar\nitems = baz\n", Data)
```

- Fields typed `str`, `int`, `float` and `bool` (`true` or `false`) are
  converted; other plain classes are called with the string value.
- A field typed as a list accepts a key given once (a one-element list) or
  several times.
- A field missing from the text takes its dataclass default; an optional
  field (`X | None`) without a default becomes `None`; any other missing
  field is an error.
- Keys without a matching field are ignored.

Failures raise `IniDeserializeError` (an `IniError`). Passing something that
is not a dataclass type raises `TypeError`.

## MTREE v2

```python
from alpmfiles.mtree import parse_mtree_v2

paths = parse_mtree_v2("""#mtree
/set uid=0 gid=0 mode=644 type=link
./some_link link=/etc time=1706086640.0
""")
for path in paths:
    print(path.to_dict())
```

`/set` and `/unset` lines change the default `uid`, `gid`, `mode` and `type`
for the path lines that follow (`PathDefaults` holds that state). Each path
line becomes a `Directory`, `File` or `Link`, and must end up with every
property its type requires:

- `Directory`: `uid`, `gid`, `mode`, `time`
- `File`: `uid`, `gid`, `mode`, `size`, `time`, `sha256digest`;
  `md5digest` is accepted but optional
- `Link`: `uid`, `gid`, `mode`, `time`, `link`

`to_dict()` gives a JSON-ready mapping with a `type` entry of `dir`, `file`
or `link`; a file's `md5_digest` is left out when it is not known. Digests
are stored in lower case.

`parse_raw_mtree_v2(data)` takes raw bytes and decompresses them first when
they start with the gzip magic number; otherwise the bytes must be UTF-8.

The syntax layer is available on its own: `alpmfiles.mtree_parser.parse_statements(text)`
returns one statement per line (`IgnoredStatement`, `SetStatement`,
`UnsetStatement`, `PathStatement`) without applying `/set` and `/unset`.

Paths and link targets use the escapes `\s`, `\t`, `\r`, `\n`, `\#` and
octal triplets such as `\360\237\214\240` for other characters;
`alpmfiles.path_decoder.decode_utf8_chars` decodes them.

### Errors

All errors derive from `alpmfiles.mtree_errors.MtreeError`:

- `MtreeParseError` for malformed syntax, with `offset`, `line` and `column`
- `InterpreterError` for missing properties, with the zero-based statement
  index (`line_nr`), the text of the affected line and the reason
- `InvalidGzipError` for broken gzip data
- `InvalidUtf8Error` for uncompressed input that is not UTF-8
- `MtreeIoError` when reading a file or standard input fails
- `NoInputFileError` when no file is given and standard input is a terminal

## Command line

```sh
alpm-mtree validate path/to/.MTREE
alpm-mtree format --pretty path/to/.MTREE
```

`validate` exits with status 0 and no output when the file is valid.
`format` prints the parsed paths as JSON (`-o/--output-format json`, the
only format and the default; `-p/--pretty` indents the output). Without a
file argument, input is read from standard input when it is not a terminal.
On failure the error is printed to standard error and the exit status is 1.

The same operations are available from Python in `alpmfiles.mtree_cli`:
`parse(file, stdin)`, `validate(file, stdin)` and
`format_paths(file, output_format, pretty, stdin)`, which returns the
rendered text.

## What this package does not do

- It has no types for `.BUILDINFO` or other metadata files: it parses their
  `key = value` syntax, but does not check fields, versions or formats, and
  does not write such files.
- It only reads MTREE files; it does not create them from a directory tree
  or compare them against files on disk.