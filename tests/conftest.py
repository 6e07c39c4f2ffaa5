import pathlib
import textwrap

import pytest

from potr.utils import debug_buffer

HEADER = '''\
msgid ""
msgstr ""
"Content-Type: text/plain; charset=UTF-8\\n"
"Language: sv\\n"
"Plural-Forms: nplurals=2; plural=(n != 1);\\n"

'''


@pytest.fixture
def write_po(tmp_path):
    """Write a PO file (header added) and return its path."""

    def _write(body: str, name: str = "input.po", header: str = HEADER) -> pathlib.Path:
        path = tmp_path / name
        path.write_text(header + textwrap.dedent(body), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _clear_debug_buffer():
    debug_buffer.clear()
    yield
    debug_buffer.clear()
