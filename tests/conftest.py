import textwrap
from pathlib import Path

import pytest


@pytest.fixture
def class_root(tmp_path) -> Path:
    root = tmp_path / "lib"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def write_class(class_root):
    """Write a class file below `class_root`, e.g. write_class("widgets/Button.py", source)."""

    def write(relative: str, source: str) -> Path:
        path = class_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
        return path

    return write
