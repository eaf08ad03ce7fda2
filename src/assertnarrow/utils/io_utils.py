"""
Snippet file access: locating ``.nrw`` snippets and reading them.
"""

from pathlib import Path
from typing import List, Union

from .config import DEFAULT_FILE_ENCODING, SNIPPET_FILE_EXTENSION


def read_source_file(path: Union[Path, str]) -> str:
    return Path(path).read_text(encoding=DEFAULT_FILE_ENCODING)


def find_snippet_files(path: Union[Path, str]) -> List[Path]:
    """
    Snippets to analyse for ``path``.

    A file is returned as is, whatever its suffix; a directory is searched
    recursively for snippet files, in sorted order. A missing path yields
    nothing.
    """
    root = Path(path)
    if root.is_file():
        return [root]
    if root.is_dir():
        return sorted(p for p in root.rglob(f"*{SNIPPET_FILE_EXTENSION}") if p.is_file())
    return []
