"""
assertnarrow utilities package
"""

from .io_utils import find_snippet_files, read_source_file

__all__ = ["find_snippet_files", "read_source_file"]
