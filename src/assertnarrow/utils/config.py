"""
Configuration constants to replace magic strings throughout assertnarrow
"""

import os
import tempfile

# Assertion library
ASSERT_CLASS = "Webmozart\\Assert\\Assert"
# Short names accepted in snippets for fully qualified classes
DEFAULT_CLASS_ALIASES = {
    "Assert": ASSERT_CLASS,
}

# Method name prefixes
NULL_OR_PREFIX = "nullOr"
ALL_PREFIX = "all"
ALL_NOT_PREFIX = "allNot"

# Per-element negated assertions and their minimum argument counts
ALL_NOT_ARITIES = {
    "allNotNull": 1,
    "allNotInstanceOf": 2,
    "allNotSame": 2,
}

# Parser configuration (cache under temp dir to avoid cluttering project root)
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "assertnarrow_parser.cache")
GRAMMAR_FILE_NAME = "grammar.lark"

# Snippet files
SNIPPET_FILE_EXTENSION = ".nrw"
DEFAULT_SOURCE_FILE = "<snippet>"
DEFAULT_FILE_ENCODING = "utf-8"

# Environment variables
COLOR_ENV_VAR = "ASSERTNARROW_COLOR"
LOG_LEVEL_ENV_VAR = "ASSERTNARROW_LOG_LEVEL"
