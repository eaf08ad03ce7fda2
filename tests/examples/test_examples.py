#!/usr/bin/env python3
"""
Parametrized tests over the shipped example snippets.
Every .nrw file under examples/ states its expectations with assertType,
so analysing it without diagnostics is the whole check.
"""

import pytest
from pathlib import Path
from assertnarrow.utils import find_snippet_files

EXAMPLES_DIR = Path(__file__).parent.parent.parent / "examples"


class TestExamples:

    def test_examples_are_shipped(self):
        assert find_snippet_files(EXAMPLES_DIR), "examples/ should contain .nrw snippets"

    @pytest.mark.parametrize("example_file", find_snippet_files(EXAMPLES_DIR), ids=lambda f: f.stem)
    def test_analysis(self, driver, example_file):
        result = driver.analyse_file(example_file)
        assert result.success, result.reporter.format_all_errors(color=False)
        assert result.program.statements, f"{example_file.name} should not be empty"
