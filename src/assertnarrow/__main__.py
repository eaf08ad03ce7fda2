"""CLI entry point: run `assertnarrow file.nrw` or `assertnarrow snippets/`."""

import logging
import os
import sys
from pathlib import Path


def main() -> int:
    import argparse
    from .analyser.driver import AnalyserDriver
    from .utils.config import LOG_LEVEL_ENV_VAR, SNIPPET_FILE_EXTENSION
    from .utils.io_utils import find_snippet_files

    parser = argparse.ArgumentParser(
        prog="assertnarrow",
        description="Analyse snippets (.nrw) and report the types narrowed by Assert:: calls.",
    )
    parser.add_argument("path", type=Path, help="Path to a .nrw snippet file or a directory of snippets")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log narrowing steps")
    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING").upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    path = args.path.resolve()
    if not path.exists():
        sys.stderr.write(f"assertnarrow: error: file not found: {path}\n")
        return 1
    snippets = find_snippet_files(path)
    if not snippets:
        sys.stderr.write(f"assertnarrow: error: no {SNIPPET_FILE_EXTENSION} snippets found in {path}\n")
        return 1

    driver = AnalyserDriver()
    status = 0
    for snippet in snippets:
        try:
            result = driver.analyse_file(snippet)
        except OSError as e:
            sys.stderr.write(f"assertnarrow: error: could not read file: {e}\n")
            return 1

        for dumped in result.dumped_types:
            sys.stdout.write(f"{dumped}\n")

        if not result.success:
            if result.reporter and result.reporter.has_errors():
                sys.stderr.write(result.reporter.format_all_errors())
            else:
                sys.stderr.write(f"assertnarrow: analysis failed: {snippet}\n")
            status = 1

    return status


if __name__ == "__main__":
    sys.exit(main())
