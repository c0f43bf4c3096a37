"""
Console logging for the eis-circuits CLI.

Records are routed to two streams and tagged by level:

    stdout   INFO (no prefix), WARNING ("! ")
    stderr   ERROR and CRITICAL ("!! "), DEBUG ("[DEBUG] ", only with -v)

``-q`` drops INFO, so only warnings and errors remain.
"""

import argparse
import logging
import sys

LEVEL_PREFIXES = {
    logging.DEBUG: '[DEBUG] ',
    logging.INFO: '',
    logging.WARNING: '! ',
    logging.ERROR: '!! ',
    logging.CRITICAL: '!! ',
}


class PrefixFormatter(logging.Formatter):
    """Prepend the level prefix from LEVEL_PREFIXES to the bare message."""

    def format(self, record):
        return LEVEL_PREFIXES.get(record.levelno, '') + record.getMessage()


def _is_report(record: logging.LogRecord) -> bool:
    # Regular output: INFO and WARNING go to stdout
    return logging.INFO <= record.levelno < logging.ERROR


def setup_logging(args: argparse.Namespace) -> None:
    """
    Install the CLI handlers on the root logger.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed arguments with 'quiet' and 'verbose' attributes
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()
    formatter = PrefixFormatter()

    report = logging.StreamHandler(sys.stdout)
    report.setLevel(logging.WARNING if args.quiet else logging.INFO)
    report.addFilter(_is_report)
    report.setFormatter(formatter)
    root.addHandler(report)

    problems = logging.StreamHandler(sys.stderr)
    problems.setLevel(logging.DEBUG if args.verbose else logging.ERROR)
    problems.addFilter(lambda record: not _is_report(record))
    problems.setFormatter(formatter)
    root.addHandler(problems)


def log_separator(length: int = 50, char: str = "=") -> None:
    """Log a horizontal rule at INFO level."""
    logging.getLogger(__name__).info(char * length)
