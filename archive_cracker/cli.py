#!/usr/bin/env python3
"""
Command-line interface for the Archive Password Cracker.
"""

import argparse
import multiprocessing
import platform
import sys
import time
from typing import List, Optional

import pikepdf
import pyzipper

from archive_cracker.core.cracker import ArchiveCracker
from archive_cracker.utils.config import Config, verbosity_to_level
from archive_cracker.utils.exceptions import ArchiveCrackerError
from archive_cracker.utils.logger import Logger


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog="archive-cracker",
        description="Brute-force password recovery for encrypted archives",
        epilog="Settings such as worker count and charsets are read from "
               "~/.archive_cracker_config.json",
    )
    parser.add_argument("archive", help="Path to the encrypted archive")
    parser.add_argument(
        "resume",
        nargs="?",
        help="Candidate to resume from, e.g. the last one logged by a previous run",
    )
    return parser


def setup_logger(config: Config) -> Logger:
    """Set up logging based on the config"""
    return Logger(
        name="archive_cracker",
        log_file=config.get("log_file"),
        level=verbosity_to_level(config.get("verbosity", "info")),
    )


def log_system_info(logger) -> None:
    """Log system information useful for debugging"""
    logger.debug("=== System Information ===")
    logger.debug(f"Python version: {platform.python_version()}")
    logger.debug(f"Platform: {platform.platform()}")
    logger.debug(f"CPU count: {multiprocessing.cpu_count()}")
    logger.debug(f"pyzipper version: {getattr(pyzipper, '__version__', 'unknown')}")
    logger.debug(f"pikepdf version: {pikepdf.__version__}")
    logger.debug("==========================")


def main(argv: Optional[List[str]] = None, config: Optional[Config] = None) -> int:
    """Main entry point for the archive password cracker CLI

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = config or Config()
    except ArchiveCrackerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger = setup_logger(config).get_logger()

    try:
        log_system_info(logger)

        cracker = ArchiveCracker(args.archive, config=config, logger=logger)
        resume_from = args.resume.encode("latin-1") if args.resume else None

        start_time = time.time()
        password = cracker.crack(resume_from=resume_from)

        if password is not None:
            print(password.decode("latin-1"))
            logger.info(f"Total time: {time.time() - start_time:.2f} seconds")
            return 0

        logger.critical("No luck ¯\\_(ツ)_/¯ password not found in the search space")
        return 1

    except ArchiveCrackerError as e:
        logger.error(f"Error: {e}")
        return 1
    except UnicodeEncodeError:
        logger.error(f"Resume candidate must be single-byte text: {args.resume!r}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user. Pass the last logged guess to resume.")
        return 130
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


def display_examples():
    """Display usage examples"""
    examples = [
        "Basic usage:",
        "  archive-cracker secret.zip",
        "",
        "Resume from a guess logged by an earlier run:",
        "  archive-cracker secret.zip kqzvma",
        "",
        "Other formats (checked with 7z or pikepdf):",
        "  archive-cracker secret.7z",
        "  archive-cracker secret.pdf",
        "",
        "Tune workers, lengths and charsets in ~/.archive_cracker_config.json:",
        '  {"workers": 8, "sizes": [4, 5, 6], "charsets": [["digits"], ["lower", "digits"]]}',
        "",
        "For more options:",
        "  archive-cracker -h",
    ]

    print("\n".join(examples))


if __name__ == "__main__":
    if len(sys.argv) == 1:
        display_examples()
        sys.exit(1)

    sys.exit(main())
