"""
Password checkers for the Archive Password Cracker.

A checker tries one candidate against the target file and classifies the
result. Fatal conditions are raised as CheckerError instead of returned.
"""

from abc import ABC, abstractmethod
import enum
import errno
import lzma
import os
import subprocess
import zlib
from typing import Callable, Optional

import pikepdf
import pyzipper

from archive_cracker.utils.exceptions import (
    ArchiveNotEncryptedError,
    ArchiveNotFoundError,
    CheckerError,
)


# Errors meaning the process ran out of file handles
EXHAUSTION_ERRNOS = (errno.EMFILE, errno.ENFILE)

READ_CHUNK_SIZE = 64 * 1024


class Outcome(enum.Enum):
    """Classified result of a single password attempt"""
    SUCCESS = "success"
    WRONG_PASSWORD = "wrong_password"
    RESOURCE_EXHAUSTED = "resource_exhausted"


class PasswordChecker(ABC):
    """Abstract base class for password checkers"""

    @abstractmethod
    def check(self, candidate: bytes) -> Outcome:
        """Try a single candidate"""
        pass

    def close(self) -> None:
        """Release any handle held on the target file"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


CheckerFactory = Callable[[], PasswordChecker]


class SevenZipChecker(PasswordChecker):
    """Checks passwords by running the 7z tool once per candidate"""

    def __init__(self, archive_path: str, executable: str = "7z"):
        self.archive_path = archive_path
        self.executable = executable

    def command(self, candidate: bytes):
        password = candidate.decode("latin-1")
        return [self.executable, "x", "-y", "-so", f"-p{password}", self.archive_path]

    def check(self, candidate: bytes) -> Outcome:
        try:
            proc = subprocess.run(
                self.command(candidate),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise CheckerError(f"7z executable not found: {self.executable}") from e
        except OSError as e:
            if e.errno in EXHAUSTION_ERRNOS:
                return Outcome.RESOURCE_EXHAUSTED
            raise CheckerError(f"Could not run {self.executable}: {e}") from e

        if proc.returncode == 0:
            return Outcome.SUCCESS

        message = proc.stderr.decode("utf-8", errors="replace")
        if "Wrong password" in message:
            return Outcome.WRONG_PASSWORD
        if "too many open files" in message.lower():
            return Outcome.RESOURCE_EXHAUSTED
        raise CheckerError(
            f"Error with command `{self.executable} x -y -so -p{candidate.decode('latin-1')} "
            f"{self.archive_path}` (exit {proc.returncode}): {message.strip()}"
        )


class ZipChecker(PasswordChecker):
    """Checks passwords in-process against a ZIP archive (ZipCrypto or AES)

    The archive is opened once and kept open, so each worker needs its own
    instance.
    """

    def __init__(self, archive_path: str):
        self.archive_path = archive_path
        try:
            self.zip_file = pyzipper.AESZipFile(archive_path)
        except (OSError, pyzipper.BadZipFile) as e:
            raise CheckerError(f"Could not open archive {archive_path}: {e}") from e

        self.entry = self._first_encrypted_entry()
        if self.entry is None:
            self.zip_file.close()
            raise ArchiveNotEncryptedError(f"No encrypted file in archive: {archive_path}")

    def _first_encrypted_entry(self) -> Optional[pyzipper.ZipInfo]:
        for info in self.zip_file.infolist():
            if info.flag_bits & 0x1 and not info.is_dir():
                return info
        return None

    def check(self, candidate: bytes) -> Outcome:
        try:
            fp = self.zip_file.open(self.entry, pwd=candidate)
        except RuntimeError as e:
            if "Bad password" in str(e):
                return Outcome.WRONG_PASSWORD
            raise CheckerError(f"Error opening {self.entry.filename}: {e}") from e
        except OSError as e:
            if e.errno in EXHAUSTION_ERRNOS:
                return Outcome.RESOURCE_EXHAUSTED
            raise CheckerError(f"Error opening {self.entry.filename}: {e}") from e

        # The verifier matched. Read to the end so the CRC or AES HMAC gets
        # checked, any failure from here on means the key was wrong.
        try:
            with fp:
                while fp.read(READ_CHUNK_SIZE):
                    pass
        except OSError as e:
            # bz2 reports a garbled stream as OSError without an errno
            if e.errno in EXHAUSTION_ERRNOS:
                return Outcome.RESOURCE_EXHAUSTED
            return Outcome.WRONG_PASSWORD
        except (pyzipper.BadZipFile, zlib.error, lzma.LZMAError, EOFError):
            return Outcome.WRONG_PASSWORD
        return Outcome.SUCCESS

    def close(self) -> None:
        self.zip_file.close()


class PdfChecker(PasswordChecker):
    """Checks passwords against an encrypted PDF with pikepdf"""

    def __init__(self, pdf_path: str):
        self.pdf_path = pdf_path
        if not self.is_password_protected():
            raise ArchiveNotEncryptedError(f"This PDF is not password protected: {pdf_path}")

    def is_password_protected(self) -> bool:
        try:
            with pikepdf.open(self.pdf_path):
                return False
        except pikepdf.PasswordError:
            return True
        except pikepdf.PdfError as e:
            raise CheckerError(f"Error checking PDF: {e}") from e

    def check(self, candidate: bytes) -> Outcome:
        try:
            with pikepdf.open(self.pdf_path, password=candidate.decode("latin-1")):
                return Outcome.SUCCESS
        except pikepdf.PasswordError:
            return Outcome.WRONG_PASSWORD
        except OSError as e:
            if e.errno in EXHAUSTION_ERRNOS:
                return Outcome.RESOURCE_EXHAUSTED
            raise CheckerError(f"Error opening PDF: {e}") from e
        except pikepdf.PdfError as e:
            raise CheckerError(f"Error opening PDF: {e}") from e


def detect_strategy(path: str) -> str:
    """Pick a checker for a file by its type"""
    if path.lower().endswith(".pdf"):
        return "pdf"
    if pyzipper.is_zipfile(path):
        return "zip"
    return "7z"


def create_checker_factory(path: str, strategy: str = "auto",
                           sevenzip_path: str = "7z") -> CheckerFactory:
    """Build a factory that creates one fresh checker per worker

    Args:
        path: Path to the archive or PDF
        strategy: One of 'auto', 'zip', '7z', 'pdf'
        sevenzip_path: 7z executable used by the '7z' strategy

    Returns:
        Zero-argument callable returning a new PasswordChecker
    """
    if not os.path.exists(path):
        raise ArchiveNotFoundError(f"Archive not found: {path}")

    if strategy == "auto":
        strategy = detect_strategy(path)

    if strategy == "zip":
        return lambda: ZipChecker(path)
    if strategy == "pdf":
        return lambda: PdfChecker(path)
    if strategy == "7z":
        return lambda: SevenZipChecker(path, sevenzip_path)
    raise ValueError(f"Unknown checker strategy: {strategy}")
