import io
import logging
import struct
import threading
import zlib

import pikepdf
import pytest
import pyzipper

from archive_cracker.core.checker import Outcome, PasswordChecker
from archive_cracker.utils.config import Config
from archive_cracker.utils.exceptions import CheckerError
from archive_cracker.utils.logger import LOGGER_NAME


class ScriptedChecker(PasswordChecker):
    """Fake checker driven by a shared script, safe to use from many workers"""

    def __init__(self, password=None, exhausted=None, fatal=None, calls=None, lock=None):
        self.password = password
        # candidate -> number of RESOURCE_EXHAUSTED answers still to give
        self.exhausted = exhausted if exhausted is not None else {}
        self.fatal = fatal
        self.calls = calls if calls is not None else []
        self.lock = lock or threading.Lock()
        self.closed = False

    def check(self, candidate):
        with self.lock:
            self.calls.append(candidate)
            if self.exhausted.get(candidate):
                self.exhausted[candidate] -= 1
                return Outcome.RESOURCE_EXHAUSTED
        if candidate == self.fatal:
            raise CheckerError(f"cannot read archive while trying {candidate!r}")
        if candidate == self.password:
            return Outcome.SUCCESS
        return Outcome.WRONG_PASSWORD

    def close(self):
        self.closed = True


class ScriptedCheckerFactory:
    """Creates ScriptedCheckers sharing one call log"""

    def __init__(self, password=None, exhausted=None, fatal=None):
        self.calls = []
        self.lock = threading.Lock()
        self.exhausted = dict(exhausted or {})
        self.password = password
        self.fatal = fatal
        self.checkers = []

    def __call__(self):
        checker = ScriptedChecker(self.password, self.exhausted, self.fatal, self.calls, self.lock)
        self.checkers.append(checker)
        return checker


@pytest.fixture
def checker_factory():
    return ScriptedCheckerFactory


@pytest.fixture
def logger():
    return logging.getLogger("archive_cracker_tests")


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)


@pytest.fixture
def config(tmp_path):
    config = Config(str(tmp_path / "config.json"))
    config.update({
        "workers": 2,
        "backoff": 0,
        "progress_bar": False,
    })
    return config


@pytest.fixture
def make_aes_zip(tmp_path):
    def _make(password, name="secret.zip", content=b"hello world\n" * 200):
        path = tmp_path / name
        with pyzipper.AESZipFile(path, "w", compression=pyzipper.ZIP_DEFLATED,
                                 encryption=pyzipper.WZ_AES) as zf:
            zf.setpassword(password)
            zf.writestr("hello.txt", content)
        return str(path)
    return _make


class TraditionalZipCipher:
    """PKWARE stream cipher used by ZipCrypto entries"""

    def __init__(self, password):
        self.key0, self.key1, self.key2 = 0x12345678, 0x23456789, 0x34567890
        for byte in password:
            self._update(byte)

    @staticmethod
    def _crc(crc, byte):
        # One raw CRC-32 step, without zlib's pre and post inversion
        return zlib.crc32(bytes([byte]), crc ^ 0xFFFFFFFF) ^ 0xFFFFFFFF

    def _update(self, byte):
        self.key0 = self._crc(self.key0, byte)
        self.key1 = (self.key1 + (self.key0 & 0xFF)) & 0xFFFFFFFF
        self.key1 = (self.key1 * 134775813 + 1) & 0xFFFFFFFF
        self.key2 = self._crc(self.key2, self.key1 >> 24)

    def _keystream(self):
        k = self.key2 | 2
        return ((k * (k ^ 1)) >> 8) & 0xFF

    def encrypt(self, data):
        out = bytearray()
        for byte in data:
            out.append(byte ^ self._keystream())
            self._update(byte)
        return bytes(out)

    def decrypt(self, data):
        out = bytearray()
        for byte in data:
            plain = byte ^ self._keystream()
            out.append(plain)
            self._update(plain)
        return bytes(out)


class ZipCryptoArchive:
    """A single-entry ZipCrypto archive written for tests"""

    def __init__(self, path, header, check_byte):
        self.path = path
        self.header = header
        self.check_byte = check_byte

    def passes_verifier(self, candidate):
        """True if the candidate gets past the one-byte password check"""
        return TraditionalZipCipher(candidate).decrypt(self.header)[11] == self.check_byte


def write_zipcrypto_zip(path, password, compression, content, name="data.txt"):
    # Compress with a plain writer, then encrypt the payload and rebuild the headers
    buf = io.BytesIO()
    info = pyzipper.ZipInfo(name, date_time=(2020, 1, 1, 12, 0, 0))
    info.compress_type = compression
    with pyzipper.ZipFile(buf, "w") as zf:
        zf.writestr(info, content)
        info = zf.getinfo(name)
    raw = buf.getvalue()
    name_len, extra_len = struct.unpack("<HH", raw[26:30])
    start = 30 + name_len + extra_len
    payload = raw[start:start + info.compress_size]

    check_byte = (info.CRC >> 24) & 0xFF
    header = bytes(range(11)) + bytes([check_byte])
    encrypted = TraditionalZipCipher(password).encrypt(header + payload)

    flags = (info.flag_bits & ~0x8) | 0x1
    version = max(20, info.extract_version)
    year, month, day, hour, minute, second = info.date_time
    dostime = hour << 11 | minute << 5 | second // 2
    dosdate = (year - 1980) << 9 | month << 5 | day
    filename = name.encode("ascii")

    local = struct.pack(
        "<IHHHHHIIIHH", 0x04034B50, version, flags, compression, dostime, dosdate,
        info.CRC, len(encrypted), len(content), len(filename), 0,
    ) + filename
    central = struct.pack(
        "<IHHHHHHIIIHHHHHII", 0x02014B50, version, version, flags, compression,
        dostime, dosdate, info.CRC, len(encrypted), len(content), len(filename),
        0, 0, 0, 0, 0o644 << 16, 0,
    ) + filename
    cd_offset = len(local) + len(encrypted)
    end = struct.pack("<IHHHHIIH", 0x06054B50, 0, 0, 1, 1, len(central), cd_offset, 0)

    with open(path, "wb") as f:
        f.write(local + encrypted + central + end)
    return ZipCryptoArchive(str(path), encrypted[:12], check_byte)


@pytest.fixture
def make_zipcrypto_zip(tmp_path):
    def _make(password, compression=pyzipper.ZIP_DEFLATED,
              content=b"the quick brown fox jumps over the lazy dog\n" * 50):
        path = tmp_path / f"zipcrypto-{compression}.zip"
        return write_zipcrypto_zip(path, password, compression, content)
    return _make

@pytest.fixture
def plain_zip(tmp_path):
    path = tmp_path / "plain.zip"
    with pyzipper.ZipFile(path, "w") as zf:
        zf.writestr("hello.txt", b"hello world\n")
    return str(path)


@pytest.fixture
def encrypted_pdf(tmp_path):
    path = tmp_path / "secret.pdf"
    pdf = pikepdf.new()
    pdf.add_blank_page()
    pdf.save(path, encryption=pikepdf.Encryption(user="golang", owner="owner-secret"))
    pdf.close()
    return str(path)


@pytest.fixture
def plain_pdf(tmp_path):
    path = tmp_path / "plain.pdf"
    pdf = pikepdf.new()
    pdf.add_blank_page()
    pdf.save(path)
    pdf.close()
    return str(path)
