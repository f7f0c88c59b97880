"""
Pytest configuration and shared fixtures for Chunkroot tests.
"""

import os
import tempfile
import zlib
from pathlib import Path
from typing import Dict, Generator

import pytest

from chunkroot.logging_config import clear_correlation_id, setup_logging
from chunkroot.merkle.hasher import MerkleTreeHasher


LOREM_IPSUM = """Lorem ipsum dolor sit amet, consectetur
    adipiscing elit, sed do eiusmod tempor incididunt ut labore et
    dolore magna aliqua. Ut enim ad minim veniam, quis nostrud
    exercitation ullamco laboris nisi ut aliquip ex ea commodo
    consequat. Duis aute irure dolor in reprehenderit in voluptate
    velit esse cillum dolore eu fugiat nulla pariatur. Excepteur
    sint occaecat cupidatat non proident, sunt in culpa qui
    officia deserunt mollit anim id est laborum."""


@pytest.fixture(autouse=True)
def quiet_logging() -> Generator[None, None, None]:
    """Route structured logs through stdlib at WARNING for every test."""
    setup_logging(level="WARNING", json_format=False)
    clear_correlation_id()
    yield
    clear_correlation_id()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.
    
    Yields:
        Path to temporary directory that is cleaned up after test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def lorem_words() -> list:
    """Words of the lorem ipsum paragraph, as bytes."""
    return [
        word.encode()
        for word in "".join(c if c.isalpha() else " " for c in LOREM_IPSUM).split()
    ]


@pytest.fixture
def sample_files() -> Dict[str, bytes]:
    """
    Contents of the files written by sample_data_dir.
    
    Returns:
        Mapping of file name to file content.
    """
    return {
        "alpha.txt": (LOREM_IPSUM * 8).encode(),
        "beta.txt": bytes(range(256)) * 20,
        "gamma.md": b"# not served by default\n",
        "short.txt": b"tiny",
    }


@pytest.fixture
def sample_data_dir(temp_dir: Path, sample_files: Dict[str, bytes]) -> Path:
    """
    Create a directory of sample files to serve.
    
    Includes a sub-directory, which the file server skips.
    
    Returns:
        Path to the data directory.
    """
    data_dir = temp_dir / "data"
    data_dir.mkdir()
    for name, content in sample_files.items():
        (data_dir / name).write_bytes(content)
    (data_dir / "nested").mkdir()
    (data_dir / "nested" / "inner.txt").write_bytes(b"ignored")
    return data_dir


@pytest.fixture
def make_config_yaml(temp_dir: Path):
    """
    Factory fixture that writes a configuration file and returns its path.
    
    Usage:
        def test_something(make_config_yaml):
            config_path = make_config_yaml("file_server:\\n  chunk_size: 64\\n")
    """
    def _make_config(content: str, name: str = "config.yaml") -> Path:
        config_path = temp_dir / name
        config_path.write_text(content)
        return config_path
    
    return _make_config


class Crc32Hasher(MerkleTreeHasher):
    """Hasher whose digests are plain ints, with no hex() method."""

    name = "crc32"

    @classmethod
    def hash(cls, data: bytes) -> int:
        return zlib.crc32(data)

    @classmethod
    def concat(cls, left: int, right: int) -> int:
        return zlib.crc32(left.to_bytes(4, "big") + right.to_bytes(4, "big"))


@pytest.fixture
def int_digest_hasher():
    """A pluggable hasher outside the built-in registry."""
    return Crc32Hasher


# Hypothesis settings for property-based tests
from hypothesis import HealthCheck, settings, Verbosity

# quiet_logging is autouse and function scoped
_suppressed = [HealthCheck.function_scoped_fixture]

settings.register_profile("chunkroot", max_examples=100, verbosity=Verbosity.normal, suppress_health_check=_suppressed)
settings.register_profile("chunkroot-ci", max_examples=1000, verbosity=Verbosity.verbose, suppress_health_check=_suppressed)
settings.register_profile("chunkroot-dev", max_examples=10, verbosity=Verbosity.verbose, suppress_health_check=_suppressed)

# Load profile from environment or use default
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "chunkroot"))
