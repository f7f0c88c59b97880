"""
Unit tests for exception hierarchy.
"""

import pytest

from chunkroot.exceptions import (
    ChunkrootError,
    ConfigurationError,
    ConfigurationLoadError,
    DirectoryReadError,
    EmptyFileError,
    FileHashingError,
    FileServerError,
    HashCollisionError,
    InvalidConfigurationError,
    MerkleTreeError,
    TreeConstructionError,
    UnknownHasherError,
)


class TestExceptionHierarchy:
    """Test that exception hierarchy is correctly defined."""
    
    def test_base_exception(self):
        error = ChunkrootError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"
    
    def test_merkle_errors_inherit_from_base(self):
        assert issubclass(MerkleTreeError, ChunkrootError)
        assert issubclass(TreeConstructionError, MerkleTreeError)
        assert issubclass(UnknownHasherError, MerkleTreeError)
    
    def test_configuration_errors_inherit_from_base(self):
        assert issubclass(ConfigurationError, ChunkrootError)
        assert issubclass(InvalidConfigurationError, ConfigurationError)
        assert issubclass(ConfigurationLoadError, ConfigurationError)
    
    @pytest.mark.parametrize(
        "error_class",
        [FileHashingError, EmptyFileError, HashCollisionError, DirectoryReadError],
    )
    def test_file_server_errors_inherit_from_base(self, error_class):
        assert issubclass(error_class, FileServerError)
        assert issubclass(error_class, ChunkrootError)
    
    def test_catch_specific_exception(self):
        with pytest.raises(TreeConstructionError):
            raise TreeConstructionError("source failed")
    
    def test_catch_base_exception(self):
        with pytest.raises(ChunkrootError):
            raise HashCollisionError("collision")
