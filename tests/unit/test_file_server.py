"""
Unit tests for file chunking and the chunk server.

Tests cover:
- Chunk reading, including short reads and the final partial chunk
- Per-file Merkle tree construction
- Directory scanning with extension filtering
- Serving chunks with proofs and verifying them
- Error handling for empty files, collisions and unreadable inputs
"""

import io
from pathlib import Path

import pytest

from chunkroot.exceptions import (
    DirectoryReadError,
    EmptyFileError,
    FileHashingError,
    HashCollisionError,
)
from chunkroot.fileserver import (
    FileServer,
    make_merkle_tree_for_file,
    read_file_chunk,
    read_file_chunk_by_offset,
)
from chunkroot.merkle import MerkleTree, SdbmHasher, Sha256Hasher


class TrickleReader(io.RawIOBase):
    """Binary stream that returns at most 3 bytes per read call."""
    
    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0
    
    def readable(self):
        return True
    
    def read(self, size=-1):
        chunk = self._data[self._pos:self._pos + min(size, 3)]
        self._pos += len(chunk)
        return chunk


class TestReadFileChunk:
    """Test chunk reading helpers."""
    
    def test_reads_full_chunk_across_short_reads(self):
        reader = TrickleReader(b"abcdefghij")
        
        assert read_file_chunk(reader, 8) == b"abcdefgh"
        assert read_file_chunk(reader, 8) == b"ij"
        assert read_file_chunk(reader, 8) == b""
    
    def test_read_by_offset(self, temp_dir: Path):
        path = temp_dir / "data.bin"
        path.write_bytes(b"0123456789")
        
        assert read_file_chunk_by_offset(path, 4, 4) == b"4567"
        assert read_file_chunk_by_offset(path, 8, 4) == b"89"
        assert read_file_chunk_by_offset(path, 12, 4) == b""


class TestMakeMerkleTreeForFile:
    """Test building a chunk tree for a file."""
    
    def test_leaves_are_chunks(self, temp_dir: Path):
        path = temp_dir / "data.bin"
        path.write_bytes(b"aaaabbbbcc")
        
        tree, size = make_merkle_tree_for_file(path, 4)
        
        assert size == 10
        assert tree.item_count == 3
        assert tree.get_root() == MerkleTree.from_data_items([b"aaaa", b"bbbb", b"cc"]).get_root()
    
    def test_empty_file_has_no_root(self, temp_dir: Path):
        path = temp_dir / "empty.txt"
        path.write_bytes(b"")
        
        tree, size = make_merkle_tree_for_file(path, 4)
        
        assert size == 0
        assert tree.get_root() is None
    
    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(FileHashingError, match="can not open file"):
            make_merkle_tree_for_file(temp_dir / "missing.txt", 4)
    
    def test_uses_given_hasher(self, temp_dir: Path):
        path = temp_dir / "data.txt"
        path.write_bytes(b"hello")
        
        tree, _ = make_merkle_tree_for_file(path, 1024, SdbmHasher)
        
        assert tree.get_root() == SdbmHasher.hash(b"hello")


class TestFileServer:
    """Test the chunk server."""
    
    def test_from_dir_filters_by_extension(self, sample_data_dir: Path):
        server = FileServer.from_dir(sample_data_dir, ["txt"], chunk_size=128)
        
        names = [info.name for info in server.list_files()]
        
        assert names == ["alpha.txt", "beta.txt", "short.txt"]
    
    def test_from_dir_without_filter_includes_all_regular_files(self, sample_data_dir: Path):
        server = FileServer.from_dir(sample_data_dir, [], chunk_size=128)
        
        names = [info.name for info in server.list_files()]
        
        assert names == ["alpha.txt", "beta.txt", "gamma.md", "short.txt"]
        assert "inner.txt" not in names
    
    def test_extension_with_leading_dot(self, sample_data_dir: Path):
        server = FileServer.from_dir(sample_data_dir, [".md"], chunk_size=128)
        
        assert [info.name for info in server.list_files()] == ["gamma.md"]
    
    def test_file_info(self, sample_data_dir: Path, sample_files):
        server = FileServer.from_dir(sample_data_dir, ["txt"], chunk_size=128)
        info = {info.name: info for info in server.list_files()}["beta.txt"]
        
        assert info.size == len(sample_files["beta.txt"])
        assert info.chunk_size == 128
        assert info.chunk_count == 40
        assert info.to_dict()["root_hash"] == info.root_hash.hex()
    
    def test_every_chunk_verifies(self, sample_data_dir: Path, sample_files):
        server = FileServer.from_dir(sample_data_dir, ["txt"], chunk_size=100)
        
        for info in server.list_files():
            content = sample_files[info.name]
            for chunk_index in range(info.chunk_count):
                proof, data = server.get_file_chunk(info.root_hash, chunk_index)
                
                assert data == content[chunk_index * 100:(chunk_index + 1) * 100]
                assert server.verify_chunk(info.root_hash, data, proof)
    
    def test_tampered_chunk_fails(self, sample_data_dir: Path):
        server = FileServer.from_dir(sample_data_dir, ["txt"], chunk_size=100)
        info = server.list_files()[0]
        
        proof, data = server.get_file_chunk(info.root_hash, 1)
        tampered = bytes([data[0] ^ 1]) + data[1:]
        
        assert not server.verify_chunk(info.root_hash, tampered, proof)
    
    def test_get_file_chunk_out_of_range(self, sample_data_dir: Path):
        server = FileServer.from_dir(sample_data_dir, ["txt"], chunk_size=100)
        info = server.list_files()[0]
        
        assert server.get_file_chunk(info.root_hash, info.chunk_count) is None
        assert server.get_file_chunk(info.root_hash, -1) is None
    
    def test_get_file_chunk_unknown_root(self, sample_data_dir: Path):
        server = FileServer.from_dir(sample_data_dir, ["txt"], chunk_size=100)
        
        assert server.get_file_chunk(b"\x00" * 32, 0) is None
        assert server.get_file_chunk(["unhashable"], 0) is None
    
    def test_get_file_chunk_after_file_removed(self, sample_data_dir: Path):
        server = FileServer.from_dir(sample_data_dir, ["txt"], chunk_size=100)
        info = server.list_files()[0]
        
        (sample_data_dir / info.name).unlink()
        
        assert server.get_file_chunk(info.root_hash, 0) is None
    
    def test_hash_file_returns_root(self, temp_dir: Path):
        path = temp_dir / "hello.txt"
        path.write_bytes(b"hello")
        server = FileServer(chunk_size=16, hasher=SdbmHasher)
        
        assert server.hash_file(path) == SdbmHasher.hash(b"hello")
        assert len(server) == 1
    
    def test_empty_file_raises(self, temp_dir: Path):
        path = temp_dir / "empty.txt"
        path.write_bytes(b"")
        server = FileServer(chunk_size=16)
        
        with pytest.raises(EmptyFileError, match="empty file"):
            server.hash_file(path)
    
    def test_collision_raises_and_keeps_first(self, temp_dir: Path):
        first = temp_dir / "first.txt"
        second = temp_dir / "second.txt"
        first.write_bytes(b"same content")
        second.write_bytes(b"same content")
        server = FileServer(chunk_size=16)
        
        server.hash_file(first)
        with pytest.raises(HashCollisionError, match="collision"):
            server.hash_file(second)
        
        assert [info.name for info in server.list_files()] == ["first.txt"]
    
    def test_missing_directory(self, temp_dir: Path):
        with pytest.raises(DirectoryReadError, match="can not read directory"):
            FileServer.from_dir(temp_dir / "missing", ["txt"], chunk_size=16)
    
    @pytest.mark.parametrize("chunk_size", [0, -5])
    def test_invalid_chunk_size(self, chunk_size):
        with pytest.raises(ValueError, match="chunk_size must be positive"):
            FileServer(chunk_size=chunk_size)
    
    def test_default_hasher_is_sha256(self):
        assert FileServer(chunk_size=16).hasher is Sha256Hasher
    
    def test_hasher_with_int_digests(self, temp_dir: Path, int_digest_hasher):
        path = temp_dir / "numbers.txt"
        path.write_bytes(b"0123456789" * 5)
        server = FileServer(chunk_size=16, hasher=int_digest_hasher)
        
        root_hash = server.hash_file(path)
        info = server.list_files()[0]
        proof, chunk = server.get_file_chunk(root_hash, 3)
        
        assert info.to_dict()["root_hash"] == repr(root_hash)
        assert chunk == b"89"
        assert server.verify_chunk(root_hash, chunk, proof)
