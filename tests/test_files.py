# tests/test_files.py
from discovery.services.files import byte_md5, file_md5, file_write_with_checksum


def test_file_md5_matches_byte_md5(tmp_path):
    path = tmp_path / "a"
    path.write_bytes(b"hello")
    assert file_md5(path) == byte_md5(b"hello")


def test_file_md5_missing_file(tmp_path):
    assert file_md5(tmp_path / "missing") is None


def test_write_with_checksum_reports_existing(tmp_path):
    path = tmp_path / "a.conf"
    assert file_write_with_checksum(path, b"x", True) is False
    assert file_write_with_checksum(path, b"x", True) is True
    assert file_write_with_checksum(path, b"x", False) is False
    assert file_write_with_checksum(path, b"y", True) is False
    assert path.read_bytes() == b"y"


def test_write_leaves_no_temporary_files(tmp_path):
    file_write_with_checksum(tmp_path / "a.conf", b"x", False)
    assert [p.name for p in tmp_path.iterdir()] == ["a.conf"]
