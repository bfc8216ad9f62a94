import pytest
from pathlib import Path
from passman.lib.storage import FileVaultStorage, StorageError

def make_storage(tmp_path: Path):
    return FileVaultStorage(tmp_path / 'nested' / 'vault.bin')

def test_missing_vault_reads_none(tmp_path: Path):
    fs = make_storage(tmp_path)
    assert not fs.exists()
    assert fs.read() is None

def test_write_then_read(tmp_path: Path):
    fs = make_storage(tmp_path)
    fs.write(b'\x00\x01bytes')
    assert fs.exists()
    assert fs.read() == b'\x00\x01bytes'
    fs.write(b'replaced')
    assert fs.read() == b'replaced'
    assert [p.name for p in fs.path.parent.iterdir()] == ['vault.bin']

def test_empty_file_is_not_a_vault(tmp_path: Path):
    fs = make_storage(tmp_path)
    fs.path.parent.mkdir(parents=True)
    fs.path.write_bytes(b'')
    assert not fs.exists()
    assert fs.read() is None

def test_write_failure_raises_storage_error(tmp_path: Path):
    blocker = tmp_path / 'blocker'
    blocker.write_text('file where a directory should be')
    fs = FileVaultStorage(blocker / 'vault.bin')
    with pytest.raises(StorageError):
        fs.write(b'data')

def test_path_from_environment(monkeypatch, tmp_path: Path):
    monkeypatch.setenv('VAULT_PATH', str(tmp_path / 'env.bin'))
    assert FileVaultStorage().path == tmp_path / 'env.bin'
