import pytest
from pathlib import Path
from passman.lib.kdf import KdfDefaults
from passman.lib.legacy import LegacyStore
from passman.lib.storage import FileVaultStorage
from passman.lib.vault import VaultService

# Cheap cost parameters; production defaults are exercised separately.
FAST_KDF = KdfDefaults(argon2_memory_kib=1024, argon2_time_cost=1, argon2_parallelism=1, pbkdf2_iterations=1000)


@pytest.fixture
def storage(tmp_path: Path):
    return FileVaultStorage(tmp_path / 'vault.bin')


@pytest.fixture
def service(storage):
    return VaultService(storage, kdf_defaults=FAST_KDF)


def _make_legacy(path: Path, password: str, records=()):
    with LegacyStore(path, create=True) as store:
        key = store.initialize(password)
        for r in records:
            store.add_entry(key, **r)
    return path


@pytest.fixture
def fast_cli(monkeypatch, tmp_path):
    monkeypatch.setenv('VAULT_PATH', str(tmp_path / 'vault.bin'))
    monkeypatch.setenv('LEGACY_VAULT_PATH', str(tmp_path / 'legacy.db'))
    monkeypatch.setattr('passman.lib.vault.KdfDefaults', lambda: FAST_KDF)
    return tmp_path


@pytest.fixture
def fast_kdf():
    return FAST_KDF


@pytest.fixture
def make_legacy():
    return _make_legacy
