"""Project configuration settings.

Constants used by the vault engine, the legacy store and the CLI.
Paths are resolved from the environment at call time so tests and
alternate installs can point the tool somewhere else.
"""

from pathlib import Path
import os

# Security / crypto
SALT_LENGTH = 16
KEY_LENGTH = 32  # AES-256
NONCE_LENGTH = 12  # AES-GCM standard nonce
AUTH_TAG_LENGTH = 16  # GCM tag length

# Argon2id defaults for new vaults (memory in KiB)
ARGON2_MEMORY_KIB = 65536
ARGON2_TIME_COST = 3
ARGON2_PARALLELISM = 1

# PBKDF2-HMAC-SHA256 default for new vaults
PBKDF2_ITERATIONS = 310_000

# Vault file format
VAULT_MAGIC = "PMV1"
VAULT_CIPHER = "AES-GCM"
MAX_HEADER_LENGTH = 0xFFFF

# Legacy store (pre-PMV1 per-record format)
LEGACY_PBKDF2_ITERATIONS = 250_000
LEGACY_VERIFICATION_TEXT = "VAULT_OK"

# Password policy
MIN_MASTER_PASSWORD_SCORE = 50
GENERATED_PASSWORD_LENGTH = 20

# Paths
DEFAULT_VAULT_PATH = Path("vault_data/vault.bin")
DEFAULT_LEGACY_PATH = Path("vault_data/legacy.db")

# Logging
LOG_LEVEL = os.environ.get("PASSMAN_LOG_LEVEL", "WARNING")


def vault_path() -> Path:
	env_path = os.environ.get("VAULT_PATH")
	return Path(env_path) if env_path else DEFAULT_VAULT_PATH


def legacy_path() -> Path:
	env_path = os.environ.get("LEGACY_VAULT_PATH")
	return Path(env_path) if env_path else DEFAULT_LEGACY_PATH


__all__ = [
	'SALT_LENGTH', 'KEY_LENGTH', 'NONCE_LENGTH', 'AUTH_TAG_LENGTH',
	'ARGON2_MEMORY_KIB', 'ARGON2_TIME_COST', 'ARGON2_PARALLELISM', 'PBKDF2_ITERATIONS',
	'VAULT_MAGIC', 'VAULT_CIPHER', 'MAX_HEADER_LENGTH',
	'LEGACY_PBKDF2_ITERATIONS', 'LEGACY_VERIFICATION_TEXT',
	'MIN_MASTER_PASSWORD_SCORE', 'GENERATED_PASSWORD_LENGTH',
	'DEFAULT_VAULT_PATH', 'DEFAULT_LEGACY_PATH', 'LOG_LEVEL',
	'vault_path', 'legacy_path',
]
