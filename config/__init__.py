"""Configuration settings and constants for passman.

Application code imports constants from the package directly
(e.g. `from config import SALT_LENGTH`); the values live in
`config.settings` so there is exactly one place to change them.
"""

from config.settings import (
	SALT_LENGTH, KEY_LENGTH, NONCE_LENGTH, AUTH_TAG_LENGTH,
	ARGON2_MEMORY_KIB, ARGON2_TIME_COST, ARGON2_PARALLELISM, PBKDF2_ITERATIONS,
	VAULT_MAGIC, VAULT_CIPHER, MAX_HEADER_LENGTH,
	LEGACY_PBKDF2_ITERATIONS, LEGACY_VERIFICATION_TEXT,
	MIN_MASTER_PASSWORD_SCORE, GENERATED_PASSWORD_LENGTH,
	DEFAULT_VAULT_PATH, DEFAULT_LEGACY_PATH, LOG_LEVEL,
	vault_path, legacy_path,
)

__all__ = [
	'SALT_LENGTH', 'KEY_LENGTH', 'NONCE_LENGTH', 'AUTH_TAG_LENGTH',
	'ARGON2_MEMORY_KIB', 'ARGON2_TIME_COST', 'ARGON2_PARALLELISM', 'PBKDF2_ITERATIONS',
	'VAULT_MAGIC', 'VAULT_CIPHER', 'MAX_HEADER_LENGTH',
	'LEGACY_PBKDF2_ITERATIONS', 'LEGACY_VERIFICATION_TEXT',
	'MIN_MASTER_PASSWORD_SCORE', 'GENERATED_PASSWORD_LENGTH',
	'DEFAULT_VAULT_PATH', 'DEFAULT_LEGACY_PATH', 'LOG_LEVEL',
	'vault_path', 'legacy_path',
]
