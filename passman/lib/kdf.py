"""Password based key derivation (Argon2id and PBKDF2-HMAC-SHA256).

KDF parameters are modelled as two distinct dataclasses. Code that needs
to tell them apart matches on the type, never on which attributes happen
to be present.
"""
from __future__ import annotations
import enum, secrets
from dataclasses import dataclass
from typing import Union
from argon2.low_level import hash_secret_raw, Type
from argon2.exceptions import HashingError
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from config.settings import (
	SALT_LENGTH, KEY_LENGTH, ARGON2_MEMORY_KIB, ARGON2_TIME_COST, ARGON2_PARALLELISM,
	PBKDF2_ITERATIONS
)
from .crypto import CryptoError


class KdfAlgorithm(str, enum.Enum):
	ARGON2ID = 'argon2id'
	PBKDF2 = 'pbkdf2'


@dataclass(frozen=True)
class Argon2idParams:
	memory_kib: int
	time_cost: int
	parallelism: int
	salt: bytes

	algorithm = KdfAlgorithm.ARGON2ID


@dataclass(frozen=True)
class Pbkdf2Params:
	iterations: int
	salt: bytes

	algorithm = KdfAlgorithm.PBKDF2


KdfParams = Union[Argon2idParams, Pbkdf2Params]


@dataclass(frozen=True)
class KdfDefaults:
	"""Cost parameters applied when a new vault is created.

	Existing vaults never consult these; they carry their own parameters
	in the header.
	"""
	argon2_memory_kib: int = ARGON2_MEMORY_KIB
	argon2_time_cost: int = ARGON2_TIME_COST
	argon2_parallelism: int = ARGON2_PARALLELISM
	pbkdf2_iterations: int = PBKDF2_ITERATIONS


def generate_salt() -> bytes:
	return secrets.token_bytes(SALT_LENGTH)


def new_params(algorithm: KdfAlgorithm, defaults: KdfDefaults | None = None) -> KdfParams:
	"""Build fresh parameters (new random salt) for the given algorithm."""
	d = defaults or KdfDefaults()
	if algorithm is KdfAlgorithm.ARGON2ID:
		return Argon2idParams(d.argon2_memory_kib, d.argon2_time_cost, d.argon2_parallelism, generate_salt())
	if algorithm is KdfAlgorithm.PBKDF2:
		return Pbkdf2Params(d.pbkdf2_iterations, generate_salt())
	raise ValueError(f"Unsupported KDF algorithm: {algorithm!r}")


def derive_key(password: str, params: KdfParams) -> bytes:
	"""Derive a 256-bit key from ``password`` using exactly ``params``.

	There is no fallback here: if the requested algorithm fails the
	caller gets a CryptoError.
	"""
	if not password:
		raise CryptoError("Password empty")
	if len(params.salt) < SALT_LENGTH:
		raise CryptoError(f"Salt must be at least {SALT_LENGTH} bytes")
	secret = password.encode('utf-8')
	if isinstance(params, Argon2idParams):
		try:
			return hash_secret_raw(
				secret=secret,
				salt=params.salt,
				time_cost=params.time_cost,
				memory_cost=params.memory_kib,
				parallelism=params.parallelism,
				hash_len=KEY_LENGTH,
				type=Type.ID,
			)
		except (HashingError, MemoryError, ValueError, OverflowError) as e:
			raise CryptoError(f"Argon2id derivation failed: {e}") from e
	if isinstance(params, Pbkdf2Params):
		try:
			kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=KEY_LENGTH, salt=params.salt, iterations=params.iterations)
			return kdf.derive(secret)
		except (ValueError, OverflowError) as e:
			raise CryptoError(f"PBKDF2 derivation failed: {e}") from e
	raise CryptoError(f"Unsupported KDF parameters: {type(params).__name__}")
