"""Vault file framing.

File format (PMV1)::

	[2-byte big-endian header length N][N bytes UTF-8 JSON header][ciphertext]

The header is plaintext and carries everything needed to re-derive the
key except the password. The ciphertext is opaque to this module.
"""
from __future__ import annotations
import json
from dataclasses import dataclass, replace
from typing import Any, Dict, Tuple
from config.settings import VAULT_MAGIC, VAULT_CIPHER, NONCE_LENGTH, MAX_HEADER_LENGTH
from .crypto import b64encode, b64decode
from .kdf import KdfAlgorithm, KdfParams, Argon2idParams, Pbkdf2Params

LENGTH_PREFIX = 2
# Argon2 and PBKDF2 costs are 32-bit unsigned in the native libraries
MAX_KDF_COST = 0xFFFFFFFF


class FormatError(Exception):
	"""Vault bytes are not a well formed PMV1 file."""


@dataclass(frozen=True)
class VaultHeader:
	kdf_params: KdfParams
	iv: bytes
	magic: str = VAULT_MAGIC
	cipher: str = VAULT_CIPHER

	@property
	def kdf(self) -> KdfAlgorithm:
		return self.kdf_params.algorithm

	def with_iv(self, iv: bytes) -> 'VaultHeader':
		return replace(self, iv=iv)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"magic": self.magic,
			"kdf": self.kdf.value,
			"kdfParams": kdf_params_to_dict(self.kdf_params),
			"cipher": self.cipher,
			"iv": b64encode(self.iv),
		}


def kdf_params_to_dict(params: KdfParams) -> Dict[str, Any]:
	if isinstance(params, Argon2idParams):
		return {"mem": params.memory_kib, "time": params.time_cost,
				"parallelism": params.parallelism, "salt": b64encode(params.salt)}
	if isinstance(params, Pbkdf2Params):
		return {"iterations": params.iterations, "salt": b64encode(params.salt)}
	raise FormatError(f"Unsupported KDF parameters: {type(params).__name__}")


def _positive_int(raw: Dict[str, Any], name: str) -> int:
	value = raw.get(name)
	# bool is an int subclass; reject it explicitly
	if not isinstance(value, int) or isinstance(value, bool) or not 0 < value <= MAX_KDF_COST:
		raise FormatError(f"Invalid KDF parameter {name!r}")
	return value


def _salt(raw: Dict[str, Any]) -> bytes:
	try:
		return b64decode(raw.get("salt"))
	except ValueError as e:
		raise FormatError("Invalid KDF salt") from e


def kdf_params_from_dict(kdf: str, raw: Any) -> KdfParams:
	try:
		algorithm = KdfAlgorithm(kdf)
	except ValueError as e:
		raise FormatError(f"Unknown KDF algorithm: {kdf!r}") from e
	if not isinstance(raw, dict):
		raise FormatError("kdfParams must be an object")
	if algorithm is KdfAlgorithm.ARGON2ID:
		if set(raw) != {"mem", "time", "parallelism", "salt"}:
			raise FormatError("kdfParams do not match argon2id")
		return Argon2idParams(_positive_int(raw, "mem"), _positive_int(raw, "time"),
							  _positive_int(raw, "parallelism"), _salt(raw))
	if set(raw) != {"iterations", "salt"}:
		raise FormatError("kdfParams do not match pbkdf2")
	return Pbkdf2Params(_positive_int(raw, "iterations"), _salt(raw))


def header_from_dict(raw: Any) -> VaultHeader:
	if not isinstance(raw, dict):
		raise FormatError("Header must be a JSON object")
	if raw.get("magic") != VAULT_MAGIC:
		raise FormatError("Invalid or unsupported vault file format")
	if raw.get("cipher") != VAULT_CIPHER:
		raise FormatError(f"Unsupported cipher: {raw.get('cipher')!r}")
	params = kdf_params_from_dict(raw.get("kdf"), raw.get("kdfParams"))
	try:
		iv = b64decode(raw.get("iv"))
	except ValueError as e:
		raise FormatError("Invalid IV encoding") from e
	if len(iv) != NONCE_LENGTH:
		raise FormatError("Invalid IV length")
	return VaultHeader(kdf_params=params, iv=iv)


def encode_vault_file(header: VaultHeader, ciphertext: bytes) -> bytes:
	header_bytes = json.dumps(header.to_dict(), separators=(',', ':')).encode('utf-8')
	if len(header_bytes) > MAX_HEADER_LENGTH:
		raise FormatError("Header too large")
	return len(header_bytes).to_bytes(LENGTH_PREFIX, 'big') + header_bytes + ciphertext


def decode_vault_file(data: bytes) -> Tuple[VaultHeader, bytes]:
	if len(data) < LENGTH_PREFIX:
		raise FormatError("Vault file truncated")
	header_length = int.from_bytes(data[:LENGTH_PREFIX], 'big')
	end = LENGTH_PREFIX + header_length
	if end > len(data):
		raise FormatError("Declared header length exceeds file size")
	try:
		raw = json.loads(data[LENGTH_PREFIX:end].decode('utf-8'))
	except (ValueError, RecursionError) as e:
		raise FormatError(f"Unreadable vault header: {e}") from e
	return header_from_dict(raw), data[end:]
