"""Vault lifecycle: create, unlock, save and lock the single-file vault.

``VaultService`` holds the stateless operations against a storage
collaborator. ``VaultSession`` wraps a service with the
uninitialized / locked / unlocked state machine a front end drives.
"""
from __future__ import annotations
import enum, logging
from dataclasses import dataclass
from typing import Optional
from .codec import VaultHeader, FormatError, encode_vault_file, decode_vault_file
from .crypto import CryptoError, encrypt, decrypt
from .entries import VaultContent, EntryError
from .kdf import KdfAlgorithm, KdfDefaults, derive_key, new_params
from .storage import FileVaultStorage

log = logging.getLogger(__name__)


class InvalidPasswordError(Exception):
	"""Wrong password or corrupted vault; the two are deliberately indistinguishable."""

	def __init__(self, message: str = 'Invalid password or corrupted vault'):
		super().__init__(message)


class VaultStateError(Exception):
	pass


@dataclass
class UnlockedVault:
	key: bytes
	content: VaultContent
	header: VaultHeader


class VaultService:
	def __init__(self, storage=None, kdf_defaults: KdfDefaults | None = None):
		self.storage = storage if storage is not None else FileVaultStorage()
		self.kdf_defaults = kdf_defaults or KdfDefaults()

	def is_initialized(self) -> bool:
		return self.storage.exists()

	def _derive_new_key(self, password: str, kdf: Optional[KdfAlgorithm]):
		if kdf is not None:
			params = new_params(kdf, self.kdf_defaults)
			return params, derive_key(password, params)
		params = new_params(KdfAlgorithm.ARGON2ID, self.kdf_defaults)
		try:
			return params, derive_key(password, params)
		except CryptoError as e:
			log.warning("Argon2id unavailable (%s); falling back to PBKDF2 for new vault", e)
		params = new_params(KdfAlgorithm.PBKDF2, self.kdf_defaults)
		return params, derive_key(password, params)

	def create_vault(self, password: str, initial_content: VaultContent, kdf: Optional[KdfAlgorithm] = None) -> bytes:
		"""Write a brand new vault and return its key.

		``kdf`` pins the algorithm; when it is left unset Argon2id is tried
		first and PBKDF2 is used if Argon2id cannot run.
		"""
		params, key = self._derive_new_key(password, kdf)
		iv, ciphertext = encrypt(initial_content.to_bytes(), key)
		header = VaultHeader(kdf_params=params, iv=iv)
		self.storage.write(encode_vault_file(header, ciphertext))
		log.info("Vault created (kdf=%s, %d entries)", header.kdf.value, len(initial_content.entries))
		return key

	def read_header(self) -> Optional[VaultHeader]:
		data = self.storage.read()
		if data is None:
			return None
		header, _ = decode_vault_file(data)
		return header

	def unlock_vault(self, password: str) -> Optional[UnlockedVault]:
		"""Decrypt the vault; None when there is no vault yet."""
		data = self.storage.read()
		if data is None:
			return None
		try:
			header, ciphertext = decode_vault_file(data)
			# Exactly the header's algorithm; no fallback on unlock.
			key = derive_key(password, header.kdf_params)
			content = VaultContent.from_bytes(decrypt(ciphertext, header.iv, key))
		except (FormatError, CryptoError, EntryError) as e:
			log.info("Vault unlock failed: %s", type(e).__name__)
			raise InvalidPasswordError() from e
		return UnlockedVault(key=key, content=content, header=header)

	def save_vault(self, key: bytes, content: VaultContent, header: VaultHeader) -> VaultHeader:
		"""Re-encrypt ``content`` under a fresh IV and rewrite the vault."""
		iv, ciphertext = encrypt(content.to_bytes(), key)
		new_header = header.with_iv(iv)
		self.storage.write(encode_vault_file(new_header, ciphertext))
		log.info("Vault saved (%d entries)", len(content.entries))
		return new_header


class VaultState(enum.Enum):
	UNINITIALIZED = 'uninitialized'
	LOCKED = 'locked'
	UNLOCKED = 'unlocked'


class VaultSession:
	def __init__(self, service: VaultService):
		self.service = service
		self._unlocked: Optional[UnlockedVault] = None
		self.state = VaultState.LOCKED if service.is_initialized() else VaultState.UNINITIALIZED

	def _require(self, state: VaultState):
		if self.state is not state:
			raise VaultStateError(f"Vault is {self.state.value}, expected {state.value}")

	@property
	def content(self) -> VaultContent:
		self._require(VaultState.UNLOCKED)
		return self._unlocked.content

	@property
	def header(self) -> VaultHeader:
		self._require(VaultState.UNLOCKED)
		return self._unlocked.header

	def create(self, password: str, content: VaultContent | None = None, kdf: Optional[KdfAlgorithm] = None) -> None:
		self._require(VaultState.UNINITIALIZED)
		content = content if content is not None else VaultContent()
		self.service.create_vault(password, content, kdf)
		self.state = VaultState.LOCKED
		self.unlock(password)

	def unlock(self, password: str) -> None:
		self._require(VaultState.LOCKED)
		unlocked = self.service.unlock_vault(password)
		if unlocked is None:
			# vault vanished underneath us
			self.state = VaultState.UNINITIALIZED
			raise VaultStateError("Vault is not initialized")
		self._unlocked = unlocked
		self.state = VaultState.UNLOCKED

	def save(self, content: VaultContent | None = None) -> None:
		self._require(VaultState.UNLOCKED)
		content = content if content is not None else self._unlocked.content
		header = self.service.save_vault(self._unlocked.key, content, self._unlocked.header)
		self._unlocked = UnlockedVault(key=self._unlocked.key, content=content, header=header)

	def lock(self) -> None:
		self._require(VaultState.UNLOCKED)
		self._unlocked = None
		self.state = VaultState.LOCKED
