"""One-shot migration from the legacy per-record store to a PMV1 vault.

The new vault becomes the source of truth the moment it is written.
Deleting the legacy store afterwards is cleanup: if it fails the
migration still counts as done, and the next run skips because the new
vault exists.
"""
from __future__ import annotations
import enum, logging, sqlite3
from dataclasses import dataclass
from .crypto import CryptoError
from .entries import VaultContent, VaultEntry, new_entry_id
from .legacy import LegacyStore
from .storage import StorageError
from .vault import VaultService, InvalidPasswordError

log = logging.getLogger(__name__)


class MigrationStep(enum.Enum):
	CHECK_LEGACY = 'check_legacy'
	UNLOCK_LEGACY = 'unlock_legacy'
	READ_LEGACY_ENTRIES = 'read_legacy_entries'
	BUILD_NEW_CONTENT = 'build_new_content'
	CREATE_NEW_VAULT = 'create_new_vault'
	RETIRE_LEGACY_STORE = 'retire_legacy_store'
	DONE = 'done'


class MigrationStatus(enum.Enum):
	SKIPPED = 'skipped'
	MIGRATED = 'migrated'


class MigrationError(Exception):
	def __init__(self, step: MigrationStep, message: str):
		super().__init__(f"Migration failed at {step.value}: {message}")
		self.step = step


@dataclass
class MigrationResult:
	status: MigrationStatus
	migrated: int = 0
	legacy_retired: bool = False


class LegacyMigrator:
	def __init__(self, legacy: LegacyStore, service: VaultService):
		self.legacy = legacy
		self.service = service

	def needs_migration(self) -> bool:
		try:
			return not self.service.is_initialized() and self.legacy.exists()
		except (StorageError, OSError) as e:
			raise MigrationError(MigrationStep.CHECK_LEGACY, str(e)) from e

	def run(self, password: str) -> MigrationResult:
		if not self.needs_migration():
			log.info("No legacy migration needed")
			return MigrationResult(MigrationStatus.SKIPPED)

		step = MigrationStep.UNLOCK_LEGACY
		try:
			key = self.legacy.unlock(password)
			if key is None:
				raise InvalidPasswordError('Invalid password for old vault')

			step = MigrationStep.READ_LEGACY_ENTRIES
			old_entries = self.legacy.list_all(key)

			step = MigrationStep.BUILD_NEW_CONTENT
			content = VaultContent([
				VaultEntry(id=new_entry_id(), title=e.title, username=e.username,
						   password=e.password, url=e.url, notes=e.notes)
				for e in old_entries
			])

			step = MigrationStep.CREATE_NEW_VAULT
			# Same master password on purpose; the user is not asked for a new one.
			self.service.create_vault(password, content)
		except InvalidPasswordError:
			raise
		except (CryptoError, StorageError, sqlite3.Error, OSError) as e:
			log.error("Legacy migration aborted at %s: %s", step.value, e)
			raise MigrationError(step, str(e)) from e
		log.info("Migrated %d legacy entries into new vault", len(content.entries))

		step = MigrationStep.RETIRE_LEGACY_STORE
		retired = self.legacy.destroy()
		if not retired:
			log.warning("%s incomplete; new vault is already in place", step.value)
		log.info("Migration %s", MigrationStep.DONE.value)
		return MigrationResult(MigrationStatus.MIGRATED, len(content.entries), retired)
