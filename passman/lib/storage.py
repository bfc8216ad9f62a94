"""File backed storage collaborator for the vault bytes.

The vault engine only needs three primitives: ``exists``, ``read`` and
``write``. Any object providing them can stand in for this class.
"""
from __future__ import annotations
import logging, os
from pathlib import Path
from typing import Optional
from config.settings import vault_path

log = logging.getLogger(__name__)


class StorageError(Exception): ...


class FileVaultStorage:
	def __init__(self, path: Path | None = None):
		# Resolve path dynamically to honor environment overrides in tests
		self.path = Path(path) if path is not None else vault_path()

	def exists(self) -> bool:
		return self.path.exists() and self.path.stat().st_size > 0

	def read(self) -> Optional[bytes]:
		"""Return the vault bytes, or None when no vault has been written.

		An empty file counts as no vault, same as ``exists``.
		"""
		try:
			data = self.path.read_bytes()
		except FileNotFoundError:
			return None
		except OSError as e:
			log.error("Failed to read vault %s: %s", self.path, e)
			raise StorageError('Failed to read vault file.') from e
		return data or None

	def write(self, data: bytes) -> None:
		"""Replace the vault file with ``data``.

		Writes to a sibling temp file first and swaps it in with
		os.replace, so a crash leaves either the old or the new vault.
		"""
		tmp = self.path.with_name(self.path.name + '.tmp')
		try:
			self.path.parent.mkdir(parents=True, exist_ok=True)
			with open(tmp, 'wb') as f:
				f.write(data)
				f.flush()
				os.fsync(f.fileno())
			os.replace(tmp, self.path)
		except OSError as e:
			log.error("Failed to write vault %s: %s", self.path, e)
			try:
				tmp.unlink(missing_ok=True)
			except OSError:
				log.warning("Could not remove temp file %s", tmp)
			raise StorageError('Failed to save vault file.') from e
