"""Read access to the legacy (pre-PMV1) per-record vault store.

The legacy store is a SQLite database with two tables:

- ``metadata(key, value)``: the master key salt (``masterKeySalt``, base64)
  and a verification token (``verification``), the sentinel text
  ``VAULT_OK`` encrypted under the master key.
- ``entries``: one row per credential, everything in plaintext except
  the password, which is encrypted on its own with a per-record IV.

The key is PBKDF2-HMAC-SHA256 over the master password and salt.

The store is used through an explicit handle::

	with LegacyStore(path) as store:
		if store.exists():
			key = store.unlock(password)

The connection is opened on enter and closed on exit. Opening a path
that holds no database does not create one unless ``create=True``.
"""
from __future__ import annotations
import json, logging, sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from config.settings import LEGACY_PBKDF2_ITERATIONS, LEGACY_VERIFICATION_TEXT, legacy_path
from .crypto import CryptoError, encrypt_text, decrypt_text, b64encode, b64decode
from .kdf import Pbkdf2Params, derive_key, generate_salt
from .storage import StorageError

log = logging.getLogger(__name__)

KEY_SALT = 'masterKeySalt'
KEY_VERIFICATION = 'verification'

SCHEMA = """
CREATE TABLE IF NOT EXISTS metadata (
	key TEXT PRIMARY KEY,
	value TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS entries (
	id INTEGER PRIMARY KEY AUTOINCREMENT,
	title TEXT NOT NULL DEFAULT '',
	username TEXT NOT NULL DEFAULT '',
	encrypted_password TEXT NOT NULL,
	url TEXT NOT NULL DEFAULT '',
	notes TEXT NOT NULL DEFAULT ''
);
"""


@dataclass
class LegacyEntry:
	id: int
	title: str
	username: str
	password: str
	url: str
	notes: str


class LegacyStore:
	def __init__(self, path: Path | None = None, create: bool = False):
		self.path = Path(path) if path is not None else legacy_path()
		self.create = create
		self._conn: Optional[sqlite3.Connection] = None

	def __enter__(self) -> 'LegacyStore':
		if self.create or self.path.exists():
			try:
				if self.create:
					self.path.parent.mkdir(parents=True, exist_ok=True)
				self._conn = sqlite3.connect(str(self.path))
				self._conn.row_factory = sqlite3.Row
				if self.create:
					self._conn.executescript(SCHEMA)
			except (sqlite3.Error, OSError) as e:
				self.close()
				raise StorageError(f'Failed to open legacy store: {e}') from e
		return self

	def __exit__(self, exc_type, exc, tb):
		self.close()

	def close(self) -> None:
		if self._conn is not None:
			self._conn.close()
			self._conn = None

	def _conn_or_fail(self) -> sqlite3.Connection:
		if self._conn is None:
			raise StorageError('Legacy store is not open')
		return self._conn

	def _get_meta(self, key: str) -> Optional[str]:
		row = self._conn_or_fail().execute('SELECT value FROM metadata WHERE key = ?', (key,)).fetchone()
		return row['value'] if row else None

	def _put_meta(self, key: str, value: str) -> None:
		conn = self._conn_or_fail()
		with conn:
			conn.execute('INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)', (key, value))

	def _derive(self, password: str, salt: bytes) -> bytes:
		return derive_key(password, Pbkdf2Params(LEGACY_PBKDF2_ITERATIONS, salt))

	def exists(self) -> bool:
		"""True when the store holds an initialised legacy vault."""
		if self._conn is None:
			return False
		try:
			return bool(self._get_meta(KEY_SALT))
		except sqlite3.Error:
			# not a legacy database, or one that was never set up
			return False

	def unlock(self, password: str) -> Optional[bytes]:
		"""Return the legacy key, or None if the password does not verify."""
		try:
			salt_b64 = self._get_meta(KEY_SALT)
			verification = self._get_meta(KEY_VERIFICATION)
		except sqlite3.Error as e:
			raise StorageError(f'Failed to read legacy metadata: {e}') from e
		if not salt_b64 or not verification:
			return None
		try:
			key = self._derive(password, b64decode(salt_b64))
			token = json.loads(verification)
			return key if decrypt_text(token, key) == LEGACY_VERIFICATION_TEXT else None
		except (CryptoError, ValueError):
			return None

	def list_all(self, key: bytes) -> List[LegacyEntry]:
		"""Decrypt every record's password, one record at a time."""
		try:
			rows = self._conn_or_fail().execute(
				'SELECT id, title, username, encrypted_password, url, notes FROM entries ORDER BY id'
			).fetchall()
		except sqlite3.Error as e:
			raise StorageError(f'Failed to read legacy entries: {e}') from e
		entries = []
		for row in rows:
			try:
				token = json.loads(row['encrypted_password'])
			except ValueError as e:
				raise CryptoError(f"Unreadable password for legacy record {row['id']}") from e
			entries.append(LegacyEntry(
				id=row['id'], title=row['title'], username=row['username'],
				password=decrypt_text(token, key), url=row['url'], notes=row['notes'],
			))
		return entries

	def destroy(self) -> bool:
		"""Delete the store. Best effort: failures are logged, never raised."""
		self.close()
		ok = True
		for p in (self.path, self.path.with_name(self.path.name + '-journal'),
				  self.path.with_name(self.path.name + '-wal'), self.path.with_name(self.path.name + '-shm')):
			try:
				p.unlink(missing_ok=True)
			except OSError as e:
				log.warning("Could not delete legacy store file %s: %s", p, e)
				ok = False
		return ok

	# Writers used to seed a legacy store.

	def initialize(self, password: str) -> bytes:
		salt = generate_salt()
		key = self._derive(password, salt)
		self._put_meta(KEY_SALT, b64encode(salt))
		self._put_meta(KEY_VERIFICATION, json.dumps(encrypt_text(LEGACY_VERIFICATION_TEXT, key)))
		return key

	def add_entry(self, key: bytes, title: str, username: str = '', password: str = '', url: str = '', notes: str = '') -> int:
		conn = self._conn_or_fail()
		with conn:
			cur = conn.execute(
				'INSERT INTO entries (title, username, encrypted_password, url, notes) VALUES (?, ?, ?, ?, ?)',
				(title, username, json.dumps(encrypt_text(password, key)), url, notes),
			)
		return cur.lastrowid
