"""Entry layer: credential records and the decrypted vault payload."""
from __future__ import annotations
import json, uuid
from dataclasses import dataclass, asdict, field, fields
from typing import Any, Dict, List, Optional


class EntryError(Exception): ...


def new_entry_id() -> str:
	return str(uuid.uuid4())


@dataclass
class VaultEntry:
	title: str
	username: str = ''
	password: str = ''
	url: str = ''
	notes: str = ''
	id: str = field(default_factory=new_entry_id)

	@classmethod
	def from_dict(cls, raw: Dict[str, Any]) -> 'VaultEntry':
		if not isinstance(raw, dict): raise EntryError('Entry must be an object')
		known = {f.name for f in fields(cls)}
		values = {k: ('' if v is None else v) for k, v in raw.items() if k in known}
		for k, v in values.items():
			if not isinstance(v, str): raise EntryError(f'Entry field {k!r} must be a string')
		if not values.get('id'):
			values.pop('id', None)
		values.setdefault('title', '')
		return cls(**values)


@dataclass
class VaultContent:
	"""Plaintext payload of a vault; always encrypted as a whole."""
	entries: List[VaultEntry] = field(default_factory=list)

	def to_dict(self) -> Dict[str, Any]:
		return {"entries": [asdict(e) for e in self.entries]}

	@classmethod
	def from_dict(cls, raw: Dict[str, Any]) -> 'VaultContent':
		if not isinstance(raw, dict) or not isinstance(raw.get('entries', []), list):
			raise EntryError('Vault content must hold an entries list')
		return cls([VaultEntry.from_dict(e) for e in raw.get('entries', [])])

	def to_bytes(self) -> bytes:
		return json.dumps(self.to_dict()).encode('utf-8')

	@classmethod
	def from_bytes(cls, data: bytes) -> 'VaultContent':
		try:
			raw = json.loads(data.decode('utf-8'))
		except (ValueError, RecursionError) as e:
			raise EntryError(f'Invalid vault content: {e}') from e
		return cls.from_dict(raw)


class EntryManager:
	"""Add, edit and remove entries inside decrypted vault content.

	Mutations only touch the in-memory content; persisting is the job of
	the vault session (every save rewrites the whole file).
	"""

	def add_entry(self, content: VaultContent, title: str, username: str = '', password: str = '', url: str = '', notes: str = '') -> VaultEntry:
		if not title: raise EntryError('Title required')
		entry = VaultEntry(title=title, username=username, password=password, url=url, notes=notes)
		content.entries.append(entry)
		return entry

	def get_entry(self, content: VaultContent, entry_id: str) -> Optional[VaultEntry]:
		for e in content.entries:
			if e.id == entry_id: return e
		return None

	def update_entry(self, content: VaultContent, entry_id: str, **changes: str) -> VaultEntry:
		entry = self.get_entry(content, entry_id)
		if entry is None: raise EntryError('Entry not found')
		if 'id' in changes: raise EntryError('Entry id cannot change')
		for k, v in changes.items():
			if not hasattr(entry, k): raise EntryError(f'Unknown field {k!r}')
			setattr(entry, k, v)
		return entry

	def remove_entry(self, content: VaultContent, entry_id: str) -> VaultEntry:
		entry = self.get_entry(content, entry_id)
		if entry is None: raise EntryError('Entry not found')
		content.entries.remove(entry)
		return entry

	def list_entries(self, content: VaultContent) -> List[VaultEntry]:
		return sorted(content.entries, key=lambda e: e.title.lower())
