"""CLI commands implemented with click.

A thin host shell around the vault engine: every command opens the vault
file (and, for migration, the legacy store) at the configured paths.
"""
from __future__ import annotations
import logging, click
from config.settings import LOG_LEVEL, MIN_MASTER_PASSWORD_SCORE, GENERATED_PASSWORD_LENGTH
from passman.lib.codec import FormatError
from passman.lib.crypto import check_password_strength, generate_password
from passman.lib.entries import VaultContent, EntryManager, EntryError
from passman.lib.legacy import LegacyStore
from passman.lib.migration import LegacyMigrator, MigrationError, MigrationStatus
from passman.lib.storage import StorageError
from passman.lib.vault import VaultService, VaultSession, VaultState, InvalidPasswordError, VaultStateError

def _open_session(password: str) -> VaultSession:
	session = VaultSession(VaultService())
	if session.state is VaultState.UNINITIALIZED:
		raise VaultStateError('No vault found. Run `passman init` (or `passman migrate`) first.')
	session.unlock(password)
	return session

@click.group()
def cli():
	"""passman local password vault"""
	logging.basicConfig(level=LOG_LEVEL, format='%(levelname)s %(name)s: %(message)s')

@cli.command()
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
def init(password):
	"""Create a new encrypted vault."""
	service = VaultService()
	try:
		if service.is_initialized():
			click.echo('Error: Vault already exists.')
			return
		with LegacyStore() as legacy:
			if legacy.exists():
				click.echo('Legacy vault found. Run `passman migrate` to convert it.')
				return
		score, message = check_password_strength(password)
		if score < MIN_MASTER_PASSWORD_SCORE:
			click.echo(f'Error: Password is too weak. {message}')
			return
		service.create_vault(password, VaultContent())
		click.echo('Vault created.')
	except StorageError as e:
		click.echo(f'Error: {e}')

@cli.command()
def info():
	"""Show vault header (no password needed)."""
	try:
		header = VaultService().read_header()
	except (StorageError, FormatError) as e:
		click.echo(f'Error: {e}')
		return
	if header is None:
		click.echo('No vault found.')
		return
	click.echo(f'Format: {header.magic}\nCipher: {header.cipher}\nKDF: {header.kdf.value}')
	for k, v in header.to_dict()['kdfParams'].items():
		if k != 'salt':
			click.echo(f'  {k}: {v}')

@cli.command('list')
@click.option('--password', prompt=True, hide_input=True)
def list_entries(password):
	"""List entries (passwords hidden)."""
	try:
		session = _open_session(password)
	except (InvalidPasswordError, VaultStateError, StorageError) as e:
		click.echo(f'Error: {e}')
		return
	items = EntryManager().list_entries(session.content)
	if not items:
		click.echo('Vault is empty.')
	for e in items:
		user = f' ({e.username})' if e.username else ''
		click.echo(f'{e.id}: {e.title}{user}')

@cli.command()
@click.argument('entry_id')
@click.option('--password', prompt=True, hide_input=True)
def show(entry_id, password):
	"""Show one entry, including its password."""
	try:
		session = _open_session(password)
	except (InvalidPasswordError, VaultStateError, StorageError) as e:
		click.echo(f'Error: {e}')
		return
	e = EntryManager().get_entry(session.content, entry_id)
	if e is None:
		click.echo('Not found')
		return
	click.echo(f"ID: {e.id}\nTitle: {e.title}\nUsername: {e.username}\nPassword: {e.password}\nURL: {e.url}\n---\n{e.notes}")

@cli.command()
@click.option('--password', prompt=True, hide_input=True)
@click.option('--title', prompt=True)
@click.option('--username', prompt=True, default='')
@click.option('--url', default='')
@click.option('--notes', default='')
@click.option('--secret', default=None, help='Entry password (prompted if omitted).')
@click.option('--generate', is_flag=True, help='Generate a random entry password.')
def add(password, title, username, url, notes, secret, generate):
	"""Add a credential entry."""
	if generate:
		secret = generate_password()
	elif secret is None:
		secret = click.prompt('Secret', hide_input=True, default='', show_default=False)
	try:
		session = _open_session(password)
		entry = EntryManager().add_entry(session.content, title, username, secret, url, notes)
		session.save()
		click.echo(f'Added entry {entry.id}.')
	except (EntryError, InvalidPasswordError, VaultStateError, StorageError) as e:
		click.echo(f'Error: {e}')

@cli.command()
@click.argument('entry_id')
@click.option('--password', prompt=True, hide_input=True)
def remove(entry_id, password):
	"""Delete an entry."""
	try:
		session = _open_session(password)
		entry = EntryManager().remove_entry(session.content, entry_id)
		session.save()
		click.echo(f'Removed {entry.title}.')
	except (EntryError, InvalidPasswordError, VaultStateError, StorageError) as e:
		click.echo(f'Error: {e}')

@cli.command()
@click.option('--password', prompt=True, hide_input=True)
def migrate(password):
	"""Convert a legacy vault into the new single-file format."""
	try:
		with LegacyStore() as legacy:
			result = LegacyMigrator(legacy, VaultService()).run(password)
	except (InvalidPasswordError, MigrationError, StorageError) as e:
		click.echo(f'Error: {e}')
		return
	if result.status is MigrationStatus.SKIPPED:
		click.echo('Nothing to migrate.')
		return
	click.echo(f'Migrated {result.migrated} entries.')
	if not result.legacy_retired:
		click.echo('Warning: old vault could not be removed.')

@cli.command('pw-strength')
@click.argument('password')
def pw_strength_cmd(password):
	score, fb = check_password_strength(password)
	click.echo(f"Score: {score} -> {fb or '-'}")

@cli.command()
@click.option('--length', default=GENERATED_PASSWORD_LENGTH, show_default=True, type=int)
def generate(length):
	"""Print a random password."""
	try:
		click.echo(generate_password(length))
	except ValueError as e:
		click.echo(f'Error: {e}')
