import json
from click.testing import CliRunner
from passman.cli.commands import cli


def test_cli_help():
	r = CliRunner().invoke(cli, ['--help'])
	assert r.exit_code == 0
	assert 'init' in r.output and 'migrate' in r.output


def test_weak_master_password_refused(fast_cli):
	r = CliRunner().invoke(cli, ['init'], input='short\nshort\n')
	assert 'too weak' in r.output
	assert not (fast_cli / 'vault.bin').exists()


def test_list_without_vault(fast_cli):
	r = CliRunner().invoke(cli, ['list'], input='whatever\n')
	assert 'No vault found' in r.output


def test_migrate_flow(fast_cli, make_legacy):
	make_legacy(fast_cli / 'legacy.db', 'old master pw', [
		{'title': 'Email', 'username': 'bob', 'password': 'pw1'},
	])
	runner = CliRunner()
	# init defers to migration while a legacy store is present
	r = runner.invoke(cli, ['init'], input='Tr0ub4dor&3xtra!\nTr0ub4dor&3xtra!\n')
	assert 'migrate' in r.output
	bad = runner.invoke(cli, ['migrate'], input='wrong\n')
	assert 'Invalid password for old vault' in bad.output
	ok = runner.invoke(cli, ['migrate'], input='old master pw\n')
	assert 'Migrated 1 entries' in ok.output
	assert not (fast_cli / 'legacy.db').exists()
	lst = runner.invoke(cli, ['list'], input='old master pw\n')
	assert 'Email (bob)' in lst.output
	again = runner.invoke(cli, ['migrate'], input='old master pw\n')
	assert 'Nothing to migrate' in again.output


def test_generate_and_strength():
	runner = CliRunner()
	g = runner.invoke(cli, ['generate', '--length', '32'])
	assert len(g.output.strip()) == 32
	s = runner.invoke(cli, ['pw-strength', 'Tr0ub4dor&3xtra!'])
	assert 'Score: 100 -> Strong' in s.output


def test_unreadable_header_reported(fast_cli):
	blob = b'[' * 60000 + b']' * 10
	(fast_cli / 'vault.bin').write_bytes(len(blob).to_bytes(2, 'big') + blob)
	runner = CliRunner()
	r = runner.invoke(cli, ['info'])
	assert r.exit_code == 0
	assert 'Error: Unreadable vault header' in r.output
	lst = runner.invoke(cli, ['list'], input='whatever\n')
	assert lst.exit_code == 0
	assert 'Error: Invalid password or corrupted vault' in lst.output


def test_out_of_range_kdf_cost_reported(fast_cli):
	header = {'magic': 'PMV1', 'kdf': 'argon2id',
		'kdfParams': {'mem': 2**40, 'time': 1, 'parallelism': 1, 'salt': 'BQUFBQUFBQUFBQUFBQUFBQ=='},
		'cipher': 'AES-GCM', 'iv': 'BwcHBwcHBwcHBwcH'}
	blob = json.dumps(header).encode()
	(fast_cli / 'vault.bin').write_bytes(len(blob).to_bytes(2, 'big') + blob + b'\x00' * 32)
	runner = CliRunner()
	r = runner.invoke(cli, ['info'])
	assert r.exit_code == 0
	assert "Error: Invalid KDF parameter 'mem'" in r.output
	lst = runner.invoke(cli, ['list'], input='whatever\n')
	assert 'Error: Invalid password or corrupted vault' in lst.output
