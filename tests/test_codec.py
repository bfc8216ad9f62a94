import base64
import json
import pytest
from passman.lib.codec import (
    VaultHeader, FormatError, encode_vault_file, decode_vault_file, header_from_dict,
)
from passman.lib.kdf import Argon2idParams, Pbkdf2Params, KdfAlgorithm

SALT = b'\x05' * 16
IV = b'\x07' * 12


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def raw_file(header: dict, ciphertext: bytes = b'CIPHERTEXT') -> bytes:
    blob = json.dumps(header).encode()
    return len(blob).to_bytes(2, 'big') + blob + ciphertext


def good_header(**overrides):
    h = {'magic': 'PMV1', 'kdf': 'pbkdf2', 'kdfParams': {'iterations': 310000, 'salt': b64(SALT)},
         'cipher': 'AES-GCM', 'iv': b64(IV)}
    h.update(overrides)
    return h


@pytest.mark.parametrize('params', [
    Argon2idParams(65536, 3, 1, SALT),
    Pbkdf2Params(310000, SALT),
])
def test_encode_decode(params):
    header = VaultHeader(kdf_params=params, iv=IV)
    data = encode_vault_file(header, b'\x00\x01opaque')
    decoded, ct = decode_vault_file(data)
    assert decoded == header
    assert ct == b'\x00\x01opaque'


def test_wire_layout():
    header = VaultHeader(kdf_params=Argon2idParams(65536, 3, 1, SALT), iv=IV)
    data = encode_vault_file(header, b'CT')
    n = int.from_bytes(data[:2], 'big')
    parsed = json.loads(data[2:2 + n])
    assert parsed == {
        'magic': 'PMV1', 'kdf': 'argon2id',
        'kdfParams': {'mem': 65536, 'time': 3, 'parallelism': 1, 'salt': b64(SALT)},
        'cipher': 'AES-GCM', 'iv': b64(IV),
    }
    assert list(parsed) == ['magic', 'kdf', 'kdfParams', 'cipher', 'iv']
    assert data[2 + n:] == b'CT'


def test_empty_ciphertext_allowed():
    header, ct = decode_vault_file(raw_file(good_header(), b''))
    assert ct == b'' and header.kdf is KdfAlgorithm.PBKDF2


def test_bad_magic_rejected():
    with pytest.raises(FormatError):
        decode_vault_file(raw_file(good_header(magic='XXXX')))


@pytest.mark.parametrize('data', [b'', b'\x00'])
def test_truncated_buffer(data):
    with pytest.raises(FormatError):
        decode_vault_file(data)


def test_header_length_overflow():
    data = raw_file(good_header())
    declared = len(data) + 10
    with pytest.raises(FormatError, match='exceeds'):
        decode_vault_file(declared.to_bytes(2, 'big') + data[2:])


@pytest.mark.parametrize('blob', [
    b'{not json', b'\xff\xfe', b'[1, 2]',
    b'[' * 60000 + b']' * 10,  # nesting deeper than the recursion limit
    b'{"magic": ' + b'9' * 5000 + b'}',  # integer past the str-to-int digit limit
])
def test_unparseable_header(blob):
    with pytest.raises(FormatError):
        decode_vault_file(len(blob).to_bytes(2, 'big') + blob)


@pytest.mark.parametrize('overrides', [
    {'kdf': 'scrypt'},
    {'kdf': 'argon2id'},  # params are pbkdf2-shaped
    {'kdfParams': {'iterations': 310000, 'salt': b64(SALT), 'mem': 1}},
    {'kdfParams': {'iterations': 0, 'salt': b64(SALT)}},
    {'kdfParams': {'iterations': '310000', 'salt': b64(SALT)}},
    {'kdfParams': {'iterations': True, 'salt': b64(SALT)}},
    {'kdfParams': {'iterations': 2**32, 'salt': b64(SALT)}},
    {'kdf': 'argon2id', 'kdfParams': {'mem': 2**40, 'time': 1, 'parallelism': 1, 'salt': b64(SALT)}},
    {'kdf': 'argon2id', 'kdfParams': {'mem': 1024, 'time': 2**40, 'parallelism': 1, 'salt': b64(SALT)}},
    {'kdf': 'argon2id', 'kdfParams': {'mem': 1024, 'time': 1, 'parallelism': 2**40, 'salt': b64(SALT)}},
    {'kdfParams': {'iterations': 310000, 'salt': '***'}},
    {'cipher': 'ChaCha20'},
    {'iv': b64(b'\x00' * 16)},
    {'iv': 42},
])
def test_invalid_header_fields(overrides):
    with pytest.raises(FormatError):
        header_from_dict(good_header(**overrides))


def test_with_iv_changes_only_iv():
    header = VaultHeader(kdf_params=Pbkdf2Params(310000, SALT), iv=IV)
    other = header.with_iv(b'\x09' * 12)
    assert other.iv == b'\x09' * 12
    assert other.kdf_params == header.kdf_params
    assert (other.magic, other.cipher) == (header.magic, header.cipher)
    assert header.iv == IV


def test_oversized_header_rejected_on_encode():
    header = VaultHeader(kdf_params=Pbkdf2Params(310000, b'\x00' * 60000), iv=IV)
    with pytest.raises(FormatError):
        encode_vault_file(header, b'')


def test_largest_cost_accepted():
    params = {'mem': 0xFFFFFFFF, 'time': 1, 'parallelism': 1, 'salt': b64(SALT)}
    header = header_from_dict(good_header(kdf='argon2id', kdfParams=params))
    assert header.kdf_params.memory_kib == 0xFFFFFFFF
