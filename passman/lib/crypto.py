"""Cryptographic utilities (AES-GCM encryption + password helpers)."""
from __future__ import annotations
import base64, binascii, secrets, string
from typing import Dict, Tuple
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.backends import default_backend
from config.settings import (
	KEY_LENGTH, NONCE_LENGTH, AUTH_TAG_LENGTH, GENERATED_PASSWORD_LENGTH
)

class CryptoError(Exception):
	pass

_backend = default_backend()

def generate_nonce() -> bytes:
	return secrets.token_bytes(NONCE_LENGTH)

def encrypt(plaintext: bytes, key: bytes) -> Tuple[bytes, bytes]:
	"""Encrypt with AES-256-GCM under a fresh random nonce.

	Returns (nonce, ciphertext) where ciphertext carries the 16-byte tag
	at its end.
	"""
	if len(key) != KEY_LENGTH: raise CryptoError("Bad key length")
	nonce = generate_nonce()
	cipher = Cipher(algorithms.AES(key), modes.GCM(nonce), backend=_backend)
	enc = cipher.encryptor()
	ct = enc.update(plaintext) + enc.finalize()
	return nonce, ct + enc.tag

def decrypt(ciphertext: bytes, nonce: bytes, key: bytes) -> bytes:
	"""Decrypt AES-256-GCM output produced by :func:`encrypt`.

	Every failure (wrong key, tampered data, malformed input) raises the
	same CryptoError; callers cannot tell them apart.
	"""
	if len(key) != KEY_LENGTH or len(nonce) != NONCE_LENGTH or len(ciphertext) < AUTH_TAG_LENGTH:
		raise CryptoError("Decryption failed")
	tag = ciphertext[-AUTH_TAG_LENGTH:]; ct = ciphertext[:-AUTH_TAG_LENGTH]
	cipher = Cipher(algorithms.AES(key), modes.GCM(nonce, tag), backend=_backend)
	dec = cipher.decryptor()
	try:
		return dec.update(ct) + dec.finalize()
	except Exception as e:
		raise CryptoError("Decryption failed") from e

def b64encode(data: bytes) -> str:
	return base64.b64encode(data).decode('ascii')

def b64decode(text: str) -> bytes:
	"""Strict base64 decode; raises ValueError on malformed input."""
	try:
		return base64.b64decode(text.encode('ascii'), validate=True)
	except (binascii.Error, UnicodeEncodeError, AttributeError) as e:
		raise ValueError(f"Invalid base64: {e}") from e

def encrypt_text(text: str, key: bytes) -> Dict[str, str]:
	"""Encrypt a string into the {iv, encryptedData} base64 pair used by the legacy store."""
	nonce, ct = encrypt(text.encode('utf-8'), key)
	return {"iv": b64encode(nonce), "encryptedData": b64encode(ct)}

def decrypt_text(token: Dict[str, str], key: bytes) -> str:
	try:
		nonce = b64decode(token["iv"]); ct = b64decode(token["encryptedData"])
	except (KeyError, TypeError, ValueError) as e:
		raise CryptoError("Decryption failed") from e
	try:
		return decrypt(ct, nonce, key).decode('utf-8')
	except UnicodeDecodeError as e:
		raise CryptoError("Decryption failed") from e


COMMON_PASSWORDS = frozenset([
	'123456', 'password', '12345678', 'qwerty', '123456789', '12345', '123', 'pass', '111111'
])

def check_password_strength(password: str) -> Tuple[int, str]:
	"""Score a candidate master password from 0 to 100."""
	if not password: return 0, ''
	if len(password) < 12: return 0, 'Too short (min 12 chars)'
	if password.lower() in COMMON_PASSWORDS: return 0, 'Very common password'
	points = min(2, len(password) // 6)
	points += sum([
		any(c.islower() for c in password),
		any(c.isupper() for c in password),
		any(c.isdigit() for c in password),
		any(not c.isalnum() for c in password),
	])
	if points < 4: label = 'Weak'
	elif points < 6: label = 'Okay'
	else: label = 'Strong'
	return round(points / 6 * 100), label

SYMBOLS = '!@#$%^&*()_+-=[]{}|;:,.<>?'

def generate_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
	"""Random password with at least one lower, upper, digit and symbol."""
	pools = [string.ascii_lowercase, string.ascii_uppercase, string.digits, SYMBOLS]
	if length < len(pools): raise ValueError(f"Password length must be at least {len(pools)}")
	chars = [secrets.choice(p) for p in pools]
	alphabet = ''.join(pools)
	chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
	secrets.SystemRandom().shuffle(chars)
	return ''.join(chars)
