#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Authenticated symmetric encryption with a random nonce.

Two interchangeable strategies are provided:

  "aes-gcm":    AES-256 in GCM mode, 12-byte nonce, 16-byte tag.
                Envelope: nonce(12) + ciphertext(N) + tag(16)
  "secretbox":  NaCl secretbox (XSalsa20-Poly1305), 24-byte nonce, 16-byte tag.
                Envelope: nonce(24) + box(N + 16), in NaCl's native box format

A fresh random nonce is generated for every encryption and shipped in front of the
ciphertext, so the caller never has to track nonces. The length of the plaintext
is not hidden.
"""

from typing import Optional, Union, Dict, Type, cast

import logging

from Cryptodome.Cipher import AES
from Cryptodome.Cipher._mode_gcm import GcmMode
import nacl.secret
import nacl.exceptions

from .exceptions import (
    InvalidKeySizeError,
    InvalidNonceSizeError,
    AuthenticationFailedError,
    UnknownCipherError,
  )
from .constants import (
    KEY_SIZE_BYTES,
    TAG_SIZE_BYTES,
    GCM_NONCE_SIZE_BYTES,
    SECRETBOX_NONCE_SIZE_BYTES,
    DEFAULT_CIPHER,
  )
from .rand import random_bytes

logger = logging.getLogger(__name__)

AUTHENTICATION_FAILED_MESSAGE = "Envelope cannot be decrypted with the given key"

def _to_bytes(plaintext: Union[str, bytes]) -> bytes:
  if isinstance(plaintext, str):
    return plaintext.encode('utf-8')
  assert isinstance(plaintext, (bytes, bytearray))
  return bytes(plaintext)

class SymmetricCipher:
  """Base class for an authenticated encryption recipe.

  Subclasses supply the primitive seal/open steps; this class owns key and nonce
  validation, nonce generation and the envelope convention.
  """

  name: str = ""
  """Name under which the strategy is registered in CIPHERS"""

  KEY_SIZE_BYTES: int = KEY_SIZE_BYTES
  """Required key length in bytes"""

  NONCE_SIZE_BYTES: int = 0
  """Length of the random nonce that prefixes each envelope"""

  TAG_SIZE_BYTES: int = TAG_SIZE_BYTES
  """Length of the authentication tag carried in each envelope"""

  @property
  def overhead(self) -> int:
    """Number of bytes an envelope is longer than its plaintext"""
    return self.NONCE_SIZE_BYTES + self.TAG_SIZE_BYTES

  def generate_key(self) -> bytes:
    """Generate a cryptographically random key for this cipher.

    Returns:
        bytes: KEY_SIZE_BYTES random bytes
    """
    return random_bytes(self.KEY_SIZE_BYTES)

  def generate_nonce(self) -> bytes:
    return random_bytes(self.NONCE_SIZE_BYTES)

  def check_key(self, key: bytes) -> None:
    assert isinstance(key, (bytes, bytearray))
    if len(key) != self.KEY_SIZE_BYTES:
      raise InvalidKeySizeError(f"Wrong key size for {self.name}, expected {self.KEY_SIZE_BYTES} bytes, got {len(key)}")

  def check_nonce(self, nonce: bytes) -> None:
    assert isinstance(nonce, (bytes, bytearray))
    if len(nonce) != self.NONCE_SIZE_BYTES:
      raise InvalidNonceSizeError(
          f"Wrong nonce size for {self.name}, expected {self.NONCE_SIZE_BYTES} bytes, got {len(nonce)}")

  def encrypt(self, plaintext: Union[str, bytes], key: bytes) -> bytes:
    """Encrypt plaintext under key with a freshly generated nonce.

    Args:
        plaintext (Union[str, bytes]): The data to encrypt. A str is encoded as UTF-8.
        key (bytes): A KEY_SIZE_BYTES symmetric key

    Raises:
        InvalidKeySizeError: Wrong size key
        EntropySourceError: A nonce could not be generated

    Returns:
        bytes: The envelope, len(plaintext) + self.overhead bytes long
    """
    self.check_key(key)
    nonce = self.generate_nonce()
    return self.seal(plaintext, key, nonce)

  def seal(self, plaintext: Union[str, bytes], key: bytes, nonce: bytes) -> bytes:
    """Encrypt plaintext under key with a caller-supplied nonce.

    A nonce must never be used twice with the same key. Use encrypt() unless
    a fixed nonce is actually required (e.g., reproducing a known answer).

    Raises:
        InvalidKeySizeError: Wrong size key
        InvalidNonceSizeError: Wrong size nonce
    """
    self.check_key(key)
    self.check_nonce(nonce)
    bin_plaintext = _to_bytes(plaintext)
    envelope = self._seal(bin_plaintext, bytes(key), bytes(nonce))
    assert len(envelope) == len(bin_plaintext) + self.overhead
    logger.debug("%s: sealed %d plaintext bytes into %d byte envelope", self.name, len(bin_plaintext), len(envelope))
    return envelope

  def decrypt(self, envelope: bytes, key: bytes) -> bytes:
    """Decrypt and authenticate an envelope produced by encrypt().

    Args:
        envelope (bytes): nonce + sealed data, as returned by encrypt()
        key (bytes): The KEY_SIZE_BYTES symmetric key used for encryption

    Raises:
        InvalidKeySizeError: Wrong size key
        AuthenticationFailedError: The envelope is truncated, has been altered, or was
                                   not encrypted with key

    Returns:
        bytes: The original plaintext
    """
    self.check_key(key)
    assert isinstance(envelope, (bytes, bytearray))
    envelope = bytes(envelope)
    if len(envelope) < self.overhead:
      logger.debug("%s: envelope of %d bytes is shorter than the %d byte overhead", self.name, len(envelope), self.overhead)
      raise AuthenticationFailedError(AUTHENTICATION_FAILED_MESSAGE)
    plaintext = self._open(envelope, bytes(key))
    logger.debug("%s: opened %d byte envelope", self.name, len(envelope))
    return plaintext

  def _seal(self, plaintext: bytes, key: bytes, nonce: bytes) -> bytes:
    raise NotImplementedError()

  def _open(self, envelope: bytes, key: bytes) -> bytes:
    raise NotImplementedError()

class AesGcmCipher(SymmetricCipher):
  """AES-256 in GCM mode. Envelope is nonce(12) + ciphertext + tag(16)."""

  name = "aes-gcm"
  NONCE_SIZE_BYTES = GCM_NONCE_SIZE_BYTES

  def _new_gcm(self, key: bytes, nonce: bytes) -> GcmMode:
    return cast(GcmMode, AES.new(key, AES.MODE_GCM, nonce=nonce, mac_len=self.TAG_SIZE_BYTES))

  def _seal(self, plaintext: bytes, key: bytes, nonce: bytes) -> bytes:
    cipher = self._new_gcm(key, nonce)
    ciphertext_data, tag = cipher.encrypt_and_digest(plaintext)
    assert len(tag) == self.TAG_SIZE_BYTES
    return nonce + ciphertext_data + tag

  def _open(self, envelope: bytes, key: bytes) -> bytes:
    nonce = envelope[:self.NONCE_SIZE_BYTES]
    ciphertext_data = envelope[self.NONCE_SIZE_BYTES:-self.TAG_SIZE_BYTES]
    ciphertext_tag = envelope[-self.TAG_SIZE_BYTES:]
    try:
      cipher = self._new_gcm(key, nonce)
      bin_plaintext = cipher.decrypt_and_verify(ciphertext_data, ciphertext_tag)
    except ValueError as e:
      raise AuthenticationFailedError(AUTHENTICATION_FAILED_MESSAGE) from e
    return bin_plaintext

class SecretBoxCipher(SymmetricCipher):
  """NaCl secretbox (XSalsa20-Poly1305). Envelope is nonce(24) + Poly1305 tag(16) + ciphertext."""

  name = "secretbox"
  NONCE_SIZE_BYTES = SECRETBOX_NONCE_SIZE_BYTES

  def _seal(self, plaintext: bytes, key: bytes, nonce: bytes) -> bytes:
    box = nacl.secret.SecretBox(key)
    return bytes(box.encrypt(plaintext, nonce))

  def _open(self, envelope: bytes, key: bytes) -> bytes:
    box = nacl.secret.SecretBox(key)
    try:
      bin_plaintext = box.decrypt(envelope)
    except (nacl.exceptions.CryptoError, ValueError) as e:
      raise AuthenticationFailedError(AUTHENTICATION_FAILED_MESSAGE) from e
    return bin_plaintext

CIPHERS: Dict[str, Type[SymmetricCipher]] = {
    AesGcmCipher.name: AesGcmCipher,
    SecretBoxCipher.name: SecretBoxCipher,
  }
"""Available symmetric cipher strategies, by name"""

def get_cipher(name: Optional[Union[str, SymmetricCipher]]=None) -> SymmetricCipher:
  """Look up a symmetric cipher strategy.

  Args:
      name (Optional[Union[str, SymmetricCipher]], optional):
                  "aes-gcm" or "secretbox". A SymmetricCipher instance is returned as-is.
                  If None, DEFAULT_CIPHER is used. Defaults to None.

  Raises:
      UnknownCipherError: name is not a known cipher

  Returns:
      SymmetricCipher: The cipher strategy
  """
  if isinstance(name, SymmetricCipher):
    return name
  if name is None:
    name = DEFAULT_CIPHER
  cipher_class = CIPHERS.get(name)
  if cipher_class is None:
    raise UnknownCipherError(f"Unknown cipher '{name}'; expected one of {', '.join(sorted(CIPHERS))}")
  return cipher_class()

def generate_encryption_key(cipher: Optional[Union[str, SymmetricCipher]]=None) -> bytes:
  """Generate a cryptographically random 256-bit symmetric key.

  Returns:
      bytes: a cryptographically random 256-bit (32-byte) key
  """
  return get_cipher(cipher).generate_key()

def encrypt(
      plaintext: Union[str, bytes],
      key: bytes,
      cipher: Optional[Union[str, SymmetricCipher]]=None
    ) -> bytes:
  """Encrypt plaintext with a random nonce, returning a self-contained envelope.

  Args:
      plaintext (Union[str, bytes]): The data to encrypt. A str is encoded as UTF-8.
      key (bytes): A 256-bit (32-byte) symmetric key
      cipher (Optional[Union[str, SymmetricCipher]], optional):
                  The cipher strategy to use. Defaults to "aes-gcm".

  Raises:
      InvalidKeySizeError: Wrong size key
      UnknownCipherError: Unknown cipher name

  Returns:
      bytes: nonce + ciphertext + tag
  """
  return get_cipher(cipher).encrypt(plaintext, key)

def decrypt(
      envelope: bytes,
      key: bytes,
      cipher: Optional[Union[str, SymmetricCipher]]=None
    ) -> bytes:
  """Decrypt an envelope previously produced by encrypt() with the same cipher.

  Args:
      envelope (bytes): nonce + ciphertext + tag
      key (bytes): A 256-bit (32-byte) symmetric key
      cipher (Optional[Union[str, SymmetricCipher]], optional):
                  The cipher strategy used for encryption. Defaults to "aes-gcm".

  Raises:
      InvalidKeySizeError: Wrong size key
      AuthenticationFailedError: Envelope is malformed, altered, or the key is incorrect

  Returns:
      bytes: The original plaintext
  """
  return get_cipher(cipher).decrypt(envelope, key)
