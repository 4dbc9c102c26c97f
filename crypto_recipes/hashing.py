#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Recommended hashing and password hashing.

The hash function is SHA-512/256 as described in FIPS 180-4. This construction avoids
length-extension attacks while keeping a widely compatible 32-byte digest, and is
typically faster than SHA-256 on 64-bit hardware.

SHA-256 is also provided because it is widely used elsewhere.

Passwords are hashed with bcrypt at a fixed cost of 12.
"""

from typing import Union

import logging
import re

from Cryptodome.Hash import SHA256, SHA512
from Cryptodome.Protocol.KDF import bcrypt, bcrypt_check

from .exceptions import (
    CryptoRecipesError,
    PasswordTooLongError,
    PasswordMismatchError,
    MalformedPasswordHashError,
  )
from .constants import (
    DIGEST_SIZE_BYTES,
    BCRYPT_COST,
    BCRYPT_MAX_PASSWORD_BYTES,
    BCRYPT_HASH_PREFIX,
  )
from .rand import random_bytes

logger = logging.getLogger(__name__)

BCRYPT_SALT_SIZE_BYTES = 16

# pycryptodomex reads and writes the "$2a$" revision, which computes the same hash as
# "$2b$" and "$2y$" for any password of at most 72 bytes.
_BCRYPT_NATIVE_PREFIX = "$2a$"
_BCRYPT_HASH_RE = re.compile(r"\$2[aby]\$([0-9]{2})\$[./A-Za-z0-9]{53}")
_BCRYPT_MIN_COST = 4
_BCRYPT_MAX_COST = 31

def hash(data: bytes) -> bytes:  # pylint: disable=redefined-builtin
  """Hash data using SHA-512/256.

  Args:
      data (bytes): The data to hash

  Returns:
      bytes: A 32-byte digest
  """
  assert isinstance(data, (bytes, bytearray))
  return SHA512.new(data=bytes(data), truncate="256").digest()

def hash_sha256(data: bytes) -> bytes:
  """Hash data using SHA-256.

  Use is not recommended except where necessary to preserve compatibility;
  SHA-256 is subject to length-extension attacks that hash() is not.
  """
  assert isinstance(data, (bytes, bytearray))
  digest = SHA256.new(data=bytes(data)).digest()
  assert len(digest) == DIGEST_SIZE_BYTES
  return digest

def _password_bytes(password: Union[str, bytes]) -> bytes:
  if isinstance(password, str):
    return password.encode('utf-8')
  assert isinstance(password, (bytes, bytearray))
  return bytes(password)

def hash_password(password: Union[str, bytes]) -> str:
  """Hash a password with bcrypt for storage.

  The returned string embeds the algorithm revision, cost and salt, and can be
  checked later with check_password() alone.

  Args:
      password (Union[str, bytes]): The password. A str is encoded as UTF-8.

  Raises:
      PasswordTooLongError: The password is longer than 72 bytes. bcrypt would silently
                            ignore the excess, so distinct long passwords would collide.
      CryptoRecipesError: The password contains a zero byte

  Returns:
      str: A hash of the form "$2b$12$" + salt(22 chars) + hash(31 chars)
  """
  bin_password = _password_bytes(password)
  if len(bin_password) > BCRYPT_MAX_PASSWORD_BYTES:
    raise PasswordTooLongError(
        f"Password is {len(bin_password)} bytes long; bcrypt accepts at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
  if b"\x00" in bin_password:
    raise CryptoRecipesError("Password must not contain a zero byte")
  salt = random_bytes(BCRYPT_SALT_SIZE_BYTES)
  native_hash = bcrypt(bin_password, BCRYPT_COST, salt=salt).decode('ascii')
  assert native_hash.startswith(_BCRYPT_NATIVE_PREFIX)
  result = BCRYPT_HASH_PREFIX + native_hash[len(_BCRYPT_NATIVE_PREFIX):]
  logger.debug("Hashed password with bcrypt cost %d", BCRYPT_COST)
  return result

def check_password(hashed: Union[str, bytes], password: Union[str, bytes]) -> None:
  """Check a password against a bcrypt hash produced by hash_password().

  The comparison is constant-time.

  Args:
      hashed (Union[str, bytes]): A bcrypt hash string ("$2a$", "$2b$" or "$2y$" revision)
      password (Union[str, bytes]): The candidate password. A str is encoded as UTF-8.

  Raises:
      MalformedPasswordHashError: hashed is not a bcrypt hash string
      PasswordMismatchError: The password does not match
  """
  if isinstance(hashed, (bytes, bytearray)):
    try:
      hashed = bytes(hashed).decode('ascii')
    except UnicodeDecodeError as e:
      raise MalformedPasswordHashError("Password hash is not a bcrypt hash string") from e
  assert isinstance(hashed, str)
  m = _BCRYPT_HASH_RE.fullmatch(hashed)
  if m is None:
    raise MalformedPasswordHashError("Password hash is not a bcrypt hash string")
  cost = int(m.group(1))
  if not _BCRYPT_MIN_COST <= cost <= _BCRYPT_MAX_COST:
    raise MalformedPasswordHashError(f"bcrypt cost {cost} is outside {_BCRYPT_MIN_COST}..{_BCRYPT_MAX_COST}")
  bin_password = _password_bytes(password)
  if len(bin_password) > BCRYPT_MAX_PASSWORD_BYTES or b"\x00" in bin_password:
    raise PasswordMismatchError("Password does not match")
  native_hash = _BCRYPT_NATIVE_PREFIX + hashed[len(_BCRYPT_NATIVE_PREFIX):]
  try:
    bcrypt_check(bin_password, native_hash)
  except ValueError as e:
    logger.debug("bcrypt password check failed")
    raise PasswordMismatchError("Password does not match") from e
