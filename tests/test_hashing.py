#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Tests for hashing and password hashing"""

import pytest

from crypto_recipes import (
    hash,
    hash_sha256,
    hash_password,
    check_password,
    CryptoRecipesError,
    PasswordTooLongError,
    PasswordMismatchError,
    MalformedPasswordHashError,
  )

PASSWORD = "password"


@pytest.fixture(scope="module")
def password_hash():
  return hash_password(PASSWORD)


class TestHash:
  def test_sha512_256_abc(self):
    assert hash(b"abc").hex() == "53048e2681941ef99b2e29b76b4c7dabe4c2d0c634fc6d46e0e2f13107e7af23"

  def test_sha256_abc(self):
    assert hash_sha256(b"abc").hex() == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

  def test_sha256_empty(self):
    assert hash_sha256(b"").hex() == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

  @pytest.mark.parametrize("data", [b"", b"a", b"x" * 1000])
  def test_digest_size(self, data):
    assert len(hash(data)) == 32
    assert len(hash_sha256(data)) == 32

  def test_recommended_hash_differs_from_sha256(self):
    assert hash(b"abc") != hash_sha256(b"abc")

  def test_deterministic(self):
    assert hash(b"message") == hash(bytearray(b"message"))


class TestPasswordHashing:
  """bcrypt at cost 12 with explicit rejection of over-long passwords."""

  def test_format(self, password_hash):
    assert password_hash.startswith("$2b$12$")
    assert len(password_hash) == 60

  def test_round_trip(self, password_hash):
    check_password(password_hash, PASSWORD)
    check_password(password_hash.encode('ascii'), PASSWORD.encode('utf-8'))

  def test_salted(self, password_hash):
    assert hash_password(PASSWORD) != password_hash

  def test_mismatch(self, password_hash):
    with pytest.raises(PasswordMismatchError):
      check_password(password_hash, "passwore")
    with pytest.raises(PasswordMismatchError):
      check_password(password_hash, "")

  @pytest.mark.parametrize("prefix", ["$2a$", "$2y$"])
  def test_other_revisions_accepted(self, password_hash, prefix):
    check_password(prefix + password_hash[4:], PASSWORD)

  def test_max_length(self):
    password = "a" * 72
    hashed = hash_password(password)
    check_password(hashed, password)
    with pytest.raises(PasswordMismatchError):
      check_password(hashed, "a" * 71)

  def test_too_long(self):
    with pytest.raises(PasswordTooLongError):
      hash_password("a" * 73)

  def test_too_long_multibyte(self):
    # 37 two-byte characters is 74 bytes
    with pytest.raises(PasswordTooLongError):
      hash_password("é" * 37)

  def test_too_long_never_matches(self, password_hash):
    with pytest.raises(PasswordMismatchError):
      check_password(password_hash, PASSWORD + "x" * 100)

  def test_zero_byte_rejected(self):
    with pytest.raises(CryptoRecipesError):
      hash_password(b"pass\x00word")

  @pytest.mark.parametrize("bad_hash", [
      "",
      "password",
      "$1$abcdefgh$0123456789012345678901",
      "$2b$12$tooshort",
    ])
  def test_malformed_hash(self, bad_hash):
    with pytest.raises(MalformedPasswordHashError):
      check_password(bad_hash, PASSWORD)

  @pytest.mark.parametrize("cost", ["03", "32", "99"])
  def test_cost_out_of_range(self, password_hash, cost):
    with pytest.raises(MalformedPasswordHashError):
      check_password(password_hash[:4] + cost + password_hash[6:], PASSWORD)
