#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Tests for secure random byte generation"""

import pytest

import crypto_recipes.rand
from crypto_recipes import random_bytes, encrypt, generate_encryption_key, EntropySourceError


def _broken_source(n_bytes):
  raise OSError("no entropy")


class TestRandomBytes:
  """random_bytes() delegates to the OS source and never degrades."""

  @pytest.mark.parametrize("n_bytes", [0, 1, 12, 24, 32, 1000])
  def test_length(self, n_bytes):
    assert len(random_bytes(n_bytes)) == n_bytes

  def test_not_repeated(self):
    assert random_bytes(32) != random_bytes(32)

  def test_negative_rejected(self):
    with pytest.raises(ValueError):
      random_bytes(-1)

  def test_entropy_failure_propagates(self, monkeypatch):
    monkeypatch.setattr(crypto_recipes.rand, "get_random_bytes", _broken_source)
    with pytest.raises(EntropySourceError):
      random_bytes(32)

  def test_entropy_failure_reaches_encrypt(self, monkeypatch):
    """A nonce that cannot be generated aborts encryption instead of falling back."""
    key = generate_encryption_key()
    monkeypatch.setattr(crypto_recipes.rand, "get_random_bytes", _broken_source)
    with pytest.raises(EntropySourceError):
      encrypt(b"plaintext", key)
