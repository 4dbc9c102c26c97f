#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Asymmetric signatures: ECDSA using P-256 and SHA-256.

ECDSA over P-256 is the best compromise between cryptographic strength and
interoperability (e.g., the ES256 algorithm of RFC 7518). Signing uses a fresh
random per-signature nonce (FIPS 186-3), not deterministic RFC 6979 nonces.
"""

from typing import NamedTuple

import logging

from Cryptodome.Hash import SHA256
from Cryptodome.PublicKey import ECC
from Cryptodome.Signature import DSS

from .exceptions import InvalidCurveParamsError, NotECKeyError
from .constants import (
    ECDSA_CURVE,
    ECDSA_CURVE_NAMES,
    ECDSA_BIT_SIZE,
    ECDSA_COORDINATE_SIZE_BYTES,
  )
from .rand import random_bytes

logger = logging.getLogger(__name__)

DSS_MODE = 'fips-186-3'
"""Randomized-nonce ECDSA, as opposed to 'deterministic-rfc6979'"""

class ECDSASignature(NamedTuple):
  """An ECDSA signature. How it is serialized depends on the consumer; see codec.py."""

  r: int
  s: int

def generate_signing_key() -> ECC.EccKey:
  """Generate a P-256 ECDSA private key.

  The public key is available as key.public_key().
  """
  return ECC.generate(curve=ECDSA_CURVE, randfunc=random_bytes)

def _check_curve(key: ECC.EccKey) -> None:
  if key.curve not in ECDSA_CURVE_NAMES or key.pointQ.size_in_bits() != ECDSA_BIT_SIZE:
    raise InvalidCurveParamsError(f"ecdsa: invalid curve params; key is on {key.curve}, expected {ECDSA_CURVE}")

def _digest(data: bytes) -> SHA256.SHA256Hash:
  assert isinstance(data, (bytes, bytearray))
  return SHA256.new(data=bytes(data))

def sign(data: bytes, private_key: ECC.EccKey) -> ECDSASignature:
  """Sign data with a P-256 private key.

  Args:
      data (bytes): The message to sign. It is hashed with SHA-256.
      private_key (ECC.EccKey): A P-256 private key

  Raises:
      InvalidCurveParamsError: The key is not on P-256
      NotECKeyError: The key does not include the private scalar

  Returns:
      ECDSASignature: The (R, S) pair
  """
  assert isinstance(private_key, ECC.EccKey)
  _check_curve(private_key)
  if not private_key.has_private():
    raise NotECKeyError("A private key is required for signing")
  signer = DSS.new(private_key, DSS_MODE, encoding='binary', randfunc=random_bytes)
  sig_bytes = signer.sign(_digest(data))
  assert len(sig_bytes) == 2 * ECDSA_COORDINATE_SIZE_BYTES
  r = int.from_bytes(sig_bytes[:ECDSA_COORDINATE_SIZE_BYTES], 'big')
  s = int.from_bytes(sig_bytes[ECDSA_COORDINATE_SIZE_BYTES:], 'big')
  return ECDSASignature(r, s)

def verify(data: bytes, signature: ECDSASignature, public_key: ECC.EccKey) -> bool:
  """Check an ECDSA signature over data.

  An invalid signature is an expected outcome, so this returns False rather than raising.

  Args:
      data (bytes): The signed message
      signature (ECDSASignature): The (R, S) pair returned by sign()
      public_key (ECC.EccKey): The signer's P-256 public key (a private key also works)

  Returns:
      bool: True if the signature is valid
  """
  assert isinstance(public_key, ECC.EccKey)
  r, s = signature
  limit = 1 << ECDSA_BIT_SIZE
  if not (0 < r < limit and 0 < s < limit):
    logger.debug("ECDSA signature has out-of-range R or S")
    return False
  if public_key.curve not in ECDSA_CURVE_NAMES:
    logger.debug("ECDSA public key is on %s, not %s", public_key.curve, ECDSA_CURVE)
    return False
  sig_bytes = r.to_bytes(ECDSA_COORDINATE_SIZE_BYTES, 'big') + s.to_bytes(ECDSA_COORDINATE_SIZE_BYTES, 'big')
  verifier = DSS.new(public_key, DSS_MODE, encoding='binary')
  try:
    verifier.verify(_digest(data), sig_bytes)
  except ValueError:
    logger.debug("ECDSA signature did not verify")
    return False
  return True
