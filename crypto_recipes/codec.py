#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Encoding and decoding of ECDSA signatures and keys for transport.

Signatures:
  DER:      ASN.1 SEQUENCE { INTEGER r, INTEGER s } (X9.62; see RFC 3279 section 2.2.3)
  Compact:  base64url(r(32 bytes) + s(32 bytes)) without padding (RFC 7515 appendix A.3.1)

Keys:
  Public:   PKIX SubjectPublicKeyInfo DER in a "PUBLIC KEY" PEM block
  Private:  SEC1 ECPrivateKey DER in an "EC PRIVATE KEY" PEM block
"""

from typing import List, Tuple, Union

import logging
import re
from base64 import urlsafe_b64encode, urlsafe_b64decode
from binascii import Error as BinasciiError

from Cryptodome.IO import PEM
from Cryptodome.PublicKey import ECC
from Cryptodome.Util.asn1 import DerSequence

from .exceptions import (
    MalformedSignatureError,
    InvalidEncodingError,
    WrongPEMTypeError,
    NotECKeyError,
  )
from .constants import (
    ECDSA_COORDINATE_SIZE_BYTES,
    PUBLIC_KEY_PEM_TYPE,
    PRIVATE_KEY_PEM_TYPE,
    EC_PARAMETERS_PEM_TYPE,
  )
from .signing import ECDSASignature

logger = logging.getLogger(__name__)

COMPACT_SIGNATURE_SIZE_BYTES = 2 * ECDSA_COORDINATE_SIZE_BYTES

# Curves pycryptodomex loads through ECC.import_key that cannot be used for ECDSA
NON_ECDSA_CURVE_NAMES = frozenset(["Ed25519", "Ed448", "Curve25519", "Curve448"])

_PEM_BLOCK_RE = re.compile(r"-----BEGIN ([^-\r\n]+)-----.*?-----END \1-----", re.DOTALL)
_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]*")

# ======================= Signatures

def encode_signature_der(sig: ECDSASignature) -> bytes:
  """Encode an ECDSA signature as an ASN.1 DER sequence of two integers.

  Raises:
      MalformedSignatureError: R or S is negative
  """
  r, s = sig
  if r < 0 or s < 0:
    raise MalformedSignatureError("ECDSA signature components must be non-negative")
  return DerSequence([r, s]).encode()

def decode_signature_der(sig_bytes: bytes) -> ECDSASignature:
  """Decode an ECDSA signature from an ASN.1 DER sequence of two integers.

  Raises:
      MalformedSignatureError: sig_bytes is not a DER SEQUENCE of exactly two non-negative
                               INTEGERs, or has trailing data
  """
  assert isinstance(sig_bytes, (bytes, bytearray))
  try:
    seq = DerSequence().decode(bytes(sig_bytes), strict=True, nr_elements=2, only_ints_expected=True)
  except (ValueError, IndexError, TypeError) as e:
    raise MalformedSignatureError("Badly formed ASN.1 DER ECDSA signature") from e
  r, s = int(seq[0]), int(seq[1])
  if r < 0 or s < 0:
    raise MalformedSignatureError("ECDSA signature components must be non-negative")
  return ECDSASignature(r, s)

def encode_signature_compact(sig: ECDSASignature) -> str:
  """Encode an ECDSA signature according to RFC 7515 appendix A.3.1.

  R and S are each written as 32 big-endian bytes (left zero-padded), concatenated
  and base64url-encoded without padding.

  Raises:
      InvalidEncodingError: R or S is negative or does not fit in 32 bytes
  """
  r, s = sig
  try:
    combined = r.to_bytes(ECDSA_COORDINATE_SIZE_BYTES, 'big') + s.to_bytes(ECDSA_COORDINATE_SIZE_BYTES, 'big')
  except OverflowError as e:
    raise InvalidEncodingError(
        f"ECDSA signature components must be non-negative and fit in {ECDSA_COORDINATE_SIZE_BYTES} bytes") from e
  return urlsafe_b64encode(combined).rstrip(b'=').decode('ascii')

def decode_signature_compact(b64sig: str) -> ECDSASignature:
  """Decode an ECDSA signature according to RFC 7515 appendix A.3.1.

  Raises:
      InvalidEncodingError: b64sig is not unpadded base64url, or does not decode to exactly 64 bytes
  """
  assert isinstance(b64sig, str)
  if _BASE64URL_RE.fullmatch(b64sig) is None:
    raise InvalidEncodingError("Compact signature is not unpadded base64url")
  try:
    combined = urlsafe_b64decode(b64sig + '=' * (-len(b64sig) % 4))
  except (BinasciiError, ValueError) as e:
    raise InvalidEncodingError("Compact signature is not unpadded base64url") from e
  if len(combined) != COMPACT_SIGNATURE_SIZE_BYTES:
    raise InvalidEncodingError(
        f"Compact signature decodes to {len(combined)} bytes, expected {COMPACT_SIGNATURE_SIZE_BYTES}")
  r = int.from_bytes(combined[:ECDSA_COORDINATE_SIZE_BYTES], 'big')
  s = int.from_bytes(combined[ECDSA_COORDINATE_SIZE_BYTES:], 'big')
  return ECDSASignature(r, s)

# ======================= Keys

def _pem_blocks(pem_data: Union[str, bytes]) -> List[Tuple[str, str]]:
  """Split PEM text into (label, block_text) pairs"""
  if isinstance(pem_data, (bytes, bytearray)):
    try:
      pem_data = bytes(pem_data).decode('ascii')
    except UnicodeDecodeError as e:
      raise WrongPEMTypeError("Data is not PEM text") from e
  assert isinstance(pem_data, str)
  return [(m.group(1), m.group(0)) for m in _PEM_BLOCK_RE.finditer(pem_data)]

def _decode_pem(pem_data: Union[str, bytes], expected_type: str) -> bytes:
  """Return the DER body of the first PEM block that is not curve parameters.

  Raises:
      WrongPEMTypeError: No PEM block, or the block label is not expected_type
      NotECKeyError: The block body cannot be decoded
  """
  blocks = [(label, block) for label, block in _pem_blocks(pem_data) if label != EC_PARAMETERS_PEM_TYPE]
  if len(blocks) == 0:
    raise WrongPEMTypeError(f"Could not find a PEM block of type {expected_type}")
  label, block = blocks[0]
  if label != expected_type:
    raise WrongPEMTypeError(f"Could not decode PEM block type {label}; expected {expected_type}")
  try:
    der, _, _ = PEM.decode(block)
  except ValueError as e:
    # also raised for encrypted blocks, since no passphrase is supplied
    raise NotECKeyError(f"Could not decode PEM block of type {expected_type}") from e
  return der

def _import_ec_key(der: bytes) -> ECC.EccKey:
  try:
    key = ECC.import_key(der)
  except (ValueError, IndexError, TypeError) as e:
    raise NotECKeyError("Data was not an ECDSA key") from e
  if key.curve in NON_ECDSA_CURVE_NAMES:
    raise NotECKeyError(f"Data was not an ECDSA key; {key.curve} keys cannot be used for ECDSA")
  return key

def _encode_pem(pem_text: str) -> bytes:
  if not pem_text.endswith('\n'):
    pem_text += '\n'
  return pem_text.encode('ascii')

def encode_public_key(key: ECC.EccKey) -> bytes:
  """Encode an ECDSA public key to PEM format.

  Args:
      key (ECC.EccKey): The public key. If a private key is given, its public half is encoded.

  Returns:
      bytes: PKIX DER in a newline-terminated "PUBLIC KEY" PEM block
  """
  if not isinstance(key, ECC.EccKey) or key.curve in NON_ECDSA_CURVE_NAMES:
    raise NotECKeyError("Key is not an ECDSA key")
  pub = key.public_key() if key.has_private() else key
  return _encode_pem(pub.export_key(format='PEM'))

def decode_public_key(encoded_key: Union[str, bytes]) -> ECC.EccKey:
  """Decode a PEM-encoded ECDSA public key.

  Raises:
      WrongPEMTypeError: The data does not hold a "PUBLIC KEY" PEM block
      NotECKeyError: The block does not hold an ECDSA public key
  """
  der = _decode_pem(encoded_key, PUBLIC_KEY_PEM_TYPE)
  key = _import_ec_key(der)
  if key.has_private():
    raise NotECKeyError("Data was not an ECDSA public key")
  return key

def encode_private_key(key: ECC.EccKey) -> bytes:
  """Encode an ECDSA private key to PEM format.

  Args:
      key (ECC.EccKey): The private key

  Returns:
      bytes: SEC1 DER (private scalar, curve OID and public point) in a newline-terminated
             "EC PRIVATE KEY" PEM block
  """
  if not isinstance(key, ECC.EccKey) or key.curve in NON_ECDSA_CURVE_NAMES or not key.has_private():
    raise NotECKeyError("Key is not an ECDSA private key")
  return _encode_pem(key.export_key(format='PEM', use_pkcs8=False))

def decode_private_key(encoded_key: Union[str, bytes]) -> ECC.EccKey:
  """Decode a PEM-encoded ECDSA private key.

  A leading "EC PARAMETERS" block, as written by "openssl ecparam -genkey", is skipped.

  Raises:
      WrongPEMTypeError: The data does not hold an "EC PRIVATE KEY" PEM block
      NotECKeyError: The block does not hold an ECDSA private key
  """
  der = _decode_pem(encoded_key, PRIVATE_KEY_PEM_TYPE)
  key = _import_ec_key(der)
  if not key.has_private():
    raise NotECKeyError("Data was not an ECDSA private key")
  logger.debug("Decoded %s private key", key.curve)
  return key

def encode_key_pair(key: ECC.EccKey) -> Tuple[bytes, bytes]:
  """Encode a private key and its public key to PEM, as (private_pem, public_pem)."""
  return encode_private_key(key), encode_public_key(key)
