#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants defined by this package"""

KEY_SIZE_BITS = 256
"""Size of symmetric encryption keys (AES-256 and secretbox) in bits"""

KEY_SIZE_BYTES = KEY_SIZE_BITS // 8
"""Size of symmetric encryption keys (AES-256 and secretbox) in bytes"""

TAG_SIZE_BYTES = 16
"""Size of the authentication tag attached to each encrypted envelope (GCM tag or Poly1305 tag)"""

GCM_NONCE_SIZE_BYTES = 12
"""Number of random bytes used for the nonce on each AES-GCM encrypted value"""

SECRETBOX_NONCE_SIZE_BYTES = 24
"""Number of random bytes used for the nonce on each secretbox encrypted value"""

DEFAULT_CIPHER = "aes-gcm"
"""Name of the symmetric cipher strategy used when none is specified"""

DIGEST_SIZE_BYTES = 32
"""Size of the digest produced by the SHA-512/256 and SHA-256 hash recipes"""

HMAC_KEY_SIZE_BYTES = 32
"""Size of a generated HMAC-SHA512/256 key in bytes"""

BCRYPT_COST = 12
"""bcrypt work factor (log2 of the number of key expansion rounds)"""

BCRYPT_MAX_PASSWORD_BYTES = 72
"""bcrypt only consumes this many bytes of password; longer passwords are rejected rather than truncated"""

BCRYPT_HASH_PREFIX = "$2b$"
"""Version prefix of the bcrypt hash strings produced by this package"""

ECDSA_CURVE = "P-256"
"""Elliptic curve used for asymmetric signatures"""

ECDSA_BIT_SIZE = 256
"""Field size of ECDSA_CURVE in bits. Signing refuses keys on curves of any other size"""

ECDSA_COORDINATE_SIZE_BYTES = ECDSA_BIT_SIZE // 8
"""Width of each of R and S in the compact (JWT) signature encoding"""

ECDSA_CURVE_NAMES = frozenset(["NIST P-256", "P-256", "p256", "prime256v1", "secp256r1"])
"""Names under which pycryptodomex may report ECDSA_CURVE"""

PUBLIC_KEY_PEM_TYPE = "PUBLIC KEY"
"""PEM block label for a PKIX-encoded public key"""

PRIVATE_KEY_PEM_TYPE = "EC PRIVATE KEY"
"""PEM block label for a SEC1-encoded elliptic curve private key"""

EC_PARAMETERS_PEM_TYPE = "EC PARAMETERS"
"""PEM block label for the curve parameter block that "openssl ecparam -genkey" writes ahead of a private key"""
