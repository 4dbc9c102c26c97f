# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Package crypto_recipes provides a command-line tool as well as a runtime API of recommended recipes for
common cryptographic tasks: authenticated symmetric encryption, hashing, password hashing, message
authentication, ECDSA signatures, and marshaling of signatures and keys. Each recipe fixes safe parameter
choices so callers do not have to.
"""

from .version import __version__

from .constants import (
    KEY_SIZE_BITS,
    KEY_SIZE_BYTES,
    TAG_SIZE_BYTES,
    GCM_NONCE_SIZE_BYTES,
    SECRETBOX_NONCE_SIZE_BYTES,
    DEFAULT_CIPHER,
    DIGEST_SIZE_BYTES,
    HMAC_KEY_SIZE_BYTES,
    BCRYPT_COST,
    BCRYPT_MAX_PASSWORD_BYTES,
    ECDSA_CURVE,
    ECDSA_BIT_SIZE,
  )

from .rand import random_bytes

from .cipher import (
    SymmetricCipher,
    AesGcmCipher,
    SecretBoxCipher,
    CIPHERS,
    get_cipher,
    generate_encryption_key,
    encrypt,
    decrypt,
  )

from .hashing import (
    hash,
    hash_sha256,
    hash_password,
    check_password,
  )

from .mac import (
    generate_hmac_key,
    generate_hmac,
    validate_hmac,
  )

from .signing import (
    ECDSASignature,
    generate_signing_key,
    sign,
    verify,
  )

from .codec import (
    encode_signature_der,
    decode_signature_der,
    encode_signature_compact,
    decode_signature_compact,
    encode_public_key,
    decode_public_key,
    encode_private_key,
    decode_private_key,
    encode_key_pair,
  )

from .internal_types import Jsonable
from .exceptions import (
    CryptoRecipesError,
    CryptoRecipesNoKeyError,
    EntropySourceError,
    InvalidKeySizeError,
    InvalidNonceSizeError,
    UnknownCipherError,
    AuthenticationFailedError,
    PasswordTooLongError,
    PasswordMismatchError,
    MalformedPasswordHashError,
    InvalidCurveParamsError,
    MalformedSignatureError,
    InvalidEncodingError,
    WrongPEMTypeError,
    NotECKeyError,
  )
