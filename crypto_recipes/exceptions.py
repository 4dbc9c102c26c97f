#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package.

None of these exceptions ever carries key material, plaintext or passwords in its message.
"""

class CryptoRecipesError(Exception):
  """Base class for all error exceptions defined by this package."""
  #pass

class EntropySourceError(CryptoRecipesError):
  """Exception indicating the operating system's secure random source could not supply bytes."""
  #pass

class InvalidKeySizeError(CryptoRecipesError):
  """Exception indicating a symmetric key of the wrong length was provided."""
  #pass

class InvalidNonceSizeError(CryptoRecipesError):
  """Exception indicating a nonce of the wrong length was provided."""
  #pass

class UnknownCipherError(CryptoRecipesError):
  """Exception indicating an unrecognized symmetric cipher name."""
  #pass

class AuthenticationFailedError(CryptoRecipesError):
  """Exception indicating an encrypted envelope could not be opened.

  Raised for tag mismatch, wrong key and malformed or truncated envelopes alike; the cases
  are deliberately indistinguishable.
  """
  #pass

class PasswordTooLongError(CryptoRecipesError):
  """Exception indicating a password is longer than bcrypt can consume."""
  #pass

class PasswordMismatchError(CryptoRecipesError):
  """Exception indicating a password does not match a bcrypt hash."""
  #pass

class MalformedPasswordHashError(CryptoRecipesError):
  """Exception indicating a string is not a bcrypt password hash."""
  #pass

class InvalidCurveParamsError(CryptoRecipesError):
  """Exception indicating an ECDSA key is not on the curve this package signs with."""
  #pass

class MalformedSignatureError(CryptoRecipesError):
  """Exception indicating an ASN.1 DER signature could not be decoded."""
  #pass

class InvalidEncodingError(CryptoRecipesError):
  """Exception indicating a compact (JWT) signature could not be encoded or decoded."""
  #pass

class WrongPEMTypeError(CryptoRecipesError):
  """Exception indicating PEM text is missing or has an unexpected block label."""
  #pass

class NotECKeyError(CryptoRecipesError):
  """Exception indicating a key is not an elliptic curve key of the expected kind."""
  #pass

class CryptoRecipesNoKeyError(CryptoRecipesError):
  """Exception indicating failure because a required key was not provided."""
  #pass
