#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Cryptographically secure random bytes"""

import logging

from Cryptodome.Random import get_random_bytes

from .exceptions import EntropySourceError

logger = logging.getLogger(__name__)

def random_bytes(n_bytes: int) -> bytes:
  """Generate cryptographically secure random bytes from the operating system.

  There is no fallback to a weaker source; if the OS cannot supply entropy the
  caller gets an exception.

  Args:
      n_bytes (int): The number of bytes to generate.

  Raises:
      EntropySourceError: The secure random source failed

  Returns:
      bytes: n_bytes cryptographically random bytes
  """
  assert isinstance(n_bytes, int)
  if n_bytes < 0:
    raise ValueError(f"Cannot generate a negative number of random bytes: {n_bytes}")
  try:
    result = get_random_bytes(n_bytes)
  except (OSError, NotImplementedError) as e:
    logger.error("Secure random source failed while generating %d bytes", n_bytes)
    raise EntropySourceError(f"Secure random source could not supply {n_bytes} bytes") from e
  if len(result) != n_bytes:
    raise EntropySourceError(f"Secure random source returned {len(result)} bytes, expected {n_bytes}")
  return result
