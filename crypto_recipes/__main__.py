#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Command-line interface for crypto_recipes package"""


from typing import Optional, Sequence, Dict, Any, TextIO, cast

import os
import sys
import argparse
import binascii
import json
import logging
import yaml
from base64 import b64encode, b64decode
import colorama # type: ignore[import]
from colorama import Fore, Style
from pygments import highlight, lexers, formatters

# NOTE: this module runs with -m; do not use relative imports
from crypto_recipes import (
    Jsonable,
    CIPHERS,
    DEFAULT_CIPHER,
    generate_encryption_key,
    encrypt,
    decrypt,
    hash as hash_sha512_256,
    hash_sha256,
    hash_password,
    check_password,
    generate_hmac_key,
    generate_hmac,
    validate_hmac,
    generate_signing_key,
    sign,
    verify,
    encode_signature_der,
    decode_signature_der,
    encode_signature_compact,
    decode_signature_compact,
    encode_public_key,
    decode_public_key,
    encode_private_key,
    decode_private_key,
    CryptoRecipesError,
    CryptoRecipesNoKeyError,
    __version__ as pkg_version,
  )

logger = logging.getLogger(__name__)

KEY_ENV_VAR = 'CRYPTO_RECIPES_KEY'
MAC_KEY_ENV_VAR = 'CRYPTO_RECIPES_MAC_KEY'
CIPHER_ENV_VAR = 'CRYPTO_RECIPES_CIPHER'

def is_colorizable(stream: TextIO) -> bool:
  is_a_tty = hasattr(stream, 'isatty') and stream.isatty()
  return is_a_tty

class CmdExitError(RuntimeError):
  exit_code: int

  def __init__(self, exit_code: int, msg: Optional[str]=None):
    if msg is None:
      msg = f"Command exited with return code {exit_code}"
    super().__init__(msg)
    self.exit_code = exit_code

class ArgparseExitError(CmdExitError):
  pass

class NoExitArgumentParser(argparse.ArgumentParser):
  def exit(self, status=0, message=None):
    if message:
      self._print_message(message, sys.stderr)
    raise ArgparseExitError(status, message)

class CommandHandler:
  _argv: Optional[Sequence[str]]
  _parser: argparse.ArgumentParser
  _args: argparse.Namespace
  _colorize_stdout: bool = False
  _colorize_stderr: bool = False
  _compact: bool = False
  _raw: bool = False
  _encoding: str
  _output_file: Optional[str] = None
  _config: Optional[Dict[str, Any]] = None

  def __init__(self, argv: Optional[Sequence[str]]=None):
    self._argv = argv

  def ecolor(self, codes: str) -> str:
    return codes if self._colorize_stderr else ""

  def pretty_print(self, value: Jsonable) -> None:
    """Write a JSON result, or a bare string with --raw. Colorized only on a terminal stdout."""
    if self._raw and isinstance(value, str):
      self.write_text(value)
      return
    if self._compact:
      json_text = json.dumps(value, separators=(',', ':'), sort_keys=True)
    else:
      json_text = json.dumps(value, indent=2, sort_keys=True)
    if self._output_file is None and self._colorize_stdout:
      json_text = highlight(json_text, lexers.JsonLexer(), formatters.TerminalFormatter())  # pylint: disable=no-member
    else:
      json_text += '\n'
    self.write_text(json_text)

  def write_text(self, text: str) -> None:
    output_file = self._output_file
    if output_file is None:
      sys.stdout.write(text)
    else:
      with open(output_file, 'w', encoding=self._encoding) as f:
        f.write(text)

  def get_config(self) -> Dict[str, Any]:
    if self._config is None:
      config_file: Optional[str] = self._args.config_file
      config_obj: Any = {}
      if not config_file is None:
        try:
          with open(config_file, encoding='utf-8') as f:
            config_obj = yaml.safe_load(f)
        except yaml.YAMLError:
          # the parser's message quotes the offending line, which may hold a key
          raise CryptoRecipesError(f"Config file {config_file} is not valid YAML") from None
        if config_obj is None:
          config_obj = {}
        if not isinstance(config_obj, dict):
          raise CryptoRecipesError(f"Config file {config_file} must contain a YAML mapping")
        logger.debug("Loaded config file %s", config_file)
      self._config = cast(Dict[str, Any], config_obj)
    return self._config

  def get_setting(self, arg_value: Optional[str], config_name: str, env_var: str) -> Optional[str]:
    """Resolve a setting from the commandline, then the config file, then the environment"""
    result = arg_value
    if result is None:
      config_value = self.get_config().get(config_name, None)
      if not config_value is None:
        if not isinstance(config_value, str):
          raise CryptoRecipesError(f"Config file property '{config_name}' must be a string")
        result = config_value
    if result is None:
      result = os.environ.get(env_var, '')
      if result == '':
        result = None
    return result

  def decode_b64_key(self, b64_key: str, what: str) -> bytes:
    try:
      return b64decode(b64_key, validate=True)
    except binascii.Error as e:
      raise CryptoRecipesError(f"The {what} must be base64-encoded") from e

  def get_key(self) -> bytes:
    b64_key = self.get_setting(self._args.key, 'key', KEY_ENV_VAR)
    if b64_key is None:
      raise CryptoRecipesNoKeyError(f'An encryption key must be provided with --key, in a config file, or in environment variable {KEY_ENV_VAR}')
    return self.decode_b64_key(b64_key, 'encryption key')

  def get_mac_key(self) -> bytes:
    b64_key = self.get_setting(self._args.mac_key, 'mac_key', MAC_KEY_ENV_VAR)
    if b64_key is None:
      raise CryptoRecipesNoKeyError(f'An HMAC key must be provided with --mac-key, in a config file, or in environment variable {MAC_KEY_ENV_VAR}')
    return self.decode_b64_key(b64_key, 'HMAC key')

  def get_cipher_name(self) -> str:
    cipher_name = self.get_setting(self._args.cipher, 'cipher', CIPHER_ENV_VAR)
    if cipher_name is None:
      cipher_name = DEFAULT_CIPHER
    return cipher_name

  def get_input_bytes(self, value: Optional[str], what: str='value') -> bytes:
    args = self._args
    use_stdin: bool = args.use_stdin
    input_file: Optional[str] = args.input_file
    if use_stdin:
      if input_file is None:
        input_file = '/dev/stdin'
      else:
        raise CryptoRecipesError("Only one of --stdin and --input can be provided")
    if value is None:
      if input_file is None:
        raise CryptoRecipesError(f"One of {what} parameter, --stdin, or --input must be provided")
      with open(input_file, 'rb') as f:
        return f.read()
    if not input_file is None:
      raise CryptoRecipesError(f"Only one of {what} parameter, --stdin, and --input can be provided")
    try:
      return value.encode(self._encoding)
    except UnicodeError:
      # the codec's message quotes the offending character
      raise CryptoRecipesError(f"The {what} cannot be encoded as {self._encoding}; use --input for binary data") from None

  def read_file(self, filename: str) -> bytes:
    with open(filename, 'rb') as f:
      return f.read()

  def cmd_bare(self) -> int:
    print("A command is required", file=sys.stderr)
    return 1

  def cmd_version(self) -> int:
    self.pretty_print(pkg_version)
    return 0

  def cmd_generate_key(self) -> int:
    if self._args.hmac:
      key = generate_hmac_key()
    else:
      key = generate_encryption_key(self.get_cipher_name())
    self.write_text(b64encode(key).decode('utf-8'))
    return 0

  def cmd_encrypt(self) -> int:
    plaintext = self.get_input_bytes(self._args.value)
    envelope = encrypt(plaintext, self.get_key(), cipher=self.get_cipher_name())
    self.write_text(b64encode(envelope).decode('utf-8'))
    return 0

  def cmd_decrypt(self) -> int:
    b64_envelope = self.get_input_bytes(self._args.envelope, what='envelope').decode('utf-8').strip()
    try:
      envelope = b64decode(b64_envelope, validate=True)
    except binascii.Error as e:
      raise CryptoRecipesError("The envelope must be base64-encoded") from e
    plaintext = decrypt(envelope, self.get_key(), cipher=self.get_cipher_name())
    if self._args.base64:
      self.write_text(b64encode(plaintext).decode('utf-8'))
    else:
      try:
        text = plaintext.decode(self._encoding)
      except UnicodeError:
        raise CryptoRecipesError(f"The plaintext is not valid {self._encoding} text; use --base64") from None
      self.write_text(text)
    return 0

  def cmd_hash(self) -> int:
    data = self.get_input_bytes(self._args.value)
    digest = hash_sha256(data) if self._args.sha256 else hash_sha512_256(data)
    self.write_text(digest.hex())
    return 0

  def get_password(self) -> bytes:
    password = self.get_input_bytes(self._args.password, what='password')
    if self._args.password is None:
      password = password.rstrip(b'\r\n')
    return password

  def cmd_hash_password(self) -> int:
    self.write_text(hash_password(self.get_password()))
    return 0

  def cmd_check_password(self) -> int:
    check_password(self._args.hashed, self.get_password())
    self.pretty_print(True)
    return 0

  def cmd_hmac(self) -> int:
    data = self.get_input_bytes(self._args.value)
    self.write_text(generate_hmac(data, self.get_mac_key()).hex())
    return 0

  def cmd_hmac_verify(self) -> int:
    data = self.get_input_bytes(self._args.value)
    try:
      tag = bytes.fromhex(self._args.tag)
    except ValueError as e:
      raise CryptoRecipesError("The HMAC tag must be hex-encoded") from e
    result = validate_hmac(data, tag, self.get_mac_key())
    self.pretty_print(result)
    return 0 if result else 1

  def cmd_generate_signing_key(self) -> int:
    key = generate_signing_key()
    public_output_file: Optional[str] = self._args.public_output
    if not public_output_file is None:
      with open(public_output_file, 'wb') as f:
        f.write(encode_public_key(key))
    self.write_text(encode_private_key(key).decode('ascii'))
    return 0

  def cmd_public_key(self) -> int:
    pem_data = self.get_input_bytes(None, what='private key')
    key = decode_private_key(pem_data)
    self.write_text(encode_public_key(key).decode('ascii'))
    return 0

  def cmd_sign(self) -> int:
    args = self._args
    private_key = decode_private_key(self.read_file(args.private_key))
    data = self.get_input_bytes(args.value)
    signature = sign(data, private_key)
    if args.sig_format == 'compact':
      self.write_text(encode_signature_compact(signature))
    else:
      self.write_text(b64encode(encode_signature_der(signature)).decode('utf-8'))
    return 0

  def cmd_verify(self) -> int:
    args = self._args
    public_key = decode_public_key(self.read_file(args.public_key))
    data = self.get_input_bytes(args.value)
    if args.sig_format == 'compact':
      signature = decode_signature_compact(args.signature)
    else:
      try:
        der = b64decode(args.signature, validate=True)
      except binascii.Error as e:
        raise CryptoRecipesError("A DER signature must be base64-encoded") from e
      signature = decode_signature_der(der)
    result = verify(data, signature, public_key)
    self.pretty_print(result)
    return 0 if result else 1

  def add_input_args(self, parser: argparse.ArgumentParser, what: str='value') -> None:
    parser.add_argument('--stdin', dest="use_stdin", action='store_true', default=False,
                        help=f'Read the {what} from stdin instead of the commandline')
    parser.add_argument('-i', '--input', dest="input_file", default=None,
                        help=f'Read the {what} from the specified file instead of the commandline')

  def add_sig_format_arg(self, parser: argparse.ArgumentParser) -> None:
    parser.add_argument('-f', '--format', dest='sig_format', default='der', choices=['der', 'compact'],
                        help='''Signature encoding. "der" is a base64-encoded ASN.1 DER sequence; "compact" is
                                the unpadded base64url R||S form used by JWT (RFC 7515). Default is "der".''')

  def run(self) -> int:
    """Run the crypto-recipes command-line tool with provided arguments

    Args:
        argv (Optional[Sequence[str]], optional):
            A list of commandline arguments (NOT including the program as argv[0]!),
            or None to use sys.argv[1:]. Defaults to None.

    Returns:
        int: The exit code that would be returned if this were run as a standalone command.
    """
    parser = NoExitArgumentParser(description="Recommended recipes for encryption, hashing, MACs and signatures.")


    # ======================= Main command

    self._parser = parser
    parser.add_argument('--traceback', "--tb", action='store_true', default=False,
                        help='Display detailed exception information')
    parser.add_argument('-M', '--monochrome', action='store_true', default=False,
                        help='Output to stdout/stderr in monochrome. Default is to colorize if stream is a compatible terminal')
    parser.add_argument('-c', '--compact', action='store_true', default=False,
                        help='Compact instead of pretty-printed output')
    parser.add_argument('-r', '--raw', action='store_true', default=False,
                        help='''Output raw strings directly, not json-encoded.''')
    parser.add_argument('-o', '--output', dest="output_file", default=None,
                        help='Write output value to the specified file instead of stdout')
    parser.add_argument('--text-encoding', default='utf-8',
                        help='The encoding used for text. Default  is utf-8')
    parser.add_argument('--log-level', default='warning',
                        choices=['debug', 'info', 'warning', 'error', 'critical'],
                        help='Logging level for diagnostic messages on stderr. Default is warning')
    parser.add_argument('-k', '--key', default=None,
                        help=f'''The base64-encoded 32-byte symmetric encryption key. By default,
                                the config file property "key" or environment variable {KEY_ENV_VAR} is used''')
    parser.add_argument('--mac-key', default=None,
                        help=f'''The base64-encoded HMAC key. By default, the config file property "mac_key"
                                or environment variable {MAC_KEY_ENV_VAR} is used''')
    parser.add_argument('--cipher', default=None, choices=sorted(CIPHERS),
                        help=f'''The symmetric cipher. By default, the config file property "cipher",
                                environment variable {CIPHER_ENV_VAR}, or "{DEFAULT_CIPHER}" is used''')
    parser.add_argument('--config-file', '-C', default=None,
                        help='''A YAML document with optional top-level properties "key", "mac_key" and
                                "cipher", used when the corresponding option is not given''')
    parser.set_defaults(func=self.cmd_bare)

    subparsers = parser.add_subparsers(
                        title='Commands',
                        description='Valid commands',
                        help='Additional help available with "<command-name> -h"')


    # ======================= version

    parser_version = subparsers.add_parser('version',
                            description='''Display version information. JSON-quoted string. If a raw string is desired, use -r.''')
    parser_version.set_defaults(func=self.cmd_version)

    # ======================= generate-key

    parser_generate_key = subparsers.add_parser('generate-key', description="Generate a random base64-encoded 256-bit key")
    parser_generate_key.add_argument('--hmac', action='store_true', default=False,
                        help='Generate an HMAC key instead of an encryption key')
    parser_generate_key.set_defaults(func=self.cmd_generate_key)

    # ======================= encrypt

    parser_encrypt = subparsers.add_parser('encrypt', description="Encrypt a value, producing a base64-encoded envelope")
    self.add_input_args(parser_encrypt)
    parser_encrypt.add_argument('value', nargs='?', default=None,
                        help="The value to be encrypted. Omit this parameter if --input or --stdin is provided.")
    parser_encrypt.set_defaults(func=self.cmd_encrypt)

    # ======================= decrypt

    parser_decrypt = subparsers.add_parser('decrypt', description="Decrypt a base64-encoded envelope")
    self.add_input_args(parser_decrypt, what='envelope')
    parser_decrypt.add_argument('--base64', action='store_true', default=False,
                        help='Output the plaintext base64-encoded, for binary content')
    parser_decrypt.add_argument('envelope', nargs='?', default=None,
                        help="The envelope to be decrypted. Omit this parameter if --input or --stdin is provided.")
    parser_decrypt.set_defaults(func=self.cmd_decrypt)

    # ======================= hash

    parser_hash = subparsers.add_parser('hash', description="Display the hex SHA-512/256 digest of a value")
    self.add_input_args(parser_hash)
    parser_hash.add_argument('--sha256', action='store_true', default=False,
                        help='Use SHA-256 instead. Not recommended except for compatibility')
    parser_hash.add_argument('value', nargs='?', default=None,
                        help="The value to be hashed. Omit this parameter if --input or --stdin is provided.")
    parser_hash.set_defaults(func=self.cmd_hash)

    # ======================= hash-password

    parser_hash_password = subparsers.add_parser('hash-password', description="Hash a password with bcrypt")
    self.add_input_args(parser_hash_password, what='password')
    parser_hash_password.add_argument('password', nargs='?', default=None,
                        help="The password. Omit this parameter if --input or --stdin is provided.")
    parser_hash_password.set_defaults(func=self.cmd_hash_password)

    # ======================= check-password

    parser_check_password = subparsers.add_parser('check-password', description="Check a password against a bcrypt hash")
    self.add_input_args(parser_check_password, what='password')
    parser_check_password.add_argument('hashed', help="The bcrypt hash string")
    parser_check_password.add_argument('password', nargs='?', default=None,
                        help="The password. Omit this parameter if --input or --stdin is provided.")
    parser_check_password.set_defaults(func=self.cmd_check_password)

    # ======================= hmac

    parser_hmac = subparsers.add_parser('hmac', description="Display the hex HMAC-SHA512/256 tag of a value")
    self.add_input_args(parser_hmac)
    parser_hmac.add_argument('value', nargs='?', default=None,
                        help="The value to be authenticated. Omit this parameter if --input or --stdin is provided.")
    parser_hmac.set_defaults(func=self.cmd_hmac)

    # ======================= hmac-verify

    parser_hmac_verify = subparsers.add_parser('hmac-verify', description="Check an HMAC-SHA512/256 tag. Exit code is 1 if it does not match")
    self.add_input_args(parser_hmac_verify)
    parser_hmac_verify.add_argument('-t', '--tag', required=True, help="The hex-encoded tag")
    parser_hmac_verify.add_argument('value', nargs='?', default=None,
                        help="The authenticated value. Omit this parameter if --input or --stdin is provided.")
    parser_hmac_verify.set_defaults(func=self.cmd_hmac_verify)

    # ======================= generate-signing-key

    parser_generate_signing_key = subparsers.add_parser('generate-signing-key',
                            description="Generate a P-256 ECDSA private key in PEM format")
    parser_generate_signing_key.add_argument('--public-output', default=None,
                        help='Also write the PEM-encoded public key to the specified file')
    parser_generate_signing_key.set_defaults(func=self.cmd_generate_signing_key)

    # ======================= public-key

    parser_public_key = subparsers.add_parser('public-key', description="Derive the PEM public key from a PEM private key")
    self.add_input_args(parser_public_key, what='private key')
    parser_public_key.set_defaults(func=self.cmd_public_key)

    # ======================= sign

    parser_sign = subparsers.add_parser('sign', description="Sign a value with an ECDSA P-256 private key")
    self.add_input_args(parser_sign)
    self.add_sig_format_arg(parser_sign)
    parser_sign.add_argument('-K', '--private-key', required=True, help="File containing the PEM private key")
    parser_sign.add_argument('value', nargs='?', default=None,
                        help="The value to be signed. Omit this parameter if --input or --stdin is provided.")
    parser_sign.set_defaults(func=self.cmd_sign)

    # ======================= verify

    parser_verify = subparsers.add_parser('verify', description="Verify an ECDSA P-256 signature. Exit code is 1 if it is not valid")
    self.add_input_args(parser_verify)
    self.add_sig_format_arg(parser_verify)
    parser_verify.add_argument('-P', '--public-key', required=True, help="File containing the PEM public key")
    parser_verify.add_argument('-s', '--signature', required=True, help="The encoded signature")
    parser_verify.add_argument('value', nargs='?', default=None,
                        help="The signed value. Omit this parameter if --input or --stdin is provided.")
    parser_verify.set_defaults(func=self.cmd_verify)

    # =========================================================

    try:
      args = parser.parse_args(self._argv)
    except ArgparseExitError as ex:
      return ex.exit_code
    traceback: bool = args.traceback
    logging.basicConfig(level=args.log_level.upper(), format='%(levelname)s %(name)s: %(message)s', stream=sys.stderr)
    try:
      self._args = args
      self._raw = args.raw
      self._compact = args.compact
      self._output_file = args.output_file
      self._encoding = args.text_encoding
      if not args.monochrome:
        self._colorize_stdout = is_colorizable(sys.stdout)
        self._colorize_stderr = is_colorizable(sys.stderr)
        if self._colorize_stdout or self._colorize_stderr:
          colorama.just_fix_windows_console()
      rc = args.func()
    except Exception as ex:
      if isinstance(ex, CmdExitError):
        rc = ex.exit_code
      else:
        rc = 1
      if rc != 0:
        if traceback:
          raise

        print(f"{self.ecolor(Fore.RED)}crypto-recipes: error: {ex}{self.ecolor(Style.RESET_ALL)}", file=sys.stderr)
    return rc

def run(argv: Optional[Sequence[str]]=None) -> int:
  try:
    rc = CommandHandler(argv).run()
  except CmdExitError as ex:
    rc = ex.exit_code
  return rc

def main() -> None:
  sys.exit(run())

# allow running with "python3 -m", or as a standalone script
if __name__ == "__main__":
  main()
