"""OpenSSH public key parsing.

Keys arrive as authorized_keys-style lines: "<type> <base64> [comment]".
The type and blob are checked by cryptography's SSH loader, which also
rejects a blob whose embedded type disagrees with the prefix.
"""

import base64
import binascii
import hashlib

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import load_ssh_public_key


class InvalidKeyError(ValueError):
    """Raised when a key line is not a usable OpenSSH public key."""


def normalize_key(line: str) -> str:
    """Validate a key line and return it with whitespace collapsed.

    Raises InvalidKeyError when the line cannot be loaded.
    """
    parts = line.split()
    if len(parts) < 2:
        raise InvalidKeyError("expected '<type> <base64> [comment]'")

    key_type, blob = parts[0], parts[1]
    try:
        load_ssh_public_key(f"{key_type} {blob}".encode("ascii"))
    except (ValueError, UnicodeEncodeError, UnsupportedAlgorithm) as e:
        raise InvalidKeyError(str(e)) from e

    return " ".join(parts)


def fingerprint(line: str) -> str:
    """OpenSSH-style SHA256 fingerprint of a key line ("SHA256:...")."""
    try:
        blob = base64.b64decode(line.split()[1], validate=True)
    except (IndexError, binascii.Error):
        return ""
    digest = hashlib.sha256(blob).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")
