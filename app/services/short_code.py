"""
Short code service - generates the 6-character bin ids printed on QR labels.

Codes use an unambiguous alphabet (no 0/O, 1/I/L) so they can be typed from
a printed label.
"""

import secrets

from sqlalchemy.orm import Session

from app.models.bin import Bin

CODE_LENGTH = 6
CODE_CHARS = "23456789ABCDEFGHJKMNPQRSTUVWXYZ"
MAX_ATTEMPTS = 10


class ShortCodeExhaustedError(RuntimeError):
    """No unused code was found within MAX_ATTEMPTS tries."""


def generate_short_code() -> str:
    return "".join(secrets.choice(CODE_CHARS) for _ in range(CODE_LENGTH))


def generate_unique_bin_id(db: Session) -> str:
    """
    Return a short code not used by any bin (active or trashed).

    Raises:
        ShortCodeExhaustedError: after MAX_ATTEMPTS collisions
    """
    for _ in range(MAX_ATTEMPTS):
        code = generate_short_code()
        if db.get(Bin, code) is None:
            return code
    raise ShortCodeExhaustedError("Could not generate a unique bin code")
