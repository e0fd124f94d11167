"""Password hashing with bcrypt.

Digests are one-way and salted per call; verification never compares
plaintext.
"""

import bcrypt

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    """Hash a plaintext password into a bcrypt digest string."""
    return bcrypt.hashpw(
        password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    ).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt digest.

    Returns False for anything that is not a well-formed bcrypt digest,
    so legacy plaintext rows can never authenticate.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
