# Third-party imports
import bcrypt

# bcrypt only looks at the first 72 bytes and newer releases reject longer input
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def get_password_hash(password: str) -> str:
    """
    Generate a salted bcrypt hash for ``password``.
    """
    hashed_password = bcrypt.hashpw(password=_password_bytes(password), salt=bcrypt.gensalt())
    return hashed_password.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain text password against its hash. A malformed stored hash never matches.
    """
    try:
        return bcrypt.checkpw(password=_password_bytes(plain_password), hashed_password=hashed_password.encode("utf-8"))
    except ValueError:
        return False
