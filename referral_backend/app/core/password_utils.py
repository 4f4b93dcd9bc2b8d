"""Password hashing. Uses bcrypt directly (passlib has incompatibilities with bcrypt 4.1+)."""
import bcrypt

from referral_backend.app.core.exceptions import HashingError

# bcrypt work factor; fixed so every stored hash has the same cost
BCRYPT_ROUNDS = 10


def _to_bytes(password: str) -> bytes:
    """Convert password to bytes, truncate to 72 bytes (bcrypt limit)."""
    if not isinstance(password, str):
        password = str(password)
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    """
    Hash password with bcrypt.

    Raises:
        HashingError: If the bcrypt primitive fails
    """
    pwd_bytes = _to_bytes(password)
    try:
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(pwd_bytes, salt).decode("utf-8")
    except (ValueError, TypeError) as e:
        raise HashingError(f"bcrypt failed: {e}") from e


def verify_password(plain: str, hashed: str) -> bool:
    """Verify plain password against bcrypt hash."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_to_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the store
        return False
