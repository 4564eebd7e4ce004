from passlib.context import CryptContext

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    if password_too_long(password):
        raise ValueError(f"Password too long (bcrypt max {BCRYPT_MAX_BYTES} bytes)")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # anything longer could never have been stored
    if password_too_long(plain_password):
        return False
    return pwd_context.verify(plain_password, hashed_password)
