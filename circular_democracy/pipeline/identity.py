import hashlib


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_email(email: str) -> str:
    """Opaque sender identity: SHA-256 hex of the normalized address."""
    return hashlib.sha256(normalize_email(email).encode("utf-8")).hexdigest()
