import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def generate_id(entity: str) -> str:
    """Generate an identifier of a new record, like ``product_1718000000000_k3j9x0a2b``.

    Not guaranteed to be unique, the storage rejects duplicates.
    """
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{entity}_{millis}_{suffix}"
