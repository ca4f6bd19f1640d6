"""Request signing for the HAFAS client interface.

Two optional schemes are supported and may be combined:

- ``checksum``: md5 over the request body followed by the checksum salt.
- ``mic``/``mac``: md5 of the body (mic), then md5 over the hex mic followed
  by the mic/mac salt (mac).

Salts are provided raw or AES encrypted with a separately supplied key.
"""

import base64
import hashlib
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_ZERO_IV = bytes(16)


def decrypt_salt(encrypted_salt: str, salt_encryption_key: str) -> bytes:
    """Recover a salt from its base64 AES-128-CBC form (zero IV, PKCS#7 padding).

    Args:
        encrypted_salt: Base64 encoded cipher text.
        salt_encryption_key: 128 bit key as hex string.

    Raises:
        ValueError: If the key is not 128 bits or the padding is invalid.
    """
    key = bytes.fromhex(salt_encryption_key)
    if len(key) * 8 != 128:
        raise ValueError("encryption key must be 128 bits")

    decryptor = Cipher(algorithms.AES(key), modes.CBC(_ZERO_IV)).decryptor()
    padded = decryptor.update(base64.b64decode(encrypted_salt)) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


@dataclass(frozen=True)
class Salt:
    """A signing salt, given raw or encrypted."""

    raw: bytes | None = None
    encrypted: str | None = None
    key: str | None = None

    def resolve(self) -> bytes:
        if self.raw is not None:
            return self.raw
        if self.encrypted is None or self.key is None:
            raise ValueError("encrypted salt needs both cipher text and key")
        return decrypt_salt(self.encrypted, self.key)


def compute_checksum(body: str, salt: bytes) -> str:
    return hashlib.md5(body.encode("utf-8") + salt).hexdigest()


def compute_mic_mac(body: str, salt: bytes) -> tuple[str, str]:
    mic = hashlib.md5(body.encode("utf-8")).hexdigest()
    mac = hashlib.md5(mic.encode("utf-8") + salt).hexdigest()
    return mic, mac


class RequestSigner:
    """Adds signature query parameters to a request.

    Salts are decrypted once at construction and never change afterwards.
    A missing salt skips the corresponding scheme.
    """

    def __init__(self, checksum_salt: Salt | None = None, mic_mac_salt: Salt | None = None) -> None:
        self._checksum_salt = checksum_salt.resolve() if checksum_salt else None
        self._mic_mac_salt = mic_mac_salt.resolve() if mic_mac_salt else None

    @property
    def active(self) -> bool:
        return self._checksum_salt is not None or self._mic_mac_salt is not None

    def sign(self, body: str) -> dict[str, str]:
        """Compute signature query parameters for a request body."""
        params: dict[str, str] = {}
        if self._checksum_salt is not None:
            params["checksum"] = compute_checksum(body, self._checksum_salt)
        if self._mic_mac_salt is not None:
            params["mic"], params["mac"] = compute_mic_mac(body, self._mic_mac_salt)
        return params
