"""Tests for request signing."""

import base64
import hashlib

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from transit_adapters.adapters.hafas_api.signing import (
    RequestSigner,
    Salt,
    compute_checksum,
    compute_mic_mac,
    decrypt_salt,
)

BODY = '{"ver":"1.15","svcReqL":[]}'
KEY_HEX = "000102030405060708090a0b0c0d0e0f"


def _encrypt(plain: bytes, key_hex: str) -> str:
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plain) + padder.finalize()
    encryptor = Cipher(algorithms.AES(bytes.fromhex(key_hex)), modes.CBC(bytes(16))).encryptor()
    return base64.b64encode(encryptor.update(padded) + encryptor.finalize()).decode("ascii")


class TestChecksum:
    """Tests for the checksum scheme."""

    def test_when_body_signed_then_checksum_is_md5_of_body_and_salt(self) -> None:
        """Given a body and salt, when computing checksum, then it is md5(body + salt) in hex."""
        expected = hashlib.md5(BODY.encode("utf-8") + b"salt").hexdigest()

        assert compute_checksum(BODY, b"salt") == expected

    def test_when_body_changes_then_checksum_changes(self) -> None:
        """Given two different bodies, when computing checksums, then they differ."""
        assert compute_checksum(BODY, b"salt") != compute_checksum(BODY + " ", b"salt")


class TestMicMac:
    """Tests for the mic/mac scheme."""

    def test_when_signed_then_mac_is_computed_over_hex_mic(self) -> None:
        """Given a body, when computing mic/mac, then mac hashes the hex mic plus salt."""
        mic, mac = compute_mic_mac(BODY, b"salt")

        assert mic == hashlib.md5(BODY.encode("utf-8")).hexdigest()
        assert mac == hashlib.md5(mic.encode("utf-8") + b"salt").hexdigest()


class TestDecryptSalt:
    """Tests for AES salt decryption."""

    def test_when_encrypted_salt_given_then_plain_salt_recovered(self) -> None:
        """Given a salt encrypted with the key, when decrypting, then the plain salt returns."""
        encrypted = _encrypt(b"bdI8UVj40K5fvxwf", KEY_HEX)

        assert decrypt_salt(encrypted, KEY_HEX) == b"bdI8UVj40K5fvxwf"

    def test_when_key_not_128_bits_then_raises(self) -> None:
        """Given a 64 bit key, when decrypting, then ValueError is raised."""
        with pytest.raises(ValueError, match="128 bits"):
            decrypt_salt("AAAA", "0001020304050607")

    def test_when_salt_has_cipher_text_without_key_then_resolve_raises(self) -> None:
        """Given an encrypted salt without key, when resolving, then ValueError is raised."""
        with pytest.raises(ValueError):
            Salt(encrypted="AAAA").resolve()


class TestRequestSigner:
    """Tests for RequestSigner."""

    def test_when_no_salts_then_no_params(self) -> None:
        """Given no salts, when signing, then no parameters are added."""
        signer = RequestSigner()

        assert signer.active is False
        assert signer.sign(BODY) == {}

    def test_when_checksum_salt_then_only_checksum_param(self) -> None:
        """Given a checksum salt, when signing, then only the checksum parameter is set."""
        signer = RequestSigner(checksum_salt=Salt(raw=b"salt"))

        params = signer.sign(BODY)

        assert params == {"checksum": compute_checksum(BODY, b"salt")}

    def test_when_both_schemes_then_all_params(self) -> None:
        """Given both salts, when signing, then checksum, mic and mac are all set."""
        signer = RequestSigner(Salt(raw=b"one"), Salt(raw=b"two"))

        params = signer.sign(BODY)

        assert set(params) == {"checksum", "mic", "mac"}
        assert (params["mic"], params["mac"]) == compute_mic_mac(BODY, b"two")

    def test_when_mic_mac_salt_encrypted_then_decrypted_once_at_construction(self) -> None:
        """Given an encrypted mic/mac salt, when signing, then the decrypted salt is used."""
        salt = Salt(encrypted=_encrypt(b"plain-salt", KEY_HEX), key=KEY_HEX)
        signer = RequestSigner(mic_mac_salt=salt)

        params = signer.sign(BODY)

        assert params["mac"] == compute_mic_mac(BODY, b"plain-salt")[1]
