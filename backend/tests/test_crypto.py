"""
Tests for credential encryption
"""
import base64

import pytest

from dbworks.core.crypto import Encryptor, NONCE_SIZE


@pytest.fixture
def encryptor():
    return Encryptor.from_base64(Encryptor.generate_key())


class TestEncryptor:
    """AES-256-GCM round trips and failure modes"""

    def test_encrypt_decrypt(self, encryptor):
        token = encryptor.encrypt("p@ss:word")
        assert token != "p@ss:word"
        assert encryptor.decrypt(token) == "p@ss:word"

    def test_nonce_is_random(self, encryptor):
        assert encryptor.encrypt("same") != encryptor.encrypt("same")

    def test_wrong_key_fails(self, encryptor):
        other = Encryptor.from_base64(Encryptor.generate_key())
        with pytest.raises(ValueError):
            other.decrypt(encryptor.encrypt("secret"))

    def test_tampered_ciphertext_fails(self, encryptor):
        raw = bytearray(base64.b64decode(encryptor.encrypt("secret")))
        raw[-1] ^= 0x01
        with pytest.raises(ValueError):
            encryptor.decrypt(base64.b64encode(bytes(raw)).decode())

    def test_truncated_input_fails(self, encryptor):
        with pytest.raises(ValueError):
            encryptor.decrypt(base64.b64encode(b"\x00" * (NONCE_SIZE - 1)).decode())

    def test_invalid_base64_fails(self, encryptor):
        with pytest.raises(ValueError):
            encryptor.decrypt("not base64!")

    @pytest.mark.parametrize("key", [None, "", base64.b64encode(b"short").decode(), "%%%"])
    def test_bad_keys(self, key):
        with pytest.raises(ValueError):
            Encryptor.from_base64(key)
