import unittest

from blockcrypt import wrapper
from blockcrypt.aes import CipherAes128, CipherAes256, get_cipher, truncate_padding
from blockcrypt.errors import InvalidKey, MalformedCiphertext

KEY_128 = bytes(range(16))
KEY_256 = bytes(range(32))
CIPHERS = ((CipherAes128, KEY_128), (CipherAes256, KEY_256))


class CipherRoundTripTests(unittest.TestCase):
    def test_round_trip(self):
        for cipher, key in CIPHERS:
            for length in (0, 1, 3, 15, 16, 17, 31, 32, 33, 100, 4096):
                plaintext = bytes((i * 31 + 7) % 256 for i in range(length))
                with self.subTest(cipher=cipher.NAME, length=length):
                    ciphertext = cipher.encrypt(plaintext, key)
                    self.assertEqual(cipher.decrypt(ciphertext, key), plaintext)

    def test_plaintext_ending_in_zero_bytes(self):
        for cipher, key in CIPHERS:
            for plaintext in (b'\x00' * 16, b'abc\x00\x00', b'\x00' * 33):
                with self.subTest(cipher=cipher.NAME, length=len(plaintext)):
                    self.assertEqual(cipher.decrypt(cipher.encrypt(plaintext, key), key), plaintext)

    def test_output_is_padding_count_container(self):
        for cipher, key in CIPHERS:
            for length, extra in ((0, 0), (3, 3), (16, 0), (20, 4)):
                metadata, payload = wrapper.decode(cipher.encrypt(b'a' * length, key))
                with self.subTest(cipher=cipher.NAME, length=length):
                    self.assertEqual(metadata, wrapper.PaddingCount(extra))
                    self.assertEqual(len(payload) % 16, 0)
                    self.assertEqual(len(payload), -(-length // 16) * 16)

    def test_crypt_dispatch(self):
        ciphertext = CipherAes256.crypt(b'hello', KEY_256, decrypt=False)
        self.assertEqual(CipherAes256.crypt(ciphertext, KEY_256, decrypt=True), b'hello')

    def test_blocks_are_encrypted_independently(self):
        _, payload = wrapper.decode(CipherAes256.encrypt(b'A' * 16 * 3, KEY_256))
        self.assertEqual(payload[:16], payload[16:32])
        self.assertEqual(payload[16:32], payload[32:48])


class KnownAnswerTests(unittest.TestCase):
    # FIPS-197 Appendix C example vectors
    PLAINTEXT = bytes.fromhex('00112233445566778899aabbccddeeff')

    def test_aes128(self):
        _, payload = wrapper.decode(CipherAes128.encrypt(self.PLAINTEXT, KEY_128))
        self.assertEqual(payload.hex(), '69c4e0d86a7b0430d8cdb78070b4c55a')

    def test_aes256(self):
        _, payload = wrapper.decode(CipherAes256.encrypt(self.PLAINTEXT, KEY_256))
        self.assertEqual(payload.hex(), '8ea2b7ca516745bfeafc49904b496089')


class CipherRejectionTests(unittest.TestCase):
    def test_wrong_key_length(self):
        with self.assertRaises(InvalidKey):
            CipherAes256.encrypt(b'foo', KEY_128)
        with self.assertRaises(InvalidKey):
            CipherAes128.encrypt(b'foo', KEY_256)
        ciphertext = CipherAes256.encrypt(b'foo', KEY_256)
        with self.assertRaises(InvalidKey):
            CipherAes256.decrypt(ciphertext, b'short')

    def test_partial_block_ciphertext(self):
        data = wrapper.encode(wrapper.PaddingCount(3), b'\x01' * 15)
        with self.assertRaises(MalformedCiphertext):
            CipherAes256.decrypt(data, KEY_256)

    def test_padding_count_out_of_range(self):
        data = wrapper.encode(wrapper.PaddingCount(16), b'\x01' * 16)
        with self.assertRaises(MalformedCiphertext):
            CipherAes256.decrypt(data, KEY_256)

    def test_padding_count_without_blocks(self):
        data = wrapper.encode(wrapper.PaddingCount(5), b'')
        with self.assertRaises(MalformedCiphertext):
            CipherAes256.decrypt(data, KEY_256)

    def test_not_a_container(self):
        with self.assertRaises(MalformedCiphertext):
            CipherAes256.decrypt(b'\x00' * 64, KEY_256)

    def test_wrong_container_type(self):
        data = wrapper.encode(wrapper.Salt(b'salt'), b'\x00' * 16)
        with self.assertRaises(MalformedCiphertext):
            CipherAes256.decrypt(data, KEY_256)

    def test_truncated_container(self):
        data = CipherAes256.encrypt(b'some plaintext that spans blocks', KEY_256)
        with self.assertRaises(MalformedCiphertext):
            CipherAes256.decrypt(data[:-5], KEY_256)


class HelperTests(unittest.TestCase):
    def test_get_cipher(self):
        self.assertIs(get_cipher('aes128'), CipherAes128)
        self.assertIs(get_cipher('AES256'), CipherAes256)
        with self.assertRaises(ValueError):
            get_cipher('des')

    def test_truncate_padding(self):
        self.assertEqual(truncate_padding(b'a' * 16 + b'bc' + b'\x00' * 14, 2), b'a' * 16 + b'bc')
        self.assertEqual(truncate_padding(b'a' * 32, 0), b'a' * 32)
        self.assertEqual(truncate_padding(b'', 0), b'')


if __name__ == '__main__':
    unittest.main()
