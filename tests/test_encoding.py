import base64
import io
import os
import string
import unittest

from blockcrypt import encoding
from blockcrypt.config import Encoding
from blockcrypt.errors import EncodingError


class HexTests(unittest.TestCase):
    def test_lowercase_even_length(self):
        data = os.urandom(1000)
        encoded = encoding.encode_bytes(data, Encoding.HEX)
        self.assertEqual(len(encoded) % 2, 0)
        self.assertTrue(set(encoded.decode('ascii')) <= set('0123456789abcdef'))
        self.assertEqual(encoded, data.hex().encode('ascii'))

    def test_round_trip_across_windows(self):
        data = os.urandom(150 * 1024 + 7)
        self.assertEqual(encoding.decode_bytes(encoding.encode_bytes(data, 'hex'), 'hex'), data)

    def test_whitespace_ignored(self):
        self.assertEqual(encoding.decode_bytes(b'de ad\nbe ef\n', Encoding.HEX), b'\xde\xad\xbe\xef')

    def test_invalid_digits(self):
        with self.assertRaises(EncodingError):
            encoding.decode_bytes(b'zz', Encoding.HEX)

    def test_odd_length(self):
        with self.assertRaises(EncodingError):
            encoding.decode_bytes(b'abc', Encoding.HEX)


class Base64Tests(unittest.TestCase):
    def test_standard_alphabet(self):
        data = os.urandom(3000)
        encoded = encoding.encode_bytes(data, Encoding.B64)
        self.assertEqual(encoded, base64.b64encode(data))
        self.assertTrue(set(encoded.decode('ascii')) <= set(string.ascii_letters + string.digits + '+/='))

    def test_round_trip_across_windows(self):
        for length in (0, 1, 2, 3, encoding.B64_WINDOW, encoding.B64_WINDOW + 1, 200 * 1024 + 2):
            data = os.urandom(length)
            with self.subTest(length=length):
                encoded = encoding.encode_bytes(data, Encoding.B64)
                self.assertEqual(encoded, base64.b64encode(data))
                self.assertEqual(encoding.decode_bytes(encoded, Encoding.B64), data)

    def test_short_reads(self):
        class Trickle(io.RawIOBase):
            def __init__(self, data):
                super().__init__()
                self.data = data

            def readable(self):
                return True

            def read(self, size=-1):
                chunk, self.data = self.data[:5], self.data[5:]
                return chunk

        data = os.urandom(101)
        out = io.BytesIO()
        encoding.encode(Trickle(data), out, Encoding.B64)
        self.assertEqual(out.getvalue(), base64.b64encode(data))

    def test_trailing_newline(self):
        self.assertEqual(encoding.decode_bytes(base64.b64encode(b'foo') + b'\n', 'b64'), b'foo')

    def test_invalid_characters(self):
        with self.assertRaises(EncodingError):
            encoding.decode_bytes(b'ab$d', Encoding.B64)

    def test_truncated(self):
        with self.assertRaises(EncodingError):
            encoding.decode_bytes(base64.b64encode(b'hello world')[:-1], Encoding.B64)

    def test_data_after_padding(self):
        with self.assertRaises(EncodingError):
            encoding.decode_bytes(b'Zg==Zm9v', Encoding.B64)


class PlainTests(unittest.TestCase):
    def test_identity(self):
        data = os.urandom(70000)
        self.assertEqual(encoding.encode_bytes(data, Encoding.PLAIN), data)
        self.assertEqual(encoding.decode_bytes(data, Encoding.PLAIN), data)

    def test_unknown_encoding(self):
        with self.assertRaises(ValueError):
            encoding.encode_bytes(b'x', 'base32')


if __name__ == '__main__':
    unittest.main()
