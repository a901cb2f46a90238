import unittest

from blockcrypt import wrapper
from blockcrypt.errors import DeserializationError, SerializationError


class ContainerRoundTripTests(unittest.TestCase):
    def test_round_trip_each_metadata_type(self):
        cases = [
            (wrapper.Salt(b'deadbeefbeefdeadbeefde'), b'ciphertext bytes'),
            (wrapper.Salt(b''), b''),
            (wrapper.PaddingCount(0), b''),
            (wrapper.PaddingCount(15), b'\x00' * 32),
            (wrapper.OriginalLength(10240), b'compressed'),
            (wrapper.OriginalLength(2 ** 64 - 1), bytes(range(256))),
        ]
        for metadata, payload in cases:
            with self.subTest(metadata=metadata):
                self.assertEqual(wrapper.decode(wrapper.encode(metadata, payload)), (metadata, payload))

    def test_metadata_types_are_distinguished(self):
        decoded, _ = wrapper.decode(wrapper.encode(wrapper.OriginalLength(0), b''))
        self.assertIsInstance(decoded, wrapper.OriginalLength)
        self.assertNotEqual(decoded, wrapper.PaddingCount(0))

    def test_decode_as(self):
        data = wrapper.encode(wrapper.PaddingCount(3), b'x' * 16)
        metadata, payload = wrapper.decode_as(data, wrapper.PaddingCount)
        self.assertEqual(metadata.value, 3)
        self.assertEqual(payload, b'x' * 16)
        with self.assertRaises(DeserializationError):
            wrapper.decode_as(data, wrapper.Salt)

    def test_describe(self):
        data = wrapper.encode(wrapper.Salt(b'abc'), b'12345')
        info = wrapper.describe(data)
        self.assertEqual(info['type'], 'Salt')
        self.assertEqual(info['metadata'], 'abc')
        self.assertEqual(info['payload_length'], 5)
        self.assertEqual(info['container_length'], len(data))


class ContainerRejectionTests(unittest.TestCase):
    def setUp(self):
        self.data = wrapper.encode(wrapper.Salt(b'0123456789abcdefghijkl'), b'payload' * 5)

    def test_truncated_input(self):
        for cut in range(len(self.data)):
            with self.subTest(cut=cut):
                with self.assertRaises(DeserializationError):
                    wrapper.decode(self.data[:cut])

    def test_every_corrupted_byte_is_rejected(self):
        for i in range(len(self.data)):
            corrupted = bytearray(self.data)
            corrupted[i] ^= 0xFF
            with self.subTest(offset=i):
                with self.assertRaises(DeserializationError):
                    wrapper.decode(bytes(corrupted))

    def test_trailing_bytes(self):
        with self.assertRaises(DeserializationError):
            wrapper.decode(self.data + b'\x00')

    def test_wrong_magic(self):
        with self.assertRaises(DeserializationError):
            wrapper.decode(b'XXXX' + self.data[4:])

    def test_not_a_container(self):
        with self.assertRaises(DeserializationError):
            wrapper.decode(b'hello, world! this is plain text, not a container')


class ContainerSerializationTests(unittest.TestCase):
    def test_negative_count(self):
        with self.assertRaises(SerializationError):
            wrapper.encode(wrapper.PaddingCount(-1), b'')

    def test_oversized_count(self):
        with self.assertRaises(SerializationError):
            wrapper.encode(wrapper.OriginalLength(2 ** 64), b'')

    def test_non_bytes_payload(self):
        with self.assertRaises(SerializationError):
            wrapper.encode(wrapper.PaddingCount(0), 'text')

    def test_non_bytes_salt(self):
        with self.assertRaises(SerializationError):
            wrapper.encode(wrapper.Salt('salt'), b'')

    def test_unknown_metadata(self):
        with self.assertRaises(SerializationError):
            wrapper.encode(42, b'')


if __name__ == '__main__':
    unittest.main()
