import unittest

from lessroutes.util.net.addr import (
    AddressDomainError, CidrBlock, addr_from_ip, bit_at, block_contains,
    block_of_length, mask_of, split,
)

class TestAddressSpace(unittest.TestCase):

    def test_bit_at(self):
        self.assertEqual(bit_at(0x80000000, 0, 32), 1)
        self.assertEqual(bit_at(0x80000000, 1, 32), 0)
        self.assertEqual(bit_at(1, 31, 32), 1)
        self.assertEqual(bit_at(1 << 127, 0, 128), 1)
        self.assertEqual(bit_at(1, 127, 128), 1)
        self.assertEqual(bit_at(1, 126, 128), 0)

        with self.assertRaises(AddressDomainError): bit_at(0, 32, 32)
        with self.assertRaises(AddressDomainError): bit_at(0, -1, 128)


    def test_mask_of(self):
        self.assertEqual(mask_of(0, 32), 0)
        self.assertEqual(mask_of(24, 32), 0xffffff00)
        self.assertEqual(mask_of(32, 32), 0xffffffff)
        self.assertEqual(mask_of(128, 128), (1 << 128) - 1)
        self.assertEqual(mask_of(1, 128), 1 << 127)
        with self.assertRaises(AddressDomainError): mask_of(33, 32)


    def test_block_of_length(self):
        addr = addr_from_ip('10.1.5.5', 32)
        self.assertEqual(
            block_of_length(addr, 8, 32), CidrBlock.parse('10.0.0.0/8')
        )
        self.assertEqual(
            block_of_length(addr, 32, 32), CidrBlock.parse('10.1.5.5/32')
        )
        self.assertEqual(
            block_of_length(addr, 0, 32), CidrBlock.parse('0.0.0.0/0')
        )
        addr6 = addr_from_ip('2001:db8:ffff::1', 128)
        self.assertEqual(
            block_of_length(addr6, 32, 128), CidrBlock.parse('2001:db8::/32')
        )


    def test_block_contains(self):
        block = CidrBlock.parse('10.0.0.0/8')
        self.assertTrue(block_contains(block, addr_from_ip('10.0.0.0', 32)))
        self.assertTrue(block_contains(block, addr_from_ip('10.255.255.255', 32)))
        self.assertFalse(block_contains(block, addr_from_ip('11.0.0.0', 32)))
        self.assertFalse(block_contains(block, addr_from_ip('9.255.255.255', 32)))

        everything = CidrBlock.parse('::/0')
        self.assertTrue(block_contains(everything, (1 << 128) - 1))

        host = CidrBlock.parse('2001:db8::1/128')
        self.assertTrue(block_contains(host, addr_from_ip('2001:db8::1', 128)))
        self.assertFalse(block_contains(host, addr_from_ip('2001:db8::2', 128)))


    def test_split(self):
        self.assertEqual(
            split(CidrBlock.parse('0.0.0.0/0')),
            (CidrBlock.parse('0.0.0.0/1'), CidrBlock.parse('128.0.0.0/1')),
        )
        self.assertEqual(
            split(CidrBlock.parse('10.0.0.0/8')),
            (CidrBlock.parse('10.0.0.0/9'), CidrBlock.parse('10.128.0.0/9')),
        )
        self.assertEqual(
            split(CidrBlock.parse('2001:db8::/127')),
            (CidrBlock.parse('2001:db8::/128'), CidrBlock.parse('2001:db8::1/128')),
        )

        with self.assertRaises(AddressDomainError):
            split(CidrBlock.parse('10.0.0.1/32'))
        with self.assertRaises(AddressDomainError):
            split(CidrBlock.parse('::1/128'))


    def test_canonical_form(self):
        with self.assertRaises(AddressDomainError): CidrBlock(1, 31, 32)
        with self.assertRaises(AddressDomainError): CidrBlock(0, 33, 32)
        with self.assertRaises(AddressDomainError): CidrBlock(0, 8, 64)
        with self.assertRaises(AddressDomainError): CidrBlock(1 << 32, 0, 32)
        with self.assertRaises(AddressDomainError): CidrBlock.parse('10.0.0.1/8')
        with self.assertRaises(AddressDomainError): CidrBlock.parse('not a block')


    def test_block_properties(self):
        block = CidrBlock.parse('192.168.0.0/16')
        self.assertEqual(block.version, 4)
        self.assertEqual(block.size, 65536)
        self.assertEqual(block.last, addr_from_ip('192.168.255.255', 32))
        self.assertEqual(str(block), '192.168.0.0/16')

        block6 = CidrBlock.parse('2001:db8::/32')
        self.assertEqual(block6.version, 6)
        self.assertEqual(block6.size, 1 << 96)
        self.assertEqual(str(block6), '2001:db8::/32')


    def test_addr_from_ip_wrong_family(self):
        with self.assertRaises(AddressDomainError): addr_from_ip('::1', 32)
