import unittest

from repairhub.utils.validators import normalize_phone_number, validate_license_plate


class TestPhoneNumbers(unittest.TestCase):

    def test_local_and_international_forms_agree(self):
        for raw in ("050 123 4567", "0501234567", "+971501234567", "00971501234567", "501234567"):
            with self.subTest(raw=raw):
                self.assertEqual(normalize_phone_number(raw), "+971501234567")

    def test_foreign_number_kept(self):
        self.assertEqual(normalize_phone_number("+1 650-253-0000"), "+16502530000")

    def test_numbers_that_cannot_exist(self):
        for raw in ("+12345678", "12", "not a phone", "0501"):
            with self.subTest(raw=raw):
                with self.assertRaises(ValueError):
                    normalize_phone_number(raw)

    def test_blank(self):
        with self.assertRaises(ValueError):
            normalize_phone_number("  ")


class TestLicensePlate(unittest.TestCase):

    def test_uppercased(self):
        self.assertEqual(validate_license_plate(" dxb-12 "), "DXB-12")

    def test_rejects_symbols(self):
        with self.assertRaises(ValueError):
            validate_license_plate("DXB 12!")
