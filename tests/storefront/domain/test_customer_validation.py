"""Tests for customer data checks run before billing."""

from storefront.checkout.validation import digits, format_phone, is_valid_phone, is_valid_tax_id


class TestTaxId:
    def test_formatted_cpf(self):
        assert is_valid_tax_id("529.982.247-25")

    def test_cnpj(self):
        assert is_valid_tax_id("11.222.333/0001-81")

    def test_repeated_digits(self):
        assert not is_valid_tax_id("111.111.111-11")

    def test_wrong_length(self):
        assert not is_valid_tax_id("1234567")

    def test_missing(self):
        assert not is_valid_tax_id(None)
        assert not is_valid_tax_id("")


class TestPhone:
    def test_mobile(self):
        assert is_valid_phone("(11) 98765-4321")

    def test_landline(self):
        assert is_valid_phone("1133334444")

    def test_without_area_code(self):
        assert not is_valid_phone("98765-4321")

    def test_missing(self):
        assert not is_valid_phone(None)

    def test_format_mobile(self):
        assert format_phone("11987654321") == "(11) 98765-4321"

    def test_format_landline(self):
        assert format_phone("1133334444") == "(11) 3333-4444"

    def test_format_leaves_invalid_input(self):
        assert format_phone("123") == "123"

    def test_digits(self):
        assert digits("+55 (11) 9-8765") == "551198765"
