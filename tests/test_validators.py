import uuid

import pytest
from django.core.exceptions import ValidationError

from client_proposals.validators import is_valid_nif, is_valid_uuid, sanitize_phone, validate_nif


class TestNif:
    """Portuguese NIF mod-11 check digit."""

    @pytest.mark.parametrize("value", ["501442600", "999999990", "501 442 600", "PT501442600"])
    def test_valid_numbers(self, value):
        assert is_valid_nif(value)

    @pytest.mark.parametrize("value", ["501442601", "123456788", "999999991"])
    def test_wrong_check_digit(self, value):
        assert not is_valid_nif(value)

    def test_check_digit_follows_weighted_sum(self):
        # 1*9 + 2*8 + ... + 8*2 = 156, 156 % 11 = 2, check digit 11 - 2 = 9
        assert is_valid_nif("123456789")
        assert not is_valid_nif("123456780")

    @pytest.mark.parametrize("value", ["", "12345678", "1234567890", "abc", None])
    def test_not_nine_digits(self, value):
        assert not is_valid_nif(value)

    def test_validator_allows_blank(self):
        validate_nif("")

    def test_validator_raises_on_invalid(self):
        with pytest.raises(ValidationError):
            validate_nif("501442601")


class TestUuid:
    def test_accepts_canonical_and_uppercase(self):
        value = str(uuid.uuid4())
        assert is_valid_uuid(value)
        assert is_valid_uuid(value.upper())
        assert is_valid_uuid(uuid.uuid4())

    @pytest.mark.parametrize("value", ["", "undefined", "null", "1234", "g" * 8 + "-1111-1111-1111-111111111111"])
    def test_rejects_malformed(self, value):
        assert not is_valid_uuid(value)


def test_sanitize_phone_keeps_leading_plus():
    assert sanitize_phone(" +351 912-345-678 ") == "+351912345678"
    assert sanitize_phone("912 345 678") == "912345678"
    assert sanitize_phone(None) == ""
    assert sanitize_phone("00351912345678") == "+351912345678"
    assert sanitize_phone("1234567890123456789") == "123456789012345"
