from decimal import Decimal

import pytest
from stellar_sdk import HashMemo, IdMemo, Keypair, NoneMemo, ReturnHashMemo, TextMemo

from stellar_txbuilder.errors import InvalidInputError
from stellar_txbuilder.validation import (
    MAX_ID_MEMO,
    build_memo,
    describe_memo,
    format_amount,
    infer_memo,
    is_valid_address,
    parse_amount,
)

HASH_HEX = "ab" * 32


class TestIsValidAddress:
    def test_random_public_keys(self):
        for _ in range(5):
            assert is_valid_address(Keypair.random().public_key) is True

    def test_known_address(self):
        assert is_valid_address("GAJMF3PZL4LQTQNPLASFIR7JYJTNKY3H3Y65ZFOOSHONUZR3R6O6QLB7") is True

    def test_empty_string(self):
        assert is_valid_address("") is False

    def test_none(self):
        assert is_valid_address(None) is False

    def test_wrong_checksum(self):
        address = Keypair.random().public_key
        last = "A" if address[-1] != "A" else "B"
        assert is_valid_address(address[:-1] + last) is False

    def test_wrong_length(self):
        address = Keypair.random().public_key
        assert is_valid_address(address[:-1]) is False
        assert is_valid_address(address + "A") is False

    def test_secret_key_is_not_an_address(self):
        assert is_valid_address(Keypair.random().secret) is False

    def test_lowercase(self):
        assert is_valid_address(Keypair.random().public_key.lower()) is False


class TestFormatAmount:
    def test_seven_decimals(self):
        assert format_amount("1") == "1.0000000"
        assert format_amount("10.5") == "10.5000000"

    def test_idempotent(self):
        for value in ("1", "0.1234567", "100.25", "922337203685.4775807"):
            once = format_amount(value)
            assert format_amount(once) == once

    def test_rounds_half_up(self):
        assert format_amount("0.00000005") == "0.0000001"
        assert format_amount("1.23456784") == "1.2345678"

    def test_accepts_decimal(self):
        assert format_amount(Decimal("2")) == "2.0000000"

    def test_sub_micro_values_stay_fixed_point(self):
        assert format_amount("0.0000001") == "0.0000001"
        assert format_amount("0.000000") == "0.0000000"
        assert format_amount(Decimal("1E-7")) == "0.0000001"


class TestParseAmount:
    def test_valid(self):
        assert parse_amount("12.5") == "12.5000000"

    def test_one_stroop(self):
        assert parse_amount("0.0000001") == "0.0000001"
        assert parse_amount("0.0000005") == "0.0000005"

    def test_strips_whitespace(self):
        assert parse_amount("  3 ") == "3.0000000"

    @pytest.mark.parametrize("value", ["", "   ", "abc", "1.2.3", "0", "-1", "NaN", "Infinity", "-Infinity"])
    def test_rejected(self, value):
        with pytest.raises(InvalidInputError):
            parse_amount(value)

    def test_below_one_stroop(self):
        with pytest.raises(InvalidInputError) as exc:
            parse_amount("0.00000001")
        assert "stroop" in str(exc.value)

    def test_above_int64_limit(self):
        with pytest.raises(InvalidInputError):
            parse_amount("922337203685.4775808")

    def test_minimum_for_create_account(self):
        assert parse_amount("1", minimum=Decimal("1")) == "1.0000000"
        with pytest.raises(InvalidInputError) as exc:
            parse_amount("0.9999999", minimum=Decimal("1"))
        assert "at least 1.0000000" in str(exc.value)


class TestBuildMemo:
    def test_none(self):
        assert isinstance(build_memo("none"), NoneMemo)

    def test_text_28_bytes_accepted(self):
        memo = build_memo("text", "a" * 28)
        assert isinstance(memo, TextMemo)

    def test_text_29_bytes_rejected(self):
        with pytest.raises(InvalidInputError):
            build_memo("text", "a" * 29)

    def test_text_counts_utf8_bytes(self):
        # 14 two-byte characters
        assert isinstance(build_memo("text", "é" * 14), TextMemo)
        with pytest.raises(InvalidInputError):
            build_memo("text", "é" * 14 + "a")

    def test_id_bounds(self):
        assert build_memo("id", "0").memo_id == 0
        assert build_memo("id", str(MAX_ID_MEMO)).memo_id == 18446744073709551615

    @pytest.mark.parametrize("value", ["-1", "18446744073709551616", "abc", "1.5", ""])
    def test_id_rejected(self, value):
        with pytest.raises(InvalidInputError):
            build_memo("id", value)

    def test_hash_64_hex_accepted(self):
        memo = build_memo("hash", HASH_HEX)
        assert isinstance(memo, HashMemo)
        assert memo.memo_hash == bytes.fromhex(HASH_HEX)

    @pytest.mark.parametrize("value", ["a" * 63, "a" * 65, "g" * 64])
    def test_hash_rejected(self, value):
        with pytest.raises(InvalidInputError):
            build_memo("hash", value)

    def test_return_64_hex_accepted(self):
        assert isinstance(build_memo("return", HASH_HEX.upper()), ReturnHashMemo)

    @pytest.mark.parametrize("value", ["a" * 63, "a" * 65])
    def test_return_rejected(self, value):
        with pytest.raises(InvalidInputError):
            build_memo("return", value)

    def test_id_rejects_non_ascii_digits(self):
        with pytest.raises(InvalidInputError):
            build_memo("id", "\u0661\u0662\u0663")

    def test_unknown_type(self):
        with pytest.raises(InvalidInputError):
            build_memo("url", "x")


class TestInferMemo:
    def test_empty_is_none(self):
        assert isinstance(infer_memo(""), NoneMemo)

    def test_digits_are_id(self):
        memo = infer_memo("12345")
        assert isinstance(memo, IdMemo)
        assert memo.memo_id == 12345

    def test_twenty_digits_fall_back_to_text(self):
        assert isinstance(infer_memo("1" * 20), TextMemo)

    def test_text(self):
        assert isinstance(infer_memo("invoice 42"), TextMemo)

    def test_non_ascii_digits_are_text(self):
        assert isinstance(infer_memo("\u0661\u0662\u0663"), TextMemo)

    def test_long_text_rejected(self):
        with pytest.raises(InvalidInputError):
            infer_memo("x" * 29)


class TestDescribeMemo:
    def test_descriptions(self):
        assert describe_memo(NoneMemo()) is None
        assert describe_memo(TextMemo("hi")) == "text:hi"
        assert describe_memo(IdMemo(7)) == "id:7"
        assert describe_memo(build_memo("hash", HASH_HEX)) == f"hash:{HASH_HEX}"
        assert describe_memo(build_memo("return", HASH_HEX)) == f"return:{HASH_HEX}"
