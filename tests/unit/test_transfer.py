from decimal import Decimal

import pytest

from finchat.core.transfer import (
    TRANSFER_MATCHERS,
    TransferIntent,
    describe_transfer,
    detect_transfer,
    parse_amount,
)
from finchat.services.address import is_valid_sui_address, normalize_sui_address, shorten_address

HEX = "a1" * 32
ADDRESS = "0x" + HEX


def _matcher_named(name):
    return next(m for m in TRANSFER_MATCHERS if m.name == name)


class TestDetectTransfer:
    def test_send_amount_to_address(self):
        intent = detect_transfer(f"send 2.5 SUI to {ADDRESS}")

        assert intent == TransferIntent(amount=Decimal("2.5"), to_address=ADDRESS)
        assert intent.currency == "SUI"
        assert intent.amount_mist == 2_500_000_000

    @pytest.mark.parametrize(
        "text, matcher",
        [
            (f"create a transfer 10 SUI to {ADDRESS}", "create_transfer"),
            (f"Can you please send 1,000 SUI to {ADDRESS}", "polite_request"),
            (f"transfer 3 sui to my friend at {ADDRESS}", "named_recipient"),
            (f"pay 4 sui to wallet {ADDRESS}", "verb_amount_to"),
            (f"send {ADDRESS} 5 sui", "recipient_first"),
            (f"5 SUI to {ADDRESS}", "amount_to_address"),
        ],
    )
    def test_phrasings(self, text, matcher):
        assert _matcher_named(matcher).match(text) is not None
        intent = detect_transfer(text)
        assert intent is not None
        assert intent.to_address == ADDRESS

    def test_thousands_separator(self):
        intent = detect_transfer(f"please send 1,000 sui to {ADDRESS}")
        assert intent.amount == Decimal("1000")

    def test_address_without_prefix_is_normalized(self):
        intent = detect_transfer(f"send 1 sui to {HEX}")
        assert intent.to_address == ADDRESS

    def test_case_insensitive(self):
        intent = detect_transfer(f"SEND 2 SUI TO 0X{HEX.upper()}")
        assert intent is not None
        assert intent.to_address == "0x" + HEX.upper()

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "What's my budget for groceries?",
            "send me a monthly report",
            "I paid 20 dollars for lunch",
        ],
    )
    def test_no_intent(self, text):
        assert detect_transfer(text) is None

    def test_short_address_is_rejected(self):
        assert detect_transfer("send 5 sui to 0x123") is None

    def test_zero_amount_is_rejected(self):
        assert detect_transfer(f"send 0 sui to {ADDRESS}") is None

    @pytest.mark.parametrize(
        "text",
        [
            f"send 1,5 sui to {ADDRESS}",
            f"send 0,5 sui to {ADDRESS}",
            f"send -5 sui to {ADDRESS}",
            f"-5 sui to {ADDRESS}",
            f"+5 sui to {ADDRESS}",
        ],
    )
    def test_amount_is_never_taken_from_the_middle_of_a_number(self, text):
        assert detect_transfer(text) is None

    def test_hex_looking_word_is_not_a_recipient(self):
        text = f"send dad 5 sui to {ADDRESS}"
        assert _matcher_named("recipient_first").match(text) is None

        intent = detect_transfer(text)
        assert intent == TransferIntent(amount=Decimal("5"), to_address=ADDRESS)

    def test_recipient_first_accepts_bare_full_length_hex(self):
        intent = detect_transfer(f"pay {HEX} 7 sui")
        assert intent.to_address == ADDRESS
        assert intent.amount == Decimal("7")

    def test_invalid_first_match_does_not_fall_through(self):
        # The later "recipient first" phrasing is valid, but the earlier match decides.
        text = f"send 5 sui to 0x123. pay {ADDRESS} 5 sui"
        assert _matcher_named("recipient_first").match(text) is not None
        assert detect_transfer(text) is None

    def test_describe_transfer(self):
        intent = detect_transfer(f"send 2.5 SUI to {ADDRESS}")
        assert describe_transfer(intent) == "I detected a SUI transfer request: 2.5 SUI to 0xa1a1a1...a1a1a1a1"


class TestTransferIntent:
    def test_rejects_invalid_address(self):
        with pytest.raises(ValueError):
            TransferIntent(amount=Decimal("1"), to_address="0x123")

    def test_rejects_non_positive_amount(self):
        with pytest.raises(ValueError):
            TransferIntent(amount=Decimal("-1"), to_address=ADDRESS)

    def test_accepts_camel_case(self):
        intent = TransferIntent.model_validate({"amount": "1.5", "toAddress": ADDRESS})
        assert intent.amount == Decimal("1.5")


def test_parse_amount():
    assert parse_amount("2.5") == Decimal("2.5")
    assert parse_amount("1,250.75") == Decimal("1250.75")
    assert parse_amount("0") is None
    assert parse_amount("-5") is None
    assert parse_amount("abc") is None


class TestAddressHelpers:
    def test_normalize_prepends_prefix(self):
        assert normalize_sui_address(HEX) == ADDRESS

    def test_normalize_is_idempotent(self):
        once = normalize_sui_address(HEX)
        assert normalize_sui_address(once) == once
        assert normalize_sui_address("0X" + HEX) == ADDRESS

    def test_normalize_empty(self):
        assert normalize_sui_address("") == ""
        assert normalize_sui_address(None) == ""

    def test_validation(self):
        assert is_valid_sui_address(ADDRESS) is True
        assert is_valid_sui_address(ADDRESS[:-1]) is False
        assert is_valid_sui_address(HEX + "ab") is False
        assert is_valid_sui_address("0x" + "g" * 64) is False

    def test_shorten(self):
        assert shorten_address(ADDRESS) == "0xa1a1a1...a1a1a1a1"
        assert shorten_address("0x1234") == "0x1234"
