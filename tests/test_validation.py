"""Structural reply validation."""

import pytest

from support_reply.domain.validation import validate


def test_good_reply_is_valid():
    result = validate(
        "Thank you for contacting us! Your order #1001 has shipped and should arrive Friday."
    )
    assert result.is_valid
    assert result.issues == []
    assert result.warnings == []
    assert result.score == 1.0


def test_twenty_chars_is_too_short():
    result = validate("Thanks, will help!!!")
    assert len("Thanks, will help!!!") == 20
    assert not result.is_valid
    assert "Response is too short" in result.issues


def test_placeholder_in_long_reply_is_invalid():
    text = ("Thank you for your patience. " * 6) + "Your tracking number is [TRACKING]."
    assert len(text) >= 200
    result = validate(text)
    assert not result.is_valid
    assert "Response contains placeholders or incomplete information" in result.issues


@pytest.mark.parametrize("marker", ["{{name}}", "PLACEHOLDER", "todo", "XXX"])
def test_other_placeholder_markers(marker):
    assert not validate(f"Thank you for your message, we will help {marker} soon.").is_valid


def test_long_reply_only_warns():
    result = validate("Thank you. " + "We appreciate your business. " * 40)
    assert result.is_valid
    assert "Response is quite long" in result.warnings
    assert result.score == pytest.approx(0.9)


def test_missing_courtesy_warns():
    result = validate("The package left the warehouse on Monday morning.")
    assert result.is_valid
    assert result.warnings == ["Response may lack professional courtesy words"]


def test_vague_order_reference_warns():
    result = validate("Thank you! We are checking on your order and will reply soon.")
    assert "Response mentions order but lacks specific order details" in result.warnings


def test_score_combines_issues_and_warnings():
    # too short + no courtesy word
    result = validate("Fine.")
    assert result.score == pytest.approx(0.6)
    # short + placeholder + no courtesy + vague order
    result = validate("[your order]")
    assert result.score == pytest.approx(0.2)
