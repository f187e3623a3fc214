"""Tests for the widget write protocol (typed write + synthetic fallback)."""

from unittest.mock import MagicMock

import pytest
from hypothesis import given, settings, strategies as st
from playwright.sync_api import Error as PlaywrightError

from autoapply.widgets import WidgetWriteProtocol, WriteMode, digit_count, has_min_digits


def _target(read_back: str) -> MagicMock:
    target = MagicMock()
    target.input_value.return_value = read_back
    return target


@pytest.mark.parametrize("value, digits", [
    ("", 0),
    (None, 0),
    ("06-1111 2222", 10),
    ("+31 (0)6 12", 6),
    ("abc", 0),
])
def test_digit_count(value, digits):
    assert digit_count(value) == digits


@given(st.text(alphabet="0123456789 +-()abc", max_size=20))
@settings(max_examples=200)
def test_phone_verification_needs_eight_digits(read_back):
    protocol = WidgetWriteProtocol(key_delay_ms=0)
    target = _target(read_back)

    mode = protocol.write_verified(target, "0611112222", has_min_digits(8))

    passes = sum(ch.isdigit() for ch in read_back) >= 8
    if passes:
        assert mode is WriteMode.TYPED
        target.evaluate.assert_not_called()
    else:
        assert mode is WriteMode.SYNTHETIC
        target.evaluate.assert_called_once()
        assert target.evaluate.call_args.args[1] == "0611112222"


def test_typed_write_clears_then_types_slowly():
    protocol = WidgetWriteProtocol(key_delay_ms=60)
    target = _target("0611112222")

    protocol.write_typed(target, "0611112222")

    target.click.assert_called_once()
    pressed = [c.args[0] for c in target.press.call_args_list]
    assert pressed == ["Control+A", "Meta+A", "Backspace"]
    target.press_sequentially.assert_called_once_with("0611112222", delay=60)


def test_select_all_failure_is_ignored():
    target = _target("")

    def press(key):
        if key == "Meta+A":
            raise PlaywrightError("Unknown key")

    target.press.side_effect = press
    WidgetWriteProtocol().write_typed(target, "123")
    target.press_sequentially.assert_called_once()


def test_typed_write_error_falls_back_to_synthetic_once():
    target = _target("")
    target.click.side_effect = PlaywrightError("Element is outside of the viewport")

    mode = WidgetWriteProtocol().write_verified(target, "0611112222", has_min_digits())

    assert mode is WriteMode.SYNTHETIC
    target.evaluate.assert_called_once()


def test_synthetic_failure_propagates():
    target = _target("")
    target.evaluate.side_effect = PlaywrightError("Element is not attached to the DOM")

    with pytest.raises(PlaywrightError):
        WidgetWriteProtocol().write_verified(target, "0611112222", has_min_digits())


def test_verify_treats_read_error_as_failure():
    target = MagicMock()
    target.input_value.side_effect = PlaywrightError("detached")
    assert WidgetWriteProtocol().verify(target, has_min_digits()) is False


@pytest.mark.browser
def test_synthetic_events_reach_masked_input(page):
    page.set_content("""
        <input id="ph" type="tel">
        <script>
          window.events = [];
          const ph = document.getElementById('ph');
          ph.addEventListener('keydown', e => e.preventDefault());
          for (const t of ['input', 'change', 'blur']) {
            ph.addEventListener(t, () => window.events.push(t));
          }
        </script>
    """)
    target = page.locator("#ph")

    mode = WidgetWriteProtocol(key_delay_ms=0).write_verified(target, "0611112222", has_min_digits())

    assert mode is WriteMode.SYNTHETIC
    assert target.input_value() == "0611112222"
    assert page.evaluate("window.events") == ["input", "change", "blur"]
