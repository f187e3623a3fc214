"""Tests for label resolution strategies and their composition."""

import re

import pytest
from playwright.sync_api import Error as PlaywrightError

from autoapply.models import Strategy
from autoapply.resolver import (
    first_success,
    iter_candidates,
    resolve,
    xpath_literal,
)


# === Combinator ===

def test_first_success_returns_first_truthy_result():
    calls = []

    def attempt(value):
        def run():
            calls.append(value)
            return value
        return run

    assert first_success([attempt(None), attempt("b"), attempt("c")]) == "b"
    assert calls == [None, "b"]


def test_first_success_treats_playwright_errors_as_miss():
    def boom():
        raise PlaywrightError("Element is not attached to the DOM")

    assert first_success([boom, lambda: "ok"]) == "ok"
    assert first_success([boom, lambda: None]) is None


def test_first_success_propagates_other_errors():
    def bug():
        raise KeyError("x")

    with pytest.raises(KeyError):
        first_success([bug, lambda: "never"])


@pytest.mark.parametrize("text, expected", [
    ("Voornaam", "'Voornaam'"),
    ("Naam v/d partner's", "\"Naam v/d partner's\""),
    ("it's \"x\"", "concat('it', \"'\", 's \"x\"')"),
])
def test_xpath_literal(text, expected):
    assert xpath_literal(text) == expected


# === Strategies against real markup ===

@pytest.mark.browser
def test_native_label_wins_for_wired_inputs(page):
    page.set_content("""
        <form>
          <label for="fn">Voornaam *</label><input id="fn">
          <input id="ln" aria-label="Achternaam">
        </form>
    """)
    first = resolve(page, ["voornaam"])
    assert first.strategy is Strategy.NATIVE_LABEL
    assert first.locator.get_attribute("id") == "fn"

    last = resolve(page, ["Achternaam"])
    assert last.strategy is Strategy.NATIVE_LABEL
    assert last.locator.get_attribute("id") == "ln"


@pytest.mark.browser
def test_adjacent_text_following_input(page):
    page.set_content("""
        <form>
          <div class="row"><span>Voornaam</span><input type="hidden" name="x"><input id="fn"></div>
          <div class="row"><span>Achternaam</span><input id="ln"></div>
        </form>
    """)
    result = resolve(page, ["Voornaam"])
    assert result.strategy is Strategy.ADJACENT_TEXT
    assert result.locator.get_attribute("id") == "fn"


@pytest.mark.browser
def test_adjacent_text_input_inside_label_container(page):
    # The input precedes the text, so only the container search finds it.
    page.set_content("""
        <form>
          <div class="field"><input id="city"><p>Woonplaats</p></div>
        </form>
    """)
    result = resolve(page, ["Woonplaats"])
    assert result.strategy is Strategy.ADJACENT_TEXT
    assert result.locator.get_attribute("id") == "city"


@pytest.mark.browser
def test_adjacent_text_is_case_and_whitespace_insensitive(page):
    page.set_content("""
        <form><p>  E-MAILADRES
             (verplicht)</p><input id="em"></form>
    """)
    result = resolve(page, ["E-mailadres"])
    assert result.locator.get_attribute("id") == "em"


@pytest.mark.browser
def test_regex_synonym(page):
    page.set_content("""
        <form><label for="m">Mobiel nummer</label><input id="m"></form>
    """)
    result = resolve(page, [re.compile(r"^mobiel", re.I)])
    assert result.locator.get_attribute("id") == "m"


@pytest.mark.browser
def test_earlier_synonym_wins_over_better_strategy_for_later_one(page):
    page.set_content("""
        <form>
          <label for="mob">Mobiel</label><input id="mob">
          <div><span>Telefoonnummer</span><input id="tel"></div>
        </form>
    """)
    result = resolve(page, ["Telefoonnummer", "Mobiel"])
    assert result.synonym == "Telefoonnummer"
    assert result.strategy is Strategy.ADJACENT_TEXT
    assert result.locator.get_attribute("id") == "tel"


@pytest.mark.browser
def test_type_based_fallback_only_after_all_synonyms(page):
    page.set_content("""
        <form><input id="other"><input type="tel" id="tel"></form>
    """)
    assert resolve(page, ["Telefoon"]) is None
    result = resolve(page, ["Telefoon"], fallback_selector="input[type='tel']")
    assert result.strategy is Strategy.TYPE_BASED
    assert result.locator.get_attribute("id") == "tel"


@pytest.mark.browser
def test_missing_field_resolves_to_none(page):
    page.set_content("<form><label for='a'>Voornaam</label><input id='a'></form>")
    assert resolve(page, ["Postcode", "Zip"]) is None


@pytest.mark.browser
def test_iter_candidates_yields_in_resolution_order(page):
    page.set_content("""
        <form>
          <label for="a">Motivatie</label><input id="a">
          <textarea id="t"></textarea>
        </form>
    """)
    found = list(iter_candidates(page, ["Motivatie"], fallback_selector="textarea"))
    assert [c.strategy for c in found] == [
        Strategy.NATIVE_LABEL, Strategy.ADJACENT_TEXT, Strategy.TYPE_BASED,
    ]
    assert found[-1].locator.get_attribute("id") == "t"


@pytest.mark.browser
def test_scope_can_be_a_locator(page):
    page.set_content("""
        <div id="other"><span>Voornaam</span><input id="outside"></div>
        <form id="apply"><span>Voornaam</span><input id="inside"></form>
    """)
    result = resolve(page.locator("#apply"), ["Voornaam"])
    assert result.locator.get_attribute("id") == "inside"
