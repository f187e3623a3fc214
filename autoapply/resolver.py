"""Locate form inputs by their human-readable label.

Forms differ in whether labels are programmatically wired to their inputs,
so each synonym goes through an ordered chain of strategies:

1. native association: ``get_by_label`` (``for``/``id``, wrapping label,
   ``aria-label``, ``aria-labelledby``);
2. adjacent text: a label/div/span/p showing the text, then the nearest
   fillable input after it, inside its container, or in a sibling container;
3. type-based: a plain selector (``input[type='tel']``, ``textarea``) that
   is only tried after every synonym has failed.

A strategy is a function ``(scope, synonym) -> Locator | None``. The scope
is anything exposing Playwright's locator API: a Page, Frame or Locator.
"""
from __future__ import annotations

import functools
import re
from typing import Any, Callable, Iterable, Iterator, Optional, TypeVar

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator

from autoapply.log import get_logger
from autoapply.models import ResolutionResult, Strategy, Synonym

log = get_logger(__name__)

T = TypeVar("T")
StrategyFn = Callable[[Any, Synonym], Optional[Locator]]

# Text-bearing nodes examined per synonym; keeps a pathological page bounded.
MAX_TEXT_NODES = 20

_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = "abcdefghijklmnopqrstuvwxyz"
_NORMALIZED_TEXT = f"translate(normalize-space(.), '{_UPPER}', '{_LOWER}')"

_FILLABLE = (
    "self::textarea or self::input[not(@type='hidden' or @type='checkbox' or @type='radio'"
    " or @type='submit' or @type='button' or @type='file' or @type='image' or @type='reset')]"
)
_FOLLOWING_INPUT = f"xpath=following::*[{_FILLABLE}][1]"
_NEAREST_CONTAINER = "xpath=ancestor::*[self::div or self::label][1]"
_INPUT_INSIDE = f"xpath=.//*[{_FILLABLE}]"
_SIBLING_INPUT = f"xpath=following-sibling::*//*[{_FILLABLE}]"


def first_success(attempts: Iterable[Callable[[], Optional[T]]]) -> Optional[T]:
    """Run *attempts* in order and return the first truthy result.

    A Playwright error counts as a miss: the element may be detached,
    covered or of the wrong type, and the next attempt gets its turn.
    """
    for attempt in attempts:
        try:
            result = attempt()
        except PlaywrightError as exc:
            log.debug("Attempt failed: %s", str(exc).split("\n")[0])
            continue
        if result:
            return result
    return None


def xpath_literal(text: str) -> str:
    """Quote *text* as an XPath 1.0 string literal."""
    if "'" not in text:
        return f"'{text}'"
    if '"' not in text:
        return f'"{text}"'
    parts = text.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


def _first(locator: Locator) -> Locator | None:
    return locator.first if locator.count() else None


# ── Strategies ───────────────────────────────────────────────────────────


def native_label(scope: Any, synonym: Synonym) -> Locator | None:
    """Input programmatically associated with a label matching *synonym*."""
    if isinstance(synonym, str):
        return _first(scope.get_by_label(synonym, exact=False))
    return _first(scope.get_by_label(synonym))


def _text_nodes(scope: Any, synonym: Synonym) -> Iterator[Locator]:
    """Label, then div/span/p nodes whose own text contains *synonym*."""
    if isinstance(synonym, str):
        needle = xpath_literal(" ".join(synonym.split()).lower())
        groups = [
            scope.locator(f"xpath=.//label[contains({_NORMALIZED_TEXT}, {needle})]"),
            scope.locator(
                "xpath=.//*[self::div or self::span or self::p]"
                f"[text()[contains({_NORMALIZED_TEXT}, {needle})]]"
            ),
        ]
    else:
        groups = [scope.get_by_text(synonym)]

    seen = 0
    for group in groups:
        for i in range(group.count()):
            if seen >= MAX_TEXT_NODES:
                return
            seen += 1
            yield group.nth(i)


def _input_near(node: Locator) -> Locator | None:
    found = _first(node.locator(_FOLLOWING_INPUT))
    if found is not None:
        return found
    container = _first(node.locator(_NEAREST_CONTAINER))
    if container is not None:
        found = _first(container.locator(_INPUT_INSIDE))
        if found is not None:
            return found
    return _first(node.locator(_SIBLING_INPUT))


def adjacent_text(scope: Any, synonym: Synonym) -> Locator | None:
    """Input positioned next to visible text matching *synonym*."""
    for node in _text_nodes(scope, synonym):
        found = _input_near(node)
        if found is not None:
            return found
    return None


def by_selector(selector: str) -> StrategyFn:
    """Strategy that ignores the synonym and takes the first *selector* match."""

    def strategy(scope: Any, synonym: Synonym) -> Locator | None:
        return _first(scope.locator(selector))

    strategy.__name__ = f"by_selector({selector})"
    return strategy


DEFAULT_STRATEGIES: tuple[tuple[Strategy, StrategyFn], ...] = (
    (Strategy.NATIVE_LABEL, native_label),
    (Strategy.ADJACENT_TEXT, adjacent_text),
)
NATIVE_ONLY: tuple[tuple[Strategy, StrategyFn], ...] = DEFAULT_STRATEGIES[:1]


# ── Composition ──────────────────────────────────────────────────────────


def _run(
    tag: Strategy, fn: StrategyFn, scope: Any, synonym: Synonym | None
) -> ResolutionResult | None:
    locator = fn(scope, synonym)  # type: ignore[arg-type]
    if locator is None:
        return None
    log.debug("Resolved %r via %s", _describe(synonym), tag.value)
    return ResolutionResult(locator=locator, strategy=tag, synonym=synonym)


def _attempts(
    scope: Any,
    synonyms: Iterable[Synonym],
    strategies: Iterable[tuple[Strategy, StrategyFn]],
    fallback_selector: str | None,
) -> Iterator[Callable[[], ResolutionResult | None]]:
    strategies = tuple(strategies)
    for synonym in synonyms:
        for tag, fn in strategies:
            yield functools.partial(_run, tag, fn, scope, synonym)
    if fallback_selector:
        yield functools.partial(_run, Strategy.TYPE_BASED, by_selector(fallback_selector), scope, None)


def resolve(
    scope: Any,
    synonyms: Iterable[Synonym],
    *,
    strategies: Iterable[tuple[Strategy, StrategyFn]] = DEFAULT_STRATEGIES,
    fallback_selector: str | None = None,
) -> ResolutionResult | None:
    """First element found for *synonyms*, or ``None`` if the field is absent.

    Every strategy is tried for a synonym before moving on to the next one,
    so an earlier synonym always wins over a later one.
    """
    return first_success(_attempts(scope, synonyms, strategies, fallback_selector))


def iter_candidates(
    scope: Any,
    synonyms: Iterable[Synonym],
    *,
    strategies: Iterable[tuple[Strategy, StrategyFn]] = DEFAULT_STRATEGIES,
    fallback_selector: str | None = None,
) -> Iterator[ResolutionResult]:
    """Lazily yield every resolution in the same order :func:`resolve` uses.

    Callers that fail to write into one candidate move on to the next.
    """
    for attempt in _attempts(scope, synonyms, strategies, fallback_selector):
        try:
            result = attempt()
        except PlaywrightError as exc:
            log.debug("Resolution attempt failed: %s", str(exc).split("\n")[0])
            continue
        if result is not None:
            yield result


def _describe(synonym: Synonym | None) -> str:
    if synonym is None:
        return "<type>"
    if isinstance(synonym, re.Pattern):
        return f"/{synonym.pattern}/"
    return synonym
