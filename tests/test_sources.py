"""Tests for listing sources (JSON feed and portal scraper)."""

import json
from dataclasses import replace

import pytest

from autoapply.models import Listing
from autoapply.sources import FeedSource, PortalSource, dedupe_listings, save_listings
from autoapply.sources.portal import city_from_text


def test_dedupe_keeps_first_and_drops_linkless():
    listings = [
        Listing("A", "Utrecht", "https://site/vacature/1"),
        Listing("B", "", ""),
        Listing("A again", "", "https://site/vacature/1"),
        Listing("C", "", "https://site/vacature/2"),
    ]
    assert [l.title for l in dedupe_listings(listings)] == ["A", "C"]


def test_feed_round_trip_with_limit(tmp_path):
    path = tmp_path / "scraped_jobs.json"
    save_listings([
        Listing("A", "Utrecht", "https://site/vacature/1", salary="€ 14"),
        Listing("B", "Breda", "https://site/vacature/2"),
    ], path)

    all_listings = FeedSource(path).fetch()
    assert all_listings[0] == Listing("A", "Utrecht", "https://site/vacature/1", salary="€ 14")
    assert len(FeedSource(path).fetch(limit=1)) == 1


def test_feed_ignores_non_objects_and_duplicates(tmp_path):
    path = tmp_path / "scraped_jobs.json"
    path.write_text(json.dumps([
        {"title": "A", "link": "https://site/vacature/1"},
        "junk",
        {"title": "A", "link": "https://site/vacature/1"},
    ]), encoding="utf-8")
    assert [l.title for l in FeedSource(path).fetch()] == ["A"]


@pytest.mark.parametrize("content", [None, "{oops", '{"title": "x"}'])
def test_unusable_feed_is_empty(tmp_path, content):
    path = tmp_path / "scraped_jobs.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")
    assert FeedSource(path).fetch() == []


@pytest.mark.parametrize("text,city", [
    ("Magazijnmedewerker\nUtrecht\n€ 14,00", "Utrecht"),
    ("Den Haag - fulltime", "Den Haag"),
    ("Groningen", ""),
    ("", ""),
])
def test_city_from_text(text, city):
    assert city_from_text(text) == city


_OVERVIEW = """
<html><body>
  <button id="onetrust-accept-btn-handler" onclick="this.remove()">Accept</button>
  <div id="list">
    <a href="/vacature/1"><h3>Magazijnmedewerker</h3><span>Utrecht</span></a>
    <a href="/vacature/2"><h3>Heftruckchauffeur</h3><span>Tilburg</span></a>
    <a href="/vacature/1"><h3>Magazijnmedewerker</h3><span>Utrecht</span></a>
    <a href="/over-ons">Over ons</a>
  </div>
  <script>
    let loaded = false;
    window.addEventListener('wheel', () => {
      if (loaded) return;
      loaded = true;
      const a = document.createElement('a');
      a.href = '/vacature/3';
      a.innerHTML = '<h3>Orderpicker</h3><span>Onbekend</span>';
      a.style.display = 'block';
      a.style.height = '2000px';
      document.getElementById('list').appendChild(a);
    });
  </script>
</body></html>
"""


@pytest.mark.browser
def test_portal_scrolls_and_extracts(context, site, fast_settings):
    url = site.add("/vacatures", _OVERVIEW)
    source = PortalSource(
        context,
        settings=replace(fast_settings, portal_url=url),
        max_idle_rounds=2,
        scroll_pause_ms=50,
    )

    listings = source.fetch()

    assert [l.link for l in listings] == [
        "https://site.test/vacature/1",
        "https://site.test/vacature/2",
        "https://site.test/vacature/3",
    ]
    assert listings[0] == Listing("Magazijnmedewerker", "Utrecht", "https://site.test/vacature/1")
    assert listings[1].location == "Tilburg"
    assert listings[2].location == ""
    assert context.pages == []


@pytest.mark.browser
def test_portal_unreachable_returns_empty(context, site, fast_settings):
    source = PortalSource(
        context,
        settings=replace(fast_settings, portal_url="https://site.test/missing", nav_timeout_ms=2_000),
        max_idle_rounds=1,
        scroll_pause_ms=10,
    )
    assert source.fetch() == []
