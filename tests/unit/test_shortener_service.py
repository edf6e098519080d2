"""
Unit tests for ShortenerService and URL normalization.
"""

import pytest

from src.adapters.clock import FixedClock
from src.adapters.memory_kv import InMemoryKVStore
from src.components.shortener import ShortenerService, normalize_url
from src.rules.models import ShortenerRules


@pytest.fixture
def service(store: InMemoryKVStore, clock: FixedClock) -> ShortenerService:
    return ShortenerService(store, clock, ShortenerRules(code_length=6))


class TestNormalizeUrl:
    def test_adds_scheme_and_lowercases(self) -> None:
        assert normalize_url("Example.COM/Path/") == "https://example.com/path"

    def test_strips_www_and_default_port(self) -> None:
        assert normalize_url("https://www.example.com:443/") == "https://example.com/"

    def test_keeps_custom_port_query_and_fragment(self) -> None:
        assert (
            normalize_url("http://example.com:8080/a/?q=1#top")
            == "http://example.com:8080/a?q=1#top"
        )

    def test_unparsable_falls_back(self) -> None:
        assert normalize_url("not a url") == "https://not a url"

    def test_keeps_ipv6_brackets(self) -> None:
        assert normalize_url("http://[::1]:8080/docs/") == "http://[::1]:8080/docs"
        assert normalize_url("[2001:DB8::1]/") == "https://[2001:db8::1]/"


class TestShorten:
    def test_shorten_stores_record(self, service: ShortenerService, store: InMemoryKVStore):
        result, errors = service.shorten("https://Example.com/page/")

        assert errors == []
        assert result.exists is False
        link = result.link
        assert len(link.code) == 6
        assert link.original_url == "https://example.com/page"
        assert store.get(f"original:{link.original_url}") == link.code
        assert store.get(f"clicks:{link.code}") == 0

    def test_same_url_returns_existing(self, service: ShortenerService):
        first, _ = service.shorten("example.com/page")
        again, _ = service.shorten("https://www.example.com/page/")

        assert again.exists is True
        assert again.link.code == first.link.code

    def test_validation(self, service: ShortenerService):
        assert service.shorten("  ")[1][0].code == "url_required"
        assert service.shorten("a.com", expires_at="soon")[1][0].code == "invalid_expiry"

    def test_expiry_sets_ttl_on_every_key(
        self, service: ShortenerService, store: InMemoryKVStore, clock: FixedClock
    ):
        result, _ = service.shorten("a.com", expires_at="2025-01-01T13:00:00Z")
        code = result.link.code

        for key in (f"url:{code}", f"clicks:{code}", f"created:{code}", f"expires:{code}"):
            assert store.ttl(key) == 3600
        clock.advance(seconds=3600)
        assert service.get(code) is None
        assert store.keys("*") == []


class TestFollow:
    def test_follow_counts_clicks(self, service: ShortenerService):
        result, _ = service.shorten("a.com")
        code = result.link.code

        outcome = service.follow(code)
        service.follow(code)

        assert outcome.followed is True
        assert outcome.location == "https://a.com/"
        assert service.get(code).clicks == 2

    def test_missing_code(self, service: ShortenerService):
        assert service.follow("nope").location == "/404"

    def test_revoked_code(self, service: ShortenerService):
        code = service.shorten("a.com")[0].link.code
        assert service.toggle_revoke(code) is True

        outcome = service.follow(code)
        assert outcome.followed is False
        assert outcome.location == "/404?reason=revoked"
        assert service.get(code).clicks == 0

        assert service.toggle_revoke(code) is False
        assert service.follow(code).followed is True
        assert service.toggle_revoke("nope") is None

    def test_expired_by_date(self, service: ShortenerService, store: InMemoryKVStore):
        code = service.shorten("a.com")[0].link.code
        store.set(f"expires:{code}", "2024-01-01")

        assert service.follow(code).location == "/404?reason=expired"


class TestManagement:
    def test_list_and_delete(self, service: ShortenerService, store: InMemoryKVStore):
        a = service.shorten("a.com")[0].link
        b = service.shorten("b.com")[0].link

        assert {link.code for link in service.list_all()} == {a.code, b.code}
        assert service.delete(a.code) is True
        assert service.delete(a.code) is False
        assert store.get("original:https://a.com/") is None
        assert [link.code for link in service.list_all()] == [b.code]

    def test_migrate_indexes_normalizes_and_merges(
        self, service: ShortenerService, store: InMemoryKVStore
    ):
        store.set("url:old111", "HTTPS://www.Site.com/x/")
        store.set("clicks:old111", 3)
        store.set("created:old111", "2024-01-01T00:00:00.000Z")
        store.set("url:new222", "https://site.com/x")
        store.set("clicks:new222", 2)
        store.set("created:new222", "2024-06-01T00:00:00.000Z")

        report = service.migrate_indexes()

        assert report.migrated == 2
        assert store.get("original:https://site.com/x") == "old111"
        assert store.get("url:old111") == "https://site.com/x"
        assert store.get("clicks:old111") == 5
        assert store.exists("url:new222") is False
