"""
Domain helpers: slugs, ids, reading time, timestamps and stored documents.
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from src.domain.documents import as_document
from src.domain.text import generate_id, random_code, reading_time, slugify, suffixed_slug
from src.domain.timeutil import parse_datetime, sort_key_desc, to_iso


class TestText:
    @pytest.mark.parametrize(
        ("title", "slug"),
        [
            ("Hello World", "hello-world"),
            ("  Rust & Python: a comparison!  ", "rust-python-a-comparison"),
            ("multiple   spaces -- and dashes", "multiple-spaces-and-dashes"),
            ("---", ""),
        ],
    )
    def test_slugify(self, title: str, slug: str):
        assert slugify(title) == slug

    def test_suffixed_slug(self):
        slug = suffixed_slug("Thinking, Fast and Slow")
        base, suffix = slug.rsplit("-", 1)
        assert base == "thinking-fast-and-slow"
        assert len(suffix) == 6

    def test_random_code_alphabet(self):
        code = random_code(40)
        assert len(code) == 40
        assert code == code.lower()
        assert code.isalnum()

    def test_generate_id(self):
        now = datetime(2025, 1, 1, tzinfo=UTC)
        prefix, millis, suffix = generate_id("blog", now).split("_")
        assert prefix == "blog"
        assert millis == str(int(now.timestamp() * 1000))
        assert len(suffix) == 9

    def test_reading_time_ignores_markup(self):
        content = "<p>" + "word " * 201 + "</p>"
        assert reading_time(content) == "2 min read"
        assert reading_time("short", words_per_minute=200) == "1 min read"


class TestTime:
    def test_to_iso_milliseconds(self):
        dt = datetime(2025, 3, 4, 5, 6, 7, 890123, tzinfo=UTC)
        assert to_iso(dt) == "2025-03-04T05:06:07.890Z"

    def test_to_iso_converts_offsets(self):
        dt = datetime(2025, 3, 4, 10, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        assert to_iso(dt) == "2025-03-04T05:00:00.000Z"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2025-01-02T03:04:05Z", datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)),
            ("2025-01-02T03:04:05", datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)),
            ("2025-01-02", datetime(2025, 1, 2, tzinfo=UTC)),
            ("not a date", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse_datetime(self, value, expected):
        assert parse_datetime(value) == expected

    def test_sort_key_desc(self):
        dates = ["2024-01-01", None, "2025-01-01", "garbage"]
        assert sorted(dates, key=sort_key_desc)[:2] == ["2025-01-01", "2024-01-01"]


class TestDocuments:
    def test_dict_passes_through(self):
        doc = {"id": "1"}
        assert as_document(doc) is doc

    def test_json_string_decoded(self):
        assert as_document('{"id": "1"}') == {"id": "1"}

    @pytest.mark.parametrize("raw", ["[1, 2]", "not json", 42, None])
    def test_non_objects_rejected(self, raw):
        assert as_document(raw) is None
