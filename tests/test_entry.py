from clipboard_indicator.entry import ClipboardEntry, EntryKind, entry_label, kind_for_mimetype


class TestKind:
    def test_text_mimetypes(self):
        for mt in ("text/plain;charset=utf-8", "UTF8_STRING", "text/plain", "STRING", "text/html"):
            assert kind_for_mimetype(mt) == EntryKind.TEXT

    def test_image_mimetypes(self):
        for mt in ("image/gif", "image/png", "image/jpg", "image/jpeg", "image/webp", "image/svg+xml"):
            assert kind_for_mimetype(mt) == EntryKind.IMAGE

    def test_predicates(self):
        t = ClipboardEntry.from_text("hi")
        i = ClipboardEntry("image/png", b"\x89PNG\r\n\x1a\n")
        assert t.is_text() and not t.is_image()
        assert i.is_image() and not i.is_text()


class TestEquality:
    def test_equal_text(self):
        assert ClipboardEntry.from_text("hello").equals(ClipboardEntry.from_text("hello"))

    def test_different_text(self):
        assert not ClipboardEntry.from_text("hello").equals(ClipboardEntry.from_text("world"))

    def test_whitespace_matters_without_strip(self):
        assert not ClipboardEntry.from_text("hello ").equals(ClipboardEntry.from_text("hello"))

    def test_whitespace_ignored_with_strip(self):
        assert ClipboardEntry.from_text("hello ").equals(ClipboardEntry.from_text("hello"), strip_text=True)

    def test_text_equal_across_text_mimetypes(self):
        a = ClipboardEntry("text/plain", b"same")
        b = ClipboardEntry("text/plain;charset=utf-8", b"same")
        assert a.equals(b)

    def test_images_equal_by_hash(self):
        a = ClipboardEntry("image/png", b"\x89PNG-bytes")
        b = ClipboardEntry("image/png", b"\x89PNG-bytes")
        assert a.hash == b.hash
        assert a.equals(b)

    def test_images_differ(self):
        a = ClipboardEntry("image/png", b"one")
        b = ClipboardEntry("image/png", b"two")
        assert not a.equals(b)

    def test_cross_kind_never_equal(self):
        t = ClipboardEntry("text/plain", b"abc")
        i = ClipboardEntry("image/png", b"abc")
        assert not t.equals(i)
        assert not i.equals(t)

    def test_none_never_equal(self):
        assert not ClipboardEntry.from_text("x").equals(None)

    def test_python_equality_is_identity(self):
        a = ClipboardEntry.from_text("x")
        b = ClipboardEntry.from_text("x")
        assert a != b
        assert a == a

    def test_explicit_hash_kept(self):
        e = ClipboardEntry("image/png", b"", hash="abc123")
        assert e.hash == "abc123"


class TestAccessors:
    def test_string_value_text(self):
        assert ClipboardEntry.from_text("héllo").get_string_value() == "héllo"

    def test_string_value_image_is_empty(self):
        assert ClipboardEntry("image/png", b"\x89PNG").get_string_value() == ""

    def test_raw_bytes(self):
        e = ClipboardEntry("image/png", b"\x89PNG")
        assert e.raw_bytes() == b"\x89PNG"
        assert e.mimetype == "image/png"

    def test_invalid_utf8_does_not_raise(self):
        e = ClipboardEntry("text/plain", b"\xff\xfe")
        assert isinstance(e.get_string_value(), str)

    def test_stripped(self):
        e = ClipboardEntry.from_text("  padded \n", favorite=True)
        s = e.stripped()
        assert s.get_string_value() == "padded"
        assert s.favorite is True

    def test_stripped_noop_returns_same(self):
        e = ClipboardEntry.from_text("clean")
        assert e.stripped() is e


class TestLabel:
    def test_collapses_whitespace(self):
        assert entry_label(ClipboardEntry.from_text("a\n\n  b\tc"), 50) == "a b c"

    def test_truncates(self):
        label = entry_label(ClipboardEntry.from_text("abcdefghij"), 7)
        assert label == "abcd..."

    def test_never_longer_than_limit(self):
        entry = ClipboardEntry.from_text("abcdefghij")
        for limit in range(1, 12):
            assert len(entry_label(entry, limit)) <= limit

    def test_tiny_limit_has_no_ellipsis(self):
        assert entry_label(ClipboardEntry.from_text("abcdef"), 2) == "ab"

    def test_short_text_untouched(self):
        assert entry_label(ClipboardEntry.from_text("abc"), 3) == "abc"

    def test_image_label(self):
        e = ClipboardEntry("image/png", b"data")
        assert entry_label(e, 50) == f"[Image {e.hash[:8]}]"
