"""Unit tests for request correlation."""

from news_aggregator.correlation import REQUEST_ID_HEADER, CorrelationContext


class TestCorrelationContext:
    """Tests for CorrelationContext."""

    def test_inbound_id_is_kept(self):
        """An inbound X-Request-ID should be used as is."""
        ctx = CorrelationContext.from_headers({REQUEST_ID_HEADER: "abc-123"})
        assert ctx.request_id == "abc-123"
        assert ctx.generated is False

    def test_missing_id_is_generated(self):
        """Without a header a fresh id is minted."""
        first = CorrelationContext.from_headers({})
        second = CorrelationContext.from_headers({REQUEST_ID_HEADER: "   "})

        assert first.generated and second.generated
        assert first.request_id
        assert first.request_id != second.request_id

    def test_adopt_changes_id(self):
        """A different downstream id replaces the current one."""
        ctx = CorrelationContext(request_id="ours")

        assert ctx.adopt("theirs") is True
        assert ctx.request_id == "theirs"
        assert ctx.headers() == {REQUEST_ID_HEADER: "theirs"}

    def test_adopt_ignores_empty_and_same(self):
        """Empty or identical ids leave the context alone."""
        ctx = CorrelationContext(request_id="ours")

        assert ctx.adopt(None) is False
        assert ctx.adopt("") is False
        assert ctx.adopt("ours") is False
        assert ctx.request_id == "ours"
