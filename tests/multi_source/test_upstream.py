"""Tests for upstream pools and the candidate-URL builder."""

from search_proxy.models import Operation, SchemaFamily
from search_proxy.multi_source import CandidateBuilder, ResponseType, UpstreamPools
from search_proxy.settings import Settings


class TestSearchTiers:
    """Test search and channel tier construction."""

    def test_tier_order_and_urls(self, candidate_builder):
        """Test Invidious, then Piped on both path styles, then the HTML page."""
        tiers = candidate_builder.build(Operation.SEARCH, "lo fi", page=1)

        assert [tier.name for tier in tiers] == ["invidious", "piped", "youtube_html"]
        assert tiers[0].urls == [
            "https://inv1.test/api/v1/search?q=lo%20fi&page=1",
            "https://inv2.test/api/v1/search?q=lo%20fi&page=1",
        ]
        assert tiers[1].urls == [
            "https://piped1.test/search?query=lo%20fi&page=1",
            "https://piped1.test/api/v1/search?q=lo%20fi&page=1",
        ]
        assert tiers[2].urls == ["https://yt.test/results?search_query=lo%20fi&hl=en&gl=US"]

    def test_schema_families(self, candidate_builder):
        tiers = candidate_builder.build(Operation.SEARCH, "a")

        assert [tier.schema for tier in tiers] == [
            SchemaFamily.INVIDIOUS,
            SchemaFamily.PIPED,
            SchemaFamily.YOUTUBE_HTML,
        ]

    def test_html_tier_settings(self, candidate_builder):
        """Test the HTML tier has its own timeout and skips the raw cache."""
        html_tier = candidate_builder.build(Operation.SEARCH, "a")[2]

        assert html_tier.response_type is ResponseType.HTML
        assert html_tier.timeout == 1.0
        assert html_tier.cache_raw is False

    def test_html_tier_empty_after_first_page(self, candidate_builder):
        tiers = candidate_builder.build(Operation.SEARCH, "a", page=2)

        assert tiers[0].urls[0].endswith("page=2")
        assert tiers[2].is_empty

    def test_channel_translation(self, candidate_builder):
        """Test Invidious query prefix and Piped filter parameter."""
        tiers = candidate_builder.build(Operation.CHANNELS, "lofi", page=1)

        assert tiers[0].urls[0] == "https://inv1.test/api/v1/search?q=type%3Achannel%20lofi&page=1"
        assert tiers[1].urls == [
            "https://piped1.test/search?query=lofi&filter=channels&page=1",
            "https://piped1.test/api/v1/search?q=lofi&filter=channels&page=1",
        ]
        assert tiers[2].urls == ["https://yt.test/results?search_query=lofi&hl=en&gl=US"]

    def test_piped_path_styles_grouped(self):
        """Test every mirror's first path style precedes any second style."""
        builder = CandidateBuilder(UpstreamPools(piped=["https://p1.test", "https://p2.test"]))

        piped = builder.build(Operation.SEARCH, "a")[1]

        assert piped.urls == [
            "https://p1.test/search?query=a&page=1",
            "https://p2.test/search?query=a&page=1",
            "https://p1.test/api/v1/search?q=a&page=1",
            "https://p2.test/api/v1/search?q=a&page=1",
        ]

    def test_empty_pool_yields_no_candidates(self):
        builder = CandidateBuilder(UpstreamPools(invidious=[], piped=["https://p.test"]))

        tiers = builder.build(Operation.SEARCH, "a")

        assert tiers[0].is_empty
        assert not tiers[1].is_empty


class TestSuggestTiers:
    """Test suggestion tier construction."""

    def test_tier_order_and_urls(self, candidate_builder):
        tiers = candidate_builder.build(Operation.SUGGEST, "lofi")

        assert [tier.name for tier in tiers] == ["invidious", "piped", "google_suggest"]
        assert tiers[0].urls == [
            "https://inv1.test/api/v1/search/suggestions?q=lofi",
            "https://inv2.test/api/v1/search/suggestions?q=lofi",
        ]
        assert tiers[1].urls == [
            "https://piped1.test/suggestions?query=lofi",
            "https://piped1.test/api/v1/suggestions?q=lofi",
        ]
        assert tiers[2].urls == [
            "https://suggest.test/complete/search?client=firefox&ds=yt&hl=en&gl=US&q=lofi"
        ]
        assert tiers[2].schema is SchemaFamily.GOOGLE_SUGGEST
        assert tiers[2].timeout == 1.0


class TestUpstreamPoolsFromSettings:
    """Test pool construction from settings."""

    def test_from_settings(self):
        settings = Settings(
            invidious_pool="https://a.test/,https://b.test",
            piped_pool="",
            piped_base="https://pb.test",
            suggest_hl="de",
            suggest_gl="DE",
            scrape_timeout_ms=4000,
        )

        pools = UpstreamPools.from_settings(settings)

        assert pools.invidious == ["https://a.test", "https://b.test"]
        assert pools.piped[0] == "https://pb.test"
        assert (pools.hl, pools.gl) == ("de", "DE")
        assert pools.scrape_timeout == 4.0
        assert pools.suggest_fallback_timeout == 2.5
