"""
Unit tests for TrustedHostRegistry.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import httpx
import pytest

from connector_auth.app.constants import DEFAULT_TRUSTED_HOSTS
from connector_auth.app.trust import TrustedHostRegistry


class TestTrustedHostRegistry:
    """Test cases for TrustedHostRegistry."""

    @pytest.mark.parametrize("host", DEFAULT_TRUSTED_HOSTS)
    def test_default_hosts_trusted_indefinitely(self, registry, clock, host):
        """Test well-known hosts are trusted at startup and never expire."""
        assert registry.is_trusted(f"https://{host}/v3/conversations")

        clock.advance(timedelta(days=365 * 100))

        assert registry.is_trusted(f"https://{host}")
        assert registry.expiry_for(host) == TrustedHostRegistry.NEVER_EXPIRES

    def test_unknown_host_not_trusted(self, registry):
        """Test hosts that were never trusted are rejected."""
        assert registry.is_trusted("https://evil.example.com/api") is False

    def test_trust_with_expiry_honours_grace_window(self, registry, clock):
        """Test trust lasts until expiry plus exactly five minutes."""
        expires_at = clock.now + timedelta(hours=2)
        registry.trust("https://smba.trafficmanager.net/amer/", expires_at)

        clock.now = expires_at
        assert registry.is_trusted("https://smba.trafficmanager.net/amer/")

        clock.now = expires_at + timedelta(minutes=5)
        assert registry.is_trusted("https://smba.trafficmanager.net/amer/")

        clock.now = expires_at + timedelta(minutes=5, seconds=1)
        assert registry.is_trusted("https://smba.trafficmanager.net/amer/") is False

    def test_trust_defaults_to_one_day(self, registry, clock):
        """Test trusting without an expiry lasts one day."""
        registry.trust("https://smba.trafficmanager.net/emea/")

        assert registry.expiry_for("smba.trafficmanager.net") == clock.now + timedelta(days=1)

    def test_trust_recently_expired_host_still_trusted(self, registry, clock):
        """Test a host that expired less than five minutes ago is trusted."""
        registry.trust("https://smba.trafficmanager.net", clock.now - timedelta(minutes=4))

        assert registry.is_trusted("https://smba.trafficmanager.net")

    def test_trust_long_expired_host_not_trusted(self, registry, clock):
        """Test an expiry in the past beyond the grace window is untrusted."""
        registry.trust("https://smba.trafficmanager.net", clock.now - timedelta(minutes=6))

        assert registry.is_trusted("https://smba.trafficmanager.net") is False

    def test_trust_overwrites_previous_expiry(self, registry, clock):
        """Test re-trusting a host replaces its expiry."""
        registry.trust("https://smba.trafficmanager.net", clock.now + timedelta(days=3))
        registry.trust("https://smba.trafficmanager.net", clock.now - timedelta(days=1))

        assert registry.is_trusted("https://smba.trafficmanager.net") is False

    def test_host_matching_ignores_case_path_and_port(self, registry):
        """Test trust is keyed by host only."""
        registry.trust("https://Bot.Example.COM:8443/api/messages")

        assert registry.is_trusted("https://bot.example.com/other")
        assert registry.is_trusted("http://BOT.example.com")
        assert registry.is_trusted("bot.example.com")

    def test_trust_bare_host(self, registry):
        """Test a bare host string is accepted."""
        registry.trust("bot.example.com:3978")

        assert registry.is_trusted("https://bot.example.com/api")

    def test_internationalized_host_trusted_by_punycode(self, registry):
        """Test unicode hosts are keyed by their IDNA form."""
        registry.trust("https://bücher.example/api")

        assert registry.is_trusted("https://bücher.example/other")
        assert registry.is_trusted("https://xn--bcher-kva.example")
        assert registry.is_trusted("bücher.example:443")
        assert registry.expiry_for("xn--bcher-kva.example") is not None

    def test_trust_accepts_httpx_url(self, registry):
        """Test httpx.URL values are accepted."""
        registry.trust(httpx.URL("https://bot.example.com/api"))

        assert registry.is_trusted(httpx.URL("https://bot.example.com"))

    def test_naive_expiry_interpreted_as_utc(self, registry, clock):
        """Test naive datetimes are treated as UTC."""
        naive = (clock.now + timedelta(hours=1)).replace(tzinfo=None)
        registry.trust("bot.example.com", naive)

        assert registry.expiry_for("bot.example.com") == clock.now + timedelta(hours=1)
        assert registry.is_trusted("bot.example.com")

    @pytest.mark.parametrize("value", [
        "not a url",
        "http://",
        "ftp://files.example.com",
        "https://exa mple.com",
        "",
        None,
        "::::",
    ])
    def test_is_trusted_malformed_fails_closed(self, registry, value):
        """Test malformed input is untrusted and does not raise."""
        assert registry.is_trusted(value) is False

    def test_trust_malformed_is_noop(self, registry):
        """Test trusting malformed input changes nothing."""
        registry.trust("https://exa mple.com")
        registry.trust("not a url")

        assert registry.expiry_for("exa mple.com") is None
        assert registry.is_trusted("https://api.botframework.com")

    def test_registries_are_independent(self, clock):
        """Test entries do not leak between registry instances."""
        first = TrustedHostRegistry(clock=clock)
        second = TrustedHostRegistry(clock=clock)

        first.trust("bot.example.com")

        assert first.is_trusted("bot.example.com")
        assert second.is_trusted("bot.example.com") is False

    def test_custom_default_hosts(self, clock):
        """Test the default host list can be replaced."""
        registry = TrustedHostRegistry(default_hosts=["Channel.Example.com"], clock=clock)

        assert registry.is_trusted("https://channel.example.com")
        assert registry.is_trusted("https://api.botframework.com") is False

    def test_concurrent_trust_loses_no_updates(self, registry):
        """Test concurrent writers all land in the registry."""
        hosts = [f"bot{i}.example.com" for i in range(200)]

        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(registry.trust, hosts))

        assert all(registry.is_trusted(host) for host in hosts)

    def test_trust_then_check_after_one_day(self, registry, clock):
        """Test a default trust window end to end."""
        registry.trust("api.example.net")

        clock.advance(timedelta(days=1) - timedelta(seconds=1))
        assert registry.is_trusted("api.example.net")

        clock.advance(timedelta(minutes=6, seconds=1))
        assert registry.is_trusted("api.example.net") is False

    def test_retrusting_default_host_replaces_permanent_trust(self, registry, clock):
        """Test an explicit trust call on a default host sets a finite expiry."""
        registry.trust("api.botframework.com")

        clock.advance(timedelta(days=1) - timedelta(seconds=1))
        assert registry.is_trusted("api.botframework.com")

        clock.advance(timedelta(minutes=6, seconds=1))
        assert registry.is_trusted("api.botframework.com") is False
