from dataclasses import FrozenInstanceError
from unittest.mock import Mock

import pytest

from proxy_backend.app_proxy.allowlist import HostAllowlist, get_allowlist


class TestFromCsv:
    def test_empty_string_is_permissive(self):
        allowlist = HostAllowlist.from_csv("")
        assert allowlist.hosts == ()
        assert allowlist.permissive

    def test_blank_entries_and_whitespace_dropped(self):
        allowlist = HostAllowlist.from_csv(" example.com, ,docs.example.com,,")
        assert allowlist.hosts == ("example.com", "docs.example.com")

    def test_order_preserved_and_duplicates_removed(self):
        allowlist = HostAllowlist.from_csv("b.com,a.com,b.com")
        assert allowlist.hosts == ("b.com", "a.com")

    def test_none_is_permissive(self):
        assert HostAllowlist.from_csv(None).permissive


class TestIsAllowed:
    def test_empty_allowlist_allows_everything(self):
        allowlist = HostAllowlist()
        assert allowlist.is_allowed("evil.example")
        assert allowlist.is_allowed("example.com")
        assert allowlist.is_allowed("")

    def test_configured_host_allowed(self):
        allowlist = HostAllowlist(("example.com",))
        assert allowlist.is_allowed("example.com")
        assert not allowlist.is_allowed("evil.com")

    def test_no_subdomain_matching(self):
        allowlist = HostAllowlist(("example.com",))
        assert not allowlist.is_allowed("www.example.com")
        assert not allowlist.is_allowed("example.com.evil.com")

    def test_match_is_case_sensitive(self):
        allowlist = HostAllowlist(("example.com",))
        assert not allowlist.is_allowed("Example.com")

    def test_allowlist_is_immutable(self):
        allowlist = HostAllowlist(("example.com",))
        with pytest.raises(FrozenInstanceError):
            allowlist.hosts = ()
        assert allowlist.hosts == ("example.com",)


class TestIsUrlAllowed:
    def test_checks_url_hostname(self):
        allowlist = HostAllowlist(("example.com",))
        assert allowlist.is_url_allowed("https://example.com/page")
        assert not allowlist.is_url_allowed("https://evil.com/page")

    def test_url_without_host_rejected_when_restricted(self):
        allowlist = HostAllowlist(("example.com",))
        assert not allowlist.is_url_allowed("not a url")

    def test_unparseable_url_rejected(self):
        assert not HostAllowlist().is_url_allowed("http://[::1")
        assert not HostAllowlist(("example.com",)).is_url_allowed("http://[::1")

    def test_permissive_allows_any_http_url(self):
        assert HostAllowlist().is_url_allowed("https://evil.example/")
        assert HostAllowlist().is_url_allowed("http://localhost:8080/x")

    @pytest.mark.parametrize(
        "url",
        ["not a url", "/relative/path", "file:///etc/passwd", "javascript:alert(1)", "https:///"],
    )
    def test_permissive_still_requires_http_url_with_host(self, url):
        assert not HostAllowlist().is_url_allowed(url)


def test_get_allowlist_reads_app_state():
    allowlist = HostAllowlist(("example.com",))
    request = Mock()
    request.app.state.allowlist = allowlist
    assert get_allowlist(request) is allowlist
