import pytest

from core.exceptions import InvalidTargetError
from core.router import RouteDecider, normalize_request_url

HOST = "proxy.local"
BASE = f"http://{HOST}"


@pytest.fixture
def decider():
    return RouteDecider("/proxy/")


def test_options_is_preflight(decider):
    decision = decider.decide("OPTIONS", f"{BASE}/proxy/https://site.test/", HOST)
    assert decision.route == "preflight"


def test_path_outside_prefix_is_not_found(decider):
    decision = decider.decide("GET", f"{BASE}/other/https://site.test/", HOST)
    assert decision.route == "not_found"
    assert decision.target_url is None


def test_target_keeps_query_string(decider):
    decision = decider.decide("GET", f"{BASE}/proxy/https://site.test/search?q=a&page=2", HOST)
    assert decision.route == "proxy"
    assert decision.target_url == "https://site.test/search?q=a&page=2"


def test_protocol_relative_target_uses_https(decider):
    decision = decider.decide("GET", f"{BASE}/proxy///site.test/x", HOST)
    assert decision.target_url == "https://site.test/x"


def test_single_slash_scheme_is_repaired(decider):
    decision = decider.decide("GET", f"{BASE}/proxy/https:/site.test/x", HOST)
    assert decision.target_url == "https://site.test/x"


def test_target_mentioning_proxy_host_is_kept_whole(decider):
    url = f"{BASE}/proxy/https://site.test/?next=http://{HOST}/back"
    decision = decider.decide("GET", url, HOST)
    assert decision.target_url == f"https://site.test/?next=http://{HOST}/back"


def test_missing_host_falls_back_to_path(decider):
    decision = decider.decide("GET", f"{BASE}/proxy/http://site.test/a?b=1", None)
    assert decision.target_url == "http://site.test/a?b=1"


def test_target_without_scheme_is_rejected(decider):
    with pytest.raises(InvalidTargetError):
        decider.decide("GET", f"{BASE}/proxy/site.test/x", HOST)


def test_custom_prefix():
    decision = RouteDecider("/live/").decide("GET", f"{BASE}/live/https://site.test/", HOST)
    assert decision.target_url == "https://site.test/"


def test_normalize_only_touches_first_single_slash():
    url = "http://proxy.local/proxy/http:/a.test/?u=https:/b.test"
    assert normalize_request_url(url) == "http://proxy.local/proxy/http://a.test/?u=https:/b.test"


def test_normalize_leaves_wellformed_urls_alone():
    url = "https://proxy.local/proxy/https://site.test/"
    assert normalize_request_url(url) == url
