# tests/test_preview.py
import pytest
import requests

from zkfetch.errors import PreviewFailure, UnknownSourceKind
from zkfetch.preview import extract_values, preview_source, to_python_pattern
from zkfetch.sources import get_source

WEATHER_HTML = (
    '<div class="cur-con-weather-card">'
    '<div class="temp">72&#xB0;<span class="after-temp">F</span></div>'
    '<span class="phrase">Partly sunny</span>'
    "</div>"
)
RANKINGS_JSON = (
    '{"personList":{"personsLists":['
    '{"rank":1,"personName":"Ada Example","finalWorth":250.5},'
    '{"rank":2,"personName":"Bo Example","finalWorth":199.1}]}}'
)


class FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def request(self, method, url, headers=None, timeout=None):
        self.requests.append((method, url, headers))
        if self.error is not None:
            raise self.error
        return self.response


def test_named_groups_translated():
    assert to_python_pattern(r"(?<price>\d+)") == r"(?P<price>\d+)"


def test_lookbehinds_untouched():
    pattern = r"(?<=\$)(?<!x)(?<v>\d+)"
    assert to_python_pattern(pattern) == r"(?<=\$)(?<!x)(?P<v>\d+)"


def test_extract_price():
    values = extract_values('{"stellar":{"usd":0.1234}}', get_source("price-feed").response_matches)
    assert values == {"price": "0.1234"}


def test_extract_is_sparse():
    values = extract_values(RANKINGS_JSON, get_source("rankings").response_matches)
    assert values == {
        "rank1": "1", "name1": "Ada Example", "worth1": "250.5",
        "rank2": "2", "name2": "Bo Example", "worth2": "199.1",
    }


def test_extract_bad_pattern():
    with pytest.raises(PreviewFailure):
        extract_values("x", ["(?<broken"])


def test_preview_weather():
    session = FakeSession(FakeResponse(WEATHER_HTML))
    values = preview_source("weather", session=session)
    assert values == {"temperature": "72", "unit": "F", "condition": "Partly sunny"}

    method, url, headers = session.requests[0]
    assert method == "GET"
    assert url == get_source("weather").url
    assert "User-Agent" in headers


def test_preview_alias():
    session = FakeSession(FakeResponse('{"stellar":{"usd":0.5}}'))
    assert preview_source("stellar", session=session) == {"price": "0.5"}


def test_preview_nothing_matched():
    with pytest.raises(PreviewFailure, match="no pattern matched"):
        preview_source("price-feed", session=FakeSession(FakeResponse("<html></html>")))


def test_preview_http_error():
    with pytest.raises(PreviewFailure, match="fetch failed"):
        preview_source("price-feed", session=FakeSession(FakeResponse("", status=503)))


def test_preview_connection_error():
    session = FakeSession(error=requests.ConnectionError("refused"))
    with pytest.raises(PreviewFailure, match="refused"):
        preview_source("weather", session=session)


def test_preview_unknown_kind_never_fetches():
    session = FakeSession(FakeResponse(""))
    with pytest.raises(UnknownSourceKind):
        preview_source("nope", session=session)
    assert session.requests == []
