import asyncio
import json

import pytest

from app.models.market_schemas import CoinCandidate
from app.services import market_service
from app.services.market_service import (
    CoinGeckoService,
    InvalidQuery,
    MarketDataUnavailable,
    NoMatchFound,
    UpstreamMarketError,
    UpstreamSearchError,
    parse_market_row,
)


SEARCH_COINS_PAYLOAD = {"coins": [{"id": "bitcoin", "symbol": "btc", "name": "Bitcoin"}]}


def _coin(id_, symbol, name=""):
    return CoinCandidate(id=id_, symbol=symbol, name=name)


@pytest.mark.parametrize("query", ["", " ", "b", "  x  ", None])
def test_short_query_rejected_without_network(make_service, query):
    service = make_service()
    with pytest.raises(InvalidQuery) as exc:
        asyncio.run(service.resolve_and_fetch(query))
    assert exc.value.http_status == 400
    assert service.calls == []


def test_exact_symbol_match_wins_over_list_order(make_service):
    service = make_service()
    result = asyncio.run(service.resolve_and_fetch("  btc "))

    assert result.chosen == _coin("bitcoin", "BTC", "Bitcoin")
    assert result.row["id"] == "bitcoin"
    assert [path for path, _ in service.calls] == ["/search", "/coins/markets"]
    assert service.calls[0][1] == {"query": "btc"}
    assert service.calls[1][1] == {
        "vs_currency": "usd",
        "ids": "bitcoin",
        "price_change_percentage": "24h,7d,30d",
    }


def test_first_candidate_used_when_no_symbol_matches():
    candidates = [_coin("solana", "SOL"), _coin("solana-wormhole", "SOL"), _coin("bitcoin", "BTC")]
    assert CoinGeckoService.choose_coin("solan", candidates).id == "solana"
    assert CoinGeckoService.choose_coin("btc", candidates).id == "bitcoin"


def test_first_exact_match_among_duplicates():
    candidates = [_coin("a", "ABC"), _coin("b", "XYZ"), _coin("c", "XYZ")]
    assert CoinGeckoService.choose_coin("xyz", candidates).id == "b"


def test_empty_candidates_raise_no_match():
    with pytest.raises(NoMatchFound):
        CoinGeckoService.choose_coin("btc", [])


@pytest.mark.parametrize("payload", [{}, {"coins": None}, {"coins": "oops"}, [], None])
def test_malformed_candidate_list_is_empty(make_service, payload):
    service = make_service(search=(200, payload))
    with pytest.raises(NoMatchFound) as exc:
        asyncio.run(service.resolve_and_fetch("btc"))
    assert exc.value.http_status == 404
    assert len(service.calls) == 1


def test_search_normalizes_candidates(make_service):
    service = make_service(search=(200, {"coins": [{"id": "pepe", "symbol": "pepe"}, {"id": "x", "name": "X"}]}))
    candidates = asyncio.run(service.search("pepe"))
    assert candidates == [_coin("pepe", "PEPE", ""), _coin("x", "", "X")]


def test_search_failure_carries_upstream_status(make_service):
    service = make_service(search=(429, None))
    with pytest.raises(UpstreamSearchError) as exc:
        asyncio.run(service.resolve_and_fetch("btc"))
    assert exc.value.upstream_status == 429
    assert exc.value.http_status == 502
    assert str(exc.value) == "Search failed (429)"
    assert len(service.calls) == 1


def test_market_failure_carries_upstream_status(make_service):
    service = make_service(markets=(503, None))
    with pytest.raises(UpstreamMarketError) as exc:
        asyncio.run(service.resolve_and_fetch("btc"))
    assert exc.value.upstream_status == 503
    assert str(exc.value) == "Market fetch failed (503)"


@pytest.mark.parametrize("payload", [[], None, {"id": "bitcoin"}])
def test_missing_market_row(make_service, payload):
    service = make_service(markets=(200, payload))
    with pytest.raises(MarketDataUnavailable):
        asyncio.run(service.resolve_and_fetch("btc"))


def test_no_retries_on_repeated_calls(make_service):
    service = make_service(markets=(500, None))
    for _ in range(2):
        with pytest.raises(UpstreamMarketError):
            asyncio.run(service.resolve_and_fetch("btc"))
    assert len(service.calls) == 4


def test_parse_market_row_keeps_absent_fields_absent():
    snapshot = parse_market_row({
        "id": "tiny",
        "symbol": "tny",
        "name": "Tiny",
        "current_price": "0.5",
        "market_cap": None,
        "market_cap_rank": None,
        "total_volume": "abc",
        "price_change_percentage_24h": 2.5,
    })
    assert snapshot.symbol == "TNY"
    assert snapshot.current_price == 0.5
    assert snapshot.market_cap == 0.0
    assert snapshot.total_volume == 0.0
    assert snapshot.market_cap_rank is None
    assert snapshot.price_change_percentage_24h == 2.5
    assert snapshot.price_change_percentage_7d is None
    assert snapshot.ath is None
    assert snapshot.image is None


def test_parse_market_row_prefers_in_currency_changes(btc_row):
    snapshot = parse_market_row(btc_row)
    assert snapshot.market_cap_rank == 1
    assert snapshot.price_change_percentage_24h == -1.2
    assert snapshot.price_change_percentage_7d == 3.4
    assert snapshot.price_change_percentage_30d is None
    assert snapshot.ath == 69000.0


def test_candidates_without_id_are_skipped(make_service):
    service = make_service(search=(200, {"coins": [{"symbol": "xyz", "name": "X"}, {"id": "", "symbol": "xyz"}]}))
    with pytest.raises(NoMatchFound):
        asyncio.run(service.resolve_and_fetch("xyz"))
    assert [path for path, _ in service.calls] == ["/search"]


def test_market_row_must_match_requested_id(make_service, btc_row):
    service = make_service(
        search=(200, {"coins": [{"id": "xyz-token", "symbol": "xyz"}]}),
        markets=(200, [btc_row]),
    )
    with pytest.raises(MarketDataUnavailable):
        asyncio.run(service.resolve_and_fetch("xyz"))
    assert service.calls[1][1]["ids"] == "xyz-token"


def test_market_row_picked_by_id_not_position(make_service, btc_row):
    other = dict(btc_row, id="ethereum", symbol="eth")
    service = make_service(markets=(200, [other, btc_row]))
    result = asyncio.run(service.resolve_and_fetch("btc"))
    assert result.row["id"] == "bitcoin"


def test_any_2xx_is_success(make_service, btc_row):
    service = make_service(search=(203, SEARCH_COINS_PAYLOAD), markets=(201, [btc_row]))
    result = asyncio.run(service.resolve_and_fetch("btc"))
    assert result.chosen.id == "bitcoin"


class _FakeResponse:
    def __init__(self, status, body=b"", payload=None):
        self.status = status
        self._body = body
        self._payload = payload

    async def read(self):
        return self._body

    async def json(self, content_type=None):
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class _FakeSession:
    closed = False

    def __init__(self, response):
        self.response = response
        self.requests = []

    def get(self, url, params=None, headers=None):
        self.requests.append((url, params, headers))
        return self.response


def test_undecodable_error_body_still_reports_upstream_status():
    service = CoinGeckoService()
    service._session = _FakeSession(_FakeResponse(503, body=b"\xff\xfe\xfa bad"))

    with pytest.raises(UpstreamSearchError) as exc:
        asyncio.run(service.resolve_and_fetch("btc"))
    assert exc.value.upstream_status == 503
    assert str(exc.value) == "Search failed (503)"


def test_get_json_sends_no_store_and_api_key(monkeypatch):
    monkeypatch.setenv("COINGECKO_API_KEY", "demo-key")
    service = CoinGeckoService()
    session = _FakeSession(_FakeResponse(200, payload={"coins": []}))
    service._session = session

    status, data = asyncio.run(service._get_json("/search", {"query": "btc"}))

    assert (status, data) == (200, {"coins": []})
    url, params, headers = session.requests[0]
    assert url.endswith("/search")
    assert params == {"query": "btc"}
    assert headers == {"Cache-Control": "no-store", "x-cg-demo-api-key": "demo-key"}


def test_headers_without_api_key(monkeypatch):
    monkeypatch.delenv("COINGECKO_API_KEY", raising=False)
    assert CoinGeckoService._headers() == {"Cache-Control": "no-store"}


def test_load_config_defaults_when_file_missing(monkeypatch, tmp_path):
    monkeypatch.setattr(market_service, "project_root", str(tmp_path))
    config = market_service._load_config()
    assert config == {"coingecko_api_url": "https://api.coingecko.com/api/v3", "request_timeout": 30}


def test_load_config_merges_missing_keys(monkeypatch, tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "config.json").write_text(json.dumps({"request_timeout": 5}), encoding="utf-8")
    monkeypatch.setattr(market_service, "project_root", str(tmp_path))

    config = market_service._load_config()
    assert config["request_timeout"] == 5
    assert config["coingecko_api_url"] == "https://api.coingecko.com/api/v3"


def test_load_config_falls_back_on_bad_json(monkeypatch, tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "config.json").write_text("{not json", encoding="utf-8")
    monkeypatch.setattr(market_service, "project_root", str(tmp_path))

    assert market_service._load_config()["request_timeout"] == 30
