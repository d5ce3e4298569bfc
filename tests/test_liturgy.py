from __future__ import annotations

import asyncio
from datetime import date

import httpx
import pytest

from parish_api.main import app
from parish_api.services.cache import InMemoryTTLCache
from parish_api.services.liturgy import FALLBACK_GOSPEL_TEXT, LiturgyService, get_liturgy_service, parse_liturgy

UPSTREAM = "https://liturgy.example.com/api"

PORTUGUESE_DOCUMENT = {
    "liturgia": "2º Domingo da Quaresma",
    "cor": "Roxo",
    "primeiraLeitura": {
        "titulo": "Leitura do Livro do Gênesis",
        "texto": "Naqueles dias...",
        "referencia": "Gn 12,1-4a",
    },
    "salmo": {"texto": "Sobre nós venha, Senhor, a vossa graça", "referencia": "Sl 32"},
    "evangelho": {"titulo": "Evangelho", "texto": "Jesus tomou consigo...", "referencia": "Mt 17,1-9"},
}


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class Upstream:
    def __init__(self, status_code: int = 200, payload: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = payload if payload is not None else PORTUGUESE_DOCUMENT
        self.paths: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        return httpx.Response(self.status_code, json=self.payload)


def _service(upstream: Upstream, clock: FakeClock | None = None) -> LiturgyService:
    cache = InMemoryTTLCache(clock=clock or FakeClock())
    return LiturgyService(cache=cache, base_url=UPSTREAM, ttl_seconds=60, transport=httpx.MockTransport(upstream))


def test_parse_portuguese_document():
    liturgy = parse_liturgy(PORTUGUESE_DOCUMENT, "2030-03-17")
    assert liturgy.liturgy == "2º Domingo da Quaresma"
    assert liturgy.color == "Roxo"
    assert liturgy.first_reading.reference == "Gn 12,1-4a"
    assert liturgy.psalm.title == "Salmo"
    assert liturgy.second_reading is None
    assert liturgy.gospel.text == "Jesus tomou consigo..."
    assert liturgy.fallback is False


def test_parse_english_document_with_defaults():
    liturgy = parse_liturgy({"gospel": {"text": "In the beginning", "reference": "Jn 1:1"}}, "2030-01-01")
    assert liturgy.liturgy == "Tempo Comum"
    assert liturgy.color == "Verde"
    assert liturgy.gospel.title == "Evangelho"
    assert liturgy.gospel.reference == "Jn 1:1"


def test_fetch_is_cached_until_expiry():
    upstream = Upstream()
    clock = FakeClock()
    service = _service(upstream, clock)

    first = asyncio.run(service.get_by_date(date(2030, 3, 17)))
    second = asyncio.run(service.get_by_date(date(2030, 3, 17)))
    assert first == second
    assert upstream.paths == ["/api/2030-03-17"]

    clock.now += 61
    asyncio.run(service.get_by_date(date(2030, 3, 17)))
    assert len(upstream.paths) == 2


def test_upstream_failure_returns_uncached_fallback():
    upstream = Upstream(status_code=500, payload={"error": "down"})
    service = _service(upstream)

    liturgy = asyncio.run(service.get_by_date(date(2030, 3, 17)))
    assert liturgy.fallback is True
    assert liturgy.gospel.text == FALLBACK_GOSPEL_TEXT
    assert len(service.cache) == 0

    asyncio.run(service.get_by_date(date(2030, 3, 17)))
    assert len(upstream.paths) == 2


@pytest.mark.parametrize(
    "payload",
    [
        {"liturgia": {"nome": "Quaresma"}, "cor": "Roxo"},
        {"evangelho": {"titulo": 5, "texto": "Jesus tomou consigo..."}},
    ],
)
def test_malformed_document_returns_uncached_fallback(payload):
    upstream = Upstream(payload=payload)
    service = _service(upstream)

    liturgy = asyncio.run(service.get_by_date(date(2030, 3, 17)))
    assert liturgy.fallback is True
    assert liturgy.gospel.text == FALLBACK_GOSPEL_TEXT
    assert len(service.cache) == 0


def test_cache_clear_expired():
    clock = FakeClock()
    cache = InMemoryTTLCache(clock=clock)
    cache.set("short", "a", 10)
    cache.set("long", "b", 100)

    clock.now += 10
    assert cache.get("short") is None
    assert cache.clear_expired() == 0
    assert len(cache) == 1

    clock.now += 100
    assert cache.clear_expired() == 1
    assert len(cache) == 0


@pytest.fixture()
def liturgy_upstream(client):
    upstream = Upstream()
    service = _service(upstream)
    app.dependency_overrides[get_liturgy_service] = lambda: service
    yield upstream
    app.dependency_overrides.pop(get_liturgy_service, None)


def test_liturgy_route_by_date(client, liturgy_upstream):
    resp = client.get("/liturgy/2030-03-17")
    assert resp.status_code == 200, resp.text
    assert resp.json()["date"] == "2030-03-17"
    assert resp.json()["color"] == "Roxo"


@pytest.mark.parametrize("day", ["17-03-2030", "2030-3-17", "tomorrow"])
def test_liturgy_route_rejects_bad_dates(client, liturgy_upstream, day):
    resp = client.get(f"/liturgy/{day}")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid date format. Use YYYY-MM-DD"
    assert liturgy_upstream.paths == []
