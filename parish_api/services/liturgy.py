from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from parish_api.core.config import settings
from parish_api.schemas.liturgy import LiturgyOut, Reading
from parish_api.services.cache import InMemoryTTLCache, TTLCache

logger = logging.getLogger(__name__)

DEFAULT_LITURGY = "Tempo Comum"
DEFAULT_COLOR = "Verde"
FALLBACK_GOSPEL_TEXT = "Liturgia não disponível no momento. Por favor, tente novamente mais tarde."

# (output field, portuguese key, english key, default title)
_READINGS = (
    ("first_reading", "primeiraLeitura", "firstReading", "Primeira Leitura"),
    ("psalm", "salmo", "psalm", "Salmo"),
    ("second_reading", "segundaLeitura", "secondReading", "Segunda Leitura"),
    ("gospel", "evangelho", "gospel", "Evangelho"),
)


class LiturgyUnavailable(Exception):
    pass


def _first(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def _reading(data: dict[str, Any], pt_key: str, en_key: str, default_title: str) -> Optional[Reading]:
    pt = data.get(pt_key)
    en = data.get(en_key)
    if not pt and not en:
        return None
    pt = pt if isinstance(pt, dict) else {}
    en = en if isinstance(en, dict) else {}
    return Reading(
        title=_first(pt.get("titulo"), en.get("title"), default_title),
        text=_first(pt.get("texto"), en.get("text"), ""),
        reference=_first(pt.get("referencia"), en.get("reference"), ""),
    )


def parse_liturgy(data: dict[str, Any], day: str) -> LiturgyOut:
    """Normalize an upstream document that may use Portuguese or English field names."""
    readings = {field: _reading(data, pt_key, en_key, title) for field, pt_key, en_key, title in _READINGS}
    return LiturgyOut(
        date=day,
        liturgy=_first(data.get("liturgia"), data.get("liturgy"), DEFAULT_LITURGY),
        color=_first(data.get("cor"), data.get("color"), DEFAULT_COLOR),
        **readings,
    )


def fallback_liturgy(day: str) -> LiturgyOut:
    return LiturgyOut(
        date=day,
        liturgy=DEFAULT_LITURGY,
        color=DEFAULT_COLOR,
        gospel=Reading(title="Evangelho", text=FALLBACK_GOSPEL_TEXT, reference=""),
        fallback=True,
    )


class LiturgyService:
    def __init__(
        self,
        cache: TTLCache,
        base_url: str = settings.LITURGY_API_URL,
        ttl_seconds: float = settings.LITURGY_CACHE_TTL_SECONDS,
        timeout: float = settings.LITURGY_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self._transport = transport

    async def _fetch(self, day: str) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(f"{self.base_url}/{day}")
        except httpx.HTTPError as exc:
            raise LiturgyUnavailable(str(exc)) from exc
        if resp.status_code != 200:
            raise LiturgyUnavailable(f"upstream returned {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise LiturgyUnavailable("upstream returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise LiturgyUnavailable("upstream returned an unexpected document")
        return payload

    @staticmethod
    def _parse(payload: dict[str, Any], day: str) -> LiturgyOut:
        try:
            return parse_liturgy(payload, day)
        except (ValidationError, TypeError, AttributeError) as exc:
            raise LiturgyUnavailable("upstream document could not be normalized") from exc

    async def get_by_date(self, day: date) -> LiturgyOut:
        key = day.isoformat()
        cached = self.cache.get(key)
        if cached is not None:
            logger.info("liturgy_cache_hit", extra={"date": key})
            return cached

        try:
            payload = await self._fetch(key)
            liturgy = self._parse(payload, key)
        except LiturgyUnavailable as exc:
            logger.error("liturgy_fetch_failed", extra={"date": key, "error": str(exc)})
            logger.warning("liturgy_fallback_used", extra={"date": key})
            return fallback_liturgy(key)

        self.cache.set(key, liturgy, self.ttl_seconds)
        logger.info("liturgy_fetched", extra={"date": key})
        return liturgy

    async def get_today(self) -> LiturgyOut:
        return await self.get_by_date(date.today())

    def clear_expired(self) -> int:
        removed = self.cache.clear_expired()
        logger.info("liturgy_cache_pruned", extra={"removed": removed})
        return removed


_service: Optional[LiturgyService] = None


def get_liturgy_service() -> LiturgyService:
    global _service
    if _service is None:
        _service = LiturgyService(cache=InMemoryTTLCache())
    return _service
