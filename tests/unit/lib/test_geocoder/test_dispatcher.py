"""Unit tests for GeocoderList dispatch, caching and attempt logging."""

import re

import pytest

from geocoder_list.lib.geocoder.base import BaseGeocoder, GeocodingProviderError, RawRecord
from geocoder_list.lib.geocoder.dispatcher import GeocoderList, Multiplicity
from geocoder_list.lib.geocoder.registry import Conditional


class MockGeocoder(BaseGeocoder):
    """Test backend returning pre-configured records and counting calls."""

    def __init__(self, name: str, records: list[RawRecord] | None = None, error: bool = False) -> None:
        self._name = name
        self._records = records or []
        self._error = error
        self.calls: list[str] = []

    @property
    def provider_name(self) -> str:
        return self._name

    async def search(self, query: str) -> list[RawRecord]:
        self.calls.append(query)
        if self._error:
            raise GeocodingProviderError(self._name, "Test error")
        return self._records


def _osm(lat: float, lon: float) -> RawRecord:
    return {"lat": str(lat), "lon": str(lon), "display_name": "somewhere"}


class TestInputHandling:
    """Tests for empty and missing queries."""

    @pytest.mark.parametrize("query", [None, "", "   "])
    async def test_blank_query_is_noop(self, query: str | None) -> None:
        backend = MockGeocoder("a", [_osm(1.0, 2.0)])
        geocoders = GeocoderList().register(backend)

        assert await geocoders.resolve_one(query) is None
        assert await geocoders.resolve_all(query) == []
        assert backend.calls == []
        assert geocoders.log() == ()

    async def test_empty_registry_returns_none_without_log(self) -> None:
        geocoders = GeocoderList()

        assert await geocoders.resolve_one("10 Downing St, London, UK") is None
        assert await geocoders.resolve_all("10 Downing St, London, UK") == []
        assert geocoders.log() == ()

    async def test_resolve_accepts_mode_string(self) -> None:
        geocoders = GeocoderList().register(MockGeocoder("a", [_osm(1.0, 2.0), _osm(3.0, 4.0)]))

        results = await geocoders.resolve("Somewhere", "all")

        assert len(results) == 2


class TestCaching:
    """Tests for the per-instance result cache."""

    async def test_whitespace_variants_share_cache_entry(self) -> None:
        backend = MockGeocoder("a", [_osm(40.7, -74.0)])
        geocoders = GeocoderList().register(backend)

        await geocoders.resolve_one("New   York")
        await geocoders.resolve_one("New York")

        assert backend.calls == ["New York"]
        second = geocoders.log()[1]
        assert second.elapsed_seconds == 0
        assert second.backend_name is None
        assert second.from_cache

    async def test_cache_hit_skips_backends_and_strips_attribution(self) -> None:
        backend = MockGeocoder("a", [_osm(51.5, -0.12)])
        geocoders = GeocoderList().register(backend)

        first = await geocoders.resolve_one("London")
        second = await geocoders.resolve_one("London")

        assert len(backend.calls) == 1
        assert first is not None and second is not None
        assert first.geocoder == "a"
        assert second.geocoder is None
        assert (second.latitude, second.longitude) == (first.latitude, first.longitude)
        assert "geocoder" not in second.to_dict()

    async def test_success_log_keeps_attribution_after_cache_hit(self) -> None:
        geocoders = GeocoderList().register(MockGeocoder("a", [_osm(51.5, -0.12)]))

        await geocoders.resolve_one("London")
        await geocoders.resolve_one("London")

        success = geocoders.log()[0]
        assert success.backend_name == "a"
        assert success.result.geocoder == "a"

    async def test_all_mode_cache_hit_returns_every_candidate(self) -> None:
        backend = MockGeocoder("a", [_osm(1.0, 1.0), _osm(2.0, 2.0)])
        geocoders = GeocoderList().register(backend)

        await geocoders.resolve_all("Springfield")
        cached = await geocoders.resolve_all("Springfield")

        assert len(backend.calls) == 1
        assert [r.latitude for r in cached] == [1.0, 2.0]
        assert all(r.geocoder is None for r in cached)
        assert isinstance(geocoders.log()[-1].result, tuple)

    async def test_single_mode_reads_first_of_cached_sequence(self) -> None:
        backend = MockGeocoder("a", [_osm(1.0, 1.0), _osm(2.0, 2.0)])
        geocoders = GeocoderList().register(backend)

        await geocoders.resolve_all("Springfield")
        single = await geocoders.resolve_one("Springfield")

        assert len(backend.calls) == 1
        assert single is not None
        assert single.latitude == 1.0

    async def test_single_cached_value_does_not_answer_all_mode(self) -> None:
        backend = MockGeocoder("a", [_osm(1.0, 1.0), _osm(2.0, 2.0)])
        geocoders = GeocoderList().register(backend)

        await geocoders.resolve_one("Springfield")
        results = await geocoders.resolve_all("Springfield")

        assert len(backend.calls) == 2
        assert len(results) == 2

    async def test_editing_returned_address_does_not_change_cache(self) -> None:
        record = {"lat": "48.85", "lon": "2.35", "address": {"city": "Paris"}}
        geocoders = GeocoderList().register(MockGeocoder("a", [record]))

        first = await geocoders.resolve_one("Paris")
        assert first is not None
        first.address["city"] = "Lyon"
        first.address["extra"] = 1

        second = await geocoders.resolve_one("Paris")
        assert second is not None
        assert second.address == {"city": "Paris"}

        second.address["city"] = "Nice"
        third = await geocoders.resolve_one("Paris")
        assert third is not None
        assert third is not second
        assert third.address == {"city": "Paris"}
        assert geocoders.log()[1].result.address == {"city": "Paris"}

    async def test_editing_all_mode_results_does_not_change_cache(self) -> None:
        records = [
            {"lat": "1.0", "lon": "1.0", "address": {"city": "A"}},
            {"lat": "2.0", "lon": "2.0", "address": {"city": "B"}},
        ]
        geocoders = GeocoderList().register(MockGeocoder("a", records))

        results = await geocoders.resolve_all("Springfield")
        for result in results:
            result.address.clear()

        cached = await geocoders.resolve_all("Springfield")
        assert [r.address for r in cached] == [{"city": "A"}, {"city": "B"}]

    async def test_cache_is_not_shared_between_instances(self) -> None:
        backend = MockGeocoder("a", [_osm(1.0, 1.0)])
        first = GeocoderList().register(backend)
        second = GeocoderList().register(backend)

        await first.resolve_one("Paris")
        await second.resolve_one("Paris")

        assert len(backend.calls) == 2
        assert len(second.log()) == 1
        assert second.log()[0].backend_name == "a"

    async def test_not_found_is_not_cached(self) -> None:
        backend = MockGeocoder("a", [])
        geocoders = GeocoderList().register(backend)

        await geocoders.resolve_one("Atlantis")
        await geocoders.resolve_one("Atlantis")

        assert len(backend.calls) == 2


class TestRouting:
    """Tests for predicate-guarded backends."""

    def _geocoders(self) -> tuple[GeocoderList, MockGeocoder, MockGeocoder]:
        us = MockGeocoder("us_only", [_osm(38.8977, -77.0365)])
        world = MockGeocoder("world", [_osm(51.5034, -0.1276)])
        geocoders = GeocoderList().register({"predicate": re.compile(r"USA$"), "backend": us}).register(world)
        return geocoders, us, world

    async def test_matching_predicate_uses_conditional_backend(self) -> None:
        geocoders, us, world = self._geocoders()

        result = await geocoders.resolve_one("1600 Pennsylvania Ave NW, Washington DC, USA")

        assert result is not None
        assert result.geocoder == "us_only"
        assert [r.backend_name for r in geocoders.log()] == ["us_only"]
        assert world.calls == []

    async def test_non_matching_predicate_is_skipped_silently(self) -> None:
        geocoders, us, world = self._geocoders()

        result = await geocoders.resolve_one("10 Downing St, London, UK")

        assert result is not None
        assert result.geocoder == "world"
        assert [r.backend_name for r in geocoders.log()] == ["world"]
        assert us.calls == []

    async def test_callable_predicate(self) -> None:
        backend = MockGeocoder("short", [_osm(1.0, 1.0)])
        geocoders = GeocoderList().register(Conditional(lambda q: len(q) < 10, backend))

        assert await geocoders.resolve_one("Rome") is not None
        assert await geocoders.resolve_one("Llanfairpwllgwyngyll") is None
        assert backend.calls == ["Rome"]


class TestFallback:
    """Tests for error handling and short-circuit fallback."""

    async def test_failed_backend_falls_through_to_next(self, log_messages: list[str]) -> None:
        failing = MockGeocoder("failing", error=True)
        working = MockGeocoder("working", [_osm(48.85, 2.35)])
        geocoders = GeocoderList().register(failing).register(working)

        result = await geocoders.resolve_one("Paris")

        assert result is not None
        assert result.geocoder == "working"
        log = geocoders.log()
        assert len(log) == 2
        assert log[0].backend_name == "failing"
        assert log[0].error == "failing: Test error"
        assert log[0].result is None
        assert log[1].backend_name == "working"
        assert log[1].error is None
        assert log[1].result == result
        assert any(m.startswith("WARNING failing 'Paris'") for m in log_messages)

    async def test_first_success_short_circuits(self) -> None:
        first = MockGeocoder("first", [_osm(1.0, 1.0)])
        second = MockGeocoder("second", [_osm(2.0, 2.0)])
        geocoders = GeocoderList().register(first).register(second)

        result = await geocoders.resolve_one("Anywhere")

        assert result is not None
        assert result.geocoder == "first"
        assert second.calls == []

    async def test_reported_error_discards_whole_batch(self) -> None:
        quota = MockGeocoder("quota", [{"error": "OVER_QUERY_LIMIT"}, _osm(9.0, 9.0)])
        fallback = MockGeocoder("fallback", [_osm(1.0, 1.0)])
        geocoders = GeocoderList().register(quota).register(fallback)

        result = await geocoders.resolve_one("Anywhere")

        assert result is not None
        assert result.geocoder == "fallback"
        log = geocoders.log()
        assert log[0].backend_name == "quota"
        assert log[0].error == "OVER_QUERY_LIMIT"
        assert geocoders.last_error is None

    async def test_unresolvable_records_fall_through(self) -> None:
        vague = MockGeocoder("vague", [{"name": "no coordinates here"}, "not a record"])  # type: ignore[list-item]
        precise = MockGeocoder("precise", [_osm(1.0, 1.0)])
        geocoders = GeocoderList().register(vague).register(precise)

        result = await geocoders.resolve_one("Anywhere")

        assert result is not None
        assert result.geocoder == "precise"
        log = geocoders.log()
        assert [r.backend_name for r in log] == ["vague", "precise"]
        assert log[0].error is None
        assert log[0].result is None

    async def test_exhaustion_returns_none_and_log_explains(self) -> None:
        geocoders = GeocoderList().register(MockGeocoder("a", error=True)).register(MockGeocoder("b", error=True))

        assert await geocoders.resolve_one("Nowhere") is None
        assert [r.error for r in geocoders.log()] == ["a: Test error", "b: Test error"]
        assert geocoders.last_error == "b: Test error"

    async def test_unexpected_exception_becomes_failed_attempt(self) -> None:
        class BrokenGeocoder(MockGeocoder):
            async def search(self, query: str) -> list[RawRecord]:
                raise RuntimeError("boom")

        geocoders = GeocoderList().register(BrokenGeocoder("broken")).register(MockGeocoder("ok", [_osm(1.0, 1.0)]))

        result = await geocoders.resolve_one("Anywhere")

        assert result is not None
        assert "boom" in geocoders.log()[0].error

    async def test_elapsed_time_recorded(self) -> None:
        geocoders = GeocoderList().register(MockGeocoder("a", [_osm(1.0, 1.0)]))

        await geocoders.resolve_one("Anywhere")

        assert geocoders.log()[0].elapsed_seconds >= 0


class TestMultiplicity:
    """Tests for single versus all result modes."""

    async def test_all_returns_every_candidate(self) -> None:
        records = [_osm(1.0, 1.0), _osm(2.0, 2.0), _osm(3.0, 3.0)]
        geocoders = GeocoderList().register(MockGeocoder("a", records))

        results = await geocoders.resolve_all("Springfield")

        assert [r.latitude for r in results] == [1.0, 2.0, 3.0]
        assert all(r.geocoder == "a" for r in results)

    async def test_single_returns_first(self) -> None:
        records = [_osm(1.0, 1.0), _osm(2.0, 2.0), _osm(3.0, 3.0)]
        geocoders = GeocoderList().register(MockGeocoder("a", records))

        result = await geocoders.resolve_one("Springfield")

        assert result is not None
        assert result.latitude == 1.0

    async def test_all_logs_one_success_record(self) -> None:
        records = [_osm(1.0, 1.0), _osm(2.0, 2.0)]
        geocoders = GeocoderList().register(MockGeocoder("a", records))

        await geocoders.resolve(" Springfield ", Multiplicity.ALL)

        assert len(geocoders.log()) == 1
        assert geocoders.log()[0].result.latitude == 1.0

    async def test_all_skips_unresolvable_and_error_candidates(self) -> None:
        records = [{"name": "vague"}, _osm(1.0, 1.0), {"error": "partial"}, _osm(2.0, 2.0)]
        geocoders = GeocoderList().register(MockGeocoder("a", records))

        results = await geocoders.resolve_all("Springfield")

        assert [r.latitude for r in results] == [1.0, 2.0]


class TestLogAccessors:
    """Tests for log snapshot and flush."""

    async def test_log_accumulates_until_flushed(self) -> None:
        geocoders = GeocoderList().register(MockGeocoder("a", [_osm(1.0, 1.0)]))

        await geocoders.resolve_one("One")
        await geocoders.resolve_one("Two")
        assert len(geocoders.log()) == 2

        geocoders.flush()
        assert geocoders.log() == ()

    async def test_flush_keeps_cache(self) -> None:
        backend = MockGeocoder("a", [_osm(1.0, 1.0)])
        geocoders = GeocoderList().register(backend)

        await geocoders.resolve_one("One")
        geocoders.flush()
        await geocoders.resolve_one("One")

        assert len(backend.calls) == 1
        assert geocoders.log()[0].from_cache

    def test_register_is_chainable(self) -> None:
        geocoders = GeocoderList()
        assert geocoders.register(MockGeocoder("a")) is geocoders
        assert len(geocoders.registry) == 1
