import asyncio

import anyio
import pytest

from fakes import ScriptedTransport
from inventory_search.client.cache import ResultCache
from inventory_search.client.service import InventorySearchApi, envelope_failed
from inventory_search.data.models import SearchQuery
from inventory_search.errors import InvalidArgument


@pytest.fixture
def transport(store):
    return ScriptedTransport(store)


def test_identical_concurrent_searches_reach_upstream_once(transport):
    async def scenario():
        api = InventorySearchApi(transport)
        gate = transport.hold_page(0)

        first = api.search(SearchQuery(criteria="PN-1001", branches=["SEA", "PDX"]))
        second = api.search(SearchQuery(criteria=" pn-1001 ", branches=["PDX", "SEA"]))
        gate.set()
        a, b = await asyncio.gather(first, second)

        assert a is b
        assert len(transport.search_calls) == 1

    anyio.run(scenario)


def test_failed_envelopes_are_retried(transport):
    async def scenario():
        api = InventorySearchApi(transport)
        query = SearchQuery(criteria="PN-1001")

        transport.fail_message = "service unavailable"
        failed = await api.search(query)
        assert failed.is_failed
        await asyncio.sleep(0)

        transport.fail_message = None
        ok = await api.search(query)
        assert not ok.is_failed
        assert ok.data.total == 3
        assert len(transport.search_calls) == 2

    anyio.run(scenario)


def test_raised_transport_errors_propagate_and_are_not_cached(transport):
    async def scenario():
        api = InventorySearchApi(transport)
        transport.raise_error = ConnectionError("refused")
        with pytest.raises(ConnectionError):
            await api.get_peak_availability("PN-1001")

        transport.raise_error = None
        lookup = await api.get_peak_availability("PN-1001")
        assert lookup.data.part_number == "PN-1001"
        assert transport.peak_calls == ["PN-1001", "PN-1001"]

    anyio.run(scenario)


def test_search_and_peak_caches_are_independent(transport):
    async def scenario():
        api = InventorySearchApi(transport)
        await api.get_peak_availability("PN-1001")
        for page in range(6):
            await api.search(SearchQuery(page=page))

        assert len(api.search_cache) == 5
        assert len(api.peak_cache) == 1
        await api.get_peak_availability("pn-1001")
        assert transport.peak_calls == ["PN-1001"]

    anyio.run(scenario)


def test_blank_part_number_fails_before_the_transport(transport):
    async def scenario():
        api = InventorySearchApi(transport)
        with pytest.raises(InvalidArgument):
            api.get_peak_availability("   ")
        with pytest.raises(InvalidArgument):
            api.search(None)
        assert transport.peak_calls == []
        assert transport.search_calls == []

    anyio.run(scenario)


def test_unknown_part_is_a_successful_empty_result(transport):
    async def scenario():
        api = InventorySearchApi(transport)
        envelope = await api.get_peak_availability("nonexistent")
        assert not envelope.is_failed
        assert envelope.data.total_available == 0
        assert envelope.data.branches == []

    anyio.run(scenario)


def test_cancelled_caller_does_not_cancel_shared_call(transport):
    async def scenario():
        api = InventorySearchApi(transport)
        gate = transport.hold_page(0)
        query = SearchQuery(criteria="PN-1002")

        impatient = asyncio.ensure_future(api.search(query))
        patient = api.search(query)
        await asyncio.sleep(0)
        impatient.cancel()
        await asyncio.sleep(0)

        gate.set()
        envelope = await patient
        assert envelope.data.total == 3
        assert len(transport.search_calls) == 1

    anyio.run(scenario)


def test_injected_caches_are_used(transport):
    async def scenario():
        search_cache = ResultCache("search", max_entries=1, is_failure=envelope_failed)
        api = InventorySearchApi(transport, search_cache=search_cache)
        await api.search(SearchQuery(page=0))
        await api.search(SearchQuery(page=1))
        assert len(search_cache) == 1

        await api.aclose()
        assert len(api.search_cache) == 0
        assert len(api.peak_cache) == 0

    anyio.run(scenario)
