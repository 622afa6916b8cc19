from dataclasses import replace
from decimal import Decimal

from app.domain.services.carry_in_resolver import CarryInResolver

from fakes import USER_ID, InMemoryExecutionStore, make_execution


async def test_later_cycle_reads_previous_cycle():
    store = InMemoryExecutionStore(make_execution("2026-02#1", {"069500": "5000"}))
    carry = await CarryInResolver(store).resolve(USER_ID, "2026-02", 2)
    assert carry == {"069500": Decimal("5000")}


async def test_gap_in_cycles_yields_empty_carry():
    store = InMemoryExecutionStore(make_execution("2026-02#1", {"069500": "5000"}))
    assert await CarryInResolver(store).resolve(USER_ID, "2026-02", 3) == {}


async def test_first_cycle_prefers_highest_previous_month_cycle():
    store = InMemoryExecutionStore(
        make_execution("2026-01#1", {"069500": "1"}),
        make_execution("2026-01#2", {"069500": "2"}),
    )
    carry = await CarryInResolver(store).resolve(USER_ID, "2026-02", 1)
    assert carry == {"069500": Decimal("2")}


async def test_first_cycle_of_january_looks_at_december():
    store = InMemoryExecutionStore(make_execution("2025-12#3", {"439870": "4000"}))
    carry = await CarryInResolver(store).resolve(USER_ID, "2026-01", 1)
    assert carry == {"439870": Decimal("4000")}


async def test_soft_deleted_source_is_ignored():
    deleted = replace(make_execution("2026-02#1", {"069500": "5000"}), deleted_at=make_execution().created_at)
    store = InMemoryExecutionStore(deleted)
    assert await CarryInResolver(store).resolve(USER_ID, "2026-02", 2) == {}


async def test_other_users_are_isolated():
    store = InMemoryExecutionStore(make_execution("2026-02#1", {"069500": "5000"}, user_id="someone-else"))
    assert await CarryInResolver(store).resolve(USER_ID, "2026-02", 2) == {}
