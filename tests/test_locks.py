from __future__ import annotations

import asyncio

import pytest

from riskintel.locks import KeyedLocks


class TestKeyedLocks:
    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_same_key_is_serialized(self) -> None:
        locks = KeyedLocks()
        order: list[str] = []

        async def _work(name: str) -> None:
            async with locks.hold("s1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(_work("a"), _work("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]
        assert len(locks) == 0

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_entry_kept_while_waiters_remain(self) -> None:
        locks = KeyedLocks()
        entered = asyncio.Event()
        release = asyncio.Event()

        async def _holder() -> None:
            async with locks.hold("s1"):
                entered.set()
                await release.wait()

        async def _waiter() -> None:
            async with locks.hold("s1"):
                pass

        holder = asyncio.create_task(_holder())
        await entered.wait()
        waiter = asyncio.create_task(_waiter())
        await asyncio.sleep(0)

        assert "s1" in locks
        release.set()
        await asyncio.gather(holder, waiter)
        assert "s1" not in locks

    @pytest.mark.asyncio  # type: ignore[misc]
    async def test_released_on_error(self) -> None:
        locks = KeyedLocks()
        with pytest.raises(RuntimeError):
            async with locks.hold("s1"):
                raise RuntimeError("boom")
        assert len(locks) == 0
