"""Unit tests for the per-user locks."""

import asyncio

import pytest

from core.locks import KeyedLock, NullLock


@pytest.mark.asyncio
async def test_same_key_is_serialized():
    locks = KeyedLock()
    order = []

    async def worker(name):
        async with locks.hold("U1"):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert order == ["a-in", "a-out", "b-in", "b-out"]


@pytest.mark.asyncio
async def test_different_keys_overlap():
    locks = KeyedLock()
    inside = []

    async def worker(key):
        async with locks.hold(key):
            inside.append(key)
            await asyncio.sleep(0.01)
            assert len(inside) == 2

    await asyncio.gather(worker("U1"), worker("U2"))


@pytest.mark.asyncio
async def test_entries_released():
    locks = KeyedLock()

    async with locks.hold("U1"):
        assert len(locks) == 1

    assert len(locks) == 0


@pytest.mark.asyncio
async def test_released_on_error():
    locks = KeyedLock()

    with pytest.raises(ValueError):
        async with locks.hold("U1"):
            raise ValueError("boom")

    assert len(locks) == 0


@pytest.mark.asyncio
async def test_null_lock():
    async with NullLock().hold("U1"):
        pass
