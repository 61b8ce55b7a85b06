"""Tests for the screen registry – no database required."""

import asyncio

from patient_details.services.confirmation import ConfirmationGate
from patient_details.services.screens import ScreenRegistry

LISTING = "/prediction-table"


def test_registry_evicts_oldest_screen(fake_store):
    registry = ScreenRegistry(fake_store, ConfirmationGate(), LISTING, max_screens=2)

    async def scenario():
        return [await registry.open("p42") for _ in range(3)]

    first, second, third = asyncio.run(scenario())

    assert len(registry) == 2
    assert registry.get(first.id) is None
    assert first.view.mounted is False
    assert registry.get(second.id) is second
    assert registry.get(third.id) is third
    assert third.view.mounted is True


def test_close_unmounts_screen(fake_store):
    registry = ScreenRegistry(fake_store, ConfirmationGate(), LISTING)
    screen = asyncio.run(registry.open("p42"))

    assert registry.close(screen.id) is True
    assert screen.view.mounted is False
    assert len(registry) == 0
    assert registry.close(screen.id) is False
