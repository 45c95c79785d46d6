from __future__ import annotations

import asyncio
import itertools

import pytest

from homelink.config import get_settings
from homelink.core import DevicesClient, OnboardingFlow
from homelink.exceptions import BackendError
from homelink.models import CommissionedNode, PresenceEntry
from homelink.storage import Database


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("HOMELINK_CONFIG", raising=False)
    monkeypatch.delenv("HOMELINK_DATA_DIR", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakePresence:
    def __init__(self) -> None:
        self.entries: list[PresenceEntry] = []
        self.fail = False
        self.calls = 0

    async def fetch(self) -> list[PresenceEntry]:
        self.calls += 1
        if self.fail:
            raise BackendError("presence", "router unreachable")
        return list(self.entries)


class FakeMesh:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.power: dict[int, bool] = {}
        self.fail = False
        self._ids = itertools.count(1000)

    def _check(self) -> None:
        if self.fail:
            raise BackendError("mesh", "controller offline")

    async def commission(self, pairing_code: str) -> CommissionedNode:
        self._check()
        node_id = next(self._ids)
        self.calls.append(("commission", pairing_code))
        return CommissionedNode(node_id=node_id, metadata={"vendor": "fake"})

    async def decommission(self, node_id: int) -> None:
        self._check()
        self.calls.append(("decommission", node_id))

    async def get_power_state(self, node_id: int) -> bool:
        self._check()
        return self.power.get(node_id, False)

    async def set_power(self, node_id: int, on: bool) -> None:
        self._check()
        self.calls.append(("set_power", node_id, on))


class FakeLighting:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.readings: dict[str, str | None] = {}
        self.delay = 0.0
        self.fail = False

    async def get_power_state(self, address: str, timeout: float | None = None):
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.readings.get(address)

    async def set_power(self, address: str, on: bool) -> None:
        if self.fail:
            raise BackendError("lighting", f"{address} timed out")
        self.calls.append(("set_power", address, on))


class FakeWake:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    async def wake(self, mac: str, address: str) -> None:
        self.calls.append((mac, address))


@pytest.fixture
def db(tmp_path) -> Database:
    database = Database(tmp_path / "data")
    database.init()
    return database


@pytest.fixture
def presence() -> FakePresence:
    return FakePresence()


@pytest.fixture
def mesh() -> FakeMesh:
    return FakeMesh()


@pytest.fixture
def lighting() -> FakeLighting:
    return FakeLighting()


@pytest.fixture
def wake() -> FakeWake:
    return FakeWake()


@pytest.fixture
def client(db, presence, mesh, lighting, wake) -> DevicesClient:
    return DevicesClient(
        db,
        presence=presence,
        mesh=mesh,
        lighting=lighting,
        wake=wake,
        state_timeout=0.5,
    )


@pytest.fixture
def flow(client, db) -> OnboardingFlow:
    return OnboardingFlow(client, store=db)
