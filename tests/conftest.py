from __future__ import annotations

import pytest

from gcenode.api.model import Image, MachineType, Zone
from gcenode.providers.gce.adapter import GCEComputeServiceAdapter

from fakes import PROJECT, ZONE, FakeClock, FakeComputeApi


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api() -> FakeComputeApi:
    fake = FakeComputeApi()
    fake.zones_by_project[PROJECT] = [
        Zone(name=ZONE, region="us-central1", status="UP"),
        Zone(name="us-central1-b", region="us-central1", status="UP"),
    ]
    fake.machine_types_by_project[PROJECT] = {
        "n1-standard-1": MachineType(
            name="n1-standard-1",
            self_link=f"projects/{PROJECT}/zones/{ZONE}/machineTypes/n1-standard-1",
            zone=ZONE,
            guest_cpus=1,
            memory_mb=3840,
        ),
    }
    fake.images_by_project["google"] = {
        "debian-12": Image(name="debian-12", project="google"),
    }
    return fake


@pytest.fixture
def adapter(api: FakeComputeApi, clock: FakeClock) -> GCEComputeServiceAdapter:
    return GCEComputeServiceAdapter(
        api,
        lambda: PROJECT,
        operation_interval=2.0,
        operation_timeout=10.0,
        sleep=clock.sleep,
        clock=clock,
    )
