from __future__ import annotations

import threading

import pytest

from gcenode.api.model import Project
from gcenode.core.exceptions import ConfigurationError
from gcenode.providers.gce.project import Memoized, project_name_from_identity, project_supplier


class TestMemoized:
    def test_computes_once(self):
        calls = []
        supplier = Memoized(lambda: calls.append(1) or "value")
        assert supplier() == "value"
        assert supplier() == "value"
        assert calls == [1]

    def test_failure_not_cached(self):
        attempts = iter([RuntimeError("boom"), "value"])

        def compute():
            outcome = next(attempts)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        supplier = Memoized(compute)
        with pytest.raises(RuntimeError):
            supplier()
        assert supplier() == "value"

    def test_reset(self):
        values = iter(["first", "second"])
        supplier = Memoized(lambda: next(values))
        assert supplier() == "first"
        supplier.reset()
        assert supplier() == "second"

    def test_concurrent_callers_compute_once(self):
        calls = []
        gate = threading.Event()

        def compute():
            gate.wait(1)
            calls.append(1)
            return "value"

        supplier = Memoized(compute)
        results = []
        threads = [threading.Thread(target=lambda: results.append(supplier())) for _ in range(8)]
        for t in threads:
            t.start()
        gate.set()
        for t in threads:
            t.join()
        assert results == ["value"] * 8
        assert calls == [1]


class TestProjectNameFromIdentity:
    def test_plain_identity_is_project(self, api):
        assert project_name_from_identity("my-project", api.projects) == "my-project"
        assert api.project_reads == 0

    def test_service_account_identity(self, api):
        api.projects_by_id["1234"] = Project(name="resolved", id="1234")
        name = project_name_from_identity("1234@developer.gserviceaccount.com", api.projects)
        assert name == "resolved"

    def test_unknown_project(self, api):
        with pytest.raises(ConfigurationError, match="'1234'"):
            project_name_from_identity("1234@developer.gserviceaccount.com", api.projects)


class TestProjectSupplier:
    def test_resolves_once(self, api):
        api.projects_by_id["1234"] = Project(name="resolved", id="1234")
        supplier = project_supplier("1234@developer.gserviceaccount.com", api.projects)
        assert supplier() == "resolved"
        assert supplier() == "resolved"
        assert api.project_reads == 1
