from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import NotFound

from gcenode.api.model import (
    AccessConfig,
    HttpError,
    InstanceTemplate,
    ListOptions,
    NetworkInterface,
    ServiceAccount,
)
from gcenode.core.exceptions import PaginationScopeError
from gcenode.providers.gce.client import (
    GCEImageApi,
    GCEInstanceApi,
    GCEMachineTypeApi,
    GCEOperationApi,
    GCEProjectApi,
    GCEZoneApi,
    GoogleComputeApi,
    _Listing,
    to_instance,
    to_instance_resource,
    to_operation,
)
from gcenode.providers.paging import ListScope

PROJECT = "my-project"
ZONE_URI = "https://www.googleapis.com/compute/v1/projects/my-project/zones/us-central1-a"


def _status(name: str) -> SimpleNamespace:
    return SimpleNamespace(name=name)


def _raw_op(status: str, **kwargs) -> SimpleNamespace:
    fields = {
        "name": "op-1",
        "status": _status(status),
        "zone": ZONE_URI,
        "target_link": f"{ZONE_URI}/instances/web-1",
        "id": 42,
        "self_link": f"{ZONE_URI}/operations/op-1",
        "operation_type": "insert",
        "progress": 0,
        "http_error_status_code": 0,
        "http_error_message": "",
        "error": SimpleNamespace(errors=[]),
    }
    return SimpleNamespace(**{**fields, **kwargs})


def _raw_instance(name: str = "web-1") -> SimpleNamespace:
    return SimpleNamespace(
        name=name,
        zone=ZONE_URI,
        status="RUNNING",
        id=123,
        machine_type=f"{ZONE_URI}/machineTypes/n1-standard-1",
        self_link=f"{ZONE_URI}/instances/{name}",
        tags=SimpleNamespace(items=["gcenode-web"]),
        metadata=SimpleNamespace(items=[SimpleNamespace(key="ssh-keys", value="u:k")]),
        network_interfaces=[
            SimpleNamespace(
                network="global/networks/default",
                network_i_p="10.0.0.2",
                access_configs=[
                    SimpleNamespace(name="External NAT", type_="ONE_TO_ONE_NAT", nat_i_p="34.1.2.3"),
                ],
            ),
        ],
    )


def _pager(*responses: SimpleNamespace) -> SimpleNamespace:
    return SimpleNamespace(pages=iter(responses))


def _response(items, token: str = "") -> SimpleNamespace:
    return SimpleNamespace(items=list(items), next_page_token=token)


class TestToOperation:
    def test_running(self):
        op = to_operation(_raw_op("RUNNING", progress=40))
        assert op.status == "RUNNING"
        assert op.zone == "us-central1-a"
        assert op.id == "42"
        assert op.progress == 40
        assert op.http_error is None

    def test_done_with_http_error(self):
        op = to_operation(
            _raw_op("DONE", http_error_status_code=400, http_error_message="quota exceeded"),
        )
        assert op.is_done
        assert op.failed
        assert op.http_error == HttpError(400, "quota exceeded")

    def test_done_with_error_details_only(self):
        errors = SimpleNamespace(errors=[SimpleNamespace(message="a"), SimpleNamespace(message="b")])
        op = to_operation(_raw_op("DONE", error=errors))
        assert op.http_error == HttpError(500, "a; b")

    def test_running_ignores_error_fields(self):
        op = to_operation(_raw_op("RUNNING", http_error_status_code=400))
        assert op.http_error is None

    def test_global_operation(self):
        op = to_operation(_raw_op("DONE", zone=""))
        assert op.zone is None
        assert not op.failed

    def test_unknown_status_is_pending(self):
        assert to_operation(_raw_op("UNDEFINED_STATUS")).status == "PENDING"


class TestToInstance:
    def test_fields(self):
        inst = to_instance(_raw_instance())
        assert inst.name == "web-1"
        assert inst.zone == "us-central1-a"
        assert inst.id == "123"
        assert inst.tags == ("gcenode-web",)
        assert inst.metadata == (("ssh-keys", "u:k"),)
        assert inst.external_ip == "34.1.2.3"
        assert inst.network_interfaces[0].network_ip == "10.0.0.2"


class TestToInstanceResource:
    def test_body(self):
        template = InstanceTemplate(
            machine_type="zones/us-central1-a/machineTypes/n1-standard-1",
            image="projects/debian-cloud/global/images/family/debian-12",
            network_interfaces=(NetworkInterface("global/networks/default", (AccessConfig(),)),),
            metadata={"ssh-keys": "u:k"},
            tags=("gcenode-web",),
            service_accounts=(ServiceAccount("sa@p.iam.gserviceaccount.com"),),
        )
        body = to_instance_resource("web-1", template)
        assert body.name == "web-1"
        assert body.machine_type == template.machine_type
        assert body.disks[0].boot
        assert body.disks[0].initialize_params.source_image == template.image
        assert body.network_interfaces[0].access_configs[0].type_ == "ONE_TO_ONE_NAT"
        assert [(i.key, i.value) for i in body.metadata.items] == [("ssh-keys", "u:k")]
        assert list(body.tags.items) == ["gcenode-web"]
        assert body.service_accounts[0].email == "sa@p.iam.gserviceaccount.com"


class TestInstanceApi:
    def test_get_not_found(self):
        client = MagicMock()
        client.get.side_effect = NotFound("gone")
        assert GCEInstanceApi(client, PROJECT, "us-central1-a").get("web-1") is None

    def test_get(self):
        client = MagicMock()
        client.get.return_value = _raw_instance()
        inst = GCEInstanceApi(client, PROJECT, "us-central1-a").get("web-1")
        assert inst is not None
        request = client.get.call_args.kwargs["request"]
        assert (request.project, request.zone, request.instance) == (PROJECT, "us-central1-a", "web-1")

    def test_delete_not_found(self):
        client = MagicMock()
        client.delete.side_effect = NotFound("gone")
        assert GCEInstanceApi(client, PROJECT, "us-central1-a").delete("web-1") is None

    def test_delete(self):
        client = MagicMock()
        client.delete.return_value = _raw_op("PENDING")
        op = GCEInstanceApi(client, PROJECT, "us-central1-a").delete("web-1")
        assert op is not None
        assert op.status == "PENDING"

    def test_list_follows_page_tokens(self):
        client = MagicMock()
        client.list.side_effect = [
            _pager(_response([_raw_instance("a"), _raw_instance("b")], token="t1")),
            _pager(_response([_raw_instance("c")])),
        ]

        names = [i.name for i in GCEInstanceApi(client, PROJECT, "us-central1-a").list()]

        assert names == ["a", "b", "c"]
        second = client.list.call_args_list[1].kwargs["request"]
        assert second.page_token == "t1"
        assert second.project == PROJECT
        assert second.zone == "us-central1-a"

    def test_list_at_marker_carries_options(self):
        client = MagicMock()
        client.list.return_value = _pager(_response([_raw_instance("c")]))
        api = GCEInstanceApi(client, PROJECT, "us-central1-a")

        page = api.list_at_marker("t1", ListOptions(filter="status = RUNNING", max_results=10))

        assert [i.name for i in page] == ["c"]
        request = client.list.call_args.kwargs["request"]
        assert request.page_token == "t1"
        assert request.filter == "status = RUNNING"
        assert request.max_results == 10

    def test_list_starts_from_first_page(self):
        client = MagicMock()
        client.list.side_effect = [
            _pager(_response([_raw_instance("a")], token="t1")),
            _pager(_response([_raw_instance("b")])),
        ]
        api = GCEInstanceApi(client, PROJECT, "us-central1-a")
        api.list_first_page = MagicMock(wraps=api.list_first_page)
        api.list_at_marker = MagicMock(wraps=api.list_at_marker)

        assert [i.name for i in api.list()] == ["a", "b"]

        api.list_first_page.assert_called_once_with()
        api.list_at_marker.assert_called_once_with("t1", None)

    def test_list_with_options_filters_first_page(self):
        client = MagicMock()
        client.list.return_value = _pager(_response([_raw_instance("a")]))

        GCEInstanceApi(client, PROJECT, "us-central1-a").list(ListOptions(filter="name = a")).concat()

        request = client.list.call_args.kwargs["request"]
        assert request.filter == "name = a"
        assert not request.page_token

    def test_listing_base_is_abstract(self):
        with pytest.raises(TypeError):
            _Listing(ListScope(PROJECT))

    def test_list_missing_zone_is_empty(self):
        client = MagicMock()
        client.list.side_effect = NotFound("no zone")
        assert GCEInstanceApi(client, PROJECT, "nowhere").list().concat() == []

    def test_continuation_without_project(self):
        client = MagicMock()
        client.list.return_value = _pager(_response([_raw_instance("a")], token="t1"))
        with pytest.raises(PaginationScopeError):
            GCEInstanceApi(client, "", "us-central1-a").list()


class TestMachineTypeApi:
    def _raw(self, name: str) -> SimpleNamespace:
        return SimpleNamespace(
            name=name,
            self_link=f"{ZONE_URI}/machineTypes/{name}",
            zone=ZONE_URI,
            guest_cpus=2,
            memory_mb=7680,
            description="2 vCPUs",
        )

    def test_zonal_get(self):
        client = MagicMock()
        client.get.return_value = self._raw("n1-standard-2")
        mt = GCEMachineTypeApi(client, PROJECT, "us-central1-a").get("n1-standard-2")
        assert mt is not None
        assert (mt.name, mt.zone, mt.guest_cpus) == ("n1-standard-2", "us-central1-a", 2)

    def test_aggregated_list(self):
        client = MagicMock()
        response = SimpleNamespace(
            items={
                "zones/us-central1-a": SimpleNamespace(machine_types=[self._raw("a")]),
                "zones/us-central1-b": SimpleNamespace(machine_types=[self._raw("b")]),
            },
            next_page_token="",
        )
        client.aggregated_list.return_value = _pager(response)
        names = [m.name for m in GCEMachineTypeApi(client, PROJECT, None).list()]
        assert names == ["a", "b"]
        client.list.assert_not_called()

    def test_unzoned_get_filters_by_name(self):
        client = MagicMock()
        response = SimpleNamespace(
            items={"zones/us-central1-a": SimpleNamespace(machine_types=[self._raw("n1")])},
            next_page_token="",
        )
        client.aggregated_list.return_value = _pager(response)
        mt = GCEMachineTypeApi(client, PROJECT, None).get("n1")
        assert mt is not None
        request = client.aggregated_list.call_args.kwargs["request"]
        assert request.filter == "name = n1"


class TestImageAndZoneApi:
    def test_image_project_recorded(self):
        client = MagicMock()
        client.get.return_value = SimpleNamespace(
            name="debian-12", self_link="x", family="debian-12", status="READY", description="",
        )
        image = GCEImageApi(client, "google").get("debian-12")
        assert image is not None
        assert image.project == "google"

    def test_image_not_found(self):
        client = MagicMock()
        client.get.side_effect = NotFound("nope")
        assert GCEImageApi(client, "google").get("debian-12") is None

    def test_zones(self):
        client = MagicMock()
        client.list.return_value = _pager(_response([
            SimpleNamespace(
                name="us-central1-a",
                self_link=ZONE_URI,
                region="https://www.googleapis.com/compute/v1/projects/p/regions/us-central1",
                status="UP",
            ),
        ]))
        [zone] = GCEZoneApi(client, PROJECT).list()
        assert (zone.name, zone.region) == ("us-central1-a", "us-central1")


class TestOperationApi:
    def test_zonal(self):
        zonal, global_ = MagicMock(), MagicMock()
        zonal.get.return_value = _raw_op("DONE")
        op = GCEOperationApi(zonal, global_, PROJECT, "us-central1-a").get("op-1")
        assert op is not None and op.is_done
        global_.get.assert_not_called()

    def test_global(self):
        zonal, global_ = MagicMock(), MagicMock()
        global_.get.return_value = _raw_op("RUNNING", zone="")
        op = GCEOperationApi(zonal, global_, PROJECT, None).get("op-1")
        assert op is not None and op.status == "RUNNING"
        zonal.get.assert_not_called()

    def test_not_found(self):
        zonal = MagicMock()
        zonal.get.side_effect = NotFound("gone")
        assert GCEOperationApi(zonal, MagicMock(), PROJECT, "us-central1-a").get("op-1") is None


class TestProjectApi:
    def test_get(self):
        client = MagicMock()
        client.get.return_value = SimpleNamespace(name="resolved", id=1234, self_link="x")
        project = GCEProjectApi(client).get("1234")
        assert project is not None
        assert (project.name, project.id) == ("resolved", "1234")


class TestGoogleComputeApi:
    def test_scoped_apis(self):
        clients = {
            name: MagicMock()
            for name in (
                "instances_client", "machines_client", "images_client",
                "zones_client", "zone_operations_client", "global_operations_client",
                "projects_client",
            )
        }
        api = GoogleComputeApi(**clients)
        clients["instances_client"].get.return_value = _raw_instance()

        assert api.instances(PROJECT, "us-central1-a").get("web-1") is not None
        assert isinstance(api.operations(PROJECT), GCEOperationApi)
        assert isinstance(api.machine_types(PROJECT), GCEMachineTypeApi)
