"""Resource-access layer over the google-cloud-compute clients.

Implements :class:`gcenode.api.compute.ComputeApi`. Protobuf messages are
translated into gcenode records, ``NotFound`` becomes ``None`` (or an empty
page) and listings are exposed page by page with an explicit
:class:`~gcenode.providers.paging.ListScope`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any

from google.api_core.exceptions import NotFound

from gcenode.api.model import (
    AccessConfig,
    HttpError,
    Image,
    Instance,
    InstanceTemplate,
    ListOptions,
    ListPage,
    MachineType,
    NetworkInterface,
    Operation,
    Project,
    Zone,
)
from gcenode.observability.logger import logger
from gcenode.providers.paging import ListScope, PagedIterable, advance

from .naming import short_name

log = logger.bind(provider="gce")

COMPUTE_SCOPE = "https://www.googleapis.com/auth/compute"


def _or_none[T](call: Callable[[], T]) -> T | None:
    try:
        return call()
    except NotFound:
        return None


def _first_page(pager: Any) -> Any:
    """First raw response of a GAPIC pager, without fetching further pages."""
    return next(iter(pager.pages))


def _list_request_kwargs(scope: ListScope, marker: str | None) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"project": scope.project}
    if scope.zone:
        kwargs["zone"] = scope.zone
    if marker:
        kwargs["page_token"] = marker
    if options := scope.options:
        if options.filter:
            kwargs["filter"] = options.filter
        if options.max_results:
            kwargs["max_results"] = options.max_results
    return kwargs


# =============================================================================
# Message -> record translation
# =============================================================================


def to_operation(op: Any) -> Operation:
    status = getattr(op, "status", "PENDING")
    status_name = getattr(status, "name", str(status))
    if status_name not in ("PENDING", "RUNNING", "DONE"):
        status_name = "PENDING"

    http_error = None
    if status_name == "DONE":
        code = int(getattr(op, "http_error_status_code", 0) or 0)
        errors = list(getattr(getattr(op, "error", None), "errors", None) or [])
        if code >= 400 or errors:
            message = getattr(op, "http_error_message", "") or "; ".join(
                getattr(e, "message", "") for e in errors
            )
            http_error = HttpError(status_code=code or 500, message=message)

    zone = getattr(op, "zone", "") or ""
    return Operation(
        name=op.name,
        status=status_name,  # type: ignore[arg-type]
        target_link=getattr(op, "target_link", "") or "",
        zone=short_name(zone) if zone else None,
        id=str(getattr(op, "id", "") or ""),
        self_link=getattr(op, "self_link", "") or "",
        operation_type=getattr(op, "operation_type", "") or "",
        progress=int(getattr(op, "progress", 0) or 0),
        http_error=http_error,
    )


def to_instance(inst: Any) -> Instance:
    interfaces = tuple(
        NetworkInterface(
            network=iface.network,
            network_ip=getattr(iface, "network_i_p", None) or None,
            access_configs=tuple(
                AccessConfig(
                    name=cfg.name,
                    type=getattr(cfg, "type_", "ONE_TO_ONE_NAT"),
                    nat_ip=getattr(cfg, "nat_i_p", None) or None,
                )
                for cfg in iface.access_configs
            ),
        )
        for iface in inst.network_interfaces
    )
    metadata = getattr(inst, "metadata", None)
    tags = getattr(inst, "tags", None)
    return Instance(
        name=inst.name,
        zone=short_name(inst.zone),
        status=inst.status,
        id=str(inst.id),
        machine_type=inst.machine_type,
        self_link=inst.self_link,
        tags=tuple(tags.items) if tags else (),
        metadata=tuple((i.key, i.value) for i in metadata.items) if metadata else (),
        network_interfaces=interfaces,
    )


def to_machine_type(mt: Any) -> MachineType:
    return MachineType(
        name=mt.name,
        self_link=mt.self_link,
        zone=short_name(mt.zone) if mt.zone else None,
        guest_cpus=mt.guest_cpus,
        memory_mb=mt.memory_mb,
        description=mt.description,
    )


def to_image(image: Any, project: str) -> Image:
    return Image(
        name=image.name,
        self_link=image.self_link,
        project=project,
        family=image.family,
        status=image.status,
        description=image.description,
    )


def to_zone(zone: Any) -> Zone:
    return Zone(
        name=zone.name,
        self_link=zone.self_link,
        region=short_name(zone.region) if zone.region else "",
        status=zone.status,
    )


def to_instance_resource(name: str, template: InstanceTemplate) -> Any:
    from google.cloud import compute_v1

    instance = compute_v1.Instance(
        name=name,
        machine_type=template.machine_type,
        disks=[
            compute_v1.AttachedDisk(
                boot=True,
                auto_delete=True,
                initialize_params=compute_v1.AttachedDiskInitializeParams(
                    source_image=template.image,
                ),
            ),
        ],
        network_interfaces=[
            compute_v1.NetworkInterface(
                network=iface.network,
                access_configs=[
                    compute_v1.AccessConfig(name=cfg.name, type_=cfg.type)
                    for cfg in iface.access_configs
                ],
            )
            for iface in template.network_interfaces
        ],
        metadata=compute_v1.Metadata(
            items=[compute_v1.Items(key=k, value=v) for k, v in template.metadata.items()],
        ),
        tags=compute_v1.Tags(items=list(template.tags)),
        service_accounts=[
            compute_v1.ServiceAccount(email=sa.email, scopes=list(sa.scopes))
            for sa in template.service_accounts
        ],
    )
    if template.description:
        instance.description = template.description
    return instance


# =============================================================================
# Scoped resource apis
# =============================================================================


class _Listing[T](ABC):
    """Shared paging for scoped resource apis.

    ``list`` starts from ``list_first_page`` (or the first page under the
    given options) and continues through ``list_at_marker``.
    """

    def __init__(self, scope: ListScope) -> None:
        self._scope = scope

    @abstractmethod
    def _page(self, scope: ListScope, marker: str | None) -> ListPage[T]: ...

    def list_first_page(self) -> ListPage[T]:
        return self._page(self._scope, None)

    def list_at_marker(self, marker: str | None, options: ListOptions | None = None) -> ListPage[T]:
        scope = ListScope(self._scope.project, self._scope.zone, options or self._scope.options)
        return self._page(scope, marker)

    def list(self, options: ListOptions | None = None) -> PagedIterable[T]:
        scope = ListScope(self._scope.project, self._scope.zone, options or self._scope.options)
        first = self.list_first_page() if options is None else self.list_at_marker(None, options)
        return advance(first, scope, lambda marker, s: self.list_at_marker(marker, s.options))


def _collect_page[T](response: Any, convert: Callable[[Any], T]) -> ListPage[T]:
    return ListPage(
        items=tuple(convert(item) for item in response.items),
        next_marker=response.next_page_token or None,
    )


class GCEInstanceApi(_Listing[Instance]):
    def __init__(self, client: Any, project: str, zone: str) -> None:
        super().__init__(ListScope(project, zone))
        self._client = client
        self._project = project
        self._zone = zone

    def _page(self, scope: ListScope, marker: str | None) -> ListPage[Instance]:
        from google.cloud import compute_v1

        request = compute_v1.ListInstancesRequest(**_list_request_kwargs(scope, marker))
        response = _or_none(lambda: _first_page(self._client.list(request=request)))
        return _collect_page(response, to_instance) if response is not None else ListPage()

    def get(self, name: str) -> Instance | None:
        from google.cloud import compute_v1

        request = compute_v1.GetInstanceRequest(
            project=self._project, zone=self._zone, instance=name,
        )
        found = _or_none(lambda: self._client.get(request=request))
        return to_instance(found) if found is not None else None

    def create_in_zone(self, name: str, template: InstanceTemplate, zone: str) -> Operation:
        from google.cloud import compute_v1

        request = compute_v1.InsertInstanceRequest(
            project=self._project,
            zone=zone,
            instance_resource=to_instance_resource(name, template),
        )
        operation = to_operation(self._client.insert(request=request))
        log.debug("Submitted insert of {name}: {op}", name=name, op=operation.name)
        return operation

    def delete(self, name: str) -> Operation | None:
        from google.cloud import compute_v1

        request = compute_v1.DeleteInstanceRequest(
            project=self._project, zone=self._zone, instance=name,
        )
        found = _or_none(lambda: self._client.delete(request=request))
        return to_operation(found) if found is not None else None


class GCEMachineTypeApi(_Listing[MachineType]):
    """Machine types of a zone, or of every zone when no zone is given."""

    def __init__(self, client: Any, project: str, zone: str | None) -> None:
        super().__init__(ListScope(project, zone))
        self._client = client
        self._project = project
        self._zone = zone

    def _page(self, scope: ListScope, marker: str | None) -> ListPage[MachineType]:
        from google.cloud import compute_v1

        if scope.zone:
            request = compute_v1.ListMachineTypesRequest(**_list_request_kwargs(scope, marker))
            response = _or_none(lambda: _first_page(self._client.list(request=request)))
            return _collect_page(response, to_machine_type) if response is not None else ListPage()

        request = compute_v1.AggregatedListMachineTypesRequest(**_list_request_kwargs(scope, marker))
        response = _or_none(lambda: _first_page(self._client.aggregated_list(request=request)))
        if response is None:
            return ListPage()
        items = tuple(
            to_machine_type(mt)
            for scoped in response.items.values()
            for mt in scoped.machine_types
        )
        return ListPage(items=items, next_marker=response.next_page_token or None)

    def get(self, name: str) -> MachineType | None:
        from google.cloud import compute_v1

        if self._zone:
            request = compute_v1.GetMachineTypeRequest(
                project=self._project, zone=self._zone, machine_type=name,
            )
            found = _or_none(lambda: self._client.get(request=request))
            return to_machine_type(found) if found is not None else None

        return next(
            iter(self.list(ListOptions(filter=f"name = {name}"))),
            None,
        )


class GCEImageApi(_Listing[Image]):
    def __init__(self, client: Any, project: str) -> None:
        super().__init__(ListScope(project))
        self._client = client
        self._project = project

    def _page(self, scope: ListScope, marker: str | None) -> ListPage[Image]:
        from google.cloud import compute_v1

        request = compute_v1.ListImagesRequest(**_list_request_kwargs(scope, marker))
        response = _or_none(lambda: _first_page(self._client.list(request=request)))
        if response is None:
            return ListPage()
        return _collect_page(response, lambda i: to_image(i, self._project))

    def get(self, name: str) -> Image | None:
        from google.cloud import compute_v1

        request = compute_v1.GetImageRequest(project=self._project, image=name)
        found = _or_none(lambda: self._client.get(request=request))
        return to_image(found, self._project) if found is not None else None


class GCEZoneApi(_Listing[Zone]):
    def __init__(self, client: Any, project: str) -> None:
        super().__init__(ListScope(project))
        self._client = client
        self._project = project

    def _page(self, scope: ListScope, marker: str | None) -> ListPage[Zone]:
        from google.cloud import compute_v1

        request = compute_v1.ListZonesRequest(**_list_request_kwargs(scope, marker))
        response = _or_none(lambda: _first_page(self._client.list(request=request)))
        return _collect_page(response, to_zone) if response is not None else ListPage()

    def get(self, name: str) -> Zone | None:
        from google.cloud import compute_v1

        request = compute_v1.GetZoneRequest(project=self._project, zone=name)
        found = _or_none(lambda: self._client.get(request=request))
        return to_zone(found) if found is not None else None


class GCEOperationApi:
    """Operations endpoint: zonal when a zone is given, global otherwise."""

    def __init__(self, zone_client: Any, global_client: Any, project: str, zone: str | None) -> None:
        self._zone_client = zone_client
        self._global_client = global_client
        self._project = project
        self._zone = zone

    def get(self, name: str) -> Operation | None:
        from google.cloud import compute_v1

        if self._zone:
            request = compute_v1.GetZoneOperationRequest(
                project=self._project, zone=self._zone, operation=name,
            )
            found = _or_none(lambda: self._zone_client.get(request=request))
        else:
            request = compute_v1.GetGlobalOperationRequest(project=self._project, operation=name)
            found = _or_none(lambda: self._global_client.get(request=request))
        return to_operation(found) if found is not None else None


class GCEProjectApi:
    def __init__(self, client: Any) -> None:
        self._client = client

    def get(self, project_id: str) -> Project | None:
        from google.cloud import compute_v1

        request = compute_v1.GetProjectRequest(project=project_id)
        found = _or_none(lambda: self._client.get(request=request))
        if found is None:
            return None
        return Project(name=found.name, id=str(found.id), self_link=found.self_link)


class GoogleComputeApi:
    """ComputeApi backed by sync google-cloud-compute clients."""

    def __init__(
        self,
        *,
        instances_client: Any,
        machines_client: Any,
        images_client: Any,
        zones_client: Any,
        zone_operations_client: Any,
        global_operations_client: Any,
        projects_client: Any,
    ) -> None:
        self._instances = instances_client
        self._machines = machines_client
        self._images = images_client
        self._zones = zones_client
        self._zone_operations = zone_operations_client
        self._global_operations = global_operations_client
        self._projects = projects_client

    @classmethod
    def create(cls, credentials_path: str | None = None, scopes: Iterable[str] = (COMPUTE_SCOPE,)) -> GoogleComputeApi:
        from google.cloud import compute_v1

        kwargs: dict[str, Any] = {}
        if credentials_path:
            from google.oauth2 import service_account

            kwargs["credentials"] = service_account.Credentials.from_service_account_file(
                credentials_path, scopes=list(scopes),
            )
            log.debug("Loaded service account key from {path}", path=credentials_path)

        return cls(
            instances_client=compute_v1.InstancesClient(**kwargs),
            machines_client=compute_v1.MachineTypesClient(**kwargs),
            images_client=compute_v1.ImagesClient(**kwargs),
            zones_client=compute_v1.ZonesClient(**kwargs),
            zone_operations_client=compute_v1.ZoneOperationsClient(**kwargs),
            global_operations_client=compute_v1.GlobalOperationsClient(**kwargs),
            projects_client=compute_v1.ProjectsClient(**kwargs),
        )

    def instances(self, project: str, zone: str) -> GCEInstanceApi:
        return GCEInstanceApi(self._instances, project, zone)

    def machine_types(self, project: str, zone: str | None = None) -> GCEMachineTypeApi:
        return GCEMachineTypeApi(self._machines, project, zone)

    def images(self, project: str) -> GCEImageApi:
        return GCEImageApi(self._images, project)

    def zones(self, project: str) -> GCEZoneApi:
        return GCEZoneApi(self._zones, project)

    def operations(self, project: str, zone: str | None = None) -> GCEOperationApi:
        return GCEOperationApi(self._zone_operations, self._global_operations, project, zone)

    def projects(self) -> GCEProjectApi:
        return GCEProjectApi(self._projects)
