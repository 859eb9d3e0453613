"""Resource-access boundary consumed by the adapter.

One protocol per resource type, each already scoped to a project (and zone,
where the resource is zonal). Not-found is an explicit ``None`` for ``get``
and ``delete`` and an empty page for listings, never an exception.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gcenode.api.model import (
        Image,
        Instance,
        InstanceTemplate,
        ListOptions,
        ListPage,
        MachineType,
        Operation,
        Project,
        Zone,
    )
    from gcenode.providers.paging import PagedIterable


class ListableApi[T](Protocol):
    def list_first_page(self) -> ListPage[T]: ...

    def list_at_marker(self, marker: str | None, options: ListOptions | None = None) -> ListPage[T]: ...

    def list(self, options: ListOptions | None = None) -> PagedIterable[T]: ...


class InstanceApi(ListableApi["Instance"], Protocol):
    def get(self, name: str) -> Instance | None: ...

    def create_in_zone(self, name: str, template: InstanceTemplate, zone: str) -> Operation: ...

    def delete(self, name: str) -> Operation | None: ...


class MachineTypeApi(ListableApi["MachineType"], Protocol):
    def get(self, name: str) -> MachineType | None: ...


class ImageApi(ListableApi["Image"], Protocol):
    def get(self, name: str) -> Image | None: ...


class ZoneApi(ListableApi["Zone"], Protocol):
    def get(self, name: str) -> Zone | None: ...


class OperationApi(Protocol):
    def get(self, name: str) -> Operation | None: ...


class ProjectApi(Protocol):
    def get(self, project_id: str) -> Project | None: ...


@runtime_checkable
class ComputeApi(Protocol):
    """Factory of scoped resource apis."""

    def instances(self, project: str, zone: str) -> InstanceApi: ...

    def machine_types(self, project: str, zone: str | None = None) -> MachineTypeApi: ...

    def images(self, project: str) -> ImageApi: ...

    def zones(self, project: str) -> ZoneApi: ...

    def operations(self, project: str, zone: str | None = None) -> OperationApi: ...

    def projects(self) -> ProjectApi: ...
