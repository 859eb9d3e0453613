"""Compute Engine node adapter.

Maps the generic create/list/destroy node contract onto Compute Engine's
operation-based API. Creation submits an insert, optionally waits for the
operation to reach DONE, then re-reads the instance until it is visible,
since reads can lag behind a completed insert. Submitted mutating calls are
never resubmitted.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from gcenode.api.model import AccessConfig, InstanceTemplate, NetworkInterface
from gcenode.api.template import NodeAndInitialCredentials, TemplateOptions
from gcenode.core.exceptions import (
    InvalidTemplateError,
    ProvisioningError,
    UnsupportedOperationError,
    VisibilityTimeoutError,
)
from gcenode.observability.logger import logger
from gcenode.providers.wait import poll_until_present

from .credentials import derive_login_credentials, metadata_from_options
from .naming import GroupNamingConvention, ZoneScopedId, network_uri
from .operations import OperationDonePredicate, OperationWaiter
from .project import project_supplier

if TYPE_CHECKING:
    from gcenode.api.compute import ComputeApi
    from gcenode.api.model import Image, Instance, MachineType, Zone
    from gcenode.api.template import Template

    from .config import GCE

log = logger.bind(provider="gce")


class GCEComputeServiceAdapter:
    """Node adapter for one Compute Engine project.

    Holds only read-only configuration, the resource api and the memoized
    project name; calls share no other state.
    """

    def __init__(
        self,
        api: ComputeApi,
        project: Callable[[], str],
        *,
        operation_interval: float,
        operation_timeout: float,
        image_project: str = "google",
        naming: GroupNamingConvention | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._api = api
        self._project = project
        self._interval = operation_interval
        self._timeout = operation_timeout
        self._image_project = image_project
        self._naming = naming or GroupNamingConvention()
        self._sleep = sleep
        self._clock = clock
        self._operations = OperationWaiter(
            OperationDonePredicate(api, project),
            timeout=operation_timeout,
            interval=operation_interval,
            sleep=sleep,
            clock=clock,
        )

    @classmethod
    def create(cls, config: GCE, api: ComputeApi) -> GCEComputeServiceAdapter:
        project = project_supplier(config.resolved_identity(), api.projects)
        return cls(
            api,
            project,
            operation_interval=config.operation_interval,
            operation_timeout=config.operation_timeout,
            image_project=config.image_project,
            naming=GroupNamingConvention(config.group_prefix),
        )

    @property
    def project(self) -> str:
        return self._project()

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create_node_with_group_encoded_into_name(
        self, group: str, name: str, template: Template,
    ) -> NodeAndInitialCredentials:
        options = template.options
        if not isinstance(options, TemplateOptions):
            raise InvalidTemplateError(
                f"template options {type(options).__name__} lack the GCE capability set"
            )
        if not options.network:
            raise InvalidTemplateError("network was not present in template options")
        location = template.location
        if location.scope != "ZONE":
            raise InvalidTemplateError(
                f"location must be a ZONE, this location is not valid: {location}"
            )
        if not template.image.uri:
            raise InvalidTemplateError(f"image {template.image.id} has no URI")

        project = self._project()
        zone = location.id

        machine_type = self._api.machine_types(project, zone).get(template.hardware.name)
        if machine_type is None:
            raise ProvisioningError(
                f"machine type {template.hardware.name} not found in {project}/{zone}"
            )

        derived = derive_login_credentials(template.image, options)
        instance_template = InstanceTemplate(
            machine_type=machine_type.self_link or machine_type.name,
            image=template.image.uri,
            network_interfaces=(self._network_interface(project, options),),
            metadata=metadata_from_options(options, derived),
            tags=self._tags(group, options),
            service_accounts=tuple(options.service_accounts),
        )

        instances = self._api.instances(project, zone)
        log.info(
            "Creating instance {name} in {zone} (group={group}, type={mt})",
            name=name, zone=zone, group=group, mt=machine_type.name,
        )
        operation = instances.create_in_zone(name, instance_template, zone)

        if options.block_until_running:
            self._operations.wait(operation)

        visible = poll_until_present(
            lambda: instances.get(name),
            timeout=self._timeout,
            interval=self._interval,
            sleep=self._sleep,
            clock=self._clock,
            description=f"instance {zone}/{name}",
        )
        if visible.value is None:
            raise VisibilityTimeoutError(zone, name, self._timeout)

        node_id = ZoneScopedId(zone, name).slash_encode()
        log.info(
            "Instance {id} is visible at {ip}",
            id=node_id, ip=visible.value.external_ip or "no external ip",
        )
        return NodeAndInitialCredentials(
            node=visible.value,
            node_id=node_id,
            credentials=derived.credentials,
        )

    def _network_interface(self, project: str, options: TemplateOptions) -> NetworkInterface:
        network = network_uri(project, options.network)  # type: ignore[arg-type]
        if options.enable_nat:
            return NetworkInterface(network=network, access_configs=(AccessConfig(),))
        return NetworkInterface(network=network)

    def _tags(self, group: str, options: TemplateOptions) -> tuple[str, ...]:
        group_tag = self._naming.shared_name_for_group(group)
        tags = list(options.tags)
        if group_tag not in tags:
            tags.append(group_tag)
        return tuple(tags)

    # -------------------------------------------------------------------------
    # Catalogue
    # -------------------------------------------------------------------------

    def list_hardware_profiles(self) -> list[MachineType]:
        return self._api.machine_types(self._project()).list().concat()

    def list_images(self) -> set[Image]:
        images = set(self._api.images(self._project()).list())
        images.update(self._api.images(self._image_project).list())
        return images

    def get_image(self, id: str) -> Image | None:
        own = self._api.images(self._project()).get(id)
        if own is not None:
            return own
        return self._api.images(self._image_project).get(id)

    def list_locations(self) -> list[Zone]:
        return self._api.zones(self._project()).list().concat()

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def get_node(self, id: str) -> Instance | None:
        node = ZoneScopedId.from_slash_encoded(id)
        return self._api.instances(self._project(), node.zone).get(node.name)

    def list_nodes(self) -> set[Instance]:
        project = self._project()
        nodes: set[Instance] = set()
        for zone in self._api.zones(project).list():
            nodes.update(self._api.instances(project, zone.name).list())
        return nodes

    def list_nodes_by_ids(self, ids: Iterable[str]) -> list[Instance]:
        wanted = set(ids)
        return [
            node for node in self.list_nodes()
            if node.name in wanted or ZoneScopedId(node.zone, node.name).slash_encode() in wanted
        ]

    def destroy_node(self, id: str) -> None:
        node = ZoneScopedId.from_slash_encoded(id)
        operation = self._api.instances(self._project(), node.zone).delete(node.name)
        if operation is None:
            log.info("Instance {id} already gone", id=id)
            return
        log.info("Deleting instance {id}", id=id)
        self._operations.wait(operation)

    def reboot_node(self, id: str) -> None:
        raise UnsupportedOperationError("reboot is not supported by GCE")

    def resume_node(self, id: str) -> None:
        raise UnsupportedOperationError("resume is not supported by GCE")

    def suspend_node(self, id: str) -> None:
        raise UnsupportedOperationError("suspend is not supported by GCE")
