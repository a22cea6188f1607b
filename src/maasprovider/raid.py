# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Resource: `maas_raid`.

A RAID belongs to one machine and is addressed by its numeric ID or its
name within that machine. Membership changes are sent to MAAS as deltas:
what to add and what to remove, for each of the block devices, partitions,
spare devices, and spare partitions.
"""

from collections.abc import Iterable

from apiclient.client import Client
from apiclient.entity import (
    BlockDevice,
    Machine,
    Raid,
    RaidParams,
    RaidsParams,
)
from maasprovider.context import Context
from maasprovider.exceptions import ImportIDFormatException, RaidNotFound
from maasprovider.machine import get_machine
from maasprovider.resource import Resource, ResourceData
from maasprovider.schema import RAID_SCHEMA, RaidConfig

# Configuration field -> the `Raid` property holding the same members.
MEMBER_FIELDS = {
    "block_devices": "block_devices",
    "partitions": "partitions",
    "spare_devices": "spare_block_devices",
    "spare_partitions": "spare_partitions",
}
PARTITION_FIELDS = frozenset({"partitions", "spare_partitions"})


def find_raid(client: Client, system_id: str, identifier: str) -> Raid | None:
    """Return the first RAID on the machine whose ID or name is
    `identifier`, or `None`.

    The order is whatever MAAS returns.
    """
    for raid in client.raids.get(system_id):
        if str(raid.id) == identifier or raid.name == identifier:
            return raid
    return None


def get_raid(client: Client, system_id: str, identifier: str) -> Raid:
    raid = find_raid(client, system_id, identifier)
    if raid is None:
        raise RaidNotFound(identifier)
    return raid


def parse_import_id(import_id: str) -> tuple[str, str]:
    """Split an import ID of the form ``MACHINE:RAID``."""
    parts = import_id.split(":")
    if len(parts) != 2 or not all(parts):
        raise ImportIDFormatException(import_id)
    machine, raid = parts
    return machine, raid


def compute_additions(
    old: Iterable[BlockDevice],
    new: Iterable[str],
    inventory: Iterable[BlockDevice] = (),
) -> list[str]:
    """Members of `new` that are not in `old`, in `new` order.

    A configured member matches a remote one by ID or by name. Members that
    name the same device of `inventory`, or are spelled the same, are only
    added once.
    """
    old, inventory = list(old), list(inventory)
    additions, seen = [], set()
    for identifier in new:
        if any(device.matches(identifier) for device in old):
            continue
        for device in inventory:
            if device.matches(identifier):
                key = device.id
                break
        else:
            key = identifier
        if key not in seen:
            seen.add(key)
            additions.append(identifier)
    return additions


def compute_removals(
    old: Iterable[BlockDevice], new: Iterable[str]
) -> list[str]:
    """IDs of the members of `old` that are not in `new`, in `old` order."""
    new = list(new)
    return [
        str(device.id)
        for device in old
        if not any(device.matches(identifier) for identifier in new)
    ]


def reconcile_members(
    configured: Iterable[str], remote: Iterable[BlockDevice]
) -> list[str]:
    """Return the remote members, spelled as configured where possible.

    Configured members still present keep their spelling (ID or name) and
    order; members only known remotely follow, by ID. Configured members
    that MAAS no longer reports are dropped, which shows up as drift.
    """
    remaining = list(remote)
    members = []
    for identifier in configured:
        for device in remaining:
            if device.matches(identifier):
                members.append(identifier)
                remaining.remove(device)
                break
    members.extend(str(device.id) for device in remaining)
    return members


def get_raids_params(config: RaidConfig) -> RaidsParams:
    return RaidsParams(
        name=config.name,
        level=config.level,
        block_devices=config.block_devices,
        partitions=config.partitions,
        spare_devices=config.spare_devices,
        spare_partitions=config.spare_partitions,
    )


def get_add_raid_params(
    config: RaidConfig,
    raid: Raid,
    uuid: str = "",
    inventory: Iterable[BlockDevice] = (),
) -> RaidParams:
    inventory = list(inventory)
    return RaidParams(
        name=config.name or raid.name,
        uuid=uuid,
        **{
            f"add_{field}": compute_additions(
                getattr(raid, remote),
                getattr(config, field),
                [
                    device
                    for device in inventory
                    if device.is_partition == (field in PARTITION_FIELDS)
                ],
            )
            for field, remote in MEMBER_FIELDS.items()
        },
    )


def get_remove_raid_params(
    config: RaidConfig, raid: Raid, uuid: str = ""
) -> RaidParams:
    return RaidParams(
        name=config.name or raid.name,
        uuid=uuid,
        **{
            f"remove_{field}": compute_removals(
                getattr(raid, remote), getattr(config, field)
            )
            for field, remote in MEMBER_FIELDS.items()
        },
    )


def get_update_raid_requests(
    config: RaidConfig,
    raid: Raid,
    uuid: str = "",
    inventory: Iterable[BlockDevice] = (),
) -> list[RaidParams]:
    """Return the update requests that bring `raid` in line with `config`.

    MAAS only accepts free devices as additions, so removals go first, in
    their own request; a member moving between the active and spare lists
    is free by the time it is added back. Without removals a single request
    is sent, also when there is nothing to add, to apply the name and UUID.
    """
    removals = get_remove_raid_params(config, raid, uuid)
    additions = get_add_raid_params(config, raid, uuid, inventory)
    requests = []
    if any(getattr(removals, f"remove_{field}") for field in MEMBER_FIELDS):
        requests.append(removals)
    if not requests or any(
        getattr(additions, f"add_{field}") for field in MEMBER_FIELDS
    ):
        requests.append(additions)
    return requests


def raid_state(
    machine: Machine, raid: Raid, config: RaidConfig | None = None
) -> dict:
    state = {
        "id": str(raid.id),
        "machine": machine.system_id,
        "name": raid.name,
        "uuid": raid.uuid,
    }
    for field, remote in MEMBER_FIELDS.items():
        configured = [] if config is None else getattr(config, field)
        state[field] = reconcile_members(configured, getattr(raid, remote))
    return state


class RaidResource(Resource):
    """Manage the RAIDs of MAAS machines."""

    schema = RAID_SCHEMA

    def create(self, data: ResourceData, context: Context):
        client = context.client
        machine = get_machine(client, data.config.machine)
        raid = client.raids.create(
            machine.system_id, get_raids_params(data.config)
        )
        data.id = str(raid.id)
        context.logger.info(
            "Created RAID", system_id=machine.system_id, raid_id=raid.id
        )
        self.read(data, context)

    def read(self, data: ResourceData, context: Context):
        client = context.client
        machine = get_machine(client, data.get("machine"))
        raid = get_raid(client, machine.system_id, data.id)
        data.set_state(raid_state(machine, raid, data.config))

    def update(self, data: ResourceData, context: Context):
        client = context.client
        machine = get_machine(client, data.get("machine"))
        raid = get_raid(client, machine.system_id, data.id)
        requests = get_update_raid_requests(
            data.config,
            raid,
            uuid=data.get("uuid") or raid.uuid,
            inventory=client.block_devices.get(machine.system_id),
        )
        for params in requests:
            client.raid.update(machine.system_id, raid.id, params)
        context.logger.info(
            "Updated RAID", system_id=machine.system_id, raid_id=raid.id
        )
        self.read(data, context)

    def delete(self, data: ResourceData, context: Context):
        client = context.client
        machine = get_machine(client, data.get("machine"))
        raid = get_raid(client, machine.system_id, data.id)
        client.raid.delete(machine.system_id, raid.id)
        context.logger.info(
            "Deleted RAID", system_id=machine.system_id, raid_id=raid.id
        )
        data.clear()

    def import_state(self, data: ResourceData, context: Context):
        machine_identifier, raid_identifier = parse_import_id(data.id)
        client = context.client
        machine = get_machine(client, machine_identifier)
        raid = get_raid(client, machine.system_id, raid_identifier)
        data.set_state(raid_state(machine, raid, data.config))
