# Copyright 2012-2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""An in-memory MAAS server that looks like a `MAASDispatcher`.

It implements just enough of the machines and RAID endpoints for the
provider to be exercised without going via a real HTTP server, and records
every request it receives.
"""

from dataclasses import dataclass, field
import http.client
from io import BytesIO
import json
import re
from urllib.error import HTTPError
from urllib.parse import parse_qs, urlparse

from maastesting.factory import factory

API_PREFIX = re.compile(r"^.*/api/[0-9.]+/")


@dataclass
class FakeRequest:
    method: str
    path: str
    params: dict = field(default_factory=dict)
    headers: dict = field(default_factory=dict)


@dataclass
class FakeMachine:
    data: dict
    # The disk holding every partition.
    disk: dict = field(default_factory=dict)
    # Block devices and partitions that can be RAID members, by ID.
    inventory: dict = field(default_factory=dict)
    raids: dict = field(default_factory=dict)


class FakeMAASServer:
    """Dispatch queries to an in-memory model of MAAS."""

    def __init__(self):
        self.machines = {}
        self.requests = []

    def add_machine(self, block_devices=(), partitions=(), **kwargs):
        """Add a machine, with free devices named as given."""
        machine = FakeMachine(
            factory.make_machine(**kwargs),
            factory.make_block_device(name="vda"),
        )
        for name in block_devices:
            self.add_device(machine, factory.make_block_device(name=name))
        for name in partitions:
            self.add_device(machine, factory.make_partition(name=name))
        self.machines[machine.data["system_id"]] = machine
        return machine

    def add_device(self, machine, device):
        machine.inventory[device["id"]] = device
        return device

    def device(self, machine, name):
        """Return the device or partition called `name`."""
        for device in machine.inventory.values():
            if device["name"] == name:
                return device
        raise KeyError(name)

    def add_raid(self, machine, devices=(), spare_devices=(), **kwargs):
        """Add a RAID made of the named devices."""
        raid = factory.make_raid(
            system_id=machine.data["system_id"],
            devices=[self.device(machine, name) for name in devices],
            spare_devices=[
                self.device(machine, name) for name in spare_devices
            ],
            **kwargs,
        )
        machine.raids[raid["id"]] = raid
        return raid

    def requests_for(self, method):
        return [
            request for request in self.requests if request.method == method
        ]

    def dispatch_query(
        self, request_url, headers, method="GET", data=None, insecure=False
    ):
        url = urlparse(request_url)
        path = API_PREFIX.sub("", url.path).strip("/")
        params = parse_qs(url.query, keep_blank_values=True)
        if data:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            params.update(parse_qs(data, keep_blank_values=True))
        self.requests.append(FakeRequest(method, path, params, dict(headers)))
        status, body = self.handle(method, path.split("/"), params)
        if status >= 400:
            raise HTTPError(
                request_url,
                status,
                http.client.responses[status],
                {},
                BytesIO(body.encode("utf-8")),
            )
        return BytesIO(body.encode("utf-8"))

    def handle(self, method, parts, params):
        match parts:
            case ["machines"] if method == "GET":
                return self.ok(
                    [machine.data for machine in self.machines.values()]
                )
            case ["nodes", system_id, "blockdevices"] if method == "GET":
                machine = self.machines.get(system_id)
                if machine is None:
                    return self.not_found()
                return self.ok(self.list_block_devices(machine))
            case ["nodes", system_id, "raids"]:
                machine = self.machines.get(system_id)
                if machine is None:
                    return self.not_found()
                if method == "GET":
                    return self.ok(list(machine.raids.values()))
                elif method == "POST":
                    return self.create_raid(machine, params)
            case ["nodes", system_id, "raid", raid_id]:
                machine = self.machines.get(system_id)
                raid = None
                if machine is not None and raid_id.isdigit():
                    raid = machine.raids.get(int(raid_id))
                if raid is None:
                    return self.not_found()
                if method == "GET":
                    return self.ok(raid)
                elif method == "PUT":
                    return self.update_raid(machine, raid, params)
                elif method == "DELETE":
                    del machine.raids[raid["id"]]
                    return http.client.NO_CONTENT, ""
        return self.not_found()

    def ok(self, document):
        return http.client.OK, json.dumps(document)

    def not_found(self):
        return http.client.NOT_FOUND, "Not Found"

    def bad_request(self, errors):
        return http.client.BAD_REQUEST, json.dumps(errors)

    def resolve(self, identifiers, candidates):
        """Return the `candidates` named (by ID or name) in `identifiers`,
        and the identifiers that match none of them."""
        found, unknown = [], []
        for identifier in identifiers:
            for device in candidates:
                if identifier in (str(device["id"]), device["name"]):
                    found.append(device)
                    break
            else:
                unknown.append(identifier)
        return found, unknown

    def resolve_all(self, params, choices):
        resolved, errors = {}, {}
        for name, candidates in choices.items():
            found, unknown = self.resolve(params.get(name, []), candidates)
            resolved[name] = found
            if unknown:
                errors[name] = [
                    f"Select a valid choice. {identifier} is not one of "
                    "the available choices."
                    for identifier in unknown
                ]
        return resolved, errors

    def free_devices(self, machine, partitions):
        """Inventory entries of the given kind that no RAID uses."""
        used = [
            device["id"]
            for raid in machine.raids.values()
            for device in raid["devices"] + raid["spare_devices"]
        ]
        return [
            device
            for device in machine.inventory.values()
            if (device["type"] == "partition") == partitions
            and device["id"] not in used
        ]

    def list_block_devices(self, machine):
        """Free-standing devices, and the disk holding every partition.

        Partitions are listed without a name, as MAAS does, but with a
        by-dname path ending with it.
        """
        devices = [
            dict(device, path=f"/dev/disk/by-dname/{device['name']}")
            for device in machine.inventory.values()
            if device["type"] != "partition"
        ]
        partitions = [
            {
                "id": device["id"],
                "type": "partition",
                "path": f"/dev/disk/by-dname/{device['name']}",
            }
            for device in machine.inventory.values()
            if device["type"] == "partition"
        ]
        disk = dict(
            machine.disk,
            path=f"/dev/disk/by-dname/{machine.disk['name']}",
            partitions=partitions,
        )
        return [disk, *(dict(device, partitions=[]) for device in devices)]

    def create_raid(self, machine, params):
        free_devices = self.free_devices(machine, partitions=False)
        free_partitions = self.free_devices(machine, partitions=True)
        resolved, errors = self.resolve_all(
            params,
            {
                "block_devices": free_devices,
                "partitions": free_partitions,
                "spare_devices": free_devices,
                "spare_partitions": free_partitions,
            },
        )
        if "level" not in params:
            errors["level"] = ["This field is required."]
        if errors:
            return self.bad_request(errors)
        [name] = params.get("name", [f"md{len(machine.raids)}"])
        raid = factory.make_raid(
            name=name,
            level=params["level"][0],
            system_id=machine.data["system_id"],
            devices=resolved["block_devices"] + resolved["partitions"],
            spare_devices=(
                resolved["spare_devices"] + resolved["spare_partitions"]
            ),
        )
        machine.raids[raid["id"]] = raid
        return self.ok(raid)

    def update_raid(self, machine, raid, params):
        """Apply the changes in `params` to `raid`.

        Like MAAS, every choice is checked before any change is made: only
        free devices can be added, and only members removed.
        """
        members = raid["devices"] + raid["spare_devices"]
        choices = {}
        for name, partitions in (
            ("block_devices", False),
            ("partitions", True),
            ("spare_devices", False),
            ("spare_partitions", True),
        ):
            choices[f"add_{name}"] = self.free_devices(machine, partitions)
            choices[f"remove_{name}"] = [
                device
                for device in members
                if (device["type"] == "partition") == partitions
            ]
        resolved, errors = self.resolve_all(params, choices)
        if errors:
            return self.bad_request(errors)
        for name, devices in resolved.items():
            action, _, kind = name.partition("_")
            key = "spare_devices" if kind.startswith("spare") else "devices"
            for device in devices:
                if action == "add" and device not in raid[key]:
                    raid[key].append(device)
                elif action == "remove" and device in raid[key]:
                    raid[key].remove(device)
        if "name" in params:
            raid["name"] = params["name"][0]
        if "uuid" in params:
            raid["uuid"] = params["uuid"][0]
        return self.ok(raid)
