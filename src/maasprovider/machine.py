# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Resolution of the machine a resource belongs to."""

from apiclient.client import Client
from apiclient.entity import Machine
from maasprovider.exceptions import MachineNotFound


def find_machine(client: Client, identifier: str) -> Machine | None:
    """Return the first machine whose system ID, hostname, or FQDN is
    `identifier`, or `None`."""
    if not identifier:
        return None
    for machine in client.machines.get():
        if identifier in (machine.system_id, machine.hostname, machine.fqdn):
            return machine
    return None


def get_machine(client: Client, identifier: str) -> Machine:
    machine = find_machine(client, identifier)
    if machine is None:
        raise MachineNotFound(identifier)
    return machine
