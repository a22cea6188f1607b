# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""API endpoint: `BlockDevices`."""

from apiclient.entity import BlockDevice, validate_entities


class BlockDevices:
    """The block devices of a machine."""

    def __init__(self, client):
        self.client = client

    @staticmethod
    def path(system_id):
        return ["nodes", system_id, "blockdevices"]

    def get(self, system_id: str) -> list[BlockDevice]:
        """Return every block device of the machine, each followed by its
        partitions."""
        documents = self.client.get_json(self.path(system_id))
        devices = []
        for device, document in zip(
            validate_entities(BlockDevice, documents), documents
        ):
            devices.append(device)
            devices.extend(
                validate_entities(
                    BlockDevice, document.get("partitions") or []
                )
            )
        return devices
