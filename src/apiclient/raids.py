# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""API endpoints: `RAID` and `RAIDs`."""

from apiclient.entity import (
    Raid,
    RaidParams,
    RaidsParams,
    validate_entities,
    validate_entity,
)


class RAIDs:
    """Manage all RAIDs on a machine."""

    def __init__(self, client):
        self.client = client

    @staticmethod
    def path(system_id):
        return ["nodes", system_id, "raids"]

    def get(self, system_id: str) -> list[Raid]:
        return validate_entities(
            Raid, self.client.get_json(self.path(system_id))
        )

    def create(self, system_id: str, params: RaidsParams) -> Raid:
        return validate_entity(
            Raid,
            self.client.post_json(self.path(system_id), **params.to_params()),
        )


class RAID:
    """Manage a specific RAID on a machine."""

    def __init__(self, client):
        self.client = client

    @staticmethod
    def path(system_id, raid_id):
        return ["nodes", system_id, "raid", raid_id]

    def get(self, system_id: str, raid_id: int) -> Raid:
        return validate_entity(
            Raid, self.client.get_json(self.path(system_id, raid_id))
        )

    def update(self, system_id: str, raid_id: int, params: RaidParams) -> Raid:
        return validate_entity(
            Raid,
            self.client.put_json(
                self.path(system_id, raid_id), **params.to_params()
            ),
        )

    def delete(self, system_id: str, raid_id: int) -> None:
        self.client.delete(self.path(system_id, raid_id))
