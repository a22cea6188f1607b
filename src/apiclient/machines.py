# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""API endpoint: `machines`."""

from apiclient.entity import Machine, validate_entities


class Machines:
    """Manage the collection of all the machines in MAAS."""

    path = "machines"

    def __init__(self, client):
        self.client = client

    def get(self, **params) -> list[Machine]:
        """List machines, optionally filtered by `params`."""
        return validate_entities(
            Machine, self.client.get_json(self.path, **params)
        )
