# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""A single handle on every MAAS API endpoint used by the provider."""

__all__ = ["Client", "get_client"]

from apiclient.blockdevices import BlockDevices
from apiclient.machines import Machines
from apiclient.maas_client import (
    api_url,
    MAASClient,
    MAASDispatcher,
    MAASOAuth,
)
from apiclient.raids import RAID, RAIDs


class Client:
    def __init__(self, maas_client: MAASClient):
        self.maas_client = maas_client
        self.machines = Machines(maas_client)
        self.block_devices = BlockDevices(maas_client)
        self.raids = RAIDs(maas_client)
        self.raid = RAID(maas_client)


def get_client(
    url: str,
    api_key: str,
    api_version: str = "2.0",
    insecure: bool = False,
    dispatcher=None,
) -> Client:
    """Return a `Client` for the MAAS server at `url`.

    :param api_key: The API key, ``consumer:token:secret``.
    :param dispatcher: Replaces the default `MAASDispatcher`.
    """
    maas_client = MAASClient(
        MAASOAuth.from_api_key(api_key),
        MAASDispatcher() if dispatcher is None else dispatcher,
        api_url(url, api_version),
        insecure=insecure,
    )
    return Client(maas_client)
