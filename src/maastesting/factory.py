# Copyright 2012-2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Test object factories."""

from itertools import count, islice, repeat
import random
import string
from uuid import uuid4

RAID_LEVELS = ("raid-0", "raid-1", "raid-5", "raid-6", "raid-10")


class Factory:

    random_letters = map(
        random.choice, repeat(string.ascii_letters + string.digits)
    )

    random_lowercase = map(
        random.choice, repeat(string.ascii_lowercase + string.digits)
    )

    ids = count(random.randint(1000, 2000))

    def make_string(self, size=10, prefix=""):
        """Return a `str` filled with random ASCII letters or digits."""
        return prefix + "".join(islice(self.random_letters, size))

    def make_name(self, prefix=None, sep="-", size=6):
        """Generate a random name.

        :param prefix: Optional prefix.  Pass one to help make test failures
            and tracebacks easier to read!  If you don't, you might as well
            use `make_string`.
        """
        if prefix is None:
            return self.make_string(size=size)
        else:
            return prefix + sep + self.make_string(size=size)

    def make_hostname(self, prefix="host"):
        """Generate a random, lowercase, hostname."""
        return self.make_name(prefix=prefix).lower()

    def make_system_id(self):
        return "".join(islice(self.random_lowercase, 6))

    def make_id(self):
        """Return a fresh positive integer, unique within the test run."""
        return next(self.ids)

    def make_UUID(self):
        return str(uuid4())

    def pick_raid_level(self):
        return random.choice(RAID_LEVELS)

    def make_url(self, scheme="http", path="/MAAS/"):
        return "%s://%s:%d%s" % (
            scheme,
            self.make_hostname("maas"),
            random.randint(1024, 65535),
            path,
        )

    def make_api_key(self):
        return ":".join(
            (self.make_string(18), self.make_string(18), self.make_string(32))
        )

    def make_machine(self, system_id=None, hostname=None, domain="maas"):
        """Return the API representation of a machine."""
        if system_id is None:
            system_id = self.make_system_id()
        if hostname is None:
            hostname = self.make_hostname()
        return {
            "system_id": system_id,
            "hostname": hostname,
            "fqdn": f"{hostname}.{domain}",
            "status_name": "Ready",
        }

    def make_block_device(self, id=None, name=None, type="physical"):
        """Return the API representation of a block device or partition."""
        if id is None:
            id = self.make_id()
        if name is None:
            name = self.make_name("sd" if type != "partition" else "part")
        return {"id": id, "name": name, "type": type}

    def make_partition(self, id=None, name=None):
        return self.make_block_device(id=id, name=name, type="partition")

    def make_raid(
        self,
        id=None,
        name=None,
        level=None,
        system_id=None,
        uuid=None,
        devices=(),
        spare_devices=(),
    ):
        """Return the API representation of a RAID."""
        if id is None:
            id = self.make_id()
        return {
            "id": id,
            "name": self.make_name("md") if name is None else name,
            "uuid": self.make_UUID() if uuid is None else uuid,
            "level": self.pick_raid_level() if level is None else level,
            "system_id": system_id,
            "size": 0,
            "human_size": "0 bytes",
            "devices": list(devices),
            "spare_devices": list(spare_devices),
            "virtual_device": None,
        }


# Create factory singleton.
factory = Factory()
