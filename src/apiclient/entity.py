# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Entities returned by, and parameters sent to, the MAAS API."""

from typing import Any, Optional

from pydantic import (
    BaseModel,
    Field,
    field_validator,
    model_validator,
    ValidationError,
)

from apiclient.maas_client import MAASResponseError

PARTITION_TYPE = "partition"


def validate_entity(model, document):
    """Return `document`, a reply from the API, as a `model`.

    :raise MAASResponseError: if `document` does not describe a `model`.
    """
    try:
        return model.model_validate(document)
    except ValidationError as error:
        raise MAASResponseError(
            f"Unexpected {model.__name__} in reply: {error}"
        ) from error


def validate_entities(model, documents):
    if not isinstance(documents, list):
        raise MAASResponseError(
            f"Expected a list of {model.__name__} in reply, got "
            f"{type(documents).__name__}"
        )
    return [validate_entity(model, document) for document in documents]


class ParamsBase(BaseModel):
    """Base for request parameters.

    Empty values are left out of the request so that MAAS applies its own
    defaults to them.
    """

    def to_params(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in self.model_dump().items()
            if value not in (None, "", [])
        }


class Machine(BaseModel):
    system_id: str
    hostname: str = ""
    fqdn: str = ""


class BlockDevice(BaseModel):
    """A member of a RAID: either a block device or a partition."""

    id: int
    name: str = ""
    type: str = ""
    path: str = ""

    @model_validator(mode="before")
    @classmethod
    def name_from_path(cls, data):
        # Partitions are listed without a name; their by-dname path ends
        # with it.
        if (
            isinstance(data, dict)
            and not data.get("name")
            and data.get("path")
        ):
            data = {**data, "name": data["path"].rsplit("/", 1)[-1]}
        return data

    @property
    def is_partition(self) -> bool:
        return self.type == PARTITION_TYPE

    def matches(self, identifier: str) -> bool:
        return str(self.id) == identifier or self.name == identifier


class Raid(BaseModel):
    id: int
    name: str = ""
    uuid: str = ""
    level: str = ""
    system_id: Optional[str] = None
    size: int = 0
    human_size: str = ""
    devices: list[BlockDevice] = Field(default_factory=list)
    spare_devices: list[BlockDevice] = Field(default_factory=list)

    @field_validator("name", "uuid", "level", "human_size", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return "" if value is None else value

    @property
    def block_devices(self) -> list[BlockDevice]:
        return [device for device in self.devices if not device.is_partition]

    @property
    def partitions(self) -> list[BlockDevice]:
        return [device for device in self.devices if device.is_partition]

    @property
    def spare_block_devices(self) -> list[BlockDevice]:
        return [
            device for device in self.spare_devices if not device.is_partition
        ]

    @property
    def spare_partitions(self) -> list[BlockDevice]:
        return [device for device in self.spare_devices if device.is_partition]


class RaidsParams(ParamsBase):
    """Parameters for creating a RAID."""

    name: str = ""
    level: str
    block_devices: list[str] = Field(default_factory=list)
    partitions: list[str] = Field(default_factory=list)
    spare_devices: list[str] = Field(default_factory=list)
    spare_partitions: list[str] = Field(default_factory=list)


class RaidParams(ParamsBase):
    """Parameters for updating a RAID."""

    name: str = ""
    uuid: str = ""
    add_block_devices: list[str] = Field(default_factory=list)
    remove_block_devices: list[str] = Field(default_factory=list)
    add_partitions: list[str] = Field(default_factory=list)
    remove_partitions: list[str] = Field(default_factory=list)
    add_spare_devices: list[str] = Field(default_factory=list)
    remove_spare_devices: list[str] = Field(default_factory=list)
    add_spare_partitions: list[str] = Field(default_factory=list)
    remove_spare_partitions: list[str] = Field(default_factory=list)
