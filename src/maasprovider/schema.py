# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Declarative schema of the RAID resource, and its typed configuration."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, ValidationError

from maasprovider.exceptions import (
    ConfigValidationException,
    ExceptionDetail,
    INVALID_ARGUMENT_VIOLATION_TYPE,
    MISSING_ARGUMENT_VIOLATION_TYPE,
    UNKNOWN_ARGUMENT_VIOLATION_TYPE,
)


class FieldType(StrEnum):
    STRING = "string"
    LIST = "list"


@dataclass(frozen=True)
class SchemaField:
    type: FieldType
    description: str
    required: bool = False
    optional: bool = False
    computed: bool = False
    force_new: bool = False

    @property
    def settable(self) -> bool:
        """Whether a configuration may give this field a value."""
        return self.required or self.optional


class RaidConfig(BaseModel):
    """The configuration of one RAID, as declared by the user."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    machine: str
    level: str
    partitions: list[str]
    id: str = ""
    name: str = ""
    block_devices: list[str] = []
    spare_devices: list[str] = []
    spare_partitions: list[str] = []

    @field_validator(
        "partitions",
        "block_devices",
        "spare_devices",
        "spare_partitions",
        mode="before",
    )
    @classmethod
    def members_as_strings(cls, value):
        # Members are often written as bare numeric IDs.
        if isinstance(value, (list, tuple)):
            return [
                str(item) if isinstance(item, int) else item for item in value
            ]
        return value


_VIOLATION_TYPES = {
    "missing": MISSING_ARGUMENT_VIOLATION_TYPE,
    "extra_forbidden": UNKNOWN_ARGUMENT_VIOLATION_TYPE,
}


class Schema:
    """A set of named `SchemaField`s, and the model that holds their values."""

    def __init__(
        self,
        description: str,
        fields: dict[str, SchemaField],
        config_class: type[BaseModel],
    ):
        self.description = description
        self.fields = fields
        self.config_class = config_class

    def __iter__(self):
        return iter(self.fields)

    def __contains__(self, name):
        return name in self.fields

    def __getitem__(self, name) -> SchemaField:
        return self.fields[name]

    def build_config(self, raw: Mapping[str, Any]) -> BaseModel:
        """Validate `raw` and return it as a configuration model.

        :raise ConfigValidationException: listing every problem found.
        """
        details = [
            ExceptionDetail(
                type=INVALID_ARGUMENT_VIOLATION_TYPE,
                field=name,
                message="Value is computed and cannot be set",
            )
            for name in raw
            if name in self.fields and not self.fields[name].settable
        ]
        settable = {
            name: value
            for name, value in raw.items()
            if name not in self.fields or self.fields[name].settable
        }
        try:
            config = self.config_class.model_validate(settable)
        except ValidationError as error:
            details.extend(
                ExceptionDetail(
                    type=_VIOLATION_TYPES.get(
                        err["type"], INVALID_ARGUMENT_VIOLATION_TYPE
                    ),
                    field=".".join(str(loc) for loc in err["loc"]),
                    message=err["msg"],
                )
                for err in error.errors()
            )
            config = None
        if details:
            raise ConfigValidationException(details)
        return config

    def requires_replacement(
        self, old: BaseModel, new: BaseModel
    ) -> list[str]:
        """Return the force-new fields whose value differs."""
        return [
            name
            for name, field in self.fields.items()
            if field.force_new
            and getattr(old, name, None) != getattr(new, name, None)
        ]


RAID_SCHEMA = Schema(
    "Provides a resource to manage MAAS RAIDs.",
    {
        "machine": SchemaField(
            FieldType.STRING,
            "The identifier (system ID, hostname, or FQDN) of the machine "
            "for the new RAID.",
            required=True,
            force_new=True,
        ),
        "id": SchemaField(
            FieldType.STRING,
            "The ID of the RAID.",
            optional=True,
            computed=True,
        ),
        "level": SchemaField(
            FieldType.STRING,
            "The RAID level: raid-0, raid-1, raid-5, raid-6, or raid-10.",
            required=True,
            force_new=True,
        ),
        "block_devices": SchemaField(
            FieldType.LIST,
            "Block devices to add to the RAID.",
            optional=True,
        ),
        "name": SchemaField(
            FieldType.STRING,
            "The name of the new RAID. This argument is computed if it's "
            "not set.",
            optional=True,
            computed=True,
        ),
        "partitions": SchemaField(
            FieldType.LIST,
            "Partitions to add to the RAID.",
            required=True,
        ),
        "spare_partitions": SchemaField(
            FieldType.LIST,
            "Spare partitions to add to the RAID.",
            optional=True,
        ),
        "spare_devices": SchemaField(
            FieldType.LIST,
            "Spare block devices to add to the RAID.",
            optional=True,
        ),
        "uuid": SchemaField(
            FieldType.STRING,
            "UUID of the RAID.",
            computed=True,
        ),
    },
    RaidConfig,
)
