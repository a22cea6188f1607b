# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Resource state records and the lifecycle every resource implements."""

from abc import ABCMeta, abstractmethod
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from apiclient.maas_client import MAASAPIError, MAASResponseError
from maasprovider.context import Context
from maasprovider.exceptions import (
    Diagnostic,
    diagnostics_from_exception,
    ProviderException,
    StateException,
)
from maasprovider.schema import Schema


class ResourceData:
    """The configuration and reconciled state of one resource instance.

    `config` is `None` while importing, when only the ID is known.
    """

    def __init__(
        self,
        schema: Schema,
        config: BaseModel | None = None,
        id: str = "",
        state: Mapping[str, Any] | None = None,
    ):
        self.schema = schema
        self.config = config
        self.id = id
        self.state = {}
        if state:
            self.set_state(state)

    @classmethod
    def from_raw(
        cls,
        schema: Schema,
        raw: Mapping[str, Any],
        id: str = "",
        state: Mapping[str, Any] | None = None,
    ):
        """Build from an untyped configuration mapping."""
        return cls(schema, schema.build_config(raw), id=id, state=state)

    def get(self, key: str, default=None):
        """Return the value of `key`, from state first then configuration."""
        if key in self.state:
            return self.state[key]
        if self.config is not None and key in self.schema:
            value = getattr(self.config, key, None)
            if value is not None:
                return value
        return default

    def set_state(self, values: Mapping[str, Any]):
        """Record `values`; nothing is recorded if any key is unknown."""
        unknown = sorted(key for key in values if key not in self.schema)
        if unknown:
            raise StateException(
                "Cannot set unknown state attributes: " + ", ".join(unknown)
            )
        self.state.update(values)
        if "id" in values:
            self.id = values["id"]

    def clear(self):
        """Forget the resource, as after a successful delete."""
        self.id = ""
        self.state = {}

    def to_dict(self) -> dict[str, Any]:
        return {**self.state, "id": self.id}


class Resource(metaclass=ABCMeta):
    """Lifecycle operations of a resource.

    The operations raise on failure; the `apply_*` methods are what a host
    calls, and turn failures into diagnostics.
    """

    schema: Schema

    @abstractmethod
    def create(self, data: ResourceData, context: Context) -> None:
        """Create the remote object and record its state in `data`."""

    @abstractmethod
    def read(self, data: ResourceData, context: Context) -> None:
        """Refresh the state in `data` from the remote object."""

    @abstractmethod
    def update(self, data: ResourceData, context: Context) -> None:
        """Apply the configuration in `data` to the remote object."""

    @abstractmethod
    def delete(self, data: ResourceData, context: Context) -> None:
        """Delete the remote object."""

    @abstractmethod
    def import_state(self, data: ResourceData, context: Context) -> None:
        """Populate `data` from an existing object named by `data.id`."""

    def new_data(self, raw=None, id="", state=None) -> ResourceData:
        if raw is None:
            return ResourceData(self.schema, id=id, state=state)
        return ResourceData.from_raw(self.schema, raw, id=id, state=state)

    def _apply(
        self, operation, data: ResourceData, context: Context
    ) -> list[Diagnostic]:
        log = context.logger.bind(
            operation=operation.__name__, resource_id=data.id
        )
        try:
            operation(data, context)
        except (
            ProviderException,
            MAASAPIError,
            MAASResponseError,
            OSError,
        ) as error:
            diagnostics = diagnostics_from_exception(error)
            for diagnostic in diagnostics:
                log.warning(diagnostic.summary, detail=diagnostic.detail)
            return diagnostics
        log.info("Operation completed")
        return []

    def apply_create(self, data, context):
        return self._apply(self.create, data, context)

    def apply_read(self, data, context):
        return self._apply(self.read, data, context)

    def apply_update(self, data, context):
        return self._apply(self.update, data, context)

    def apply_delete(self, data, context):
        return self._apply(self.delete, data, context)

    def apply_import(self, data, context):
        return self._apply(self.import_state, data, context)
