# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Configuration of the provider: how to reach the MAAS API."""

from dataclasses import dataclass, fields
import os
from pathlib import Path

import structlog
import yaml

from apiclient.client import Client, get_client
from maasprovider.exceptions import ProviderConfigException

logger = structlog.get_logger()

DEFAULT_CONFIG_PATH = "~/.maas-provider.yaml"

# Environment variable -> configuration key. The environment wins over the
# configuration file.
ENVIRONMENT = {
    "MAAS_API_URL": "api_url",
    "MAAS_API_KEY": "api_key",
    "MAAS_API_VERSION": "api_version",
    "MAAS_INSECURE": "insecure",
}

TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


@dataclass
class ProviderConfiguration:
    api_url: str
    api_key: str
    api_version: str = "2.0"
    insecure: bool = False

    def get_client(self, dispatcher=None) -> Client:
        return get_client(
            self.api_url,
            self.api_key,
            api_version=self.api_version,
            insecure=self.insecure,
            dispatcher=dispatcher,
        )


def as_bool(name, value):
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in TRUE_STRINGS:
        return True
    if lowered in FALSE_STRINGS:
        return False
    raise ProviderConfigException(f"{name}: {value!r} is not a boolean")


def read_config_file(path: Path) -> dict:
    """Return the configuration in the YAML file at `path`.

    A missing or empty file is an empty configuration.
    """
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as error:
        raise ProviderConfigException(
            f"Cannot parse {path}: {error}"
        ) from error
    # if the file exists but is empty, data can be None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ProviderConfigException(f"{path} does not contain a mapping")
    return data


def load_provider_config(path=None, environ=None) -> ProviderConfiguration:
    """Load the provider configuration from a file and the environment."""
    if environ is None:
        environ = os.environ
    if path is None:
        path = environ.get("MAAS_PROVIDER_CONFIG", DEFAULT_CONFIG_PATH)
    path = Path(path).expanduser()
    data = read_config_file(path)
    for variable, key in ENVIRONMENT.items():
        if variable in environ:
            data[key] = environ[variable]

    known = {field.name for field in fields(ProviderConfiguration)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ProviderConfigException(
            "Unknown configuration keys: " + ", ".join(unknown)
        )
    missing = [key for key in ("api_url", "api_key") if not data.get(key)]
    if missing:
        raise ProviderConfigException(
            "Missing configuration: "
            + ", ".join(missing)
            + f" (set them in {path} or with "
            + ", ".join(
                variable
                for variable, key in ENVIRONMENT.items()
                if key in missing
            )
            + ")"
        )
    if len(str(data["api_key"]).split(":")) != 3:
        raise ProviderConfigException(
            "api_key: expected 3 colon-separated items"
        )
    if "insecure" in data:
        data["insecure"] = as_bool("insecure", data["insecure"])
    if "api_version" in data:
        data["api_version"] = str(data["api_version"])
    config = ProviderConfiguration(**data)
    logger.debug(
        "Loaded provider configuration",
        path=str(path),
        api_url=config.api_url,
        api_version=config.api_version,
    )
    return config
