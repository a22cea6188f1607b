# Copyright 2023-2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

import pytest
import structlog


@pytest.fixture(autouse=True)
def setup_testenv(monkeypatch, tmpdir):
    # Never pick up the configuration of whoever runs the tests.
    for variable in (
        "MAAS_API_URL",
        "MAAS_API_KEY",
        "MAAS_API_VERSION",
        "MAAS_INSECURE",
    ):
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.setenv(
        "MAAS_PROVIDER_CONFIG", str(tmpdir.join("maas-provider.yaml"))
    )
    yield
    structlog.reset_defaults()
