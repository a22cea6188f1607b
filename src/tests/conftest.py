# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

import pytest

from apiclient.client import get_client
from maasprovider.context import Context
from maastesting.factory import factory
from maastesting.fakemaas import FakeMAASServer


@pytest.fixture
def fake_maas():
    yield FakeMAASServer()


@pytest.fixture
def client(fake_maas):
    yield get_client(
        factory.make_url(), factory.make_api_key(), dispatcher=fake_maas
    )


@pytest.fixture
def context(client):
    yield Context(client, context_id="test-context")
