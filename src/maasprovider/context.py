# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

from uuid import uuid4

import structlog

from apiclient.client import Client


class Context:
    """What a lifecycle operation may use besides its own resource data.

    One is built per invocation and handed to every operation.
    """

    def __init__(self, client: Client, context_id: str | None = None):
        self.context_id = context_id or str(uuid4())
        self.client = client
        self.logger = structlog.get_logger().bind(context_id=self.context_id)
