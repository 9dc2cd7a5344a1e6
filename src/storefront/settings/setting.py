"""Key-value settings persisted as JSON documents."""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, String, Text

from storefront.domain import storefront


@storefront.aggregate
class Setting:
    key = String(required=True, max_length=100)
    value = Text(required=True)  # JSON document
    updated_at = DateTime()

    @property
    def data(self):
        return json.loads(self.value)

    def replace(self, data) -> None:
        self.value = json.dumps(data)
        self.updated_at = datetime.now(UTC)
