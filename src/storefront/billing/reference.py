"""BillingReference aggregate — the local record of a gateway interaction.

For Pix the referenced order already exists; for card checkouts the order
is created later by the webhook, which can rebuild it from the stored
intent when the gateway event arrives without usable metadata.
"""

import json
from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String, Text

from storefront.domain import storefront


@storefront.aggregate
class BillingReference:
    gateway = String(required=True, max_length=50)
    external_reference = String(required=True, max_length=255, unique=True)
    user_id = Identifier(required=True)
    order_id = Identifier()
    payload = Text()  # JSON: the encoded order intent metadata
    created_at = DateTime()

    @classmethod
    def record(cls, gateway, external_reference, user_id, metadata, order_id=None):
        return cls(
            gateway=gateway,
            external_reference=external_reference,
            user_id=user_id,
            order_id=order_id,
            payload=json.dumps(metadata),
            created_at=datetime.now(UTC),
        )

    @property
    def intent_metadata(self) -> dict:
        return json.loads(self.payload) if self.payload else {}


@storefront.repository(part_of=BillingReference)
class BillingReferenceRepository:
    def find_by_external_reference(self, external_reference) -> BillingReference | None:
        if not external_reference:
            return None
        references = self._dao.query.filter(external_reference=external_reference).all().items
        return references[0] if references else None
