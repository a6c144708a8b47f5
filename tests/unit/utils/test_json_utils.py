from datetime import datetime, timezone
from decimal import Decimal

from retail_tenancy_core.enums import PaymentMethodEnum
from retail_tenancy_core.schemas.principal_schema import Principal
from retail_tenancy_core.utils.json_utils import dumps, loads


def test_dumps_handles_retail_values():
    payload = {
        "total": Decimal("199.90"),
        "method": PaymentMethodEnum.PIX,
        "paid_at": datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        "principal": Principal(id=1, name="Caixa", tenant_id=2),
    }

    result = loads(dumps(payload))

    assert result["total"] == "199.90"
    assert result["method"] == "pix"
    assert result["paid_at"] == "2024-05-01T12:30:00+00:00"
    assert result["principal"]["tenant_id"] == 2


def test_dumps_falls_back_to_repr():
    class Opaque:
        def __repr__(self):
            return "<opaque>"

    assert loads(dumps({"value": Opaque()})) == {"value": "<opaque>"}
