from datetime import datetime
from enum import Enum
import json
import numpy as np

from field_quality_monitor.domain.models.result import Outcome, ResultTable


class PayloadOutputSerializer:
    @staticmethod
    def serialize(obj):
        if isinstance(obj, (np.bool_, bool)):
            return bool(obj)
        if isinstance(obj, (np.integer, int)):
            return int(obj)
        if isinstance(obj, (np.floating, float)):
            return float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return str(obj)

    @staticmethod
    def build(table: ResultTable, outcome: Outcome) -> dict:
        return {
            "field": outcome.field,
            "test_name": outcome.test_name,
            "status": outcome.status.value,
            "detail": outcome.detail,
            "rows": list(outcome.rows),
            "duration_ms": outcome.duration_ms,
            "generated_at": table.generated_at.isoformat(),
        }

    @staticmethod
    def to_json(obj) -> str:
        return json.dumps(obj, default=PayloadOutputSerializer.serialize)
