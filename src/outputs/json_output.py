"""JSON renderer."""

import json
from typing import Any, Dict

from versioning.models import DiffResult


class JsonOutput:
    """Pretty-printed JSON document of the whole result."""

    def format(self, result: DiffResult) -> str:
        return json.dumps(result.to_dict(), ensure_ascii=False, indent=4)

    @staticmethod
    def format_error(message: str) -> str:
        payload: Dict[str, Any] = {"error": message}
        return json.dumps(payload, ensure_ascii=False, indent=4)
