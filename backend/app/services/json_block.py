import json
from typing import Any, Optional


def extract_json_block(text: Any) -> Optional[Any]:
    """Best-effort pull of one JSON object out of LLM prose.

    Slices from the first "{" to the last "}" and parses once. Nested or
    multiple objects can produce a bad slice; that simply returns None.
    """
    if not isinstance(text, str):
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < start:
        return None
    try:
        return json.loads(text[start:end + 1])
    except ValueError:
        return None
