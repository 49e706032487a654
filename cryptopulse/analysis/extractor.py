"""
CryptoPulse — JSON Extraction
Best-effort recovery of a JSON object from free-form model output.
"""
import json
import re
from typing import Any, Dict, Optional

from cryptopulse.utils.logger import get_logger

logger = get_logger("json_extractor")

_FENCED_JSON = re.compile(r"```json([\s\S]*?)```")


def extract_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Return the JSON object embedded in text, or None.

    Prefers a ```json fenced block; otherwise parses the span between the
    first '{' and the last '}'. Malformed JSON inside the span fails closed.
    """
    if not text:
        return None
    try:
        match = _FENCED_JSON.search(text)
        if match and match.group(1).strip():
            return json.loads(match.group(1))

        first_open = text.find("{")
        last_close = text.rfind("}")
        if first_open != -1 and last_close > first_open:
            return json.loads(text[first_open:last_close + 1])
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning("json_extract_failed", error=str(e), length=len(text))
        return None

    logger.warning("json_not_found", length=len(text))
    return None
