"""
Turn Gemini's reply into a ChartAnalysis.

The model is asked for bare JSON but often wraps it in a markdown fence or
adds a sentence around it. Anything that still doesn't decode to an object
with the expected keys becomes the fallback record, never an error.
"""

import json
import logging
import re
from typing import Any, Iterator, Optional

from chart_analyzer.schemas import ChartAnalysis

log = logging.getLogger(__name__)

ANALYSIS_KEYS = ("direction", "rationale", "support", "resistance", "riskWarning")

FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
OBJECT_SPAN = re.compile(r"\{.*\}", re.DOTALL)

NOT_AVAILABLE = "N/A"
FALLBACK_DIRECTION = "Uncertain"
FALLBACK_RATIONALE = "Could not parse detailed analysis from AI. Raw response: "
FALLBACK_RISK_WARNING = "Always exercise caution. AI analysis is for informational purposes only."


def fallback_analysis(raw_text: str) -> ChartAnalysis:
    return ChartAnalysis(
        direction=FALLBACK_DIRECTION,
        rationale=FALLBACK_RATIONALE + (raw_text or ""),
        support=NOT_AVAILABLE,
        resistance=NOT_AVAILABLE,
        risk_warning=FALLBACK_RISK_WARNING,
    )


def parse_analysis(text: str) -> ChartAnalysis:
    data = extract_json(text)

    if not isinstance(data, dict) or not any(key in data for key in ANALYSIS_KEYS):
        log.error("Failed to parse Gemini's JSON response, sending raw text")
        return fallback_analysis(text)

    return ChartAnalysis(**{key: as_text(data.get(key)) for key in ANALYSIS_KEYS})


def extract_json(text: str) -> Optional[Any]:
    """Decode the first JSON candidate in the reply, or None."""
    for candidate in _candidates(text or ""):
        try:
            return json.loads(candidate)
        except (ValueError, RecursionError):
            # Deeply nested replies exhaust the decoder's recursion limit
            continue
    return None


def _candidates(text: str) -> Iterator[str]:
    stripped = text.strip()

    fenced = FENCED_BLOCK.search(stripped)
    yield fenced.group(1) if fenced else stripped

    span = OBJECT_SPAN.search(stripped)
    if span:
        yield span.group()


def as_text(value: Any) -> str:
    """Flatten a JSON value into the display string the client expects."""
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, str):
        return value.strip() or NOT_AVAILABLE
    if isinstance(value, (list, tuple)):
        items = [as_text(item) for item in value if item is not None]
        return ", ".join(items) or NOT_AVAILABLE
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)
