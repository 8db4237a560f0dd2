"""
Gemini prompt for chart analysis.
The reply must be a JSON object with the five ChartAnalysis keys.
"""

from typing import Dict, List, Union

from chart_analyzer.schemas import ChartUpload

Part = Union[str, Dict[str, Union[str, bytes]]]

OUTPUT_FORMAT = (
    "Focus on key technical patterns, support/resistance levels, and overall trend. "
    "Please also include a short risk warning. "
    "Provide output in this structured JSON-like format: "
    '{ "direction": "string", "rationale": "string", "support": "string", '
    '"resistance": "string", "riskWarning": "string" }'
)


def image_part(image_bytes: bytes, mime_type: str) -> Dict[str, Union[str, bytes]]:
    """Inline blob part; the client base64-encodes it on the wire."""
    return {"mime_type": mime_type, "data": image_bytes}


def build_prompt_parts(upload: ChartUpload) -> List[Part]:
    asset = upload.asset_type or "an unspecified asset"
    timeframe = f"a {upload.timeframe}" if upload.timeframe else "an unspecified"

    parts: List[Part] = [
        image_part(upload.image_bytes, upload.mime_type),
        "Analyze this market chart. ",
        f"It's for {asset} with {timeframe} timeframe.",
        "Provide a clear prediction of the market's likely direction "
        "(e.g., Bullish, Bearish, Sideways) and a brief rationale.",
    ]

    if upload.additional_notes:
        parts.append(
            f'Additional context from user: "{upload.additional_notes}". '
            "Incorporate this into your analysis if relevant."
        )

    if upload.output_language:
        parts.append(
            f"Write every field value in {upload.output_language}. "
            "Keep the JSON keys in English."
        )

    parts.append(OUTPUT_FORMAT)
    return parts
