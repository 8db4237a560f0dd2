"""Single-request analysis flow shared by the FastAPI app and the serverless handler."""

from chart_analyzer import gemini
from chart_analyzer.parsing import parse_analysis
from chart_analyzer.prompt import build_prompt_parts
from chart_analyzer.schemas import ChartAnalysis, ChartUpload


def analyze_chart(upload: ChartUpload, api_key: str) -> ChartAnalysis:
    parts = build_prompt_parts(upload)
    response_text = gemini.generate_reply(api_key, parts)
    return parse_analysis(response_text)
