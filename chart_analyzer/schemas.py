from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class ChartUpload(BaseModel):
    image_bytes: bytes
    mime_type: str
    asset_type: str = ""
    timeframe: str = ""
    additional_notes: str = ""
    output_language: str = ""


class ChartAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    direction: str
    rationale: str
    support: str
    resistance: str
    risk_warning: str = Field(alias="riskWarning")

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


class AnalyzeResponse(BaseModel):
    analysis: ChartAnalysis

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {"analysis": self.analysis.to_dict()}


class ErrorResponse(BaseModel):
    message: str
