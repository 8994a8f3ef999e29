"""Resume analysis Pydantic schemas."""
from pydantic import Field

from hiring_platform.schemas.common import CamelModel


class ResumeAnalysis(CamelModel):
    """Structured critique returned by the AI provider."""
    score: int = Field(ge=0, le=100)
    strengths: list[str]
    suggestions: list[str]
    missing_keywords: list[str]


class ResumeAnalysisResponse(CamelModel):
    success: bool = True
    analysis: ResumeAnalysis
    text: str  # preview of the extracted text
