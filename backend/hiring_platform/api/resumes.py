"""
Resume analysis endpoint.
"""
import logging

from fastapi import APIRouter, Depends, UploadFile, File

from hiring_platform.api.auth import get_current_user
from hiring_platform.models.user import User
from hiring_platform.schemas.resume import ResumeAnalysisResponse
from hiring_platform.services.completion import CompletionClient, get_completion_client
from hiring_platform.services.resume_analysis import (
    ResumeAnalyzer,
    build_resume_analyzer,
    text_preview,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def get_resume_analyzer(
    client: CompletionClient = Depends(get_completion_client)
) -> ResumeAnalyzer:
    return build_resume_analyzer(client)


@router.post("/analyze", response_model=ResumeAnalysisResponse)
async def analyze_resume(
    resume: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    analyzer: ResumeAnalyzer = Depends(get_resume_analyzer),
):
    """
    Analyze an uploaded PDF resume with the AI reviewer.

    Returns:
        200: score, strengths, suggestions, missing keywords and a text preview
        400: Not a PDF, empty, or unreadable
        413: Larger than the configured maximum
        502/503/504: AI provider failure (retryable flag set for transient ones)
    """
    logger.info(f"Resume analysis requested by {current_user.email}: {resume.filename}")
    analysis, text = await analyzer.analyze(resume)
    return ResumeAnalysisResponse(analysis=analysis, text=text_preview(text))
