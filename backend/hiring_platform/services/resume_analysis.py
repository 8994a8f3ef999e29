"""
Resume analysis pipeline.

Upload -> validated temp file -> PDF text -> AI critique -> validated result.
The temp file is removed on every exit path.
"""
import asyncio
import json
import logging
import os
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Tuple

from fastapi import UploadFile
from pydantic import ValidationError as SchemaError
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from hiring_platform.config import settings
from hiring_platform.errors import (
    FieldError,
    ValidationError,
    PayloadTooLargeError,
    MalformedResponseError,
)
from hiring_platform.schemas.resume import ResumeAnalysis
from hiring_platform.services.completion import CompletionClient

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"application/pdf", "application/x-pdf", "application/octet-stream"}
PDF_MAGIC = b"%PDF"
CHUNK_SIZE = 64 * 1024
PREVIEW_CHARS = 1000
PARSE_ATTEMPTS = 2  # first try + one retry on malformed JSON
PDF_PARSE_ERRORS = (PdfReadError, ValueError, KeyError, IndexError, AttributeError, TypeError, AssertionError)

SYSTEM_PROMPT = """You are an expert resume reviewer. Analyze the following resume and provide detailed feedback in JSON format with the following structure:
{
  "score": number (0-100),
  "strengths": string[],
  "suggestions": string[],
  "missingKeywords": string[]
}
Respond with the JSON object only."""


def extract_pdf_text(path: Path) -> str:
    """Extract text from every page of a PDF file."""
    reader = PdfReader(str(path))
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n".join(pages).strip()


def parse_analysis(raw: str) -> ResumeAnalysis:
    """
    Parse and validate the provider's JSON reply.

    Raises:
        MalformedResponseError: reply is not JSON or does not match ResumeAnalysis
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedResponseError(f"AI response was not valid JSON: {e}")
    try:
        return ResumeAnalysis.model_validate(data)
    except SchemaError as e:
        raise MalformedResponseError(f"AI response did not match the analysis schema: {e.error_count()} error(s)")


def validate_resume_upload(file: UploadFile) -> None:
    """
    Check name and declared content type before reading the body.

    Raises:
        ValidationError 400: If the upload is not a PDF
    """
    if not file.filename or Path(file.filename).suffix.lower() != ".pdf":
        raise ValidationError([FieldError("resume", "Only PDF files are accepted")])
    if file.content_type and file.content_type.lower() not in ALLOWED_CONTENT_TYPES:
        raise ValidationError([FieldError("resume", f"Unsupported content type: {file.content_type}")])


class ResumeAnalyzer:
    """Runs the upload-to-analysis pipeline for a single request."""

    def __init__(
        self,
        client: CompletionClient,
        upload_dir: Path,
        max_bytes: int,
        text_limit: int = 15000,
    ):
        self.client = client
        self.upload_dir = Path(upload_dir)
        self.max_bytes = max_bytes
        self.text_limit = text_limit

    @asynccontextmanager
    async def stored_upload(self, file: UploadFile) -> AsyncIterator[Path]:
        """
        Stream the upload into a temp file, enforcing the size ceiling as it goes.
        The file is deleted when the block exits, whatever happened inside it.
        """
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self.upload_dir / f"{uuid.uuid4().hex}.pdf"
        try:
            size = 0
            with open(path, "wb") as out:
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    if size == 0 and not chunk.startswith(PDF_MAGIC):
                        raise ValidationError([FieldError("resume", "File is not a valid PDF")])
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise PayloadTooLargeError(
                            f"File too large. Maximum size: {self.max_bytes // (1024 * 1024)}MB"
                        )
                    out.write(chunk)
            if size == 0:
                raise ValidationError([FieldError("resume", "Uploaded file is empty")])
            logger.info(f"Stored resume upload {path.name} ({size} bytes)")
            yield path
        finally:
            remove_file(path)

    async def analyze_text(self, text: str) -> ResumeAnalysis:
        """Ask the provider for a critique; one retry when the reply is malformed."""
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Please analyze this resume and provide feedback:\n\n{text[:self.text_limit]}",
            },
        ]
        for attempt in range(1, PARSE_ATTEMPTS + 1):
            raw = await self.client.complete(messages, json_mode=True)
            try:
                return parse_analysis(raw)
            except MalformedResponseError as e:
                if attempt == PARSE_ATTEMPTS:
                    raise
                logger.warning(f"Malformed resume analysis (attempt {attempt}): {e.message}")

    async def analyze(self, file: UploadFile) -> Tuple[ResumeAnalysis, str]:
        """
        Full pipeline for one uploaded resume.

        Returns:
            (analysis, text): the validated critique and the extracted text
        """
        validate_resume_upload(file)
        async with self.stored_upload(file) as path:
            try:
                text = await asyncio.to_thread(extract_pdf_text, path)
            except PDF_PARSE_ERRORS as e:
                # Broken cross-reference tables surface as plain Python errors from PyPDF2
                logger.warning(f"Could not parse uploaded PDF {path.name}: {str(e)}", exc_info=e)
                raise ValidationError([FieldError("resume", "Could not read the PDF file")])
            if not text:
                raise ValidationError([FieldError("resume", "No text could be extracted from the PDF")])
            analysis = await self.analyze_text(text)
        logger.info(f"Resume analyzed: score={analysis.score}")
        return analysis, text


def text_preview(text: str) -> str:
    return text[:PREVIEW_CHARS] + "..."


def remove_file(path: Path) -> None:
    """Delete a temp file, logging instead of raising if it is already gone."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to delete temp file {path}: {str(e)}")


def build_resume_analyzer(client: CompletionClient) -> ResumeAnalyzer:
    return ResumeAnalyzer(
        client=client,
        upload_dir=Path(settings.upload_dir),
        max_bytes=settings.max_resume_size_mb * 1024 * 1024,
        text_limit=settings.resume_text_limit,
    )
