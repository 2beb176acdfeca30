"""Orchestrator: two uploaded PDFs in, one AnalysisResult out.

Pipeline:
1. Validate both uploads (shape, type, size)
2. Check the %PDF magic number of both
3. Extract text from both PDFs concurrently
4. Reject documents with no meaningful text
5. Build the analysis prompt
6. Call Gemini
7. Parse and repair the model's JSON (never fails)
"""

import asyncio
import logging

from models.requests import AnalyzeProfileRequest
from models.responses import AnalyzeProfileResponse
from services import pdf_parser, prompt_builder
from services.errors import (
    EmptyContentError,
    ExtractionError,
    GatewayError,
    UnreadablePdfError,
    UploadValidationError,
)
from services.file_validator import validate_request
from services.gemini_client import GeminiClient
from services.response_parser import parse_analysis_response

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 10


async def analyze_profile(
    request: AnalyzeProfileRequest,
    client: GeminiClient,
    max_file_size: int,
) -> AnalyzeProfileResponse:
    """Run the full analysis pipeline for one request."""
    logger.info("Starting profile analysis")

    # --- Stage 1: Upload validation ---
    problems = validate_request(request, max_file_size)
    if problems:
        raise UploadValidationError(problems)

    # --- Stage 2: Magic number check ---
    if not pdf_parser.is_valid_pdf(request.job_description.data):
        raise UnreadablePdfError("Job description file is not a valid PDF")
    if not pdf_parser.is_valid_pdf(request.cv.data):
        raise UnreadablePdfError("CV file is not a valid PDF")

    # --- Stage 3: Text extraction (both documents at once) ---
    logger.info("PDFs validated, extracting text")
    try:
        job_description_text, cv_text = await asyncio.gather(
            pdf_parser.extract_text_async(request.job_description.data),
            pdf_parser.extract_text_async(request.cv.data),
        )
    except ExtractionError as e:
        raise UnreadablePdfError(f"PDF processing error: {e.message}") from e

    # --- Stage 4: Meaningful content ---
    if len(job_description_text.strip()) < MIN_TEXT_LENGTH:
        raise EmptyContentError("Job description PDF appears to be empty or unreadable")
    if len(cv_text.strip()) < MIN_TEXT_LENGTH:
        raise EmptyContentError("CV PDF appears to be empty or unreadable")

    logger.info(
        "Extracted %d chars from job description, %d chars from CV",
        len(job_description_text),
        len(cv_text),
    )

    # --- Stage 5-6: Prompt + model call ---
    prompt = prompt_builder.build_analysis_prompt(cv_text, job_description_text)
    logger.info("Sending %d char prompt to Gemini", len(prompt))
    try:
        raw_response = await client.generate(client.build_request(prompt))
    except GatewayError as e:
        raise type(e)(f"AI service error: {e.message}") from e

    # --- Stage 7: Sanitize ---
    analysis = parse_analysis_response(raw_response)
    logger.info("Analysis completed (alignment score %d)", analysis.alignment.score)

    return AnalyzeProfileResponse(success=True, analysis=analysis)
