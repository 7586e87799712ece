"""Transcription submission and status endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse

from coursescribe.api.deps import get_job_manager, get_settings
from coursescribe.api.schemas import ErrorResponse, JobListResponse, SubmitResponse, dump
from coursescribe.config import Settings
from coursescribe.jobs.manager import JobManager, UploadedMedia
from coursescribe.models.job import VideoMetadata
from coursescribe.services.validation import InputValidator, ValidationResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transcribe", tags=["transcribe"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=dump(ErrorResponse(error=message)))


def _rejected(file_name: str, validation: ValidationResult) -> JSONResponse:
    logger.info("Rejected upload '%s': %s", file_name, validation.reason)
    return _error(400, validation.error or "Invalid file")


# ------------------------------------------------------------------
# POST: submit an upload (201 Created)
# ------------------------------------------------------------------


@router.post("", status_code=201, response_model=SubmitResponse)
async def submit_transcription(
    title: str | None = Form(None),
    course_id: str | None = Form(None, alias="courseId"),
    course_name: str | None = Form(None, alias="courseName"),
    description: str | None = Form(None),
    video: UploadFile | None = File(None),
    mgr: JobManager = Depends(get_job_manager),
    cfg: Settings = Depends(get_settings),
) -> JSONResponse:
    try:
        title, course_id, course_name = (
            (value or "").strip() for value in (title, course_id, course_name)
        )
        if not title or not course_id or not course_name:
            return _error(400, "Missing required fields: title, courseId and courseName are required")

        if video is None or not video.filename:
            return _error(400, "No video file found in the form")

        mime_type = video.content_type or ""
        validator = InputValidator(cfg)

        # Reject on the reported size before buffering the body
        if video.size is not None:
            validation = validator.validate(mime_type, video.size)
            if not validation.is_valid:
                return _rejected(video.filename, validation)

        data = await video.read()
        validation = validator.validate(mime_type, len(data))
        if not validation.is_valid:
            return _rejected(video.filename, validation)

        metadata = VideoMetadata(
            title=title,
            description=description.strip() if description else None,
            course_id=course_id,
            course_name=course_name,
            file_name=video.filename,
            file_size=len(data),
            file_type=mime_type,
        )
        media = UploadedMedia(data=data, file_name=video.filename, mime_type=mime_type)

        if cfg.processing_mode == "inline":
            job = await mgr.process(media, metadata)
            message = job.error_message or job.message
        else:
            job = mgr.submit(media, metadata)
            message = f"Transcription job accepted; poll GET /transcribe?requestId={job.id} for status"

        response = SubmitResponse(request_id=job.id, message=message, video_metadata=metadata)
        return JSONResponse(status_code=201, content=dump(response))

    except Exception:
        logger.exception("Unexpected error while handling a transcription upload")
        return _error(500, "Internal server error while processing the transcription request")


# ------------------------------------------------------------------
# GET: poll one job or list all
# ------------------------------------------------------------------


@router.get("")
async def get_transcriptions(
    request_id: str | None = Query(None, alias="requestId"),
    mgr: JobManager = Depends(get_job_manager),
) -> JSONResponse:
    if request_id:
        job = mgr.get_job(request_id)
        if job is None:
            return _error(404, f"Transcription job '{request_id}' not found")
        return JSONResponse(content=dump(job))

    return JSONResponse(content=dump(JobListResponse(transcriptions=mgr.list_jobs())))
