"""CourseScribe command-line interface.

Usage:
    coursescribe-cli transcribe <video> --title T --course-id ID --course-name NAME [-o job.json]
    coursescribe-cli sanitize <text> [--max-length 100]
"""

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

from coursescribe.api.schemas import dump
from coursescribe.config import settings
from coursescribe.jobs.manager import JobManager, UploadedMedia
from coursescribe.models.job import VideoMetadata
from coursescribe.security.sanitizer import sanitize_text
from coursescribe.services.validation import validate_upload


# --- Transcribe subcommand ---


async def cmd_transcribe(args: argparse.Namespace) -> None:
    """Run the full pipeline on a local file and save the job record."""
    video_path = Path(args.input).resolve()
    if not video_path.exists():
        print(f"Error: file not found: {video_path}", file=sys.stderr)
        sys.exit(1)

    mime_type = args.mime_type or mimetypes.guess_type(video_path.name)[0] or ""
    data = video_path.read_bytes()

    validation = validate_upload(mime_type, len(data))
    if not validation.is_valid:
        print(f"Error: {validation.error}", file=sys.stderr)
        sys.exit(1)

    metadata = VideoMetadata(
        title=args.title,
        description=args.description,
        course_id=args.course_id,
        course_name=args.course_name,
        file_name=video_path.name,
        file_size=len(data),
        file_type=mime_type,
    )

    print(f"Transcribing: {video_path.name} ({mime_type}, {len(data)} bytes)")
    manager = JobManager()
    job = await manager.process(
        UploadedMedia(data=data, file_name=video_path.name, mime_type=mime_type),
        metadata,
    )

    print(f"  Job: {job.id}")
    print(f"  Status: {job.status.value}")
    if job.transcription_source:
        print(f"  Transcript source: {job.transcription_source.value}")
    print(f"  {job.error_message or job.message}")

    output_path = Path(args.output) if args.output else video_path.with_suffix(".transcription.json")
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(dump(job), f, ensure_ascii=False, indent=2)
    print(f"\nSaved: {output_path}")

    if job.error_message:
        sys.exit(2)


# --- Sanitize subcommand ---


def cmd_sanitize(args: argparse.Namespace) -> None:
    """Print how a piece of metadata would appear in a prompt."""
    print(sanitize_text(args.text, max_length=args.max_length))


# --- Main CLI ---


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="coursescribe-cli",
        description="CourseScribe - course video transcription CLI",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- transcribe ---
    p_transcribe = subparsers.add_parser("transcribe", help="Transcribe and enrich a video/audio file")
    p_transcribe.add_argument("input", type=str, help="Input video/audio file")
    p_transcribe.add_argument("--title", required=True, help="Lesson title")
    p_transcribe.add_argument("--course-id", required=True, help="Course identifier")
    p_transcribe.add_argument("--course-name", required=True, help="Course name")
    p_transcribe.add_argument("--description", help="Optional lesson description")
    p_transcribe.add_argument("--mime-type", help="Override the MIME type guessed from the file name")
    p_transcribe.add_argument("-o", "--output", type=str, help="Output JSON path")

    # --- sanitize ---
    p_sanitize = subparsers.add_parser("sanitize", help="Show the sanitized form of a metadata string")
    p_sanitize.add_argument("text", type=str, help="Text to sanitize")
    p_sanitize.add_argument("--max-length", type=int, default=100, help="Maximum length (default: 100)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(level=settings.log_level.upper())

    # Dispatch
    if args.command == "transcribe":
        asyncio.run(cmd_transcribe(args))
    elif args.command == "sanitize":
        cmd_sanitize(args)


if __name__ == "__main__":
    main()
