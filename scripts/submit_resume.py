import argparse
import asyncio
import json
import logging
from pathlib import Path

from app.core.config import get_settings
from app.core.logging import setup_logging
from app.pipeline.services import build_pipeline_services
from app.pipeline.status import Error, PipelineStatus, Processing
from app.pipeline.submission import SubmissionPipeline
from app.services.records import load_record
from app.services.sessions import SubmissionSession
from app.services.storage import FileBlob


def _print_status(status: PipelineStatus) -> None:
    if isinstance(status, Processing):
        print(f"... {status.label}")
    elif isinstance(status, Error):
        print(f"Error ({status.kind.value}): {status.message}")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Submit a resume PDF for AI feedback.")
    parser.add_argument("resume", type=Path, help="Path to the resume PDF")
    parser.add_argument("--company", required=True)
    parser.add_argument("--title", required=True)
    parser.add_argument("--description", help="Job description text")
    parser.add_argument("--description-file", type=Path, help="Read the job description from a file")
    return parser.parse_args()


async def _submit(args: argparse.Namespace) -> int:
    settings = get_settings()
    services = build_pipeline_services(settings)
    session = SubmissionSession(
        SubmissionPipeline(services),
        max_upload_bytes=settings.max_upload_bytes,
        on_status=_print_status,
    )

    description = args.description or ""
    if args.description_file:
        description = args.description_file.read_text(encoding="utf-8")

    if not args.resume.exists():
        raise SystemExit(f"Resume not found: {args.resume}")

    session.fill(
        company_name=args.company,
        job_title=args.title,
        job_description=description,
        file=FileBlob(filename=args.resume.name, content=args.resume.read_bytes(), content_type="application/pdf"),
    )

    outcome = await session.submit()
    if outcome is None:
        return 2
    if not outcome.ok:
        return 1

    record = await load_record(services.record_store, services.record_prefix, outcome.submission_id)
    print(f"Submission id: {outcome.submission_id}")
    print(f"Result page: {session.redirect_path}")
    if record:
        print(json.dumps(record.feedback, indent=2))
    return 0


def main() -> None:
    setup_logging(logging.WARNING)
    raise SystemExit(asyncio.run(_submit(_parse_args())))


if __name__ == "__main__":
    main()
