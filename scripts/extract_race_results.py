"""
Run one race result extraction batch from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from app.config import get_race_results_settings
from app.services.export_service import export_results
from app.services.race_results_service import InlineTaskExecutor, build_race_results_service


def _read_urls(args: argparse.Namespace) -> list[str]:
    urls = list(args.urls)
    if args.url_file:
        with open(args.url_file, encoding="utf-8") as handle:
            urls.extend(line.strip() for line in handle if line.strip() and not line.startswith("#"))
    return urls


def main() -> int:
    parser = argparse.ArgumentParser(description="Extract participant results from race timing pages.")
    parser.add_argument("urls", nargs="*", help="Result page URLs.")
    parser.add_argument(
        "--file",
        dest="url_file",
        default=None,
        help="Optional text file with one URL per line.",
    )
    parser.add_argument(
        "--owner",
        dest="owner_id",
        default="cli",
        help="Owner identity that scopes the job and cache.",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=("json", "csv", "excel"),
        default=None,
        help="Write an export to stdout instead of the raw job summary.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "WARNING").strip().upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    urls = _read_urls(args)
    if not urls:
        parser.error("Provide at least one URL or --file.")

    service = build_race_results_service(get_race_results_settings(), executor=InlineTaskExecutor())
    job = service.submit_batch(urls=urls, owner_id=args.owner_id)
    job = service.get_job_status(job_id=job.job_id, owner_id=args.owner_id)
    records = service.get_job_results(job_id=job.job_id, owner_id=args.owner_id)

    if args.output_format:
        sys.stdout.buffer.write(export_results(records, args.output_format).data)
        sys.stdout.flush()
        return 0 if job.error_count == 0 else 1

    payload = {
        "job_id": job.job_id,
        "status": job.status,
        "total_urls": job.total_urls,
        "success_count": job.success_count,
        "error_count": job.error_count,
        "results": [
            {
                "url": record.url,
                "status": record.status,
                "from_cache": record.from_cache,
                "error_message": record.error_message,
                **record.fields(),
            }
            for record in records
        ],
    }
    print(json.dumps(payload, indent=2))
    return 0 if job.error_count == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
