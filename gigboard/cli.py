# gigboard/cli.py
"""Command-line view of the board: load jobs, apply pills, print a page.

    gigboard --jobs-file export.json -i python -x senior --page 0
    gigboard --source rest --facets
    gigboard --jobs-file export.json --import-db
"""
from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from gigboard.config import Settings
from gigboard.core.board import JobBoard
from gigboard.core.normalize import Job, is_new
from gigboard.filters.classify import score_industries
from gigboard.filters.pipeline import PillConflictError
from gigboard.providers import REGISTRY as SOURCE_REGISTRY, FileJobSource, JobSourceError, build_source

CSV_COLUMNS = ["rank", "id", "industry", "title", "company", "location", "rate", "date", "url"]


def _json_default(o):
    if isinstance(o, datetime):
        return o.isoformat()
    return str(o)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gigboard", description="Search and browse the gig board")
    src = parser.add_mutually_exclusive_group()
    src.add_argument("--jobs-file", type=str, default=None, help="Read jobs from a JSON export instead of the configured source")
    src.add_argument("--source", choices=sorted(SOURCE_REGISTRY), default=None,
                     help="Job source to fetch from (overrides GIGBOARD_SOURCE)")

    parser.add_argument("-i", "--include", action="append", default=[], metavar="TERM",
                        help="Include pill; repeat for more. Industry names filter by industry")
    parser.add_argument("-x", "--exclude", action="append", default=[], metavar="TERM",
                        help="Exclude pill; repeat for more")
    parser.add_argument("--industry", type=str, default=None, help="Select an industry to refine with --exclude-term")
    parser.add_argument("--exclude-term", action="append", default=[], metavar="TERM",
                        help="Drop jobs of the selected industry mentioning TERM")

    parser.add_argument("--page", type=int, default=0, help="Zero-based page to show (default 0)")
    parser.add_argument("--page-size", type=int, default=None, help="Jobs per page (overrides GIGBOARD_PAGE_SIZE)")

    parser.add_argument("--facets", action="store_true", help="List industries with job counts and exit")
    parser.add_argument("--keywords", type=str, default=None, metavar="INDUSTRY",
                        help="List refinement keywords for an industry and exit")
    parser.add_argument("--explain", action="store_true", help="Show per-industry keyword scores for each listed job")
    parser.add_argument("--json", action="store_true", help="Print the page as JSON")
    parser.add_argument("--csv-out", type=str, default=None, help="Also write the full filtered result to this CSV file")
    parser.add_argument("--import-db", action="store_true",
                        help="Upsert the loaded jobs into the database and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging (pipeline stage counts)")
    return parser


def _load_board(args: argparse.Namespace, settings: Settings) -> JobBoard:
    if args.jobs_file:
        source = FileJobSource(args.jobs_file)
    else:
        if args.source:
            settings.source = args.source
        source = build_source(settings)
    board = JobBoard(source, settings=settings)
    if not board.refresh():
        raise JobSourceError(board.last_error or "no jobs loaded")
    return board


def _print_page(board: JobBoard, args: argparse.Namespace, settings: Settings) -> None:
    info = board.page_info
    stats = board.pipeline_stats
    print(f"Summary: total={stats.total} matched={info.total_items} page={info.page + 1}/{max(info.total_pages, 1)}"
          + (f" mode={stats.mode}" if stats.mode else ""))
    if stats.industry_pills:
        print("Industry pills: " + ", ".join(stats.industry_pills))
    if board.state.exclude_pills:
        print("Excluding: " + ", ".join(board.state.exclude_pills))

    offset = info.page * info.page_size
    for n, job in enumerate(board.paginated_jobs, start=offset + 1):
        flag = " [new]" if is_new(job, hours=settings.new_job_hours) else ""
        industry = board.industry_of(job).value
        print(f"{n:>4}. {job.title} | {job.company} | {job.location} | {industry}{flag}")
        if job.rate:
            print(f"      rate: {job.rate}")
        if args.explain:
            scores = {k.value: v for k, v in score_industries(job, board.taxonomy).items() if v}
            print(f"      scores: {scores or '{}'}")

    if info.total_pages > 1:
        pages = " ".join(f"[{p + 1}]" if p == info.page else str(p + 1) for p in info.window)
        print(f"Pages: {pages}")


def _page_payload(board: JobBoard) -> dict:
    info = board.page_info
    return {
        "total": info.total_items,
        "page": info._asdict(),
        "facets": [{"industry": f.label, "count": f.count} for f in board.facets],
        "items": [
            job.model_dump() | {"industry": board.industry_of(job).value}
            for job in board.paginated_jobs
        ],
    }


def _write_csv(board: JobBoard, path: str) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8", newline="") as fcsv:
        writer = csv.DictWriter(fcsv, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for rank, job in enumerate(board.filtered_jobs, start=1):
            writer.writerow({
                "rank": rank,
                "id": job.id,
                "industry": board.industry_of(job).value,
                "title": job.title,
                "company": job.company,
                "location": job.location,
                "rate": job.rate,
                "date": job.date,
                "url": job.url,
            })
    print(f"CSV written to: {out}")


def _import_db(jobs: List[Job]) -> int:
    from gigboard.db.crud import upsert_jobs
    from gigboard.db.models import Base
    from gigboard.db.session import ENGINE, get_session

    Base.metadata.create_all(ENGINE)
    with get_session() as session:
        return upsert_jobs(session, jobs)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.from_env()
    if args.page_size:
        settings.page_size = max(1, args.page_size)

    try:
        board = _load_board(args, settings)
    except JobSourceError as e:
        print(f"Could not load jobs: {e}", file=sys.stderr)
        return 2

    if args.import_db:
        saved = _import_db(list(board.jobs))
        print(f"Imported {saved}/{len(board.jobs)} jobs into the database.")
        return 0

    if args.keywords:
        words = board.industry_keywords(args.keywords)
        if not words:
            print(f"Unknown industry: {args.keywords}", file=sys.stderr)
            return 2
        print("\n".join(words))
        return 0

    if args.facets:
        for facet in board.facets:
            print(f"{facet.label}: {facet.count}")
        return 0

    try:
        board.set_filters(args.include, args.exclude, args.industry, args.exclude_term)
    except PillConflictError as e:
        print(str(e), file=sys.stderr)
        return 2
    board.set_page(args.page)

    if args.json:
        print(json.dumps(_page_payload(board), indent=2, default=_json_default))
    else:
        _print_page(board, args, settings)

    if args.csv_out:
        _write_csv(board, args.csv_out)
    return 0


if __name__ == "__main__":
    # When executed as `python -m gigboard.cli ...`
    sys.exit(main())
