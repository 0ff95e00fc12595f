"""Command-line entry point for the job search engine.

Usage:
    python -m jobsearch.main -q python --location pune      # search the backend
    python -m jobsearch.main --experience "1-3 yrs" --sort salary-high
    python -m jobsearch.main --jobs-file jobs.json -q data  # search a local file
    python -m jobsearch.main -q python --save-search        # remember this search
    python -m jobsearch.main --list-saved                   # show saved/recent
    python -m jobsearch.main -q python --dry-run            # show filters only
"""

from __future__ import annotations

import argparse
import logging
import sys

from jobsearch.classifier import is_government, is_internship, is_remote
from jobsearch.client import BackendClient
from jobsearch.config import load_config
from jobsearch.experience import BUCKETS, classify
from jobsearch.models import FilterCriteria
from jobsearch.salary import format_salary
from jobsearch.search import SearchSession, load_jobs_file
from jobsearch.sorting import SORT_KEYS
from jobsearch.storage import JsonFileStore, SearchHistory


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Job board search: fetch jobs, filter them client-side, "
        "sort and paginate the results."
    )
    parser.add_argument("--config", type=str, default=None,
                        help="Path to config.yaml (default: config.yaml in project root)")
    parser.add_argument("--keyword", "-q", default="", help="Keyword to search for")
    parser.add_argument("--location", default="", help="Location, or 'remote'")
    parser.add_argument("--type", dest="job_type", default="", help="Employment type, e.g. Full-time")
    parser.add_argument("--category", default="", help="Category, e.g. government, internship or Technology")
    parser.add_argument("--company", default="", help="Company name substring")
    parser.add_argument("--experience", default="", choices=("",) + BUCKETS,
                        help="Experience bucket")
    parser.add_argument("--salary-min", type=int, default=None, help="Minimum salary")
    parser.add_argument("--salary-max", type=int, default=None, help="Maximum salary")
    parser.add_argument("--remote", action="store_true", help="Only remote jobs")
    parser.add_argument("--sort", default=None, choices=SORT_KEYS, help="Sort order")
    parser.add_argument("--page", type=int, default=1, help="Page number (1-based)")
    parser.add_argument("--jobs-file", type=str, default=None,
                        help="Search a local JSON job collection instead of the backend")
    parser.add_argument("--save-search", action="store_true",
                        help="Save the current keyword/location/type")
    parser.add_argument("--list-saved", action="store_true",
                        help="List saved searches and recent history, then exit")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the resolved criteria and server filters without searching")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug-level logging")
    return parser.parse_args(argv)


def criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    return FilterCriteria(
        keyword=args.keyword.strip(),
        location=args.location.strip(),
        job_type=args.job_type.strip(),
        experience=args.experience,
        category=args.category.strip(),
        company=args.company.strip(),
        salary_min=args.salary_min,
        salary_max=args.salary_max,
        is_remote=args.remote,
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    config = load_config(args.config)
    setup_logging("DEBUG" if args.verbose else config.log_level)
    logger = logging.getLogger(__name__)

    history = SearchHistory(
        JsonFileStore(config.storage.path),
        saved_cap=config.storage.saved_searches_cap,
        history_cap=config.storage.search_history_cap,
    )

    if args.list_saved:
        logger.info("=== Saved searches ===")
        for entry in history.saved_searches():
            logger.info("  %s  q=%r location=%r type=%r", entry.created_at, entry.keyword,
                        entry.location, entry.job_type)
        logger.info("=== Recent searches ===")
        for entry in history.recent_searches():
            logger.info("  %s  q=%r location=%r type=%r", entry.created_at, entry.keyword,
                        entry.location, entry.job_type)
        return

    criteria = criteria_from_args(args)

    if args.dry_run:
        logger.info("=== Dry Run ===")
        logger.info("Query params: %s", criteria.to_query_params())
        logger.info("Server filters: %s", criteria.server_filters(config.fetch_limit))
        return

    if args.jobs_file:
        session = SearchSession(config, history=history, criteria=criteria,
                                jobs=load_jobs_file(args.jobs_file))
    else:
        session = SearchSession(config, client=BackendClient(config), history=history,
                                criteria=criteria)

    if args.sort:
        session.set_sort(args.sort)

    if args.save_search:
        try:
            entry = session.save_current_search()
        except ValueError as exc:
            logger.error("%s", exc)
            sys.exit(1)
        logger.info("Saved search %s", entry.id)

    session.search()
    session.go_to_page(args.page)
    page = session.results()

    if not page.items:
        logger.warning("No jobs on page %d (%d matching jobs, %d pages)",
                       page.page, page.total_items, page.total_pages)
        return

    logger.info("=== Page %d of %d (%d jobs) ===", page.page, page.total_pages, page.total_items)
    for job in page.items:
        tags = [classify(job)]
        if is_remote(job):
            tags.append("remote")
        if is_government(job):
            tags.append("government")
        if is_internship(job):
            tags.append("internship")
        logger.info("  %s | %s | %s | %s | %s",
                    job.title, job.company or "-", job.location or "-",
                    format_salary(job.salary), ", ".join(tags))
        logger.info("    %s", session.job_url(job))


if __name__ == "__main__":
    main()
