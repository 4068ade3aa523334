import argparse
import sys
from pathlib import Path
from typing import List, Optional

from sqlalchemy import create_engine

from registration_reports.analytics.dashboard import build_dashboard
from registration_reports.badges.service import BadgeService
from registration_reports.badges.models import BadgeError
from registration_reports.badges.renderer import BadgeRenderer, ImgkitRasterizer
from registration_reports.badges.repository import SqlBadgeRepository
from registration_reports.badges.storage import S3BadgeStorage
from registration_reports.data.registrations import (
    load_registrations_file,
    load_registrations_from_db,
)
from registration_reports.models.registration import AttendeeRecord
from registration_reports.presentation.console import render_dashboard
from registration_reports.reporting.chart_builder import build_trend_chart
from registration_reports.reporting.excel_export import (
    export_accommodation_list,
    export_analytics_report,
    export_badge_manifest,
    export_daily_arrivals,
    export_meal_plan,
    generate_master_report,
)
from registration_reports.utils.config import EventSettings
from registration_reports.utils.email_sender import EmailConfig, send_email
from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)

REPORTS = {
    "analytics": lambda records, out, settings: export_analytics_report(records, out, settings),
    "badges": lambda records, out, settings: export_badge_manifest(records, out),
    "arrivals": lambda records, out, settings: export_daily_arrivals(records, out),
    "meals": lambda records, out, settings: export_meal_plan(records, out, settings),
    "accommodation": lambda records, out, settings: export_accommodation_list(records, out),
}


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------

def _load_records(args, settings: EventSettings) -> List[AttendeeRecord]:
    if args.input:
        return load_registrations_file(args.input)

    db_url = args.db or settings.database_url
    if not db_url:
        raise SystemExit("No registrations source: pass --input FILE or --db URL (or set EVENT_DATABASE_URL)")
    return load_registrations_from_db(db_url)


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", type=Path, default=None, help="Registrations export (.csv, .json, .xlsx)")
    parser.add_argument("--db", type=str, default=None, help="SQLAlchemy URL of the registrations database")


# ------------------------------------------------------------
# Commands
# ------------------------------------------------------------

def cmd_summary(args, settings: EventSettings) -> int:
    records = _load_records(args, settings)
    summary = build_dashboard(records, settings)
    print(render_dashboard(summary, settings.event_name))
    return 0


def cmd_export(args, settings: EventSettings) -> int:
    records = _load_records(args, settings)
    output_dir = Path(args.output or settings.output_dir)

    written = [generate_master_report(records, output_dir, settings)]
    for name in args.reports:
        written.append(REPORTS[name](records, output_dir, settings))

    for path in written:
        print(f"Saved: {path}")

    if args.email:
        email_config = EmailConfig()
        recipients = [r.strip() for r in args.to.split(",") if r.strip()] if args.to else email_config.recipients
        send_email(
            email_config,
            subject=f"{settings.event_name} registration reports",
            body=f"Attached: {', '.join(p.name for p in written)}\nRegistrations: {len(records)}",
            recipients=recipients,
            attachments=written,
        )
    return 0


def cmd_chart(args, settings: EventSettings) -> int:
    records = _load_records(args, settings)
    summary = build_dashboard(records, settings)
    path = build_trend_chart(summary.trend, Path(args.output or settings.output_dir))
    if path is None:
        print("No registrations with a creation date; nothing to chart.")
        return 1
    print(f"Saved: {path}")
    return 0


def cmd_badge(args, settings: EventSettings) -> int:
    db_url = args.db or settings.database_url
    if not db_url:
        raise SystemExit("Badges need the registrations database: pass --db URL (or set EVENT_DATABASE_URL)")

    engine = create_engine(db_url)
    record = next((r for r in load_registrations_from_db(engine) if r.id == args.id), None)
    if record is None:
        print(f"Registration {args.id} not found")
        return 1

    service = BadgeService(
        repository=SqlBadgeRepository(engine),
        storage=S3BadgeStorage(settings),
        renderer=BadgeRenderer(settings, ImgkitRasterizer(args.wkhtmltoimage)),
        settings=settings,
    )

    try:
        if args.action == "download":
            path = service.download(record, Path(args.output or settings.output_dir))
            print(f"Saved: {path}")
            return 0
        if args.action == "regenerate":
            result = service.regenerate(record)
        else:
            result = service.generate(record)
    except BadgeError as e:
        print(f"Badge {args.action} failed: {e}")
        return 1

    print(f"{result.badge_number} [{result.state.value}] {result.badge_url}")
    return 0


# ------------------------------------------------------------
# Entry point
# ------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Event registration reports")
    sub = parser.add_subparsers(dest="command", required=True)

    summary = sub.add_parser("summary", help="Print the analytics dashboard")
    _add_source_args(summary)
    summary.set_defaults(func=cmd_summary)

    export = sub.add_parser("export", help="Write Excel reports")
    _add_source_args(export)
    export.add_argument("--output", type=Path, default=None, help="Output directory")
    export.add_argument(
        "--report",
        dest="reports",
        action="append",
        choices=sorted(REPORTS),
        default=None,
        help="Extra report next to the master report (repeatable). Defaults to analytics.",
    )
    export.add_argument("--email", action="store_true", help="Email the written workbooks")
    export.add_argument("--to", type=str, default=None, help="Comma-separated recipients (defaults to DEFAULT_RECIPIENTS)")
    export.set_defaults(func=cmd_export)

    chart = sub.add_parser("chart", help="Write the registration trend chart")
    _add_source_args(chart)
    chart.add_argument("--output", type=Path, default=None, help="Output directory")
    chart.set_defaults(func=cmd_chart)

    badge = sub.add_parser("badge", help="Generate, regenerate or download one attendee badge")
    badge.add_argument("action", choices=["generate", "regenerate", "download"])
    badge.add_argument("--id", required=True, help="Registration id")
    badge.add_argument("--db", type=str, default=None, help="SQLAlchemy URL of the registrations database")
    badge.add_argument("--output", type=Path, default=None, help="Directory for downloaded badges")
    badge.add_argument("--wkhtmltoimage", type=str, default=None, help="Path to the wkhtmltoimage binary")
    badge.set_defaults(func=cmd_badge)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "reports", "") is None:
        args.reports = ["analytics"]

    settings = EventSettings()
    logger.info("Running %s | %r", args.command, settings)
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
