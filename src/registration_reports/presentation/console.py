from __future__ import annotations

import io
from typing import List, Sequence

from registration_reports.models.analytics import CategoryCount, DashboardSummary


def _format_table(rows: Sequence[Sequence[object]], headers: List[str], max_rows: int | None = None) -> str:
    output = io.StringIO()
    rows = list(rows)

    if max_rows is not None and len(rows) > max_rows:
        shown = rows[:max_rows]
        omitted = len(rows) - max_rows
    else:
        shown = rows
        omitted = 0

    widths = [len(h) for h in headers]
    for row in shown:
        for i, v in enumerate(row):
            widths[i] = max(widths[i], len(str(v)))

    def fmt(r):
        return " ".join(str(r[i]).ljust(widths[i]) for i in range(len(headers)))

    print(fmt(headers), file=output)
    print(" ".join("-" * w for w in widths), file=output)
    for row in shown:
        print(fmt(row), file=output)

    if omitted:
        print(f"... ({omitted} more rows omitted) ...", file=output)

    return output.getvalue()


def _category_table(categories: Sequence[CategoryCount], label: str, max_rows: int = 10) -> str:
    if not categories:
        return "(none)\n"
    return _format_table(
        [(c.name, c.count, f"{c.percentage:.1f}%") for c in categories],
        [label, "count", "pct"],
        max_rows=max_rows,
    )


def render_dashboard(summary: DashboardSummary, event_name: str = "GREAT DAYS 2025") -> str:
    """
    Plain-text dashboard. Presentation only: every number comes from the summary.
    """
    t = summary.trend
    ml = summary.mode_location
    arr = summary.arrivals
    meals = summary.meals
    acc = summary.accommodation
    nat = summary.nationality

    out = io.StringIO()

    print("=" * 80, file=out)
    print(f"{event_name.upper()} - REGISTRATION DASHBOARD", file=out)
    print("=" * 80, file=out)
    print(f"Total Registrations: {t.total_registrations}", file=out)
    print(f"Online / Onsite:     {ml.online_count} ({ml.online_percentage:.1f}%) / "
          f"{ml.onsite_count} ({ml.onsite_percentage:.1f}%)", file=out)
    print(f"Within / Outside Zaria (onsite): {ml.within_zaria_count} ({ml.within_zaria_percentage:.1f}%) / "
          f"{ml.outside_zaria_count} ({ml.outside_zaria_percentage:.1f}%)", file=out)
    print(file=out)

    # Trend
    print("--- REGISTRATION TREND ---", file=out)
    if t.peak_day is not None:
        print(f"Peak Day:      {t.peak_day.date} ({t.peak_day.total})", file=out)
    else:
        print("Peak Day:      N/A", file=out)
    print(f"Current Rate:  {t.current_rate:.1f} / day (last 7 active days)", file=out)
    print(f"Projection:    {t.projection} ({t.days_until_event} days to go)", file=out)
    print(file=out)

    # Arrivals
    print("--- ARRIVALS ---", file=out)
    print(f"Onsite Registrants: {arr.total_arrivals} ({arr.arrivals_with_date} with arrival date)", file=out)
    if arr.arrivals_by_date:
        print(
            _format_table(
                [(b.date, b.count, b.general, b.hotel, b.with_meals) for b in arr.arrivals_by_date],
                ["date", "arrivals", "general", "hotel", "with_meals"],
            ),
            file=out,
        )
    print(file=out)

    # Meals
    print("--- MEALS (onsite, outside Zaria) ---", file=out)
    print(f"Eligible Attendees: {meals.eligible_attendees}", file=out)
    print(f"Breakfast / Lunch / Dinner: {meals.total_breakfast} / {meals.total_lunch} / {meals.total_dinner}", file=out)
    print(f"Total Meals: {meals.total_meals} (avg {meals.average_meals_per_day:.1f} / day)", file=out)
    print(file=out)

    # Accommodation
    print("--- ACCOMMODATION ---", file=out)
    print(f"General / Hotel Requests: {acc.general_requests} / {acc.hotel_requests}", file=out)
    if acc.peak_occupancy is not None:
        print(f"Peak Night: {acc.peak_occupancy.date} ({acc.peak_occupancy.total})", file=out)
    print(f"Average Stay: {acc.average_stay_nights:.1f} nights", file=out)
    print(file=out)

    # Breakdowns
    print("--- NATIONALITY ---", file=out)
    print(f"Countries: {nat.total_countries} | Local: {nat.local_count} | International: {nat.international_count}", file=out)
    print(_category_table(nat.countries, "country"), file=out)

    print("--- BRANCHES (members) ---", file=out)
    print(_category_table(summary.branches.categories, "branch"), file=out)

    print("--- UNITS ---", file=out)
    print(_category_table(summary.units.categories, "unit"), file=out)

    return out.getvalue()
