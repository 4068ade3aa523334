# src/registration_reports/reporting/chart_builder.py
"""
Chart Builder: daily registrations bar chart (online vs onsite)
"""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from registration_reports.models.analytics import RegistrationTrend  # noqa: E402

ONLINE_COLOR = "#2563eb"
ONSITE_COLOR = "#10b981"


def build_trend_chart(trend: RegistrationTrend, output_dir: Path) -> Path | None:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    chart_path = output_dir / "registration_trend.png"

    if not trend.daily_counts:
        return None

    labels = [b.date for b in trend.daily_counts]
    online = [b.online_count for b in trend.daily_counts]
    onsite = [b.onsite_count for b in trend.daily_counts]
    positions = range(len(labels))

    plt.figure(figsize=(11, 5))
    plt.bar([p - 0.2 for p in positions], online, width=0.4, label="Online", color=ONLINE_COLOR)
    plt.bar([p + 0.2 for p in positions], onsite, width=0.4, label="Onsite", color=ONSITE_COLOR)

    plt.xticks(list(positions), labels, rotation=45, ha="right", fontsize=8)
    plt.xlabel("Registration Day", fontsize=12)
    plt.ylabel("Registrations", fontsize=12)
    title = "Daily Registrations"
    if trend.peak_day is not None:
        title += f", peak {trend.peak_day.date} ({trend.peak_day.total})"
    plt.title(title, fontsize=14)
    plt.legend()
    plt.grid(True, axis='y', alpha=0.3)
    plt.tight_layout()

    plt.savefig(chart_path, dpi=200, bbox_inches='tight', facecolor='white')
    plt.close()
    return chart_path
