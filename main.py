#!/usr/bin/env python3
"""
Kaizen-PIs - Main Demo

This script walks through the library end to end:
1. Defines KPIs with simple and tiered conversion rules
2. Logs a week of observations
3. Applies a patch that rebalances scoring
4. Prints category summaries, the daily time series and top KPIs
"""

from kaizen_pis import KPILibrary, create_flexible_date
from kaizen_pis.config import configure_logging


def build_library() -> KPILibrary:
    """Create a library with the demo KPIs."""
    library = KPILibrary()

    library.create_kpi({
        "id": "pushups",
        "name": "Push-ups",
        "category": "Fitness",
        "subcategory": "Strength",
        "dataType": "number",
        "conversionRule": {"type": "simple", "pointsPerUnit": 0.5},
        "patchVersion": "1.0.0"
    })
    library.create_kpi({
        "id": "reading",
        "name": "Pages read",
        "category": "Learning",
        "dataType": "number",
        "conversionRule": {
            "type": "tiered",
            "tiers": [
                {"threshold": 10, "pointsPerUnit": 2},
                {"threshold": 20, "pointsPerUnit": 1}
            ]
        },
        "attributes": [{"name": "focus bonus", "type": "modifier", "value": 5}],
        "patchVersion": "1.0.0"
    })
    library.create_kpi({
        "id": "meditation",
        "name": "Minutes meditated",
        "category": "Wellbeing",
        "dataType": "number",
        "conversionRule": {"type": "simple"},
        "patchVersion": "1.0.0"
    })
    return library


def log_week(library: KPILibrary) -> None:
    """Log seven days of sample observations."""
    observations = [
        (1, 20, 12, 10),
        (2, 30, 0, 15),
        (3, 25, 35, 0),
        (4, 40, 8, 20),
        (5, 10, 15, 10),
        (6, 0, 40, 30),
        (7, 35, 5, 5),
    ]

    for day, pushups, pages, minutes in observations:
        entries = [
            {"kpiId": "pushups", "value": pushups},
            {"kpiId": "reading", "value": pages, "attributes": {"difficulty": 1.2, "note": "novel"}},
            {"kpiId": "meditation", "value": minutes},
        ]
        library.create_log({
            "date": {"year": 2024, "month": 3, "day": day},
            "patchVersion": library.current_patch().version if library.current_patch() else "1.0.0",
            "entries": entries
        })


def print_summary(library: KPILibrary, title: str) -> None:
    start = create_flexible_date(2024, 3, 1)
    end = create_flexible_date(2024, 3, 7)

    print("=" * 60)
    print(title)
    print("=" * 60)
    print()

    print(f"{'Category':<20} {'Total':>10} {'Average':>10}")
    print("-" * 42)
    totals = library.summarize_by_category()
    averages = library.average_score_by_category()
    for category in sorted(totals):
        print(f"{category:<20} {totals[category]:>10.1f} {averages[category]:>10.1f}")
    print()

    print("Daily totals:")
    for point in library.summarize_by_time_range(start, end):
        print(f"  {point.date}  {point.total_score:>8.1f}")
    print()

    print("Top KPIs:")
    for item in library.top_performing_kpis(start, end, count=3):
        print(f"  {item.kpi.name:<20} {item.score:>8.1f}")
    print()


def main():
    configure_logging()

    print()
    print("+" + "=" * 58 + "+")
    print("|              KAIZEN-PIs SCORING DEMONSTRATION            |")
    print("+" + "=" * 58 + "+")
    print()

    library = build_library()
    log_week(library)
    print_summary(library, "BEFORE PATCH 1.1.0")

    # Double reading's first tier and turn the meditation KPI into a multiplier-driven score
    library.create_patch({
        "season": 1,
        "majorVersion": 1,
        "minorVersion": 0,
        "changes": [
            {
                "type": "modify",
                "kpiId": "reading",
                "details": {
                    "conversionRule": {
                        "type": "tiered",
                        "tiers": [
                            {"threshold": 10, "pointsPerUnit": 4},
                            {"threshold": 20, "pointsPerUnit": 1}
                        ]
                    }
                }
            },
            {
                "type": "modify",
                "kpiId": "meditation",
                "details": {
                    "attributes": [{"name": "consistency", "type": "multiplier", "value": 1.5}]
                }
            }
        ]
    })
    print_summary(library, "AFTER PATCH 1.1.0")

    print("Patch history:")
    for patch in library.patch_history():
        print(f"  {patch.version}  ({len(patch.changes)} change(s))")
    print()


if __name__ == "__main__":
    main()
