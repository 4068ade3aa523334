from datetime import date

from registration_reports.analytics.logistics import (
    calculate_accommodation_stats,
    calculate_daily_arrivals,
    calculate_meal_requirements,
)
from registration_reports.models.registration import (
    AccommodationType,
    LocationType,
    ParticipationMode,
)


def _by_date(buckets, attr):
    return {b.date: getattr(b, attr) for b in buckets}


class TestMealWindow:
    def test_three_meal_days_but_two_nights(self, make_record, settings):
        rec = make_record(
            accommodation=AccommodationType.GENERAL,
            arrival=date(2025, 1, 10),
            departure=date(2025, 1, 12),
        )

        meals = calculate_meal_requirements([rec], settings)
        present = {d for d, n in _by_date(meals.daily_meals, "attendees").items() if n}
        assert present == {"2025-01-10", "2025-01-11", "2025-01-12"}

        stats = calculate_accommodation_stats([rec], settings)
        nights = {d for d, n in _by_date(stats.nightly_occupancy, "total").items() if n}
        assert nights == {"2025-01-10", "2025-01-11"}
        assert stats.average_stay_nights == 2.0

    def test_same_day_departure(self, make_record, settings):
        rec = make_record(arrival=date(2025, 1, 11), departure=date(2025, 1, 11))

        meals = calculate_meal_requirements([rec], settings)
        assert meals.total_breakfast == 1

        stats = calculate_accommodation_stats([rec], settings)
        assert all(b.total == 0 for b in stats.nightly_occupancy)
        assert stats.peak_occupancy is None

    def test_meal_totals(self, make_record, settings):
        records = [
            make_record(arrival=date(2025, 1, 10), departure=date(2025, 1, 12)),
            make_record(arrival=date(2025, 1, 12), departure=date(2025, 1, 14)),
            # within Zaria: no meals
            make_record(location=LocationType.WITHIN_ZARIA, arrival=date(2025, 1, 10), departure=date(2025, 1, 14)),
            # no stay window: eligible but not counted
            make_record(arrival=date(2025, 1, 10)),
        ]
        meals = calculate_meal_requirements(records, settings)

        assert meals.eligible_attendees == 2
        assert len(meals.daily_meals) == 5
        assert _by_date(meals.daily_meals, "attendees")["2025-01-12"] == 2
        assert meals.total_breakfast == meals.total_lunch == meals.total_dinner == 6
        assert meals.total_meals == 18
        assert meals.average_meals_per_day == 3.6


class TestDailyArrivals:
    def test_total_counts_onsite_without_date(self, make_record):
        records = [
            make_record(arrival=date(2025, 1, 10), accommodation=AccommodationType.HOTEL),
            make_record(arrival=date(2025, 1, 10), location=LocationType.WITHIN_ZARIA),
            make_record(arrival=date(2025, 1, 11)),
            make_record(),  # onsite, no arrival date
            make_record(mode=ParticipationMode.ONLINE, arrival=date(2025, 1, 10)),
        ]
        arrivals = calculate_daily_arrivals(records)

        assert arrivals.total_arrivals == 4
        assert arrivals.arrivals_with_date == 3
        assert arrivals.total_arrivals >= arrivals.arrivals_with_date

        first = arrivals.arrivals_by_date[0]
        assert first.date == "2025-01-10"
        assert (first.count, first.hotel, first.with_meals, first.within_zaria) == (2, 1, 1, 1)
        assert arrivals.peak_arrival.date == "2025-01-10"


class TestAccommodation:
    def test_requests_and_split(self, make_record, settings):
        records = [
            make_record(accommodation=AccommodationType.GENERAL, arrival=date(2025, 1, 10), departure=date(2025, 1, 11)),
            make_record(accommodation=AccommodationType.HOTEL, arrival=date(2025, 1, 10), departure=date(2025, 1, 13)),
            make_record(accommodation=AccommodationType.HOTEL),
            make_record(mode=ParticipationMode.ONLINE, accommodation=AccommodationType.HOTEL),
        ]
        stats = calculate_accommodation_stats(records, settings)

        assert stats.general_requests == 1
        assert stats.hotel_requests == 2
        first = stats.nightly_occupancy[0]
        assert (first.date, first.general, first.hotel, first.total) == ("2025-01-10", 1, 1, 2)
        assert stats.peak_occupancy.date == "2025-01-10"
        assert stats.average_stay_nights == 2.0


class TestEmptyInput:
    def test_all_zero(self, settings):
        assert calculate_daily_arrivals([]).total_arrivals == 0
        meals = calculate_meal_requirements([], settings)
        assert meals.total_meals == 0
        assert all(d.attendees == 0 for d in meals.daily_meals)
        stats = calculate_accommodation_stats([], settings)
        assert stats.peak_occupancy is None
        assert stats.average_stay_nights == 0.0


class TestPeakTies:
    def test_earliest_arrival_date_wins(self, make_record):
        records = [
            make_record(arrival=date(2025, 1, 12)),
            make_record(arrival=date(2025, 1, 12)),
            make_record(arrival=date(2025, 1, 10)),
            make_record(arrival=date(2025, 1, 10)),
            make_record(arrival=date(2025, 1, 11)),
        ]
        peak = calculate_daily_arrivals(records).peak_arrival
        assert (peak.date, peak.count) == ("2025-01-10", 2)

    def test_earliest_night_wins(self, make_record, settings):
        records = [
            make_record(accommodation=AccommodationType.HOTEL, arrival=date(2025, 1, 13), departure=date(2025, 1, 14)),
            make_record(accommodation=AccommodationType.HOTEL, arrival=date(2025, 1, 13), departure=date(2025, 1, 14)),
            make_record(accommodation=AccommodationType.GENERAL, arrival=date(2025, 1, 11), departure=date(2025, 1, 12)),
            make_record(accommodation=AccommodationType.GENERAL, arrival=date(2025, 1, 11), departure=date(2025, 1, 12)),
        ]
        peak = calculate_accommodation_stats(records, settings).peak_occupancy
        assert (peak.date, peak.total) == ("2025-01-11", 2)
