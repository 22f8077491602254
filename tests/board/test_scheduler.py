"""Tests for day-bucket scheduling.

Buckets must be:
- Keyed by every day in the window, empty days included
- Ordered by commodity name, then planned bins descending
- A pure function of (plans, window, index)
"""

from harvest_board.board import bucket_plan_ids, collect_commodity_names, schedule, sort_bucket
from harvest_board.dates import day_keys_for_week
from harvest_board.reference import build_reference_index

WEEK = day_keys_for_week("2024-06-10", week_starts_on=0)


class TestSchedule:
    def test_single_plan_lands_in_its_day(self, make_plan, reference_index):
        buckets = schedule([make_plan(1, "2024-06-10", planned_bins=10)], WEEK, reference_index)

        assert list(buckets) == WEEK
        assert len(buckets["2024-06-10"]) == 1
        assert buckets["2024-06-10"][0].card.block_name == "A"
        assert all(buckets[key] == [] for key in WEEK[1:])

    def test_same_commodity_sorted_by_planned_bins_desc(self, make_plan, reference_index):
        plans = [make_plan(1, "2024-06-10", planned_bins=5), make_plan(2, "2024-06-10", planned_bins=20)]
        bucket = schedule(plans, WEEK, reference_index)["2024-06-10"]
        assert [entry.planned_bins for entry in bucket] == [20, 5]

    def test_commodities_sorted_alphabetically(self, make_plan, reference_index):
        plans = [make_plan(1, "2024-06-10", grower_block_id=102), make_plan(2, "2024-06-10")]
        bucket = schedule(plans, WEEK, reference_index)["2024-06-10"]
        assert [entry.commodity_name for entry in bucket] == ["Gala", "Honeycrisp"]

    def test_commodity_sort_is_case_insensitive(self, make_plan):
        index = build_reference_index(
            [
                {"source_database": "cobblestone", "GABLOCKIDX": 1, "CMTYIDX": "b"},
                {"source_database": "cobblestone", "GABLOCKIDX": 2, "CMTYIDX": "a"},
            ],
            [],
            [{"CMTYIDX": "a", "DESCR": "apple"}, {"CMTYIDX": "b", "DESCR": "Banana"}],
        )
        plans = [make_plan(1, "2024-06-10", grower_block_id=1), make_plan(2, "2024-06-10", grower_block_id=2)]
        bucket = schedule(plans, WEEK, index)["2024-06-10"]
        assert [entry.commodity_name for entry in bucket] == ["apple", "Banana"]

    def test_accented_commodity_sorts_with_its_base_letter(self, make_plan):
        index = build_reference_index(
            [
                {"source_database": "cobblestone", "GABLOCKIDX": 1, "CMTYIDX": "z"},
                {"source_database": "cobblestone", "GABLOCKIDX": 2, "CMTYIDX": "e"},
                {"source_database": "cobblestone", "GABLOCKIDX": 3, "CMTYIDX": "f"},
            ],
            [],
            [
                {"CMTYIDX": "z", "DESCR": "Zest"},
                {"CMTYIDX": "e", "DESCR": "Évora"},
                {"CMTYIDX": "f", "DESCR": "Fuji"},
            ],
        )
        plans = [make_plan(i, "2024-06-10", grower_block_id=i) for i in (1, 2, 3)]
        bucket = schedule(plans, WEEK, index)["2024-06-10"]
        assert [entry.commodity_name for entry in bucket] == ["Évora", "Fuji", "Zest"]

    def test_missing_commodity_sorts_first(self, make_plan, reference_index):
        plans = [make_plan(1, "2024-06-10"), make_plan(2, "2024-06-10", grower_block_id=4242)]
        bucket = schedule(plans, WEEK, reference_index)["2024-06-10"]
        assert [entry.id for entry in bucket] == [2, 1]

    def test_missing_planned_bins_sort_as_zero(self, make_plan, reference_index):
        plans = [make_plan(1, "2024-06-10"), make_plan(2, "2024-06-10", planned_bins=3)]
        bucket = schedule(plans, WEEK, reference_index)["2024-06-10"]
        assert [entry.id for entry in bucket] == [2, 1]

    def test_full_ties_keep_input_order(self, make_plan, reference_index):
        plans = [make_plan(i, "2024-06-12", planned_bins=4) for i in (3, 1, 2)]
        bucket = schedule(plans, WEEK, reference_index)["2024-06-12"]
        assert [entry.id for entry in bucket] == [3, 1, 2]

    def test_plans_outside_window_are_dropped(self, make_plan, reference_index):
        plans = [make_plan(1, "2024-06-09"), make_plan(2, "2024-06-17"), make_plan(3, "2024-06-16")]
        buckets = schedule(plans, WEEK, reference_index)
        assert bucket_plan_ids(buckets)["2024-06-16"] == [3]
        assert sum(len(entries) for entries in buckets.values()) == 1

    def test_utc_instants_bucket_by_local_day(self, make_plan, reference_index):
        # 2024-06-11T03:00Z is the evening of the 10th in the pinned timezone
        buckets = schedule([make_plan(1, "2024-06-11T03:00:00Z")], WEEK, reference_index)
        assert bucket_plan_ids(buckets)["2024-06-10"] == [1]

    def test_idempotent(self, make_plan, reference_index):
        plans = [
            make_plan(1, "2024-06-10", planned_bins=2),
            make_plan(2, "2024-06-10", grower_block_id=102, planned_bins=9),
            make_plan(3, "2024-06-11"),
        ]
        assert schedule(plans, WEEK, reference_index) == schedule(plans, WEEK, reference_index)

    def test_does_not_mutate_plans(self, make_plan, reference_index):
        plans = [make_plan(1, "2024-06-10"), make_plan(2, "2024-06-11")]
        snapshot = [plan.model_dump() for plan in plans]
        schedule(plans, WEEK, reference_index)
        assert [plan.model_dump() for plan in plans] == snapshot

    def test_received_bins_feed_estimates(self, make_plan, reference_index):
        buckets = schedule(
            [make_plan(1, "2024-06-10")],
            WEEK,
            reference_index,
            received_bins=[{"blockID": "B-101", "ReceiveDate": "2024-06-10", "RecvQnt": 14}],
        )
        assert buckets["2024-06-10"][0].card.estimated_bins == 14


class TestBucketHelpers:
    def test_sort_bucket_returns_new_list(self, make_plan, reference_index):
        buckets = schedule(
            [make_plan(1, "2024-06-10", planned_bins=1), make_plan(2, "2024-06-10", planned_bins=8)],
            WEEK,
            reference_index,
        )
        entries = list(reversed(buckets["2024-06-10"]))
        ordered = sort_bucket(entries)
        assert ordered is not entries
        assert [entry.id for entry in ordered] == [2, 1]

    def test_collect_commodity_names(self, make_plan, reference_index):
        plans = [
            make_plan(1, "2024-06-10", grower_block_id=102),
            make_plan(2, "2024-06-11"),
            make_plan(3, "2024-06-12"),
            make_plan(4, "2024-06-12", grower_block_id=4242),
        ]
        buckets = schedule(plans, WEEK, reference_index)
        assert collect_commodity_names(buckets) == ["Gala", "Honeycrisp"]
