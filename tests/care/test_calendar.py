"""Tests for care calendar reads and completion toggles."""

from datetime import date, datetime

from verdant.care.calendar import (
    UNKNOWN_SPECIES,
    group_todays_care,
    plant_detail,
    set_task_completion,
)


def _task(task_id, listing_id, due, completed=False, listing=None):
    return {
        "id": task_id,
        "listing_id": listing_id,
        "title": f"Task {task_id}",
        "due_date": due,
        "completed": completed,
        "listing": listing,
    }


class TestSetTaskCompletion:
    """completed_at follows completed."""

    def test_complete_sets_timestamp(self, fake_db):
        fake_db.tables["care_task"] = [{"id": "t1", "user_id": "user-1", "completed": False, "completed_at": None}]
        when = datetime(2024, 2, 1, 8, 30)

        row = set_task_completion(fake_db, "t1", True, when, user_id="user-1")

        assert row["completed"] is True
        assert row["completed_at"] == when.isoformat()

    def test_uncomplete_clears_timestamp(self, fake_db):
        fake_db.tables["care_task"] = [
            {"id": "t1", "user_id": "user-1", "completed": True, "completed_at": "2024-02-01T08:30:00"}
        ]

        row = set_task_completion(fake_db, "t1", False, datetime(2024, 2, 2), user_id="user-1")

        assert row["completed"] is False
        assert row["completed_at"] is None

    def test_other_users_task_is_not_updated(self, fake_db):
        fake_db.tables["care_task"] = [{"id": "t1", "user_id": "user-2", "completed": False, "completed_at": None}]

        assert set_task_completion(fake_db, "t1", True, datetime(2024, 2, 1), user_id="user-1") is None
        assert fake_db.rows("care_task")[0]["completed"] is False

    def test_unknown_task_returns_none(self, fake_db):
        assert set_task_completion(fake_db, "missing", True, datetime(2024, 2, 1)) is None


class TestGroupTodaysCare:
    """Incomplete tasks due today or earlier, grouped by plant."""

    def test_groups_due_and_overdue_by_plant(self):
        fern = {"species": "Boston Fern", "images": ["fern.jpg", "fern2.jpg"]}
        tasks = [
            _task("t1", "fern", "2024-01-10T09:00:00+00:00", listing=fern),
            _task("t2", "pothos", "2024-01-14T09:00:00+00:00", listing={"species": "Pothos", "images": []}),
            _task("t3", "fern", "2024-01-15T23:00:00+00:00", listing=fern),
            _task("t4", "fern", "2024-01-16T00:00:00+00:00", listing=fern),
        ]

        plants = group_todays_care(tasks, date(2024, 1, 15))

        assert [p.listing_id for p in plants] == ["fern", "pothos"]
        assert [t["id"] for t in plants[0].tasks] == ["t1", "t3"]
        assert plants[0].species == "Boston Fern"
        assert plants[0].image_url == "fern.jpg"
        assert plants[1].image_url is None

    def test_completed_tasks_excluded(self):
        tasks = [_task("t1", "fern", "2024-01-10T09:00:00", completed=True)]
        assert group_todays_care(tasks, date(2024, 1, 15)) == []

    def test_missing_listing_gets_unknown_species(self):
        plants = group_todays_care([_task("t1", "x", "2024-01-15T09:00:00Z")], date(2024, 1, 15))
        assert plants[0].species == UNKNOWN_SPECIES

    def test_unparseable_due_date_skipped(self):
        tasks = [_task("t1", "x", "soon"), _task("t2", "x", None)]
        assert group_todays_care(tasks, date(2024, 1, 15)) == []

    def test_accepts_datetime_values(self):
        plants = group_todays_care([_task("t1", "x", datetime(2024, 1, 15, 20, 0))], date(2024, 1, 15))
        assert len(plants) == 1


class TestPlantDetail:
    """Listing, tips and the user's tasks for one plant."""

    def test_detail_with_primary_task(self, fake_db):
        fake_db.add_listing("fern", None, species="Boston Fern", images=["fern.jpg"], care_tips=["Humid"])
        fake_db.tables["care_task"] = [
            {"id": "t2", "user_id": "user-1", "listing_id": "fern", "due_date": "2024-01-20T09:00:00", "completed": False},
            {"id": "t1", "user_id": "user-1", "listing_id": "fern", "due_date": "2024-01-14T09:00:00", "completed": True},
            {"id": "t9", "user_id": "user-2", "listing_id": "fern", "due_date": "2024-01-10T09:00:00", "completed": False},
        ]

        detail = plant_detail(fake_db, "user-1", "fern")

        assert detail.listing["species"] == "Boston Fern"
        assert detail.care_tips == ["Humid"]
        assert [t["id"] for t in detail.tasks] == ["t1", "t2"]
        assert detail.primary_task["id"] == "t2"

    def test_no_tips_and_all_done(self, fake_db):
        fake_db.add_listing("fern", None, species="Boston Fern")
        fake_db.tables["care_task"] = [
            {"id": "t1", "user_id": "user-1", "listing_id": "fern", "due_date": "2024-01-14T09:00:00", "completed": True},
        ]

        detail = plant_detail(fake_db, "user-1", "fern")

        assert detail.care_tips == []
        assert detail.primary_task is None

    def test_missing_listing(self, fake_db):
        assert plant_detail(fake_db, "user-1", "nope") is None
