"""
HotelOps - Analytics Tests
===========================
Tests: heatmap, top failures, weekly trend, team stats, single-audit
       progress, dashboard summary, zero-denominator guards
"""

from hotelops.analytics import (
    WEEKDAYS,
    audit_assignee_progress,
    audit_progress,
    audit_score,
    dashboard_summary,
    department_heatmap,
    team_stats,
    top_failures,
    weekday_index,
    weekly_trend,
)
from hotelops.domain import Audit, Incident
from hotelops.domain.seed import seed_audits, seed_incidents, seed_users

THURSDAY = "2024-08-15T10:00"  # weekday index 4
TUESDAY = "2024-08-13T09:00"   # weekday index 2


def audit(aid, department, due, results, status="Completed", descriptions=None, assignees=None):
    items = []
    for idx, result in enumerate(results):
        item = {
            "id": f"{aid}-{idx}",
            "description": descriptions[idx] if descriptions else f"Check {idx}",
            "result": result,
        }
        if assignees and assignees[idx]:
            item["assignee"] = assignees[idx]
        items.append(item)
    return Audit.from_dict({
        "id": aid, "title": aid, "department": department,
        "status": status, "dueDate": due, "items": items,
    })


def kitchen_scenario():
    return [
        audit("A", "Kitchen", THURSDAY, ["Pass", "Pass"]),
        audit("B", "Kitchen", THURSDAY, ["Pass", "Fail"]),
        audit("C", "Housekeeping", TUESDAY, ["Pass", "Pass", "Pass"], status="Pending"),
    ]


class TestWeekday:

    def test_sunday_is_zero(self):
        assert weekday_index("2024-08-11T08:00") == 0
        assert weekday_index(THURSDAY) == 4
        assert weekday_index("2024-08-14T08:00:00Z") == 3
        assert weekday_index("2024-08-17") == 6

    def test_unparseable(self):
        assert weekday_index("") is None
        assert weekday_index("next tuesday") is None


class TestHeatmap:

    def test_kitchen_scenario_scores_75_on_due_weekday(self):
        rows = department_heatmap(kitchen_scenario())
        kitchen = next(r for r in rows if r["name"] == "Kitchen")
        cell = kitchen["days"][4]
        assert cell["day"] == "Thu"
        assert (cell["passed"], cell["total"], cell["score"]) == (3, 4, 75)

    def test_empty_cells_have_no_score(self):
        rows = department_heatmap(kitchen_scenario())
        kitchen = next(r for r in rows if r["name"] == "Kitchen")
        assert kitchen["days"][0]["score"] is None
        assert kitchen["days"][0]["total"] == 0

    def test_rows_sorted_worst_first(self):
        rows = department_heatmap(kitchen_scenario())
        assert [r["name"] for r in rows] == ["Kitchen", "Housekeeping"]
        scores = [r["passed"] / r["total"] for r in rows]
        assert scores == sorted(scores)

    def test_department_drill_down_groups_by_description(self):
        audits = [
            audit("A", "Kitchen", THURSDAY, ["Pass", "Fail"], descriptions=["Fridge temp", "Floors"]),
            audit("B", "Kitchen", TUESDAY, ["Pass", "Pass"], descriptions=["Fridge temp", "Floors"]),
            audit("C", "Maintenance", TUESDAY, ["Fail"], descriptions=["HVAC"]),
        ]
        rows = department_heatmap(audits, department="Kitchen")
        assert [r["name"] for r in rows] == ["Floors", "Fridge temp"]
        floors = rows[0]
        assert floors["days"][4]["score"] == 0
        assert floors["days"][2]["score"] == 100

    def test_limited_to_ten_rows(self):
        audits = [audit(f"A{n}", f"Dept {n}", THURSDAY, ["Pass"] * (n % 3) + ["Fail"]) for n in range(14)]
        rows = department_heatmap(audits)
        assert len(rows) == 10

    def test_unscored_items_and_bad_dates_ignored(self):
        audits = [
            audit("A", "Kitchen", THURSDAY, [None, "N/A"]),
            audit("B", "Spa", "someday", ["Pass"]),
        ]
        assert department_heatmap(audits) == []


class TestTopFailures:

    def test_counts_across_departments_and_tags_last_department(self):
        audits = [
            audit("A", "Kitchen", THURSDAY, ["Fail", "Fail"], descriptions=["Floors clean", "Bins empty"]),
            audit("B", "Housekeeping", TUESDAY, ["Fail"], descriptions=["Floors clean"]),
        ]
        result = top_failures(audits)
        assert result[0] == {"description": "Floors clean", "count": 2, "department": "Housekeeping"}
        assert result[1]["description"] == "Bins empty"

    def test_at_most_five_and_non_increasing(self):
        descriptions = [f"Item {n}" for n in range(8)]
        audits = [
            audit(f"A{k}", "Kitchen", THURSDAY, ["Fail"] * (k + 1), descriptions=descriptions[: k + 1])
            for k in range(8)
        ]
        result = top_failures(audits)
        assert len(result) == 5
        counts = [r["count"] for r in result]
        assert counts == sorted(counts, reverse=True)
        assert result[0] == {"description": "Item 0", "count": 8, "department": "Kitchen"}

    def test_no_failures(self):
        assert top_failures([audit("A", "Kitchen", THURSDAY, ["Pass"])]) == []


class TestWeeklyTrend:

    def test_days_in_fixed_order(self):
        trend = weekly_trend(kitchen_scenario())
        assert [d["day"] for d in trend["days"]] == WEEKDAYS

    def test_scores_and_average_of_non_zero_days(self):
        trend = weekly_trend(kitchen_scenario())
        assert trend["days"][4]["score"] == 75
        assert trend["days"][2]["score"] == 100
        assert trend["days"][0]["score"] == 0
        assert trend["average"] == 88  # round((75 + 100) / 2)

    def test_department_filter(self):
        trend = weekly_trend(kitchen_scenario(), department="Kitchen")
        assert trend["days"][2]["score"] == 0
        assert trend["average"] == 75

    def test_baseline_when_no_data(self):
        assert weekly_trend([], baseline=94)["average"] == 94
        assert weekly_trend([audit("A", "Kitchen", THURSDAY, [None])], baseline=90)["average"] == 90


class TestTeamStats:

    def test_counts_per_assignee_with_unassigned_bucket(self):
        audits = [
            audit("A", "Kitchen", THURSDAY, ["Pass", "Fail", None],
                  assignees=["Bob Smith", "Bob Smith", None]),
            audit("B", "Kitchen", TUESDAY, ["N/A"], assignees=["Alice Johnson"]),
        ]
        stats = {s["assignee"]: s for s in team_stats(audits)}
        assert stats["Bob Smith"] == {
            "assignee": "Bob Smith", "total": 2, "completed": 2, "passed": 1, "failed": 1, "progress": 100,
        }
        assert stats["Unassigned"]["total"] == 1
        assert stats["Unassigned"]["progress"] == 0
        assert stats["Alice Johnson"]["completed"] == 1

    def test_renamed_user_reported_under_current_name(self):
        users = seed_users()
        audits = seed_audits()
        bob = next(u for u in users if u.id == "u2")
        bob.name = "Robert Smith"
        names = [s["assignee"] for s in team_stats(audits, users)]
        assert "Robert Smith" in names
        assert "Bob Smith" not in names


class TestSingleAudit:

    def test_progress_and_score(self):
        a = audit("A", "Kitchen", THURSDAY, ["Pass", "Fail", None, "N/A"])
        assert audit_progress(a) == 75
        assert audit_score(a) == 25

    def test_empty_audit_is_zero_not_error(self):
        a = audit("A", "Kitchen", THURSDAY, [])
        assert audit_progress(a) == 0
        assert audit_score(a) == 0

    def test_assignee_progress_always_has_unassigned(self):
        a = audit("A", "Kitchen", THURSDAY, ["Pass"], assignees=["Bob Smith"])
        rows = {r["assignee"]: r for r in audit_assignee_progress(a)}
        assert rows["Unassigned"] == {"assignee": "Unassigned", "total": 0, "completed": 0, "progress": 0}
        assert rows["Bob Smith"]["progress"] == 100


class TestDashboard:

    def test_seed_summary(self):
        summary = dashboard_summary(seed_audits(), seed_incidents(), baseline=94)
        assert summary["pendingAudits"] == 2
        assert summary["criticalIncidents"] == 1
        assert 0 < summary["dailyHygieneScore"] <= 100

    def test_resolved_critical_not_counted(self):
        incidents = [Incident.from_dict({
            "id": "inc-x", "title": "Gas leak", "description": "", "department": "Kitchen",
            "status": "Resolved", "priority": "Critical", "type": "Emergency", "reportedAt": "2024-08-14T08:00:00Z",
        })]
        assert dashboard_summary([], incidents)["criticalIncidents"] == 0
        assert dashboard_summary([], incidents)["dailyHygieneScore"] == 94
