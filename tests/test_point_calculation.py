from datetime import datetime, timedelta, timezone

import pytest

from tifpoint.models import ActivityStatus, Event, RecognizedCourse, UserRole
from tifpoint.services.point_calculation import (
    INVALID_REFERENCE_MESSAGE,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    PointCalculator,
    build_progress,
    check_point_range,
    classify_priority,
    recommend_for_competencies,
)

from conftest import make_activity, make_user


# ─────────────────────────────────────────────────────────────
# Pure helpers
# ─────────────────────────────────────────────────────────────
def test_build_progress_with_no_points():
    p = build_progress(0, 36)
    assert p.total_points == 0
    assert p.completion_percentage == 0.0
    assert p.remaining_points == 36
    assert p.is_completed is False


def test_build_progress_clamps_past_target():
    p = build_progress(40, 36)
    assert p.total_points == 40
    assert p.completion_percentage == 100.0
    assert p.remaining_points == 0
    assert p.is_completed is True


def test_build_progress_rounds_to_two_decimals():
    assert build_progress(15, 36).completion_percentage == 41.67


def test_build_progress_zero_target():
    p = build_progress(5, 0)
    assert p.completion_percentage == 0.0
    assert p.remaining_points == 0
    assert p.is_completed is True


@pytest.mark.parametrize(
    "type_name, points, valid, suggested",
    [
        ("Seminar", 1, True, None),
        ("Seminar", 3, True, None),
        ("Seminar", 4, False, 3),
        ("Research", 2, False, 5),
        ("Achievement", 20, True, None),
        ("Course", 9, False, 8),
    ],
)
def test_check_point_range_known_types(type_name, points, valid, suggested):
    result = check_point_range(type_name, points)
    assert result.is_valid is valid
    assert result.suggested_points == suggested


def test_check_point_range_message_names_the_type():
    result = check_point_range("Seminar", 4)
    assert result.message == "Points for Seminar should be between 1 and 3"


def test_check_point_range_unknown_type_uses_default_range():
    result = check_point_range("Workshop", 15)
    assert result.is_valid is False
    assert result.message == "Points should be between 1 and 10"
    assert result.suggested_points == 10

    assert check_point_range("Workshop", 7).is_valid is True


def test_classify_priority_thresholds():
    assert classify_priority(9, 9) == PRIORITY_HIGH
    assert classify_priority(4.5, 9) == PRIORITY_MEDIUM
    assert classify_priority(0.5, 9) == PRIORITY_MEDIUM
    assert classify_priority(0, 9) == PRIORITY_LOW


def test_recommend_for_competencies_empty():
    assert recommend_for_competencies([], {}, 36) == []


def test_recommend_for_competencies_orders_by_priority_then_need_then_name():
    comps = [(1, "Software Developer"), (2, "Network Technology"), (3, "Artificial Intelligence"), (4, "Soft Skills")]
    # target per competency is 9
    recs = recommend_for_competencies(comps, {1: 2, 2: 6, 4: 12}, 36)

    assert [(r.competency, r.priority, r.recommended_additional_points) for r in recs] == [
        ("Artificial Intelligence", PRIORITY_HIGH, 9),
        ("Software Developer", PRIORITY_HIGH, 7),
        ("Network Technology", PRIORITY_MEDIUM, 3),
        ("Soft Skills", PRIORITY_LOW, 0),
    ]


def test_recommend_for_competencies_rounds_need_up():
    # 36 / 5 = 7.2 per competency
    comps = [(i, f"C{i}") for i in range(1, 6)]
    recs = recommend_for_competencies(comps, {1: 7}, 36)
    by_id = {r.competency_id: r for r in recs}
    assert by_id[1].recommended_additional_points == 1
    assert by_id[1].priority == PRIORITY_MEDIUM
    assert by_id[2].recommended_additional_points == 8


# ─────────────────────────────────────────────────────────────
# Calculator over the database
# ─────────────────────────────────────────────────────────────
async def test_compute_progress_counts_only_approved(db, reference, student):
    comp = reference["competencies"]["Software Developer"].id
    seminar = reference["types"]["Seminar"].id

    await make_activity(db, student, comp, seminar, ActivityStatus.APPROVED, 10)
    await make_activity(db, student, comp, seminar, ActivityStatus.APPROVED, 5)
    await make_activity(db, student, comp, seminar, ActivityStatus.APPROVED, None)
    await make_activity(db, student, comp, seminar, ActivityStatus.PENDING, 20)
    await make_activity(db, student, comp, seminar, ActivityStatus.REJECTED, 7)

    p = await PointCalculator(db).compute_progress(student.id)
    assert p.total_points == 15
    assert p.target_points == 36
    assert p.completion_percentage == 41.67
    assert p.remaining_points == 21
    assert p.is_completed is False


async def test_compute_progress_for_student_without_activities(db, student):
    p = await PointCalculator(db).compute_progress(student.id)
    assert (p.total_points, p.completion_percentage, p.remaining_points, p.is_completed) == (0, 0.0, 36, False)


async def test_compute_progress_past_target(db, reference, student):
    comp = reference["competencies"]["Soft Skills"].id
    research = reference["types"]["Research"].id
    await make_activity(db, student, comp, research, ActivityStatus.APPROVED, 25)
    await make_activity(db, student, comp, research, ActivityStatus.APPROVED, 15)

    p = await PointCalculator(db).compute_progress(student.id)
    assert p.total_points == 40
    assert p.completion_percentage == 100.0
    assert p.remaining_points == 0
    assert p.is_completed is True


async def test_injected_target_points(db, reference, student):
    comp = reference["competencies"]["Soft Skills"].id
    course = reference["types"]["Course"].id
    await make_activity(db, student, comp, course, ActivityStatus.APPROVED, 5)

    p = await PointCalculator(db, target_points=10).compute_progress(student.id)
    assert p.target_points == 10
    assert p.completion_percentage == 50.0
    assert p.remaining_points == 5


async def test_points_by_competency_groups_and_names(db, reference, student):
    ai = reference["competencies"]["Artificial Intelligence"].id
    soft = reference["competencies"]["Soft Skills"].id
    seminar = reference["types"]["Seminar"].id

    await make_activity(db, student, ai, seminar, ActivityStatus.APPROVED, 3)
    await make_activity(db, student, ai, seminar, ActivityStatus.APPROVED, 2)
    await make_activity(db, student, soft, seminar, ActivityStatus.APPROVED, 1)
    await make_activity(db, student, soft, seminar, ActivityStatus.PENDING, 9)

    rows = await PointCalculator(db).points_by_competency(student.id)
    by_id = {r.competency_id: r for r in rows}

    assert set(by_id) == {ai, soft}
    assert by_id[ai].competency == "Artificial Intelligence"
    assert by_id[ai].points == 5
    assert by_id[soft].points == 1


async def test_points_by_competency_missing_competency_is_unknown(db, reference, student):
    seminar = reference["types"]["Seminar"].id
    await make_activity(db, student, 999, seminar, ActivityStatus.APPROVED, 2)

    rows = await PointCalculator(db).points_by_competency(student.id)
    assert len(rows) == 1
    assert rows[0].competency == "Unknown"
    assert rows[0].competency_id == 999
    assert rows[0].points == 2


async def test_validate_point_assignment(db, reference):
    calc = PointCalculator(db)
    comp = reference["competencies"]["Soft Skills"].id

    ok = await calc.validate_point_assignment(reference["types"]["Seminar"].id, comp, 2)
    assert ok.is_valid is True
    assert ok.message is None

    too_many = await calc.validate_point_assignment(reference["types"]["Seminar"].id, comp, 4)
    assert too_many.is_valid is False
    assert too_many.message == "Points for Seminar should be between 1 and 3"
    assert too_many.suggested_points == 3

    workshop = await calc.validate_point_assignment(reference["types"]["Workshop"].id, comp, 15)
    assert workshop.message == "Points should be between 1 and 10"
    assert workshop.suggested_points == 10


async def test_validate_point_assignment_missing_references(db, reference):
    calc = PointCalculator(db)
    comp = reference["competencies"]["Soft Skills"].id

    missing_type = await calc.validate_point_assignment(12345, comp, 2)
    assert missing_type.is_valid is False
    assert missing_type.message == INVALID_REFERENCE_MESSAGE
    assert missing_type.suggested_points is None

    missing_comp = await calc.validate_point_assignment(reference["types"]["Seminar"].id, 12345, 2)
    assert missing_comp.is_valid is False
    assert missing_comp.message == INVALID_REFERENCE_MESSAGE


async def test_recommendations_split_target_across_competencies(db, reference, student):
    software = reference["competencies"]["Software Developer"].id
    await make_activity(db, student, software, reference["types"]["Seminar"].id, ActivityStatus.APPROVED, 2)

    recs = await PointCalculator(db).get_recommended_activities(student.id)

    assert recs.progress.total_points == 2
    assert [r.competency for r in recs.competency_recommendations] == [
        "Artificial Intelligence",
        "Network Technology",
        "Soft Skills",
        "Software Developer",
    ]
    last = recs.competency_recommendations[-1]
    assert last.current_points == 2
    assert last.recommended_additional_points == 7
    assert last.priority == PRIORITY_HIGH
    assert all(r.recommended_additional_points == 9 for r in recs.competency_recommendations[:3])


async def test_recommendations_without_competencies(db, student):
    recs = await PointCalculator(db).get_recommended_activities(student.id)
    assert recs.competency_recommendations == []
    assert recs.recommended_courses == []
    assert recs.upcoming_events == []


async def test_recommendations_courses_and_events(db, student):
    for value in range(1, 7):
        db.add(RecognizedCourse(name=f"Course {value}", provider="Provider", duration=10, point_value=value))

    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    db.add_all(
        [
            Event(title="Past", date=now - timedelta(days=1), point_value=1),
            Event(title="Later", date=now + timedelta(days=4), point_value=2),
            Event(title="Soon", date=now + timedelta(days=1), point_value=3),
        ]
    )
    await db.commit()

    recs = await PointCalculator(db).get_recommended_activities(student.id, now=now)

    assert [c.point_value for c in recs.recommended_courses] == [6, 5, 4, 3, 2]
    assert [e.title for e in recs.upcoming_events] == ["Soon", "Later"]


async def test_recommendations_are_idempotent(db, reference, student):
    comp = reference["competencies"]["Network Technology"].id
    await make_activity(db, student, comp, reference["types"]["Program"].id, ActivityStatus.APPROVED, 4)

    calc = PointCalculator(db)
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    first = await calc.get_recommended_activities(student.id, now=now)
    second = await calc.get_recommended_activities(student.id, now=now)
    assert first == second


async def test_activity_summary(db, reference, student):
    comp = reference["competencies"]["Soft Skills"].id
    seminar = reference["types"]["Seminar"].id
    await make_activity(db, student, comp, seminar, ActivityStatus.PENDING)
    await make_activity(db, student, comp, seminar, ActivityStatus.PENDING)
    await make_activity(db, student, comp, seminar, ActivityStatus.APPROVED, 2)
    await make_activity(db, student, comp, seminar, ActivityStatus.REJECTED)

    summary = await PointCalculator(db).activity_summary(student.id)
    assert (summary.pending, summary.approved, summary.rejected, summary.total) == (2, 1, 1, 4)


async def test_all_students_progress_excludes_admins(db, reference, student, admin):
    idle = await make_user(db, "idle", nim="2100002")
    comp = reference["competencies"]["Soft Skills"].id
    await make_activity(db, student, comp, reference["types"]["Research"].id, ActivityStatus.APPROVED, 12)
    await make_activity(db, student, comp, reference["types"]["Research"].id, ActivityStatus.PENDING, 8)

    standings = await PointCalculator(db).all_students_progress()
    by_id = {s.id: s for s in standings}

    assert set(by_id) == {student.id, idle.id}
    assert admin.role == UserRole.ADMIN
    assert by_id[student.id].total_points == 12
    assert by_id[student.id].completion_percentage == 33.33
    assert by_id[idle.id].total_points == 0
    assert by_id[idle.id].remaining_points == 36
