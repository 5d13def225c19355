import pytest
from django.core.exceptions import ValidationError

from academics.tests.factories import make_year, make_class
from students.exceptions import PromotionError
from students.models import Student, StudentClassHistory
from students.services import PromotionService
from students.utils import is_roster_contiguous
from students.tests.factories import make_student

pytestmark = pytest.mark.django_db


@pytest.fixture
def classes():
    return make_class('Grade 8', level=8), make_class('Grade 9', level=9)


def enrolled(school_class, *names):
    students = []
    for name in names:
        student = make_student(name, school_class=school_class)
        PromotionService.enroll_student(student, school_class)
        student.refresh_from_db()
        students.append(student)
    return students


def test_enroll_opens_active_history(classes):
    year = make_year()
    grade8, _ = classes
    student = make_student('Asha')

    summary = PromotionService.enroll_student(student, grade8)

    assert summary.status == 'enrolled'
    history = student.get_active_history()
    assert history.school_class == grade8
    assert history.academic_year == year
    assert history.roll_number == 1
    assert student.school_class == grade8


def test_enroll_into_same_class_is_nothing_to_do(classes):
    grade8, _ = classes
    student, = enrolled(grade8, 'Asha')

    summary = PromotionService.enroll_student(student, grade8)

    assert summary.nothing_to_do
    assert StudentClassHistory.objects.filter(student=student).count() == 1


def test_enroll_elsewhere_closes_previous_row(classes):
    grade8, grade9 = classes
    student, = enrolled(grade8, 'Asha')

    PromotionService.enroll_student(student, grade9)

    statuses = dict(StudentClassHistory.objects.filter(student=student).values_list('school_class_id', 'status'))
    assert statuses == {
        grade8.pk: StudentClassHistory.STATUS_TRANSFERRED,
        grade9.pk: StudentClassHistory.STATUS_ACTIVE,
    }


def test_promote_whole_class(classes):
    grade8, grade9 = classes
    enrolled(grade9, 'Mina')
    students = enrolled(grade8, 'Asha', 'Bikash', 'Chandra')

    summary = PromotionService.promote_class(grade8, grade9, remarks='Year end')

    assert summary.status == 'promoted'
    assert summary.count == 3
    assert not Student.objects.filter(school_class=grade8).exists()
    assert Student.objects.filter(school_class=grade9).count() == 4
    assert is_roster_contiguous(grade9)

    for student in students:
        rows = StudentClassHistory.objects.filter(student=student)
        assert rows.filter(status=StudentClassHistory.STATUS_ACTIVE).count() == 1
        closed = rows.get(school_class=grade8)
        assert closed.status == StudentClassHistory.STATUS_PROMOTED
        assert closed.promoted_date is not None
        active = rows.get(status=StudentClassHistory.STATUS_ACTIVE)
        student.refresh_from_db()
        assert active.school_class == grade9
        assert active.roll_number == student.roll_number


def test_promote_subset_keeps_both_rosters_contiguous(classes):
    grade8, grade9 = classes
    asha, bikash, chandra = enrolled(grade8, 'Asha', 'Bikash', 'Chandra')

    summary = PromotionService.promote_class(grade8, grade9, student_ids=[bikash.pk])

    assert summary.student_ids == [bikash.pk]
    asha.refresh_from_db()
    chandra.refresh_from_db()
    assert (asha.roll_number, chandra.roll_number) == (1, 2)
    assert is_roster_contiguous(grade8)
    assert is_roster_contiguous(grade9)


def test_promote_without_matching_students_is_nothing_to_do(classes):
    grade8, grade9 = classes

    summary = PromotionService.promote_class(grade8, grade9)

    assert summary.nothing_to_do
    assert summary.count == 0


def test_promote_into_same_class_is_rejected(classes):
    grade8, _ = classes
    enrolled(grade8, 'Asha')

    with pytest.raises(ValidationError):
        PromotionService.promote_class(grade8, grade8)


def test_failed_promotion_rolls_back(classes, monkeypatch):
    grade8, grade9 = classes
    asha, bikash = enrolled(grade8, 'Asha', 'Bikash')
    calls = []

    def failing_renumber(school_class):
        calls.append(school_class)
        raise RuntimeError('disk full')

    monkeypatch.setattr('students.services.reassign_roll_numbers', failing_renumber)

    with pytest.raises(PromotionError) as exc:
        PromotionService.promote_class(grade8, grade9)

    assert 'disk full' in str(exc.value)
    assert calls
    assert Student.objects.filter(school_class=grade8).count() == 2
    assert not StudentClassHistory.objects.filter(status=StudentClassHistory.STATUS_PROMOTED).exists()
    for student in (asha, bikash):
        assert student.get_active_history().school_class == grade8


def test_graduation_keeps_class(classes):
    grade8, _ = classes
    asha, bikash = enrolled(grade8, 'Asha', 'Bikash')

    summary = PromotionService.mark_graduated([asha.pk])

    assert summary.status == 'graduated'
    asha.refresh_from_db()
    assert asha.school_class == grade8
    assert asha.get_active_history() is None
    assert StudentClassHistory.objects.get(student=asha).status == StudentClassHistory.STATUS_GRADUATED
    assert bikash.get_active_history() is not None


def test_graduation_without_active_rows_is_nothing_to_do(classes):
    grade8, _ = classes
    student = make_student('Asha', school_class=grade8)

    assert PromotionService.mark_graduated([student.pk]).nothing_to_do


def test_unknown_student_ids_are_rejected():
    with pytest.raises(ValidationError):
        PromotionService.mark_graduated(['3f1c0e4e-8f5b-4a77-9d77-6a3c11f0c2b1'])
    with pytest.raises(ValidationError):
        PromotionService.mark_transferred([])


def test_transfer_takes_student_off_roster(classes):
    grade8, _ = classes
    asha, bikash, chandra = enrolled(grade8, 'Asha', 'Bikash', 'Chandra')

    PromotionService.mark_transferred([asha.pk], transferred_to='Valley School')

    asha.refresh_from_db()
    assert asha.is_transferred
    assert asha.transferred_to == 'Valley School'
    assert asha.school_class is None
    assert asha.roll_number is None
    assert StudentClassHistory.objects.get(student=asha).status == StudentClassHistory.STATUS_TRANSFERRED
    assert is_roster_contiguous(grade8)
    bikash.refresh_from_db()
    assert bikash.roll_number == 1


def test_closed_history_cannot_change(classes):
    grade8, grade9 = classes
    student, = enrolled(grade8, 'Asha')
    PromotionService.promote_class(grade8, grade9)

    closed = StudentClassHistory.objects.get(student=student, status=StudentClassHistory.STATUS_PROMOTED)
    closed.remarks = 'rewritten'
    with pytest.raises(ValidationError):
        closed.save()
    with pytest.raises(ValidationError):
        closed.close(StudentClassHistory.STATUS_GRADUATED)
    with pytest.raises(ValidationError):
        closed.delete()


def test_second_active_row_is_rejected(classes):
    grade8, grade9 = classes
    student, = enrolled(grade8, 'Asha')

    with pytest.raises(ValidationError):
        StudentClassHistory.objects.create(student=student, school_class=grade9, year=2025)


def test_backfill_only_touches_students_without_history(classes):
    year = make_year()
    grade8, _ = classes
    with_history, = enrolled(grade8, 'Asha')
    without = make_student('Bikash', school_class=grade8, roll_number=2)
    make_student('Unplaced')

    assert PromotionService.backfill_history() == 1
    assert PromotionService.backfill_history() == 0

    history = without.get_active_history()
    assert history.school_class == grade8
    assert history.academic_year == year
    assert history.roll_number == 2
    assert StudentClassHistory.objects.filter(student=with_history).count() == 1


def test_class_history_filters(classes):
    grade8, grade9 = classes
    enrolled(grade8, 'Asha', 'Bikash')
    PromotionService.promote_class(grade8, grade9)

    assert PromotionService.class_history(grade8).count() == 2
    assert PromotionService.class_history(grade8, status=StudentClassHistory.STATUS_ACTIVE).count() == 0
    with pytest.raises(ValidationError):
        PromotionService.class_history(grade8, status='expelled')
