import pytest

from academics.tests.factories import make_class
from students.models import StudentClassHistory
from students.services import PromotionService
from students.utils import reassign_roll_numbers, is_roster_contiguous, roster_sort_key
from students.tests.factories import make_student

pytestmark = pytest.mark.django_db


def test_roll_numbers_follow_case_insensitive_full_name():
    school_class = make_class()
    zara = make_student('zara', 'Thapa', school_class, roll_number=1)
    aarav = make_student('Aarav', 'Karki', school_class, roll_number=7)
    bina = make_student('bina', 'Rai', school_class, roll_number=7)

    roll_numbers = reassign_roll_numbers(school_class)

    assert roll_numbers == {aarav.pk: 1, bina.pk: 2, zara.pk: 3}
    for student in (aarav, bina, zara):
        student.refresh_from_db()
    assert (aarav.roll_number, bina.roll_number, zara.roll_number) == (1, 2, 3)
    assert is_roster_contiguous(school_class)


def test_middle_name_is_part_of_the_sort():
    school_class = make_class()
    plain = make_student('Ram', 'Shrestha', school_class)
    middle = make_student('Ram', 'Shrestha', school_class, middle_name='Bahadur')

    reassign_roll_numbers(school_class)

    middle.refresh_from_db()
    plain.refresh_from_db()
    assert middle.roll_number == 1
    assert plain.roll_number == 2


def test_identical_names_are_ordered_by_id():
    school_class = make_class()
    first, second = make_student('Sita', 'Gurung', school_class), make_student('Sita', 'Gurung', school_class)

    roll_numbers = reassign_roll_numbers(school_class)

    expected = sorted([first, second], key=roster_sort_key)
    assert [roll_numbers[student.pk] for student in expected] == [1, 2]


def test_empty_class_renumbers_to_nothing():
    assert reassign_roll_numbers(make_class()) == {}


def test_gap_is_detected():
    school_class = make_class()
    make_student('Asha', school_class=school_class, roll_number=1)
    make_student('Bikash', school_class=school_class, roll_number=3)

    assert not is_roster_contiguous(school_class)
    reassign_roll_numbers(school_class)
    assert is_roster_contiguous(school_class)


def test_active_history_follows_new_roll_number():
    school_class = make_class()
    late = make_student('Zeenat', school_class=school_class)
    PromotionService.enroll_student(late, school_class)
    early = make_student('Anil', school_class=school_class)

    reassign_roll_numbers(school_class)

    history = StudentClassHistory.objects.get(student=late, status=StudentClassHistory.STATUS_ACTIVE)
    assert history.roll_number == 2
    early.refresh_from_db()
    assert early.roll_number == 1
