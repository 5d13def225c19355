from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from academics.tests.factories import make_year, make_class
from students.models import StudentClassHistory
from students.tests.factories import make_student

pytestmark = pytest.mark.django_db


def test_reassign_roll_numbers_command():
    school_class = make_class()
    bikash = make_student('Bikash', school_class=school_class, roll_number=4)
    asha = make_student('Asha', school_class=school_class, roll_number=9)
    out = StringIO()

    call_command('reassign_roll_numbers', '--class-id', str(school_class.pk), stdout=out)

    asha.refresh_from_db()
    bikash.refresh_from_db()
    assert (asha.roll_number, bikash.roll_number) == (1, 2)
    assert 'Roll numbers reassigned for 1 class(es)' in out.getvalue()


def test_reassign_roll_numbers_unknown_class():
    with pytest.raises(CommandError):
        call_command('reassign_roll_numbers', '--class-id', 'not-a-uuid', stdout=StringIO())


def test_backfill_student_history_command():
    year = make_year()
    school_class = make_class()
    student = make_student('Asha', school_class=school_class, roll_number=1)
    out = StringIO()

    call_command('backfill_student_history', '--academic-year-id', str(year.pk), stdout=out)

    assert StudentClassHistory.objects.filter(student=student, academic_year=year).count() == 1
    assert 'Created 1 history record(s)' in out.getvalue()
