from datetime import date

import pytest
from django.core.exceptions import ValidationError

from academics.models import AcademicYear, Subject
from academics.utils import get_class_subjects, resolve_academic_year
from academics.tests.factories import make_year, make_class, make_subject, assign_subjects

pytestmark = pytest.mark.django_db


def test_only_one_current_academic_year():
    old = make_year('2080', start=date(2023, 4, 14), end=date(2024, 4, 12))
    new = make_year('2081')

    old.refresh_from_db()
    assert not old.is_current
    assert AcademicYear.get_current() == new

    old.set_current()
    new.refresh_from_db()
    assert AcademicYear.objects.filter(is_current=True).count() == 1
    assert AcademicYear.get_current() == old
    assert not new.is_current


def test_get_current_is_none_without_flag():
    make_year(is_current=False)
    assert AcademicYear.get_current() is None
    assert resolve_academic_year(None) is None


def test_resolve_academic_year_accepts_id():
    year = make_year()
    assert resolve_academic_year(year.pk) == year
    assert resolve_academic_year(year) is year


def test_subject_pass_marks_cannot_exceed_full_marks():
    subject = Subject(subject_code='SCI', name='Science', theory_marks=75, theory_pass_marks=80,
                      practical_marks=25, practical_pass_marks=30)
    with pytest.raises(ValidationError) as exc:
        subject.full_clean()
    assert 'theory_pass_marks' in exc.value.message_dict
    assert 'practical_pass_marks' in exc.value.message_dict


def test_subject_full_marks():
    subject = make_subject('SCI', theory=75, theory_pass=30, practical=25, practical_pass=10)
    assert subject.full_marks == 100
    assert subject.has_practical


def test_class_subjects_are_ordered_by_name():
    school_class = make_class()
    other_class = make_class(name='Grade 9', level=9)
    nepali, english = make_subject('NEP', 'Nepali'), make_subject('ENG', 'English')
    assign_subjects(school_class, nepali, english)
    assign_subjects(other_class, make_subject('MTH', 'Mathematics'))

    assert list(get_class_subjects(school_class)) == [english, nepali]
