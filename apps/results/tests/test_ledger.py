from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from academics.tests.factories import make_year, make_class, make_subject, assign_subjects
from students.tests.factories import make_student
from results.exceptions import NotConfigured
from results.models import Result, ResultActivity, ResultType, CalculationMethod
from results.services import ResultLedgerService
from results.tests.factories import make_setting, terms_of, make_activity

pytestmark = pytest.mark.django_db


@pytest.fixture
def ledger():
    year = make_year()
    school_class = make_class()
    science = make_subject('SCI', 'Science', theory=100, theory_pass=40, practical=50, practical_pass=17)
    assign_subjects(school_class, science)
    student = make_student('Asha', school_class=school_class, roll_number=1)
    setting = make_setting(year)
    return {
        'year': year,
        'class': school_class,
        'subject': science,
        'student': student,
        'setting': setting,
        'terms': terms_of(setting),
    }


def test_record_without_setting_raises_not_configured():
    make_year()
    school_class = make_class()
    subject = make_subject('SCI')
    student = make_student('Asha', school_class=school_class)
    setting = make_setting(None)
    term = terms_of(setting)[0]
    setting.delete()

    with pytest.raises(NotConfigured):
        ResultLedgerService.record_result(student, subject, term, 50, 0)


def test_practical_ignored_before_last_term(ledger):
    first = ledger['terms'][0]

    result = ResultLedgerService.record_result(ledger['student'], ledger['subject'], first, 50, 20)

    # 50/100 in a theory-only term
    assert result.gpa == Decimal('2.40')
    assert result.marks_practical == Decimal('20.00')
    assert result.percentage is None
    assert result.academic_year == ledger['year']
    assert result.school_class == ledger['class']


def test_last_term_counts_practical(ledger):
    final = ledger['terms'][-1]

    result = ResultLedgerService.record_result(ledger['student'], ledger['subject'], final, 50, 20)

    # 70/150
    assert result.gpa == Decimal('2.00')


def test_percentage_stored_for_percentage_policies():
    year = make_year()
    school_class = make_class()
    subject = make_subject('SCI', practical=50, practical_pass=17)
    student = make_student('Asha', school_class=school_class)
    setting = make_setting(year, result_type=ResultType.PERCENTAGE, evaluation_per_term=True)

    result = ResultLedgerService.record_result(student, subject, terms_of(setting)[0], 50, 20)

    assert result.percentage == Decimal('46.67')
    assert result.gpa == Decimal('2.00')


def test_marks_above_full_marks_are_rejected(ledger):
    term = ledger['terms'][-1]

    with pytest.raises(ValidationError) as exc:
        ResultLedgerService.record_result(ledger['student'], ledger['subject'], term, 101, 51)
    assert set(exc.value.message_dict) == {'marks_theory', 'marks_practical'}

    with pytest.raises(ValidationError):
        ResultLedgerService.record_result(ledger['student'], ledger['subject'], term, -1, 0)
    assert not Result.objects.exists()


def test_term_of_another_setting_is_rejected(ledger):
    foreign_setting = make_setting(make_year('2082', is_current=False))

    with pytest.raises(ValidationError):
        ResultLedgerService.record_result(
            ledger['student'], ledger['subject'], terms_of(foreign_setting)[0], 50, 0,
            academic_year=ledger['year'],
        )


def test_rerecording_overwrites(ledger):
    final = ledger['terms'][-1]
    project = make_activity(ledger['subject'], full_marks=10)
    viva = make_activity(ledger['subject'], name='Viva', full_marks=10)

    ResultLedgerService.record_result(ledger['student'], ledger['subject'], final, 50, 20, activities={project: 8})
    result = ResultLedgerService.record_result(
        ledger['student'], ledger['subject'], final, 60, 25, activities={viva.pk: 5},
    )

    assert Result.objects.count() == 1
    assert result.marks_theory == Decimal('60.00')
    assert list(result.activities.values_list('activity_id', flat=True)) == [viva.pk]
    # 90/160
    assert result.gpa == Decimal('2.40')


def test_activities_rejected_in_ineligible_term(ledger):
    project = make_activity(ledger['subject'])

    with pytest.raises(ValidationError):
        ResultLedgerService.record_result(
            ledger['student'], ledger['subject'], ledger['terms'][0], 50, 0, activities={project: 5},
        )
    assert not ResultActivity.objects.exists()


def test_activity_marks_validated(ledger):
    final = ledger['terms'][-1]
    project = make_activity(ledger['subject'], full_marks=10)
    other_subject_activity = make_activity(make_subject('ENG'), name='Debate')

    with pytest.raises(ValidationError):
        ResultLedgerService.record_result(
            ledger['student'], ledger['subject'], final, 50, 0, activities={project: 11},
        )
    with pytest.raises(ValidationError):
        ResultLedgerService.record_result(
            ledger['student'], ledger['subject'], final, 50, 0, activities={other_subject_activity: 5},
        )


def test_class_batch_is_all_or_nothing(ledger):
    term = ledger['terms'][0]
    bikash = make_student('Bikash', school_class=ledger['class'], roll_number=2)
    entries = [
        {'student': ledger['student'], 'subject': ledger['subject'], 'theory_marks': 70},
        {'student': bikash, 'subject': ledger['subject'], 'theory_marks': 170},
    ]

    with pytest.raises(ValidationError) as exc:
        ResultLedgerService.record_class_results(ledger['class'], term, entries)
    assert 'Entry 2' in exc.value.messages[0]
    assert not Result.objects.exists()

    entries[1]['theory_marks'] = 65
    results = ResultLedgerService.record_class_results(ledger['class'], term, entries, exam_type='Mid Term')
    assert len(results) == 2
    assert set(Result.objects.values_list('exam_type', flat=True)) == {'Mid Term'}


def test_delete_result(ledger):
    result = ResultLedgerService.record_result(ledger['student'], ledger['subject'], ledger['terms'][0], 50, 0)
    ResultLedgerService.delete_result(result)
    assert not Result.objects.exists()


def test_simple_method_records_the_same_single_term_score():
    year = make_year()
    school_class = make_class()
    subject = make_subject('SCI')
    student = make_student('Asha', school_class=school_class)
    setting = make_setting(year, weights=(None, None), method=CalculationMethod.SIMPLE)

    result = ResultLedgerService.record_result(student, subject, terms_of(setting)[1], 91, 0)

    assert result.gpa == Decimal('4.00')
