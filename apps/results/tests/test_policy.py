from types import SimpleNamespace

import pytest
from django.core.exceptions import ValidationError

from academics.tests.factories import make_year
from results.exceptions import NotConfigured, InvalidWeights
from results.models import ResultSetting, Term, CalculationMethod, ResultType
from results.policy import ScoringPolicy
from results.services import ResultSettingService
from results.tests.factories import make_setting, terms_of


def make_policy(evaluation_per_term=False, method=CalculationMethod.WEIGHTED, weights=(20, 30, 50)):
    terms = tuple(
        SimpleNamespace(pk=index, sequence=index, weight=weight, name=f'Term {index}')
        for index, weight in enumerate(weights, start=1)
    )
    return ScoringPolicy(
        setting_id=1,
        result_type=ResultType.GPA,
        calculation_method=method,
        evaluation_per_term=evaluation_per_term,
        terms=terms,
    )


def test_practical_only_in_last_term_by_default():
    policy = make_policy()
    assert [policy.can_include_practical_or_activities(term) for term in policy.terms] == [False, False, True]
    assert policy.is_last_term(3)
    assert not policy.can_include_practical_or_activities(99)


def test_practical_every_term_when_evaluated_per_term():
    policy = make_policy(evaluation_per_term=True)
    assert all(policy.can_include_practical_or_activities(term) for term in policy.terms)


def test_weights_ignored_for_simple_method():
    policy = make_policy(method=CalculationMethod.SIMPLE)
    assert policy.weight_for(policy.terms[0]) == 0
    assert make_policy(weights=(None, 100)).weight_for(1) == 0
    assert policy.primary_metric == 'gpa'


@pytest.mark.django_db
def test_missing_setting_raises_not_configured():
    with pytest.raises(NotConfigured):
        ResultSettingService.get_active_policy()


@pytest.mark.django_db
def test_setting_lookup_falls_back_to_current_then_school_wide():
    current = make_year('2081')
    other = make_year('2082', is_current=False)
    school_wide = make_setting(None)
    assert ResultSettingService.get_setting(other) == school_wide

    current_setting = make_setting(current)
    assert ResultSettingService.get_setting(other) == current_setting

    own = make_setting(other)
    assert ResultSettingService.get_setting(other) == own
    assert ResultSettingService.get_active_policy(other).setting_id == own.pk


@pytest.mark.django_db
def test_weighted_setting_must_total_one_hundred():
    with pytest.raises(InvalidWeights) as exc:
        make_setting(weights=(20, 30, 40))
    assert exc.value.total == 90
    assert not ResultSetting.objects.exists()
    assert not Term.objects.exists()


@pytest.mark.django_db
def test_simple_setting_drops_weights():
    setting = make_setting(method=CalculationMethod.SIMPLE)
    assert [term.weight for term in terms_of(setting)] == [None, None, None]
    assert [term.sequence for term in terms_of(setting)] == [1, 2, 3]


@pytest.mark.django_db
def test_one_setting_per_academic_year():
    year = make_year()
    make_setting(year)
    with pytest.raises(ValidationError):
        make_setting(year)
    make_setting(None)
    with pytest.raises(ValidationError):
        make_setting(None)


@pytest.mark.django_db
def test_update_replaces_listed_terms():
    setting = make_setting()
    first, _, final = terms_of(setting)

    ResultSettingService.save_setting(
        {'total_terms': 3},
        [
            {'id': first.pk, 'name': 'Mid Term', 'weight': 40},
            {'id': final.pk, 'name': 'Final Term', 'weight': 40},
            {'name': 'Board Exam', 'weight': 20},
        ],
        setting=setting,
    )

    terms = terms_of(setting)
    assert [(term.name, term.weight) for term in terms] == [('Mid Term', 40), ('Final Term', 40), ('Board Exam', 20)]
    assert terms[-1].sequence == 4


@pytest.mark.django_db
def test_update_without_terms_keeps_them():
    setting = make_setting()
    ResultSettingService.save_setting({'result_type': ResultType.PERCENTAGE}, None, setting=setting)
    setting.refresh_from_db()
    assert setting.result_type == ResultType.PERCENTAGE
    assert [term.weight for term in terms_of(setting)] == [20, 30, 50]


@pytest.mark.django_db
def test_set_term_weights_is_all_or_nothing():
    setting = make_setting()
    first, second, final = terms_of(setting)

    with pytest.raises(InvalidWeights):
        ResultSettingService.set_term_weights(setting, {first.pk: 50, second.pk: 10})
    assert [term.weight for term in terms_of(setting)] == [20, 30, 50]

    ResultSettingService.set_term_weights(setting, {first.pk: 25, second.pk: 25, final.pk: 50})
    assert [term.weight for term in terms_of(setting)] == [25, 25, 50]


@pytest.mark.django_db
def test_switching_to_simple_clears_weights():
    setting = make_setting()

    assert ResultSettingService.set_calculation_method(setting, CalculationMethod.SIMPLE) is True
    assert [term.weight for term in terms_of(setting)] == [None, None, None]
    assert ResultSettingService.set_calculation_method(setting, CalculationMethod.SIMPLE) is False

    with pytest.raises(InvalidWeights):
        ResultSettingService.set_calculation_method(setting, CalculationMethod.WEIGHTED)
    with pytest.raises(ValidationError):
        ResultSettingService.set_calculation_method(setting, 'median')


@pytest.mark.django_db
def test_validate_term():
    setting = make_setting()
    other = make_setting(make_year())
    assert ResultSettingService.validate_term(terms_of(setting)[0].pk, setting)
    assert not ResultSettingService.validate_term(terms_of(other)[0].pk, setting)
    assert not ResultSettingService.validate_term('garbage', setting)
    assert ResultSettingService.is_last_term(terms_of(setting)[-1])
