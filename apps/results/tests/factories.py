from results.models import ExtraCurricularActivity, CalculationMethod, ResultType
from results.services import ResultSettingService


def make_setting(academic_year=None, weights=(20, 30, 50), result_type=ResultType.GPA,
                 method=CalculationMethod.WEIGHTED, evaluation_per_term=False, names=None):
    names = names or ['First Term', 'Second Term', 'Final Term'][:len(weights)]
    terms = [{'name': name, 'weight': weight} for name, weight in zip(names, weights)]
    return ResultSettingService.save_setting(
        {
            'academic_year': academic_year,
            'total_terms': len(terms),
            'result_type': result_type,
            'calculation_method': method,
            'evaluation_per_term': evaluation_per_term,
        },
        terms,
    )


def terms_of(setting):
    return list(setting.terms.order_by('sequence'))


def make_activity(subject, name='Project Work', full_marks=10, pass_marks=4, school_class=None):
    return ExtraCurricularActivity.objects.create(
        subject=subject,
        school_class=school_class,
        activity_name=name,
        full_marks=full_marks,
        pass_marks=pass_marks,
    )
