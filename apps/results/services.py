# results/services.py
"""
Result engine services.

ResultSettingService    scoring policy configuration and lookup
ResultLedgerService     per-term marks entry (raw ledger)
FinalResultService      year-end final results, ranking, term ledger and read helpers

Configuration and validation errors are raised before any write. Batch
writes run in one transaction on the current school database and either
complete or roll back entirely.
"""

from dataclasses import dataclass, field
from collections import defaultdict
from django.conf import settings
from django.db import transaction
from django.core.exceptions import ValidationError
import logging
import random

from schoolhub.managers import get_school_db
from academics.models import AcademicYear, SchoolClass
from academics.utils import get_current_academic_year, get_class_subjects
from students.models import Student
from utils.context import get_actor_label

from .aggregation import aggregate_subject, aggregate_overall, load_rows, score_row
from .calculations import (
    percentage,
    gpa_from_percentage,
    grade_from_percentage,
    grade_from_gpa,
    division_from_percentage,
    remarks_from_gpa,
    is_passed,
    round2,
    to_decimal,
    FAIL_DIVISION,
)
from .exceptions import NotConfigured, InvalidWeights, ResultGenerationError
from .models import (
    ResultSetting,
    Term,
    ExtraCurricularActivity,
    Result,
    ResultActivity,
    FinalResult,
    ResultType,
    CalculationMethod,
)
from .policy import ScoringPolicy

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger('academic_audit')

NOTHING_TO_DO = 'nothing_to_do'

TERM_FIELDS = ('name', 'weight', 'exam_date', 'publish_date', 'start_date', 'end_date')
SETTING_FIELDS = ('academic_year', 'total_terms', 'result_type', 'calculation_method', 'evaluation_per_term')


def get_weight_total():
    return getattr(settings, 'RESULTS_TERM_WEIGHT_TOTAL', 100)


# =============================================================================
# CONFIGURATION STORE
# =============================================================================

class ResultSettingService:
    """Scoring policy lookup and configuration"""

    @staticmethod
    def get_setting(academic_year=None):
        """
        Setting that applies to an academic year.

        Lookup order: the year's own setting, the current year's setting,
        the school-wide setting. Never invents a default.

        Raises:
            NotConfigured
        """
        queryset = ResultSetting.objects.all()

        if academic_year is not None:
            setting = queryset.filter(academic_year=academic_year).first()
            if setting:
                return setting

        current_year = get_current_academic_year()
        if current_year is not None:
            setting = queryset.filter(academic_year=current_year).first()
            if setting:
                return setting

        setting = queryset.filter(academic_year__isnull=True).first()
        if setting:
            return setting

        raise NotConfigured(
            'Result setting is not configured. Please configure result settings first.',
            academic_year=academic_year,
        )

    @staticmethod
    def get_active_policy(academic_year=None):
        return ScoringPolicy.from_setting(ResultSettingService.get_setting(academic_year))

    @staticmethod
    def _check_weights(method, weights):
        """weights: iterable of int|None for every term of a setting"""
        total = sum(weight for weight in weights if weight is not None)
        expected = get_weight_total()

        if method != CalculationMethod.WEIGHTED:
            if total:
                raise InvalidWeights('Term weights are only allowed for the weighted method', total=total)
            return total

        if any(weight is not None and not 0 <= weight <= expected for weight in weights):
            raise InvalidWeights(f'Each term weight must be between 0 and {expected}', total=total)
        if total != expected:
            raise InvalidWeights(f'Total weight must be exactly {expected}% (got {total}%)', total=total)
        return total

    @staticmethod
    def save_setting(data, terms, setting=None):
        """
        Create or update a result setting together with its terms.

        Args:
            data (dict): academic_year, total_terms, result_type,
                calculation_method, evaluation_per_term
            terms (list): dicts with name, weight, exam_date, publish_date,
                start_date, end_date and, for existing terms, id. On update,
                terms not listed are deleted.
            setting (ResultSetting): setting to update, None to create

        Returns:
            ResultSetting

        Raises:
            ValidationError: bad fields, duplicate setting for the year,
                removing a term that already has results
            InvalidWeights: weight sum differs from the required total
        """
        unknown = set(data) - set(SETTING_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown setting field(s): {', '.join(sorted(unknown))}")

        creating = setting is None
        if (terms is not None and not terms) or (creating and terms is None):
            raise ValidationError({'terms': 'At least one term is required'})

        # The caller's instance is never modified
        target = ResultSetting() if creating else ResultSetting.objects.get(pk=setting.pk)
        for name, value in data.items():
            setattr(target, name, value)

        if creating and target.academic_year_id is not None:
            if ResultSetting.objects.filter(academic_year_id=target.academic_year_id).exists():
                raise ValidationError('Result setting already exists for this academic year')

        method = target.calculation_method
        if terms is not None and method != CalculationMethod.WEIGHTED:
            terms = [dict(term, weight=None) for term in terms]

        existing_terms = {} if creating else {str(term.pk): term for term in target.terms.all()}
        if terms is not None and not creating:
            listed_ids = {str(term['id']) for term in terms if term.get('id')}
            unknown_ids = listed_ids - set(existing_terms)
            if unknown_ids:
                raise ValidationError({'terms': f"Term(s) not part of this setting: {', '.join(sorted(unknown_ids))}"})
            removed = [term for term_id, term in existing_terms.items() if term_id not in listed_ids]
            blocked = [term.name for term in removed if term.results.exists()]
            if blocked:
                raise ValidationError({'terms': f"Cannot remove term(s) with recorded results: {', '.join(blocked)}"})

        if terms is not None:
            final_weights = [term.get('weight') for term in terms]
        elif method == CalculationMethod.WEIGHTED:
            final_weights = [term.weight for term in existing_terms.values()]
        else:
            final_weights = []
        ResultSettingService._check_weights(method, final_weights)

        target.full_clean()

        with transaction.atomic(using=get_school_db()):
            target.save()

            if terms is None:
                if method != CalculationMethod.WEIGHTED:
                    target.terms.exclude(weight__isnull=True).update(weight=None)
            else:
                kept_ids = []
                next_sequence = max([term.sequence for term in existing_terms.values()], default=0) + 1
                for term_data in terms:
                    term_id = str(term_data['id']) if term_data.get('id') else None
                    if term_id:
                        term = existing_terms[term_id]
                    else:
                        term = Term(result_setting=target, sequence=next_sequence)
                        next_sequence += 1
                    term.academic_year_id = target.academic_year_id
                    for name in TERM_FIELDS:
                        if name in term_data:
                            setattr(term, name, term_data[name])
                    term.full_clean()
                    term.save()
                    kept_ids.append(term.pk)

                if not creating:
                    for term in target.terms.exclude(pk__in=kept_ids):
                        term.delete()

        audit_logger.info(
            f"result_setting_{'created' if creating else 'updated'} actor={get_actor_label()} "
            f"id={target.pk} method={target.calculation_method} type={target.result_type}"
        )
        logger.info(f"Result setting {target.pk} {'created' if creating else 'updated'}")
        return target

    @staticmethod
    def set_term_weights(setting, weights):
        """
        Replace the term weights of a weighted setting.

        Args:
            weights (dict): {term_id: int|None}; terms not listed get no weight

        Raises:
            InvalidWeights: setting is not weighted, a term is foreign, or
                the non-null weights do not sum to the required total.
                Nothing is changed in that case.
        """
        if setting.calculation_method != CalculationMethod.WEIGHTED:
            raise InvalidWeights('Term weights can only be set for the weighted calculation method')

        with transaction.atomic(using=get_school_db()):
            terms = {str(term.pk): term for term in setting.terms.select_for_update()}
            requested = {str(term_id): weight for term_id, weight in weights.items()}

            foreign = set(requested) - set(terms)
            if foreign:
                raise InvalidWeights(f"Term(s) not part of this setting: {', '.join(sorted(foreign))}")

            new_weights = {term_id: requested.get(term_id) for term_id in terms}
            total = ResultSettingService._check_weights(setting.calculation_method, list(new_weights.values()))

            for term_id, weight in new_weights.items():
                term = terms[term_id]
                if term.weight != weight:
                    term.weight = weight
                    term.save(update_fields=['weight'])

        audit_logger.info(f"term_weights_set actor={get_actor_label()} setting={setting.pk} total={total}")
        return setting

    @staticmethod
    def set_calculation_method(setting, method):
        """
        Change the calculation method.

        Switching away from weighted clears every stored term weight.
        Switching to weighted requires the stored weights to already sum to
        the required total.

        Returns:
            bool: True when stored weights were cleared
        """
        try:
            method = CalculationMethod(method)
        except ValueError:
            raise ValidationError({'calculation_method': f"Unknown calculation method '{method}'"})

        with transaction.atomic(using=get_school_db()):
            terms = list(setting.terms.select_for_update())
            cleared = False

            if method == CalculationMethod.WEIGHTED:
                ResultSettingService._check_weights(method, [term.weight for term in terms])
            else:
                for term in terms:
                    if term.weight is not None:
                        term.weight = None
                        term.save(update_fields=['weight'])
                        cleared = True

            setting.calculation_method = method
            setting.save(update_fields=['calculation_method'])

        if cleared:
            logger.info(f"Cleared term weights of setting {setting.pk} (method now {method})")
        audit_logger.info(
            f"calculation_method_set actor={get_actor_label()} setting={setting.pk} "
            f"method={method} weights_cleared={cleared}"
        )
        return cleared

    @staticmethod
    def is_last_term(term, setting=None):
        setting = setting or term.result_setting
        return ScoringPolicy.from_setting(setting).is_last_term(term)

    @staticmethod
    def can_include_practical_or_activities(term, setting=None):
        setting = setting or term.result_setting
        return ScoringPolicy.from_setting(setting).can_include_practical_or_activities(term)

    @staticmethod
    def validate_term(term_id, setting):
        """True when the term belongs to the setting"""
        try:
            return setting.terms.filter(pk=term_id).exists()
        except ValidationError:
            # malformed id
            return False


# =============================================================================
# RAW RESULT LEDGER
# =============================================================================

class ResultLedgerService:
    """Per-term marks entry"""

    @staticmethod
    def _resolve_academic_year(term, academic_year, policy_year_id):
        if academic_year is not None:
            return academic_year
        if term.academic_year_id:
            return term.academic_year
        if policy_year_id:
            return AcademicYear.objects.get(pk=policy_year_id)
        return get_current_academic_year()

    @staticmethod
    def _validate_activities(activities, subject, school_class):
        """
        Args:
            activities: {ExtraCurricularActivity or id: marks}

        Returns:
            list of (activity, marks)
        """
        validated = []
        for key, marks in (activities or {}).items():
            if isinstance(key, ExtraCurricularActivity):
                activity = key
            else:
                activity = ExtraCurricularActivity.objects.filter(pk=key).first()
                if activity is None:
                    raise ValidationError({'activities': f"Unknown activity {key}"})

            if activity.subject_id != subject.pk or not activity.applies_to(school_class):
                raise ValidationError({
                    'activities': f"{activity.activity_name} is not an activity of {subject.name} for {school_class}"
                })
            if marks is None or float(marks) < 0:
                raise ValidationError({'activities': f"Marks for {activity.activity_name} must be 0 or more"})
            if float(marks) > activity.full_marks:
                raise ValidationError({
                    'activities': f"Marks for {activity.activity_name} cannot exceed {activity.full_marks}"
                })
            validated.append((activity, marks))
        return validated

    @staticmethod
    def _prepare(student, subject, term, theory_marks, practical_marks, activities,
                 school_class, academic_year, policy):
        if not policy.has_term(term):
            raise ValidationError({'term': f"{term} is not a term of the active result setting"})

        school_class = school_class or student.school_class
        if school_class is None:
            raise ValidationError({'school_class': f"{student} is not assigned to a class"})

        academic_year = ResultLedgerService._resolve_academic_year(term, academic_year, policy.academic_year_id)
        if academic_year is None:
            raise ValidationError({'academic_year': 'No academic year given and none is current'})

        theory_marks = 0 if theory_marks is None else theory_marks
        practical_marks = 0 if practical_marks is None else practical_marks
        errors = {}
        if float(theory_marks) < 0:
            errors['marks_theory'] = 'Theory marks cannot be negative'
        elif float(theory_marks) > subject.theory_marks:
            errors['marks_theory'] = f"Theory marks cannot exceed {subject.theory_marks} for {subject.name}"
        if float(practical_marks) < 0:
            errors['marks_practical'] = 'Practical marks cannot be negative'
        elif float(practical_marks) > subject.practical_marks:
            errors['marks_practical'] = f"Practical marks cannot exceed {subject.practical_marks} for {subject.name}"
        if errors:
            raise ValidationError(errors)

        eligible = policy.can_include_practical_or_activities(term)
        if activities and not eligible:
            raise ValidationError({
                'activities': f"Activities can only be recorded in the last term ({policy.last_term})"
            })
        validated_activities = ResultLedgerService._validate_activities(activities, subject, school_class)

        obtained = float(theory_marks)
        maximum = float(subject.theory_marks)
        if eligible:
            obtained += float(practical_marks) + sum(float(marks) for _, marks in validated_activities)
            maximum += float(subject.practical_marks) + sum(activity.full_marks for activity, _ in validated_activities)

        pct = percentage(obtained, maximum)
        return {
            'school_class': school_class,
            'academic_year': academic_year,
            'theory_marks': theory_marks,
            'practical_marks': practical_marks,
            'activities': validated_activities,
            'gpa': gpa_from_percentage(pct),
            'percentage': pct if policy.result_type == ResultType.PERCENTAGE else None,
        }

    @staticmethod
    def _write(student, subject, term, prepared, exam_type, exam_date, remarks):
        result = Result.objects.filter(
            student=student,
            subject=subject,
            term=term,
            academic_year=prepared['academic_year'],
        ).first()
        created = result is None
        if created:
            result = Result(
                student=student,
                subject=subject,
                term=term,
                academic_year=prepared['academic_year'],
            )

        result.school_class = prepared['school_class']
        result.marks_theory = to_decimal(prepared['theory_marks'])
        result.marks_practical = to_decimal(prepared['practical_marks'])
        result.gpa = to_decimal(prepared['gpa'])
        result.percentage = to_decimal(prepared['percentage'])
        result.exam_type = exam_type or ''
        result.exam_date = exam_date
        result.remarks = remarks or ''
        result.save()

        if not created:
            result.activities.all().delete()
        for activity, marks in prepared['activities']:
            ResultActivity.objects.create(result=result, activity=activity, marks=to_decimal(marks))

        return result, created

    @staticmethod
    def record_result(student, subject, term, theory_marks, practical_marks, exam_type=None,
                      exam_date=None, activities=None, remarks=None, school_class=None,
                      academic_year=None):
        """
        Record (or overwrite) one student's marks for a subject in a term.

        Args:
            activities (dict): {ExtraCurricularActivity or id: marks}; only
                accepted in terms where practical/activities are eligible

        Returns:
            Result

        Raises:
            NotConfigured: no result setting applies
            ValidationError: term outside the setting, marks out of range,
                activities on an ineligible term
        """
        policy = ResultSettingService.get_active_policy(academic_year or term.academic_year)
        prepared = ResultLedgerService._prepare(
            student, subject, term, theory_marks, practical_marks, activities,
            school_class, academic_year, policy,
        )

        with transaction.atomic(using=get_school_db()):
            result, created = ResultLedgerService._write(
                student, subject, term, prepared, exam_type, exam_date, remarks,
            )

        logger.info(
            f"{'Recorded' if created else 'Updated'} result for {student} / {subject.name} / {term}: "
            f"gpa={result.gpa} percentage={result.percentage}"
        )
        return result

    @staticmethod
    def record_class_results(school_class, term, entries, academic_year=None, exam_type=None, exam_date=None):
        """
        Record marks for a whole class in one transaction; any invalid entry
        rejects the whole batch.

        Args:
            entries (list): dicts with student, subject, theory_marks,
                practical_marks and optionally activities, remarks

        Returns:
            list of Result
        """
        policy = ResultSettingService.get_active_policy(academic_year or term.academic_year)

        prepared_entries = []
        for index, entry in enumerate(entries):
            student = entry['student']
            if student.school_class_id != school_class.pk:
                raise ValidationError(f"Entry {index + 1}: {student} is not in {school_class}")
            try:
                prepared = ResultLedgerService._prepare(
                    student, entry['subject'], term,
                    entry.get('theory_marks'), entry.get('practical_marks'),
                    entry.get('activities'), school_class, academic_year, policy,
                )
            except ValidationError as e:
                raise ValidationError(f"Entry {index + 1} ({student}): {'; '.join(e.messages)}") from e
            prepared_entries.append((entry, prepared))

        results = []
        with transaction.atomic(using=get_school_db()):
            for entry, prepared in prepared_entries:
                result, _ = ResultLedgerService._write(
                    entry['student'], entry['subject'], term, prepared,
                    entry.get('exam_type', exam_type), entry.get('exam_date', exam_date), entry.get('remarks'),
                )
                results.append(result)

        logger.info(f"Recorded {len(results)} result(s) for {school_class} in {term}")
        return results

    @staticmethod
    def delete_result(result):
        description = str(result)
        with transaction.atomic(using=get_school_db()):
            result.delete()
        logger.info(f"Deleted result {description}")


# =============================================================================
# FINAL RESULT GENERATOR
# =============================================================================

@dataclass
class GenerationSummary:
    status: str
    school_class_id: object = None
    academic_year_id: object = None
    students: int = 0
    subject_rows: int = 0
    overall_rows: int = 0
    skipped_students: list = field(default_factory=list)
    message: str = ''

    @property
    def nothing_to_do(self):
        return self.status == NOTHING_TO_DO


@dataclass
class TermClassEntry:
    """One student's line in a single-term class ledger"""

    student: object
    subjects: list
    total_obtained: float
    total_maximum: float
    percentage: float
    gpa: float
    grade: str
    division: str
    is_passed: bool
    rank: object = None


def ranking_key(percentage_value, gpa_value, student, result_type):
    """Primary metric desc, other metric desc, student name, student id"""
    def metric(value):
        return float(value) if value is not None else float('-inf')

    if result_type == ResultType.PERCENTAGE:
        primary, secondary = percentage_value, gpa_value
    else:
        primary, secondary = gpa_value, percentage_value
    return (-metric(primary), -metric(secondary), student.get_full_name().casefold(), str(student.pk))


def rank_sort_key(row, result_type):
    return ranking_key(row.final_percentage, row.final_gpa, row.student, result_type)


class FinalResultService:
    """Year-end final results for a class"""

    @staticmethod
    def _class_students(school_class):
        return list(
            Student.objects.filter(school_class=school_class)
            .order_by('roll_number', 'first_name', 'last_name', 'pk')
        )

    @staticmethod
    def assign_ranks(overall_rows, result_type):
        """
        Rank overall rows 1..N. Ties never share a rank: they are ordered
        by the other metric, then student name, then student id.
        """
        ordered = sorted(overall_rows, key=lambda row: rank_sort_key(row, result_type))
        for position, row in enumerate(ordered, start=1):
            if row.rank != position:
                row.rank = position
                row.save(update_fields=['rank'])
        return ordered

    @staticmethod
    def _grade(pct, gpa, result_type):
        if result_type == ResultType.PERCENTAGE:
            return grade_from_percentage(pct)
        return grade_from_gpa(gpa)

    @staticmethod
    def _subject_passed(subject, theory_obtained, practical_obtained):
        """
        Theory and practical must each clear their own pass mark. A practical
        component that was never assessed counts as 0 obtained; the practical
        threshold only drops away for subjects without a practical component.
        """
        practical_pass = subject.practical_pass_marks if subject.practical_marks else 0
        return is_passed(
            theory_obtained, subject.theory_pass_marks,
            practical_obtained or 0, practical_pass,
        )

    @staticmethod
    def _write_subject_row(student, subject, school_class, academic_year, policy, aggregate):
        passed = FinalResultService._subject_passed(
            subject, aggregate.final_theory_marks, aggregate.final_practical_marks,
        )
        return FinalResult.objects.create(
            student=student,
            school_class=school_class,
            academic_year=academic_year,
            subject=subject,
            final_theory_marks=to_decimal(aggregate.final_theory_marks),
            final_practical_marks=to_decimal(aggregate.final_practical_marks),
            final_percentage=to_decimal(aggregate.percentage),
            final_gpa=to_decimal(aggregate.gpa),
            final_grade=FinalResultService._grade(aggregate.percentage, aggregate.gpa, policy.result_type),
            final_division=division_from_percentage(aggregate.percentage),
            is_passed=passed,
            result_type=policy.result_type,
            calculation_method=policy.calculation_method,
            term_breakdown=aggregate.breakdown(policy.calculation_method),
        ), passed

    @staticmethod
    def _write_overall_row(student, school_class, academic_year, policy, aggregates, all_passed, rows):
        raw_obtained = sum(aggregate.raw_obtained for aggregate in aggregates)
        raw_maximum = sum(aggregate.raw_maximum for aggregate in aggregates)
        pct = percentage(raw_obtained, raw_maximum)
        gpa = gpa_from_percentage(pct)

        term_level = aggregate_overall(student, school_class, academic_year, policy, rows=rows)
        breakdown = {
            'raw_obtained': round2(raw_obtained),
            'raw_maximum': round2(raw_maximum),
            'subjects': len(aggregates),
            'term_level': term_level.breakdown(policy.calculation_method) if term_level else None,
        }

        return FinalResult.objects.create(
            student=student,
            school_class=school_class,
            academic_year=academic_year,
            subject=None,
            final_percentage=to_decimal(pct),
            final_gpa=to_decimal(gpa),
            final_grade=FinalResultService._grade(pct, gpa, policy.result_type),
            final_division=division_from_percentage(pct) if all_passed else FAIL_DIVISION,
            is_passed=all_passed,
            result_type=policy.result_type,
            calculation_method=policy.calculation_method,
            remarks=remarks_from_gpa(gpa),
            term_breakdown=breakdown,
        )

    @staticmethod
    def _check_inputs(school_class, academic_year):
        """Students and subjects of the class, or a nothing-to-do summary"""
        students = FinalResultService._class_students(school_class)
        if not students:
            return None, None, GenerationSummary(
                status=NOTHING_TO_DO,
                school_class_id=school_class.pk,
                academic_year_id=academic_year.pk,
                message=f"No students found in {school_class}",
            )
        subjects = list(get_class_subjects(school_class))
        if not subjects:
            return None, None, GenerationSummary(
                status=NOTHING_TO_DO,
                school_class_id=school_class.pk,
                academic_year_id=academic_year.pk,
                message=f"No subjects assigned to {school_class}",
            )
        return students, subjects, None

    @staticmethod
    def generate_final_results(school_class, academic_year):
        """
        Regenerate every final result of a class for an academic year.

        Existing rows for (class, year) are deleted and rebuilt from the
        ledger inside one transaction; the class row is locked so two
        regenerations of the same class run one after the other.

        Returns:
            GenerationSummary

        Raises:
            NotConfigured: no result setting applies
            ResultGenerationError: anything failed inside the batch (rolled back)
        """
        policy = ResultSettingService.get_active_policy(academic_year)

        students, subjects, empty = FinalResultService._check_inputs(school_class, academic_year)
        if empty:
            logger.info(empty.message)
            return empty

        summary = GenerationSummary(
            status='generated',
            school_class_id=school_class.pk,
            academic_year_id=academic_year.pk,
        )

        try:
            with transaction.atomic(using=get_school_db()):
                SchoolClass.objects.select_for_update().get(pk=school_class.pk)
                FinalResult.objects.filter(school_class=school_class, academic_year=academic_year).delete()

                rows_by_student = defaultdict(list)
                for row in load_rows(school_class, academic_year):
                    rows_by_student[row.student_id].append(row)

                subject_ids = {subject.pk for subject in subjects}
                overall_rows = []
                for student in students:
                    student_rows = rows_by_student.get(student.pk, [])
                    rows_by_subject = defaultdict(list)
                    for row in student_rows:
                        rows_by_subject[row.subject_id].append(row)

                    aggregates = []
                    all_passed = True
                    for subject in subjects:
                        aggregate = aggregate_subject(
                            student, subject, school_class, academic_year, policy,
                            rows=rows_by_subject.get(subject.pk, []),
                        )
                        if aggregate is None:
                            continue
                        _, passed = FinalResultService._write_subject_row(
                            student, subject, school_class, academic_year, policy, aggregate,
                        )
                        aggregates.append(aggregate)
                        all_passed = all_passed and passed
                        summary.subject_rows += 1

                    if not aggregates:
                        summary.skipped_students.append(student.pk)
                        continue

                    overall_rows.append(FinalResultService._write_overall_row(
                        student, school_class, academic_year, policy, aggregates, all_passed,
                        [row for row in student_rows if row.subject_id in subject_ids],
                    ))

                FinalResultService.assign_ranks(overall_rows, policy.result_type)
                summary.overall_rows = len(overall_rows)
                summary.students = len(overall_rows)
        except Exception as e:
            logger.error(f"Final result generation for {school_class} / {academic_year} failed: {e}")
            raise ResultGenerationError(f"Error generating results: {e}") from e

        summary.message = f"Successfully generated results for {summary.students} students."
        audit_logger.info(
            f"final_results_generated actor={get_actor_label()} class={school_class.pk} "
            f"year={academic_year.pk} students={summary.students} subject_rows={summary.subject_rows} "
            f"skipped={len(summary.skipped_students)}"
        )
        logger.info(summary.message)
        return summary

    @staticmethod
    def generate_synthetic_final_results(school_class, academic_year, min_marks, max_marks, seed=None):
        """
        Fabricate final results inside a percentage band, for demo data.

        Does not read the ledger. Each subject gets a random percentage in
        [min_marks, max_marks] split between theory and practical in
        proportion to their full marks; rows are stored as percentage /
        simple and the overall remarks carry the generated suffix.

        Raises:
            ValidationError: band outside 0..100 or min above max
            ResultGenerationError: anything failed inside the batch
        """
        min_marks = float(min_marks)
        max_marks = float(max_marks)
        if not 0 <= min_marks <= 100 or not 0 <= max_marks <= 100:
            raise ValidationError('Marks band must lie between 0 and 100')
        if min_marks > max_marks:
            raise ValidationError({'max_marks': 'Maximum marks must be greater than or equal to minimum marks'})

        students, subjects, empty = FinalResultService._check_inputs(school_class, academic_year)
        if empty:
            logger.info(empty.message)
            return empty

        rng = random.Random(seed)
        suffix = getattr(settings, 'RESULTS_SYNTHETIC_REMARK_SUFFIX', ' (Generated)')
        result_type = ResultType.PERCENTAGE
        method = CalculationMethod.SIMPLE
        summary = GenerationSummary(
            status='generated',
            school_class_id=school_class.pk,
            academic_year_id=academic_year.pk,
        )

        try:
            with transaction.atomic(using=get_school_db()):
                SchoolClass.objects.select_for_update().get(pk=school_class.pk)
                FinalResult.objects.filter(school_class=school_class, academic_year=academic_year).delete()

                overall_rows = []
                for student in students:
                    total_obtained = 0.0
                    total_full = 0.0
                    all_passed = True

                    for subject in subjects:
                        full_total = subject.full_marks
                        if full_total <= 0:
                            continue

                        band_pct = round2(rng.uniform(min_marks, max_marks))
                        obtained_total = full_total * band_pct / 100
                        theory = round2(obtained_total * subject.theory_marks / full_total)
                        practical = round2(obtained_total * subject.practical_marks / full_total)
                        actual_obtained = theory + practical
                        pct = percentage(actual_obtained, full_total)
                        gpa = gpa_from_percentage(pct)
                        passed = is_passed(theory, subject.theory_pass_marks, practical, subject.practical_pass_marks)

                        FinalResult.objects.create(
                            student=student,
                            school_class=school_class,
                            academic_year=academic_year,
                            subject=subject,
                            final_theory_marks=to_decimal(theory),
                            final_practical_marks=to_decimal(practical),
                            final_percentage=to_decimal(pct),
                            final_gpa=to_decimal(gpa),
                            final_grade=grade_from_percentage(pct),
                            final_division=division_from_percentage(pct),
                            is_passed=passed,
                            result_type=result_type,
                            calculation_method=method,
                        )
                        summary.subject_rows += 1
                        total_obtained += actual_obtained
                        total_full += full_total
                        all_passed = all_passed and passed

                    if total_full <= 0:
                        summary.skipped_students.append(student.pk)
                        continue

                    overall_pct = percentage(total_obtained, total_full)
                    overall_gpa = gpa_from_percentage(overall_pct)
                    overall_rows.append(FinalResult.objects.create(
                        student=student,
                        school_class=school_class,
                        academic_year=academic_year,
                        subject=None,
                        final_percentage=to_decimal(overall_pct),
                        final_gpa=to_decimal(overall_gpa),
                        final_grade=grade_from_percentage(overall_pct),
                        final_division=division_from_percentage(overall_pct) if all_passed else FAIL_DIVISION,
                        is_passed=all_passed,
                        result_type=result_type,
                        calculation_method=method,
                        remarks=f"{remarks_from_gpa(overall_gpa)}{suffix}",
                        term_breakdown={'synthetic': True, 'min_marks': min_marks, 'max_marks': max_marks},
                    ))

                FinalResultService.assign_ranks(overall_rows, result_type)
                summary.overall_rows = len(overall_rows)
                summary.students = len(overall_rows)
        except Exception as e:
            logger.error(f"Synthetic result generation for {school_class} failed: {e}")
            raise ResultGenerationError(f"Error generating results: {e}") from e

        summary.message = f"Successfully generated results for {summary.students} students."
        audit_logger.info(
            f"synthetic_final_results_generated actor={get_actor_label()} class={school_class.pk} "
            f"year={academic_year.pk} students={summary.students} band={min_marks}-{max_marks}"
        )
        return summary

    # -------------------------------------------------------------------------
    # READ HELPERS
    # -------------------------------------------------------------------------

    @staticmethod
    def missing_terms_report(school_class, academic_year):
        """
        Students of the class with configured terms that have no result.

        Returns:
            list of dicts: {'student': Student, 'missing_terms': [Term, ...]}
        """
        policy = ResultSettingService.get_active_policy(academic_year)
        recorded = defaultdict(set)
        for student_id, term_id in Result.objects.filter(
            school_class=school_class, academic_year=academic_year
        ).values_list('student_id', 'term_id'):
            recorded[student_id].add(term_id)

        report = []
        for student in FinalResultService._class_students(school_class):
            missing = [term for term in policy.terms if term.pk not in recorded[student.pk]]
            if missing:
                report.append({'student': student, 'missing_terms': missing})
        return report

    @staticmethod
    def term_class_results(school_class, term, academic_year=None):
        """
        Class ledger for a single term, computed from the raw results.

        Each student with marks in the term gets totals over the eligible
        streams, percentage, GPA, grade and division. Only students who
        passed every subject recorded that term are ranked; the others
        keep rank None and division Fail.

        Returns:
            list of TermClassEntry: ranked entries first, then the rest,
            both in ranking order

        Raises:
            NotConfigured: no result setting applies
            ValidationError: the term is not part of the active setting
        """
        policy = ResultSettingService.get_active_policy(academic_year or term.academic_year)
        if not policy.has_term(term):
            raise ValidationError({'term': f"{term} is not a term of the active result setting"})

        academic_year = ResultLedgerService._resolve_academic_year(term, academic_year, policy.academic_year_id)
        if academic_year is None:
            return []

        rows = (
            Result.objects.filter(school_class=school_class, academic_year=academic_year, term=term)
            .select_related('student', 'subject', 'term')
            .prefetch_related('activities__activity')
            .order_by('subject__name')
        )
        rows_by_student = defaultdict(list)
        for row in rows:
            rows_by_student[row.student_id].append(row)

        entries = []
        for student_rows in rows_by_student.values():
            subjects = []
            total_obtained = 0.0
            total_maximum = 0.0
            all_passed = True

            for row in student_rows:
                score = score_row(row, policy)
                subject = row.subject
                if score.practical_included:
                    passed = FinalResultService._subject_passed(subject, score.theory, score.practical)
                else:
                    passed = is_passed(score.theory, subject.theory_pass_marks, 0, 0)

                subjects.append({
                    'subject': subject,
                    'theory': score.theory,
                    'practical': score.practical,
                    'activities': score.activities,
                    'obtained': score.obtained,
                    'maximum': score.maximum,
                    'percentage': score.percentage,
                    'gpa': score.gpa,
                    'practical_included': score.practical_included,
                    'is_passed': passed,
                })
                total_obtained += score.obtained
                total_maximum += score.maximum
                all_passed = all_passed and passed

            pct = percentage(total_obtained, total_maximum)
            gpa = gpa_from_percentage(pct)
            entries.append(TermClassEntry(
                student=student_rows[0].student,
                subjects=subjects,
                total_obtained=round2(total_obtained),
                total_maximum=round2(total_maximum),
                percentage=pct,
                gpa=gpa,
                grade=FinalResultService._grade(pct, gpa, policy.result_type),
                division=division_from_percentage(pct) if all_passed else FAIL_DIVISION,
                is_passed=all_passed,
            ))

        def order(entry):
            return ranking_key(entry.percentage, entry.gpa, entry.student, policy.result_type)

        ranked = sorted((entry for entry in entries if entry.is_passed), key=order)
        for position, entry in enumerate(ranked, start=1):
            entry.rank = position
        unranked = sorted((entry for entry in entries if not entry.is_passed), key=order)

        logger.debug(
            f"Term ledger for {school_class} / {term}: {len(entries)} student(s), {len(ranked)} ranked"
        )
        return ranked + unranked

    @staticmethod
    def class_final_results(school_class, academic_year):
        """
        Final results of a class grouped per student, best rank first.

        Returns:
            list of dicts: {'student', 'overall', 'subjects'}
        """
        rows = (
            FinalResult.objects.filter(school_class=school_class, academic_year=academic_year)
            .select_related('student', 'subject')
            .order_by('subject__name')
        )
        grouped = {}
        for row in rows:
            entry = grouped.setdefault(row.student_id, {'student': row.student, 'overall': None, 'subjects': []})
            if row.subject_id is None:
                entry['overall'] = row
            else:
                entry['subjects'].append(row)

        def order(entry):
            overall = entry['overall']
            rank = overall.rank if overall and overall.rank is not None else float('inf')
            return (rank, entry['student'].get_full_name().casefold())

        return sorted(grouped.values(), key=order)

    @staticmethod
    def student_final_result(student, academic_year):
        """
        Returns:
            dict: {'overall': FinalResult or None, 'subjects': [FinalResult, ...]}
        """
        rows = (
            FinalResult.objects.filter(student=student, academic_year=academic_year)
            .select_related('subject', 'school_class')
            .order_by('subject__name')
        )
        result = {'overall': None, 'subjects': []}
        for row in rows:
            if row.subject_id is None:
                result['overall'] = row
            else:
                result['subjects'].append(row)
        return result
