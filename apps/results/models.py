# results/models.py

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator, MaxValueValidator
from django.core.exceptions import ValidationError
from utils.models import BaseModel
import logging

logger = logging.getLogger(__name__)


class ResultType(models.TextChoices):
    GPA = 'gpa', 'GPA'
    PERCENTAGE = 'percentage', 'Percentage'


class CalculationMethod(models.TextChoices):
    SIMPLE = 'simple', 'Simple'
    WEIGHTED = 'weighted', 'Weighted'


MARKS_FIELD_OPTIONS = {
    'max_digits': 7,
    'decimal_places': 2,
    'validators': [MinValueValidator(0)],
}


# =============================================================================
# CONFIGURATION
# =============================================================================

class ResultSetting(BaseModel):
    """
    Scoring policy of the school, optionally scoped to one academic year.

    With evaluation_per_term, practical and activity marks count in every
    term; otherwise they count only in the last term (highest sequence).
    """

    academic_year = models.OneToOneField(
        'academics.AcademicYear',
        verbose_name="Academic Year",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='result_setting',
        help_text="Leave empty for the school-wide setting"
    )
    total_terms = models.PositiveSmallIntegerField(
        "Total Terms",
        default=3,
        validators=[MinValueValidator(1), MaxValueValidator(12)]
    )
    result_type = models.CharField(
        "Result Type",
        max_length=20,
        choices=ResultType.choices,
        default=ResultType.GPA
    )
    calculation_method = models.CharField(
        "Calculation Method",
        max_length=20,
        choices=CalculationMethod.choices,
        default=CalculationMethod.SIMPLE
    )
    evaluation_per_term = models.BooleanField(
        "Evaluate Practical/Activities Every Term",
        default=False
    )

    class Meta:
        verbose_name = "Result Setting"
        verbose_name_plural = "Result Settings"

    def __str__(self):
        scope = self.academic_year or 'school-wide'
        return f"{self.get_result_type_display()} / {self.get_calculation_method_display()} ({scope})"

    def clean(self):
        super().clean()
        # NULLs are distinct in unique indexes, so the school-wide row is checked here
        if self.academic_year_id is None:
            duplicate = ResultSetting.objects.filter(academic_year__isnull=True).exclude(pk=self.pk)
            if duplicate.exists():
                raise ValidationError("A school-wide result setting already exists")

    @property
    def is_weighted(self):
        return self.calculation_method == CalculationMethod.WEIGHTED


class Term(BaseModel):
    """Grading period of a result setting; the highest sequence is the last term"""

    result_setting = models.ForeignKey(
        ResultSetting,
        verbose_name="Result Setting",
        on_delete=models.CASCADE,
        related_name='terms'
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        verbose_name="Academic Year",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='terms'
    )
    name = models.CharField("Term Name", max_length=100)
    sequence = models.PositiveSmallIntegerField(
        "Sequence",
        help_text="Creation order inside the setting"
    )
    weight = models.PositiveSmallIntegerField(
        "Weight (%)",
        null=True,
        blank=True,
        validators=[MaxValueValidator(100)]
    )
    exam_date = models.DateField("Exam Date", null=True, blank=True)
    publish_date = models.DateField("Publish Date", null=True, blank=True)
    start_date = models.DateField("Start Date", null=True, blank=True)
    end_date = models.DateField("End Date", null=True, blank=True)

    class Meta:
        verbose_name = "Term"
        verbose_name_plural = "Terms"
        ordering = ['result_setting', 'sequence']
        constraints = [
            models.UniqueConstraint(
                fields=['result_setting', 'sequence'],
                name='unique_term_sequence',
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        super().clean()
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError({'end_date': 'End date cannot be before start date'})


class ExtraCurricularActivity(BaseModel):
    """Activity marked alongside a subject's practical stream"""

    subject = models.ForeignKey(
        'academics.Subject',
        verbose_name="Subject",
        on_delete=models.CASCADE,
        related_name='activities'
    )
    school_class = models.ForeignKey(
        'academics.SchoolClass',
        verbose_name="Class",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='activities',
        help_text="Leave empty to apply to every class taking the subject"
    )
    activity_name = models.CharField("Activity", max_length=100)
    full_marks = models.PositiveIntegerField("Full Marks")
    pass_marks = models.PositiveIntegerField("Pass Marks", default=0)

    class Meta:
        verbose_name = "Extra-curricular Activity"
        verbose_name_plural = "Extra-curricular Activities"
        ordering = ['subject', 'activity_name']

    def __str__(self):
        return f"{self.activity_name} ({self.subject.name})"

    def clean(self):
        super().clean()
        if self.pass_marks > self.full_marks:
            raise ValidationError({'pass_marks': 'Pass marks cannot exceed full marks'})

    def applies_to(self, school_class):
        return self.school_class_id is None or self.school_class_id == getattr(school_class, 'pk', school_class)


# =============================================================================
# RAW RESULT LEDGER
# =============================================================================

class Result(BaseModel):
    """
    One student's marks for one subject in one term.

    gpa and percentage are single-record values over the streams eligible
    in that term; percentage is only stored for percentage-type policies.
    """

    student = models.ForeignKey(
        'students.Student',
        verbose_name="Student",
        on_delete=models.CASCADE,
        related_name='results'
    )
    school_class = models.ForeignKey(
        'academics.SchoolClass',
        verbose_name="Class",
        on_delete=models.PROTECT,
        related_name='results'
    )
    subject = models.ForeignKey(
        'academics.Subject',
        verbose_name="Subject",
        on_delete=models.PROTECT,
        related_name='results'
    )
    term = models.ForeignKey(
        Term,
        verbose_name="Term",
        on_delete=models.PROTECT,
        related_name='results'
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        verbose_name="Academic Year",
        on_delete=models.PROTECT,
        related_name='results'
    )

    marks_theory = models.DecimalField("Theory Marks", default=0, **MARKS_FIELD_OPTIONS)
    marks_practical = models.DecimalField("Practical Marks", default=0, **MARKS_FIELD_OPTIONS)
    gpa = models.DecimalField("GPA", max_digits=3, decimal_places=2, default=0)
    percentage = models.DecimalField("Percentage", max_digits=5, decimal_places=2, null=True, blank=True)

    exam_type = models.CharField("Exam Type", max_length=100, blank=True)
    exam_date = models.DateField("Exam Date", null=True, blank=True)
    remarks = models.TextField("Remarks", blank=True)

    class Meta:
        verbose_name = "Result"
        verbose_name_plural = "Results"
        indexes = [
            models.Index(fields=['school_class', 'academic_year'], name='result_class_year_idx'),
            models.Index(fields=['student', 'academic_year'], name='result_student_year_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'subject', 'term', 'academic_year'],
                name='unique_result_per_term',
            ),
        ]

    def __str__(self):
        return f"{self.student} - {self.subject.name} ({self.term})"

    def clean(self):
        super().clean()
        errors = {}
        subject = self.subject

        if self.marks_theory is not None and self.marks_theory > subject.theory_marks:
            errors['marks_theory'] = (
                f"Theory marks cannot exceed {subject.theory_marks} for {subject.name}"
            )
        if self.marks_practical is not None and self.marks_practical > subject.practical_marks:
            errors['marks_practical'] = (
                f"Practical marks cannot exceed {subject.practical_marks} for {subject.name}"
            )

        if errors:
            raise ValidationError(errors)


class ResultActivity(BaseModel):
    """Marks for one activity attached to a raw result"""

    result = models.ForeignKey(
        Result,
        verbose_name="Result",
        on_delete=models.CASCADE,
        related_name='activities'
    )
    activity = models.ForeignKey(
        ExtraCurricularActivity,
        verbose_name="Activity",
        on_delete=models.PROTECT,
        related_name='result_marks'
    )
    marks = models.DecimalField("Marks", **MARKS_FIELD_OPTIONS)

    class Meta:
        verbose_name = "Result Activity"
        verbose_name_plural = "Result Activities"
        constraints = [
            models.UniqueConstraint(
                fields=['result', 'activity'],
                name='unique_result_activity',
            ),
        ]

    def __str__(self):
        return f"{self.activity.activity_name}: {self.marks}"

    def clean(self):
        super().clean()
        if self.marks is not None and self.marks > self.activity.full_marks:
            raise ValidationError({
                'marks': f"Marks cannot exceed {self.activity.full_marks} for {self.activity.activity_name}"
            })


# =============================================================================
# FINAL RESULTS
# =============================================================================

class FinalResult(BaseModel):
    """
    Year-end outcome for a student in a class.

    Rows with a subject hold the subject result; the row without a subject
    is the student's overall result and carries the class rank. The whole
    set for a (class, year) is regenerated at once, never patched.
    """

    student = models.ForeignKey(
        'students.Student',
        verbose_name="Student",
        on_delete=models.CASCADE,
        related_name='final_results'
    )
    school_class = models.ForeignKey(
        'academics.SchoolClass',
        verbose_name="Class",
        on_delete=models.CASCADE,
        related_name='final_results'
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        verbose_name="Academic Year",
        on_delete=models.PROTECT,
        related_name='final_results'
    )
    subject = models.ForeignKey(
        'academics.Subject',
        verbose_name="Subject",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='final_results',
        help_text="Empty for the overall result"
    )

    final_theory_marks = models.DecimalField("Final Theory Marks", max_digits=7, decimal_places=2, null=True, blank=True)
    final_practical_marks = models.DecimalField("Final Practical Marks", max_digits=7, decimal_places=2, null=True, blank=True)
    final_percentage = models.DecimalField("Final Percentage", max_digits=5, decimal_places=2, null=True, blank=True)
    final_gpa = models.DecimalField("Final GPA", max_digits=3, decimal_places=2, null=True, blank=True)
    final_grade = models.CharField("Final Grade", max_length=5, blank=True)
    final_division = models.CharField("Final Division", max_length=30, blank=True)
    is_passed = models.BooleanField("Passed", default=False)

    result_type = models.CharField("Result Type", max_length=20, choices=ResultType.choices)
    calculation_method = models.CharField("Calculation Method", max_length=20, choices=CalculationMethod.choices)

    rank = models.PositiveIntegerField("Rank", null=True, blank=True)
    remarks = models.CharField("Remarks", max_length=255, blank=True)
    term_breakdown = models.JSONField("Term Breakdown", default=dict, blank=True)

    class Meta:
        verbose_name = "Final Result"
        verbose_name_plural = "Final Results"
        ordering = ['school_class', 'rank']
        indexes = [
            models.Index(fields=['school_class', 'academic_year'], name='final_result_class_year_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'school_class', 'academic_year', 'subject'],
                name='unique_final_result_subject',
            ),
            models.UniqueConstraint(
                fields=['student', 'school_class', 'academic_year'],
                condition=Q(subject__isnull=True),
                name='unique_final_result_overall',
            ),
        ]

    def __str__(self):
        label = self.subject.name if self.subject_id else 'Overall'
        return f"{self.student} - {label} ({self.academic_year})"

    @property
    def is_overall(self):
        return self.subject_id is None
