# academics/models.py

from django.db import models, transaction
from django.db.models import Q
from django.core.validators import MinValueValidator
from django.core.exceptions import ValidationError
from schoolhub.managers import get_school_db
from utils.models import BaseModel
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# ACADEMIC YEAR MODEL
# =============================================================================

class AcademicYear(BaseModel):
    """
    Academic year that results and class history are recorded against.

    At most one year is current at any time. The flag is moved with an
    explicit clear-then-set inside one transaction and backed by a partial
    unique constraint.
    """

    name = models.CharField(
        "Academic Year",
        max_length=20,
        help_text="E.g., '2081', '2024-2025'"
    )
    start_date = models.DateField("Start Date")
    end_date = models.DateField("End Date")
    is_current = models.BooleanField("Is Current", default=False, db_index=True)
    description = models.TextField("Description", blank=True)

    class Meta:
        verbose_name = "Academic Year"
        verbose_name_plural = "Academic Years"
        ordering = ['-start_date']
        constraints = [
            models.UniqueConstraint(
                fields=['is_current'],
                condition=Q(is_current=True),
                name='unique_current_academic_year',
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        super().clean()
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValidationError({'end_date': 'End date must be after start date'})

    def save(self, *args, **kwargs):
        if not self.is_current:
            return super().save(*args, **kwargs)

        with transaction.atomic(using=get_school_db()):
            # Clear first so the partial unique index never sees two current rows
            AcademicYear.objects.filter(is_current=True).exclude(pk=self.pk).update(is_current=False)
            return super().save(*args, **kwargs)

    def set_current(self):
        """Make this the only current academic year"""
        self.is_current = True
        self.save()
        logger.info(f"Academic year {self.name} is now current")

    @classmethod
    def get_current(cls):
        """Current academic year, or None when none is flagged"""
        return cls.objects.filter(is_current=True).first()


# =============================================================================
# CLASS MODEL
# =============================================================================

class SchoolClass(BaseModel):
    """A class/grade section that students belong to, e.g. 'Grade 8' section 'A'"""

    name = models.CharField("Class Name", max_length=50)
    section = models.CharField("Section", max_length=10, blank=True)
    level = models.PositiveSmallIntegerField(
        "Level",
        default=0,
        help_text="Numeric grade level used for ordering and promotion paths"
    )
    subjects = models.ManyToManyField(
        'Subject',
        through='ClassSubject',
        related_name='classes',
        blank=True,
        verbose_name="Subjects"
    )

    class Meta:
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        ordering = ['level', 'name', 'section']
        constraints = [
            models.UniqueConstraint(
                fields=['name', 'section'],
                name='unique_class_name_section',
            ),
        ]

    def __str__(self):
        return self.get_display_name()

    def get_display_name(self):
        if self.section:
            return f"{self.name} - {self.section}"
        return self.name


# =============================================================================
# SUBJECT MODEL
# =============================================================================

class Subject(BaseModel):
    """
    Subject with its marks ceilings.

    Full and pass marks are authoritative for every marks entry: recorded
    marks may never exceed the full marks of their stream.
    """

    name = models.CharField("Subject Name", max_length=100)
    subject_code = models.CharField("Subject Code", max_length=20, unique=True)

    theory_marks = models.PositiveIntegerField(
        "Theory Full Marks",
        default=100,
        validators=[MinValueValidator(0)]
    )
    theory_pass_marks = models.PositiveIntegerField(
        "Theory Pass Marks",
        default=40,
        validators=[MinValueValidator(0)]
    )
    practical_marks = models.PositiveIntegerField(
        "Practical Full Marks",
        default=0,
        validators=[MinValueValidator(0)]
    )
    practical_pass_marks = models.PositiveIntegerField(
        "Practical Pass Marks",
        default=0,
        validators=[MinValueValidator(0)]
    )

    class Meta:
        verbose_name = "Subject"
        verbose_name_plural = "Subjects"
        ordering = ['name']

    def __str__(self):
        return f"{self.subject_code} - {self.name}"

    def clean(self):
        super().clean()
        errors = {}

        if self.theory_pass_marks > self.theory_marks:
            errors['theory_pass_marks'] = 'Theory pass marks cannot exceed theory full marks'
        if self.practical_pass_marks > self.practical_marks:
            errors['practical_pass_marks'] = 'Practical pass marks cannot exceed practical full marks'

        if errors:
            raise ValidationError(errors)

    @property
    def full_marks(self):
        return self.theory_marks + self.practical_marks

    @property
    def has_practical(self):
        return self.practical_marks > 0


class ClassSubject(BaseModel):
    """Subject taught to a class"""

    school_class = models.ForeignKey(
        SchoolClass,
        verbose_name="Class",
        on_delete=models.CASCADE,
        related_name="class_subjects"
    )
    subject = models.ForeignKey(
        Subject,
        verbose_name="Subject",
        on_delete=models.CASCADE,
        related_name="class_subjects"
    )

    class Meta:
        verbose_name = "Class Subject"
        verbose_name_plural = "Class Subjects"
        constraints = [
            models.UniqueConstraint(
                fields=['school_class', 'subject'],
                name='unique_class_subject',
            ),
        ]

    def __str__(self):
        return f"{self.subject.name} for {self.school_class}"
