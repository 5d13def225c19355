# students/models.py

from django.db import models
from django.db.models import Q
from django.core.exceptions import ValidationError
from utils.models import BaseModel
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT MODEL
# =============================================================================

class Student(BaseModel):
    """
    Roster entry for a learner.

    school_class is the single source of truth for which class a student is
    in right now; StudentClassHistory records how they got there.
    """

    first_name = models.CharField("First Name", max_length=50)
    middle_name = models.CharField("Middle Name", max_length=50, blank=True)
    last_name = models.CharField("Last Name", max_length=50)

    school_class = models.ForeignKey(
        'academics.SchoolClass',
        verbose_name="Current Class",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='students'
    )
    roll_number = models.PositiveIntegerField(
        "Roll Number",
        null=True,
        blank=True,
        help_text="Position in the class roster, renumbered alphabetically"
    )
    enrollment_year = models.PositiveSmallIntegerField("Enrollment Year", null=True, blank=True)

    is_transferred = models.BooleanField("Is Transferred", default=False)
    transferred_to = models.CharField(
        "Transferred To",
        max_length=200,
        blank=True,
        help_text="Name of the school the student moved to"
    )

    class Meta:
        verbose_name = "Student"
        verbose_name_plural = "Students"
        ordering = ['school_class', 'roll_number', 'first_name', 'last_name']
        indexes = [
            models.Index(fields=['school_class', 'roll_number'], name='student_class_roll_idx'),
        ]

    def __str__(self):
        return self.get_full_name()

    def get_full_name(self):
        """First, middle and last name, skipping empty parts"""
        parts = [self.first_name, self.middle_name, self.last_name]
        return ' '.join(part.strip() for part in parts if part and part.strip())

    @property
    def full_name(self):
        return self.get_full_name()

    def get_active_history(self):
        return self.class_histories.filter(status=StudentClassHistory.STATUS_ACTIVE).first()


# =============================================================================
# CLASS HISTORY MODEL
# =============================================================================

class StudentClassHistory(BaseModel):
    """
    Append-only ledger of a student's class membership.

    Exactly one row per student is active. Closing a row moves it to a
    terminal status (promoted, transferred, graduated); terminal rows are
    never modified again.
    """

    STATUS_ACTIVE = 'active'
    STATUS_PROMOTED = 'promoted'
    STATUS_TRANSFERRED = 'transferred'
    STATUS_GRADUATED = 'graduated'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_PROMOTED, 'Promoted'),
        (STATUS_TRANSFERRED, 'Transferred'),
        (STATUS_GRADUATED, 'Graduated'),
    ]
    TERMINAL_STATUSES = (STATUS_PROMOTED, STATUS_TRANSFERRED, STATUS_GRADUATED)

    student = models.ForeignKey(
        Student,
        verbose_name="Student",
        on_delete=models.CASCADE,
        related_name='class_histories'
    )
    school_class = models.ForeignKey(
        'academics.SchoolClass',
        verbose_name="Class",
        on_delete=models.PROTECT,
        related_name='student_histories'
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        verbose_name="Academic Year",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='student_histories'
    )
    year = models.PositiveSmallIntegerField("Calendar Year")
    roll_number = models.PositiveIntegerField("Roll Number", null=True, blank=True)
    status = models.CharField(
        "Status",
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE,
        db_index=True
    )
    promoted_date = models.DateField("Closed On", null=True, blank=True)
    remarks = models.TextField("Remarks", blank=True)

    class Meta:
        verbose_name = "Student Class History"
        verbose_name_plural = "Student Class Histories"
        ordering = ['-year', '-created_at']
        indexes = [
            models.Index(fields=['school_class', 'academic_year'], name='history_class_year_idx'),
            models.Index(fields=['student', 'status'], name='history_student_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['student'],
                condition=Q(status='active'),
                name='unique_active_class_history',
            ),
        ]

    def __str__(self):
        return f"{self.student.get_full_name()}: {self.school_class} ({self.get_status_display()})"

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    def clean(self):
        super().clean()
        if self._state.adding:
            return

        stored_status = (
            StudentClassHistory.objects.filter(pk=self.pk)
            .values_list('status', flat=True)
            .first()
        )
        if stored_status in self.TERMINAL_STATUSES:
            raise ValidationError(
                f"History record is {stored_status} and can no longer be modified"
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Class history records are never deleted")

    def close(self, status, remarks=None, closed_on=None):
        """
        Move this active row to a terminal status.

        Args:
            status: one of promoted, transferred, graduated
            remarks: replaces the remarks when given
            closed_on: date stored in promoted_date (defaults to today in
                the school timezone)
        """
        from utils.utils import get_school_today

        if status not in self.TERMINAL_STATUSES:
            raise ValidationError({'status': f"'{status}' is not a terminal status"})
        if not self.is_active:
            raise ValidationError(
                f"Only active history records can be closed (this one is {self.status})"
            )

        self.status = status
        self.promoted_date = closed_on or get_school_today()
        if remarks is not None:
            self.remarks = remarks
        self.save()
        logger.debug(f"Closed class history {self.pk} as {status}")
        return self
