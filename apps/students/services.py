# students/services.py
"""
Promotion & class-history services.

Every operation that rewrites class membership runs in one transaction on
the current school database: a failure for any student rolls back the whole
batch, leaving class assignments, roll numbers and history untouched.
"""

from dataclasses import dataclass, field
from django.db import transaction
from django.core.exceptions import ValidationError
import logging

from schoolhub.managers import get_school_db
from academics.utils import resolve_academic_year
from utils.context import get_actor_label
from utils.utils import get_school_today

from .exceptions import PromotionError
from .models import Student, StudentClassHistory
from .utils import reassign_roll_numbers

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger('academic_audit')

NOTHING_TO_DO = 'nothing_to_do'


@dataclass
class PromotionSummary:
    """Outcome of a promotion, graduation, transfer or enrollment call"""

    status: str
    count: int = 0
    student_ids: list = field(default_factory=list)
    from_class_id: object = None
    to_class_id: object = None
    message: str = ''

    @property
    def nothing_to_do(self):
        return self.status == NOTHING_TO_DO


# =============================================================================
# PROMOTION SERVICE
# =============================================================================

class PromotionService:
    """Moves students between classes and keeps StudentClassHistory in step"""

    @staticmethod
    def _close_active_history(student, status, remarks, closed_on):
        active = (
            StudentClassHistory.objects.select_for_update()
            .filter(student=student, status=StudentClassHistory.STATUS_ACTIVE)
            .first()
        )
        if active:
            active.close(status, remarks=remarks, closed_on=closed_on)
        return active

    @staticmethod
    def _open_active_history(student, school_class, academic_year, roll_number, remarks, today):
        return StudentClassHistory.objects.create(
            student=student,
            school_class=school_class,
            academic_year=academic_year,
            year=today.year,
            roll_number=roll_number,
            status=StudentClassHistory.STATUS_ACTIVE,
            remarks=remarks or '',
        )

    @staticmethod
    def _load_students(student_ids):
        student_ids = list(dict.fromkeys(student_ids or []))
        if not student_ids:
            raise ValidationError({'student_ids': 'Select at least one student'})

        students = list(Student.objects.filter(pk__in=student_ids))
        found = {str(student.pk) for student in students}
        missing = [str(pk) for pk in student_ids if str(pk) not in found]
        if missing:
            raise ValidationError({'student_ids': f"Unknown student id(s): {', '.join(missing)}"})
        return students

    # -------------------------------------------------------------------------
    # PROMOTION
    # -------------------------------------------------------------------------

    @staticmethod
    def promote_class(from_class, to_class, student_ids=None, academic_year=None, remarks=None):
        """
        Promote students of one class into another.

        Closes each student's active history row as promoted, moves the
        student, renumbers both classes and opens a new active row carrying
        the renumbered roll number.

        Args:
            from_class (SchoolClass): Class the students are leaving
            to_class (SchoolClass): Destination class
            student_ids (list): Restrict to these students (default: whole class)
            academic_year: AcademicYear or id for the new rows (default: current)
            remarks (str): Stored on both the closed and the new rows

        Returns:
            PromotionSummary: status 'promoted', or 'nothing_to_do' when no
            student of from_class matched

        Raises:
            ValidationError: from_class and to_class are the same
            PromotionError: anything failed inside the batch (rolled back)
        """
        if from_class.pk == to_class.pk:
            raise ValidationError({'to_class': 'Destination class must differ from the source class'})

        academic_year = resolve_academic_year(academic_year)

        queryset = Student.objects.filter(school_class=from_class)
        if student_ids:
            queryset = queryset.filter(pk__in=list(student_ids))

        try:
            with transaction.atomic(using=get_school_db()):
                students = list(queryset.select_for_update().order_by('pk'))
                if not students:
                    logger.info(f"No students to promote from {from_class}")
                    return PromotionSummary(
                        status=NOTHING_TO_DO,
                        from_class_id=from_class.pk,
                        to_class_id=to_class.pk,
                        message='No students found to promote',
                    )

                today = get_school_today()
                for student in students:
                    PromotionService._close_active_history(
                        student,
                        StudentClassHistory.STATUS_PROMOTED,
                        remarks or f"Promoted to {to_class}",
                        today,
                    )
                    student.school_class = to_class
                    student.save(update_fields=['school_class'])

                reassign_roll_numbers(from_class)
                roll_numbers = reassign_roll_numbers(to_class)

                for student in students:
                    PromotionService._open_active_history(
                        student,
                        to_class,
                        academic_year,
                        roll_numbers[student.pk],
                        remarks or f"Promoted from {from_class}",
                        today,
                    )
        except Exception as e:
            logger.error(f"Promotion from {from_class} to {to_class} failed: {e}")
            raise PromotionError(f"Failed to promote students: {e}") from e

        audit_logger.info(
            f"promotion actor={get_actor_label()} from_class={from_class.pk} "
            f"to_class={to_class.pk} count={len(students)}"
        )
        logger.info(f"Promoted {len(students)} student(s) from {from_class} to {to_class}")

        return PromotionSummary(
            status='promoted',
            count=len(students),
            student_ids=[student.pk for student in students],
            from_class_id=from_class.pk,
            to_class_id=to_class.pk,
            message=f"{len(students)} student(s) promoted successfully",
        )

    # -------------------------------------------------------------------------
    # GRADUATION / TRANSFER
    # -------------------------------------------------------------------------

    @staticmethod
    def mark_graduated(student_ids, remarks=None):
        """
        Close the active history rows of the given students as graduated.

        The students keep their current class; only the ledger changes.
        """
        students = PromotionService._load_students(student_ids)

        try:
            with transaction.atomic(using=get_school_db()):
                today = get_school_today()
                closed = []
                for student in students:
                    history = PromotionService._close_active_history(
                        student,
                        StudentClassHistory.STATUS_GRADUATED,
                        remarks or 'Graduated',
                        today,
                    )
                    if history:
                        closed.append(student.pk)
        except Exception as e:
            logger.error(f"Marking students as graduated failed: {e}")
            raise PromotionError(f"Failed to mark students as graduated: {e}") from e

        if not closed:
            return PromotionSummary(status=NOTHING_TO_DO, message='No active history records to close')

        audit_logger.info(f"graduation actor={get_actor_label()} count={len(closed)}")
        return PromotionSummary(
            status='graduated',
            count=len(closed),
            student_ids=closed,
            message=f"{len(closed)} student(s) marked as graduated",
        )

    @staticmethod
    def mark_transferred(student_ids, transferred_to=None, remarks=None):
        """
        Record that students left the school.

        Closes their active rows as transferred, flags the students, takes
        them off their class roster and renumbers the classes they left.
        """
        students = PromotionService._load_students(student_ids)

        try:
            with transaction.atomic(using=get_school_db()):
                today = get_school_today()
                left_classes = {}
                for student in students:
                    PromotionService._close_active_history(
                        student,
                        StudentClassHistory.STATUS_TRANSFERRED,
                        remarks or (f"Transferred to {transferred_to}" if transferred_to else 'Transferred'),
                        today,
                    )
                    if student.school_class_id:
                        left_classes[student.school_class_id] = student.school_class
                    student.is_transferred = True
                    student.transferred_to = transferred_to or ''
                    student.school_class = None
                    student.roll_number = None
                    student.save(update_fields=['is_transferred', 'transferred_to', 'school_class', 'roll_number'])

                for school_class in left_classes.values():
                    reassign_roll_numbers(school_class)
        except Exception as e:
            logger.error(f"Transferring students failed: {e}")
            raise PromotionError(f"Failed to transfer students: {e}") from e

        audit_logger.info(f"transfer actor={get_actor_label()} count={len(students)}")
        return PromotionSummary(
            status='transferred',
            count=len(students),
            student_ids=[student.pk for student in students],
            message=f"{len(students)} student(s) marked as transferred",
        )

    # -------------------------------------------------------------------------
    # ENROLLMENT
    # -------------------------------------------------------------------------

    @staticmethod
    def enroll_student(student, school_class, academic_year=None, remarks=None):
        """
        Put a student into a class and open their active history row.

        A previous active row in another class is closed as transferred.
        """
        academic_year = resolve_academic_year(academic_year)
        previous_class = student.school_class

        try:
            with transaction.atomic(using=get_school_db()):
                active = (
                    StudentClassHistory.objects.select_for_update()
                    .filter(student=student, status=StudentClassHistory.STATUS_ACTIVE)
                    .first()
                )
                if active and active.school_class_id == school_class.pk and student.school_class_id == school_class.pk:
                    return PromotionSummary(
                        status=NOTHING_TO_DO,
                        to_class_id=school_class.pk,
                        message=f"{student.get_full_name()} is already enrolled in {school_class}",
                    )

                today = get_school_today()
                if active:
                    active.close(
                        StudentClassHistory.STATUS_TRANSFERRED,
                        remarks=f"Moved to {school_class}",
                        closed_on=today,
                    )

                student.school_class = school_class
                student.is_transferred = False
                student.transferred_to = ''
                student.save(update_fields=['school_class', 'is_transferred', 'transferred_to'])

                if previous_class and previous_class.pk != school_class.pk:
                    reassign_roll_numbers(previous_class)
                roll_numbers = reassign_roll_numbers(school_class)

                PromotionService._open_active_history(
                    student,
                    school_class,
                    academic_year,
                    roll_numbers[student.pk],
                    remarks or 'Enrolled',
                    today,
                )
        except Exception as e:
            logger.error(f"Enrolling {student} in {school_class} failed: {e}")
            raise PromotionError(f"Failed to enroll student: {e}") from e

        student.refresh_from_db()
        logger.info(f"Enrolled {student.get_full_name()} in {school_class} (roll {student.roll_number})")
        return PromotionSummary(
            status='enrolled',
            count=1,
            student_ids=[student.pk],
            from_class_id=previous_class.pk if previous_class else None,
            to_class_id=school_class.pk,
            message=f"{student.get_full_name()} enrolled in {school_class}",
        )

    @staticmethod
    def backfill_history(academic_year=None):
        """
        Create an initial active history row for every student placed in a
        class who has no history at all.

        Returns:
            int: number of rows created
        """
        academic_year = resolve_academic_year(academic_year)
        students = list(
            Student.objects.filter(school_class__isnull=False, class_histories__isnull=True)
            .select_related('school_class')
            .order_by('pk')
        )
        if not students:
            return 0

        try:
            with transaction.atomic(using=get_school_db()):
                today = get_school_today()
                for student in students:
                    PromotionService._open_active_history(
                        student,
                        student.school_class,
                        academic_year,
                        student.roll_number,
                        'Initial history record (backfilled)',
                        today,
                    )
        except Exception as e:
            logger.error(f"Backfilling class history failed: {e}")
            raise PromotionError(f"Failed to create history records: {e}") from e

        logger.info(f"Backfilled {len(students)} class history record(s)")
        return len(students)

    # -------------------------------------------------------------------------
    # READ HELPERS
    # -------------------------------------------------------------------------

    @staticmethod
    def student_history(student):
        """History rows of one student, newest first"""
        return (
            StudentClassHistory.objects.filter(student=student)
            .select_related('school_class', 'academic_year')
            .order_by('-year', '-created_at')
        )

    @staticmethod
    def class_history(school_class, academic_year=None, status=None):
        """Everyone who was in a class, optionally for one year and/or status"""
        valid_statuses = dict(StudentClassHistory.STATUS_CHOICES)
        if status is not None and status not in valid_statuses:
            raise ValidationError({'status': f"Unknown status '{status}'"})

        queryset = StudentClassHistory.objects.filter(school_class=school_class)
        if academic_year is not None:
            queryset = queryset.filter(academic_year=academic_year)
        if status is not None:
            queryset = queryset.filter(status=status)
        return queryset.select_related('student', 'academic_year').order_by('roll_number', 'created_at')
