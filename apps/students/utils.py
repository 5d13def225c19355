# students/utils.py

from django.db import transaction
from schoolhub.managers import get_school_db
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# ROLL NUMBER UTILITIES
# =============================================================================

def roster_sort_key(student):
    """Alphabetical, case-insensitive full name; id breaks ties"""
    return (student.get_full_name().casefold(), str(student.pk))


def reassign_roll_numbers(school_class):
    """
    Renumber a class roster 1..N in alphabetical full-name order.

    The class's active history rows are updated to the new roll numbers as
    well, so the ledger matches the roster.

    Args:
        school_class (SchoolClass): Class to renumber

    Returns:
        dict: {student_id: roll_number}
    """
    from .models import Student, StudentClassHistory

    with transaction.atomic(using=get_school_db()):
        students = sorted(
            Student.objects.select_for_update().filter(school_class=school_class),
            key=roster_sort_key
        )

        roll_numbers = {}
        for position, student in enumerate(students, start=1):
            if student.roll_number != position:
                student.roll_number = position
                student.save(update_fields=['roll_number'])
            roll_numbers[student.pk] = position

        active_rows = StudentClassHistory.objects.filter(
            school_class=school_class,
            status=StudentClassHistory.STATUS_ACTIVE,
            student_id__in=roll_numbers.keys(),
        )
        for history in active_rows:
            new_roll = roll_numbers[history.student_id]
            if history.roll_number != new_roll:
                history.roll_number = new_roll
                history.save(update_fields=['roll_number'])

    logger.debug(f"Reassigned {len(roll_numbers)} roll numbers in {school_class}")
    return roll_numbers


def is_roster_contiguous(school_class):
    """True when the class roll numbers are exactly 1..N"""
    from .models import Student

    rolls = sorted(
        Student.objects.filter(school_class=school_class).values_list('roll_number', flat=True),
        key=lambda roll: -1 if roll is None else roll
    )
    return rolls == list(range(1, len(rolls) + 1))
