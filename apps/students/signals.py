# students/signals.py

"""
Students Signals
Logging of roster and class-history changes.
"""

from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

from .models import Student, StudentClassHistory

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Student)
def log_student_creation(sender, instance, created, **kwargs):
    if created:
        logger.info(
            f"New student created: {instance.get_full_name()} "
            f"(class: {instance.school_class or 'unassigned'})"
        )


@receiver(post_save, sender=StudentClassHistory)
def log_history_change(sender, instance, created, **kwargs):
    if created:
        logger.debug(
            f"Opened {instance.status} history for {instance.student_id} "
            f"in class {instance.school_class_id}"
        )
    elif instance.status in StudentClassHistory.TERMINAL_STATUSES:
        logger.info(
            f"History {instance.pk} for student {instance.student_id} closed as {instance.status}"
        )
