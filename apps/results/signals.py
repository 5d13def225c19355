# results/signals.py

"""
Results Signals
Logging of configuration and ledger changes.
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .models import ResultSetting, Term, Result

logger = logging.getLogger(__name__)


@receiver(post_save, sender=ResultSetting)
def log_result_setting_saved(sender, instance, created, **kwargs):
    logger.info(
        f"Result setting {'created' if created else 'updated'}: {instance.pk} "
        f"(type={instance.result_type}, method={instance.calculation_method}, "
        f"per_term={instance.evaluation_per_term})"
    )


@receiver(post_delete, sender=Term)
def log_term_removed(sender, instance, **kwargs):
    logger.info(f"Term removed from setting {instance.result_setting_id}: {instance.name}")


@receiver(post_delete, sender=Result)
def log_result_deleted(sender, instance, **kwargs):
    logger.info(
        f"Result deleted: student={instance.student_id} subject={instance.subject_id} "
        f"term={instance.term_id}"
    )
