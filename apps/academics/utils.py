# academics/utils.py
"""
Helpers for resolving the academic context of an operation
"""

import logging

logger = logging.getLogger(__name__)


def get_current_academic_year():
    """
    Get the current academic year.

    Returns:
        AcademicYear or None
    """
    from .models import AcademicYear

    return AcademicYear.get_current()


def resolve_academic_year(academic_year=None):
    """
    Return the given academic year, falling back to the current one.

    Accepts an AcademicYear instance, a primary key, or None.
    """
    from .models import AcademicYear

    if academic_year is None:
        return get_current_academic_year()
    if isinstance(academic_year, AcademicYear):
        return academic_year
    return AcademicYear.objects.get(pk=academic_year)


def get_class_subjects(school_class):
    """Subjects taught to a class, in a stable order"""
    from .models import Subject

    return Subject.objects.filter(
        class_subjects__school_class=school_class
    ).order_by('name', 'subject_code')
