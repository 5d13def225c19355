from datetime import date

from academics.models import AcademicYear, SchoolClass, Subject, ClassSubject


def make_year(name='2081', is_current=True, start=date(2024, 4, 13), end=date(2025, 4, 12)):
    return AcademicYear.objects.create(name=name, start_date=start, end_date=end, is_current=is_current)


def make_class(name='Grade 8', section='A', level=8):
    return SchoolClass.objects.create(name=name, section=section, level=level)


def make_subject(code, name=None, theory=100, theory_pass=40, practical=0, practical_pass=0):
    return Subject.objects.create(
        subject_code=code,
        name=name or code.title(),
        theory_marks=theory,
        theory_pass_marks=theory_pass,
        practical_marks=practical,
        practical_pass_marks=practical_pass,
    )


def assign_subjects(school_class, *subjects):
    for subject in subjects:
        ClassSubject.objects.create(school_class=school_class, subject=subject)
    return list(subjects)
