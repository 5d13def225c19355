# results/aggregation.py
"""
Combine a student's per-term ledger rows into year-level scores.

Subject level (aggregate_subject):
    simple    sum eligible obtained and max marks over every term, score once
    weighted  score each term, blend by term weight, divide by the weights
              of the terms actually recorded

Overall level (aggregate_overall) works on term averages: per term, the
mean of the student's subject scores that term, then the same blend across
terms. Practical and activity marks only count in terms where the policy
allows them.
"""

from dataclasses import dataclass, field
import logging

from .calculations import (
    percentage,
    gpa_from_percentage,
    weighted_average,
    mean,
    round2,
)
from .models import Result

logger = logging.getLogger(__name__)


@dataclass
class TermScore:
    """Eligible marks and single-term score of one ledger row"""

    term_id: object
    term_name: str
    sequence: int
    weight: int
    theory: float
    practical: float
    activities: float
    obtained: float
    maximum: float
    percentage: float
    gpa: float
    practical_included: bool

    def as_dict(self):
        return {
            'term_id': str(self.term_id),
            'term': self.term_name,
            'sequence': self.sequence,
            'weight': self.weight,
            'theory': self.theory,
            'practical': self.practical,
            'activities': self.activities,
            'obtained': self.obtained,
            'maximum': self.maximum,
            'percentage': self.percentage,
            'gpa': self.gpa,
            'practical_included': self.practical_included,
        }


@dataclass
class SubjectAggregate:
    subject_id: object
    percentage: float
    gpa: float
    final_theory_marks: float
    final_practical_marks: object
    raw_obtained: float
    raw_maximum: float
    terms: list = field(default_factory=list)

    @property
    def practical_evaluated(self):
        return self.final_practical_marks is not None

    def breakdown(self, method):
        return {
            'method': str(method),
            'terms': [term.as_dict() for term in self.terms],
            'raw_obtained': self.raw_obtained,
            'raw_maximum': self.raw_maximum,
        }


@dataclass
class OverallAggregate:
    percentage: float
    gpa: float
    terms: list = field(default_factory=list)

    def breakdown(self, method):
        return {
            'method': str(method),
            'percentage': self.percentage,
            'gpa': self.gpa,
            'terms': self.terms,
        }


# =============================================================================
# LEDGER ACCESS
# =============================================================================

def load_rows(school_class, academic_year, student=None, subject=None):
    """Ledger rows for a class/year with everything scoring needs preloaded"""
    queryset = Result.objects.filter(school_class=school_class, academic_year=academic_year)
    if student is not None:
        queryset = queryset.filter(student=student)
    if subject is not None:
        queryset = queryset.filter(subject=subject)
    return list(
        queryset.select_related('term', 'subject')
        .prefetch_related('activities__activity')
        .order_by('term__sequence')
    )


def score_row(row, policy):
    """
    Score one ledger row under the policy.

    Returns None when the row's term is not part of the policy.
    """
    term = policy.get_term(row.term_id)
    if term is None:
        logger.debug(f"Ignoring result {row.pk}: term {row.term_id} is not part of the active setting")
        return None

    subject = row.subject
    theory = float(row.marks_theory or 0)
    obtained = theory
    maximum = float(subject.theory_marks)

    included = policy.can_include_practical_or_activities(term)
    practical = float(row.marks_practical or 0) if included else 0.0
    activity_marks = 0.0
    if included:
        obtained += practical
        maximum += float(subject.practical_marks)
        for result_activity in row.activities.all():
            activity_marks += float(result_activity.marks)
            maximum += float(result_activity.activity.full_marks)
        obtained += activity_marks

    pct = percentage(obtained, maximum)
    return TermScore(
        term_id=term.pk,
        term_name=term.name,
        sequence=term.sequence,
        weight=policy.weight_for(term),
        theory=round2(theory),
        practical=round2(practical),
        activities=round2(activity_marks),
        obtained=round2(obtained),
        maximum=round2(maximum),
        percentage=pct,
        gpa=gpa_from_percentage(pct),
        practical_included=included,
    )


# =============================================================================
# SUBJECT LEVEL
# =============================================================================

def aggregate_subject(student, subject, school_class, academic_year, policy, rows=None):
    """
    Year-level score of one subject for one student.

    Args:
        rows: this student's ledger rows for the subject, when the caller
            has already loaded them

    Returns:
        SubjectAggregate, or None when nothing usable is recorded (the
        caller skips the subject rather than writing a zero)
    """
    if rows is None:
        rows = load_rows(school_class, academic_year, student=student, subject=subject)

    scores = [score for score in (score_row(row, policy) for row in rows) if score is not None]
    if not scores:
        return None
    scores.sort(key=lambda score: score.sequence)

    raw_obtained = round2(sum(score.obtained for score in scores))
    raw_maximum = round2(sum(score.maximum for score in scores))
    practical_scores = [score for score in scores if score.practical_included]

    if policy.is_weighted:
        pct = weighted_average((score.percentage, score.weight) for score in scores)
        if pct is None:
            logger.debug(f"No weighted term recorded for {subject} / student {student.pk}")
            return None
        gpa = weighted_average((score.gpa, score.weight) for score in scores)
        theory = weighted_average((score.theory, score.weight) for score in scores)
        practical = weighted_average((score.practical, score.weight) for score in practical_scores)
    else:
        pct = percentage(raw_obtained, raw_maximum)
        gpa = gpa_from_percentage(pct)
        theory = mean(score.theory for score in scores)
        practical = mean(score.practical for score in practical_scores)

    return SubjectAggregate(
        subject_id=subject.pk,
        percentage=pct,
        gpa=gpa,
        final_theory_marks=theory,
        final_practical_marks=practical,
        raw_obtained=raw_obtained,
        raw_maximum=raw_maximum,
        terms=scores,
    )


# =============================================================================
# OVERALL LEVEL
# =============================================================================

def term_breakdown(scores):
    """
    Per-term averages across subjects.

    Args:
        scores: TermScore objects of one student, any subjects

    Returns:
        list of dicts ordered by term sequence
    """
    by_term = {}
    for score in scores:
        by_term.setdefault(score.term_id, []).append(score)

    breakdown = []
    for term_scores in sorted(by_term.values(), key=lambda items: items[0].sequence):
        first = term_scores[0]
        breakdown.append({
            'term_id': str(first.term_id),
            'term': first.term_name,
            'sequence': first.sequence,
            'weight': first.weight,
            'subjects': len(term_scores),
            'average_percentage': mean(score.percentage for score in term_scores),
            'average_gpa': mean(score.gpa for score in term_scores),
        })
    return breakdown


def aggregate_overall(student, school_class, academic_year, policy, rows=None):
    """
    Term-level overall score: average each term across subjects, then blend
    the term averages (weighted) or take their plain mean (simple).

    Returns:
        OverallAggregate, or None when the student has no usable rows
    """
    if rows is None:
        rows = load_rows(school_class, academic_year, student=student)

    scores = [score for score in (score_row(row, policy) for row in rows) if score is not None]
    if not scores:
        return None

    terms = term_breakdown(scores)
    if policy.is_weighted:
        pct = weighted_average((term['average_percentage'], term['weight']) for term in terms)
        gpa = weighted_average((term['average_gpa'], term['weight']) for term in terms)
        if pct is None:
            return None
    else:
        pct = mean(term['average_percentage'] for term in terms)
        gpa = mean(term['average_gpa'] for term in terms)

    return OverallAggregate(percentage=pct, gpa=gpa, terms=terms)
