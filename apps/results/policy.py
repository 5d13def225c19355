# results/policy.py
"""
Scoring policy decision table.

    calculation_method  how terms combine
    simple              sum marks over all terms, score once
    weighted            score each term, blend by term weight

    evaluation_per_term  practical + activities eligible in
    True                 every term
    False                the last term only (highest sequence)

ScoringPolicy is built once from a ResultSetting and handed to the ledger,
the aggregator and the generator so each branch reads from one place.
"""

from dataclasses import dataclass

from .models import ResultType, CalculationMethod


def _term_id(term):
    return getattr(term, 'pk', term)


@dataclass(frozen=True)
class ScoringPolicy:
    setting_id: object
    result_type: str
    calculation_method: str
    evaluation_per_term: bool
    terms: tuple
    academic_year_id: object = None

    @classmethod
    def from_setting(cls, setting):
        return cls(
            setting_id=setting.pk,
            result_type=ResultType(setting.result_type),
            calculation_method=CalculationMethod(setting.calculation_method),
            evaluation_per_term=bool(setting.evaluation_per_term),
            terms=tuple(setting.terms.order_by('sequence')),
            academic_year_id=setting.academic_year_id,
        )

    @property
    def is_weighted(self):
        return self.calculation_method == CalculationMethod.WEIGHTED

    @property
    def primary_metric(self):
        """'gpa' or 'percentage': the metric results are ranked and graded by"""
        return 'percentage' if self.result_type == ResultType.PERCENTAGE else 'gpa'

    @property
    def secondary_metric(self):
        return 'gpa' if self.primary_metric == 'percentage' else 'percentage'

    @property
    def last_term(self):
        return self.terms[-1] if self.terms else None

    def has_term(self, term):
        term_id = _term_id(term)
        return any(t.pk == term_id for t in self.terms)

    def get_term(self, term):
        term_id = _term_id(term)
        for t in self.terms:
            if t.pk == term_id:
                return t
        return None

    def is_last_term(self, term):
        last = self.last_term
        return last is not None and last.pk == _term_id(term)

    def can_include_practical_or_activities(self, term):
        if self.evaluation_per_term:
            return self.has_term(term)
        return self.is_last_term(term)

    def weight_for(self, term):
        """Configured weight of a term; 0 for unweighted policies or null weights"""
        if not self.is_weighted:
            return 0
        found = self.get_term(term)
        if found is None or found.weight is None:
            return 0
        return found.weight
