# results/calculations.py
"""
Pure scoring functions.

Bands follow the 4.0 grade-point scale used by the school:

    percentage  grade  gpa
    >= 90       A+     4.0
    >= 80       A      3.6
    >= 70       B+     3.2
    >= 60       B      2.8
    >= 50       C+     2.4
    >= 40       C      2.0
    >= 35       D      1.6
    below       NG     1.6 (floor)

GPA is always derived from the percentage band; there is no
obtained/max x 4 path.
"""

from decimal import Decimal, ROUND_HALF_UP

GPA_BANDS = (
    (90, 4.0),
    (80, 3.6),
    (70, 3.2),
    (60, 2.8),
    (50, 2.4),
    (40, 2.0),
)
GPA_FLOOR = 1.6

GRADE_BANDS = (
    (90, 'A+'),
    (80, 'A'),
    (70, 'B+'),
    (60, 'B'),
    (50, 'C+'),
    (40, 'C'),
    (35, 'D'),
)
NOT_GRADED = 'NG'

GPA_GRADE_BANDS = (
    (4.0, 'A+'),
    (3.6, 'A'),
    (3.2, 'B+'),
    (2.8, 'B'),
    (2.4, 'C+'),
    (2.0, 'C'),
    (1.6, 'D'),
)

DIVISION_BANDS = (
    (80, 'Distinction'),
    (60, 'First Division'),
    (45, 'Second Division'),
    (35, 'Third Division'),
)
FAIL_DIVISION = 'Fail'

REMARK_BANDS = (
    (3.6, 'Outstanding'),
    (3.2, 'Excellent'),
    (2.8, 'Very Good'),
    (2.4, 'Good'),
)
DEFAULT_REMARK = 'Satisfactory'

_CENTS = Decimal('0.01')


def round2(value):
    """Round half up to 2 decimals; None passes through"""
    if value is None:
        return None
    return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def to_decimal(value):
    """2-decimal Decimal for storage in a DecimalField"""
    if value is None:
        return None
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


def percentage(obtained, maximum):
    """obtained/maximum x 100 rounded to 2 decimals; 0 when maximum <= 0"""
    obtained = float(obtained or 0)
    maximum = float(maximum or 0)
    if maximum <= 0:
        return 0.0
    return round2(obtained / maximum * 100)


def _band(value, bands, default):
    for threshold, label in bands:
        if value >= threshold:
            return label
    return default


def gpa_from_percentage(pct):
    return _band(float(pct or 0), GPA_BANDS, GPA_FLOOR)


def grade_from_percentage(pct):
    return _band(float(pct or 0), GRADE_BANDS, NOT_GRADED)


def grade_from_gpa(gpa):
    """Letter grade for a (possibly averaged) GPA, aligned with the percentage bands"""
    return _band(round2(gpa or 0), GPA_GRADE_BANDS, NOT_GRADED)


def division_from_percentage(pct):
    return _band(float(pct or 0), DIVISION_BANDS, FAIL_DIVISION)


def remarks_from_gpa(gpa):
    return _band(float(gpa or 0), REMARK_BANDS, DEFAULT_REMARK)


def is_passed(theory_obtained, theory_pass, practical_obtained, practical_pass):
    """
    Both components must clear their own pass mark independently; a strong
    theory score never offsets a failed practical, or the other way round.
    """
    theory_ok = float(theory_obtained or 0) >= float(theory_pass or 0)
    practical_ok = float(practical_obtained or 0) >= float(practical_pass or 0)
    return theory_ok and practical_ok


def weighted_average(pairs):
    """
    Weighted mean of (value, weight) pairs, divided by the weights present.

    Returns None when no pair carries a positive weight.
    """
    pairs = [(float(value), float(weight or 0)) for value, weight in pairs if value is not None]
    total_weight = sum(weight for _, weight in pairs)
    if total_weight <= 0:
        return None
    return round2(sum(value * weight for value, weight in pairs) / total_weight)


def mean(values):
    values = [float(value) for value in values if value is not None]
    if not values:
        return None
    return round2(sum(values) / len(values))
