# results/management/commands/generate_final_results.py

"""
Generate final results for a class and academic year.

USAGE EXAMPLES:
===============

# 1. Regenerate from the recorded marks
python manage.py generate_final_results --class-id <uuid> --academic-year-id <uuid>

# 2. Fabricate demo results between 80% and 100%
python manage.py generate_final_results --class-id <uuid> --academic-year-id <uuid> \
    --min-marks 80 --max-marks 100 --seed 7

# 3. Run against one school database
python manage.py generate_final_results --class-id <uuid> --academic-year-id <uuid> --database school_abc
"""

from django.core.management.base import BaseCommand, CommandError
from django.core.exceptions import ValidationError
import logging

from schoolhub.managers import DatabaseContext
from academics.models import AcademicYear, SchoolClass
from results.exceptions import ResultEngineError
from results.services import FinalResultService
from utils.context import ActorContext

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Generate final results (subject and overall rows, ranks) for a class'

    def add_arguments(self, parser):
        parser.add_argument('--class-id', type=str, required=True, help='Class to generate results for')
        parser.add_argument('--academic-year-id', type=str, required=True, help='Academic year')
        parser.add_argument(
            '--min-marks', type=float, default=None,
            help='Synthetic mode: lowest percentage to fabricate'
        )
        parser.add_argument(
            '--max-marks', type=float, default=None,
            help='Synthetic mode: highest percentage to fabricate'
        )
        parser.add_argument('--seed', type=int, default=None, help='Synthetic mode: random seed')
        parser.add_argument('--database', type=str, default=None, help='School database to run against')

    def handle(self, *args, **options):
        synthetic = options['min_marks'] is not None or options['max_marks'] is not None
        if synthetic and (options['min_marks'] is None or options['max_marks'] is None):
            raise CommandError('--min-marks and --max-marks must be given together')

        with DatabaseContext(options['database']), ActorContext(source='command'):
            try:
                school_class = SchoolClass.objects.get(pk=options['class_id'])
                academic_year = AcademicYear.objects.get(pk=options['academic_year_id'])
            except (SchoolClass.DoesNotExist, AcademicYear.DoesNotExist, ValidationError) as e:
                raise CommandError(f"Class or academic year not found: {e}")

            try:
                if synthetic:
                    summary = FinalResultService.generate_synthetic_final_results(
                        school_class, academic_year,
                        options['min_marks'], options['max_marks'],
                        seed=options['seed'],
                    )
                else:
                    summary = FinalResultService.generate_final_results(school_class, academic_year)
            except (ResultEngineError, ValidationError) as e:
                raise CommandError(str(e))

        if summary.nothing_to_do:
            self.stdout.write(self.style.WARNING(summary.message))
            return

        self.stdout.write(self.style.SUCCESS(summary.message))
        self.stdout.write(
            f"  subject rows: {summary.subject_rows}, overall rows: {summary.overall_rows}, "
            f"students without marks: {len(summary.skipped_students)}"
        )
