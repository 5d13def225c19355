# students/management/commands/backfill_student_history.py

"""
Create initial class-history rows for students that have none.

USAGE EXAMPLES:
===============

# 1. Backfill against the current academic year
python manage.py backfill_student_history

# 2. Backfill against a specific academic year
python manage.py backfill_student_history --academic-year-id <uuid>
"""

from django.core.management.base import BaseCommand, CommandError
from django.core.exceptions import ValidationError
import logging

from schoolhub.managers import DatabaseContext
from academics.models import AcademicYear
from students.exceptions import PromotionError
from students.services import PromotionService
from utils.context import ActorContext

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Create initial history records for existing students'

    def add_arguments(self, parser):
        parser.add_argument(
            '--academic-year-id', type=str, default=None,
            help='Academic year for the new rows (default: current year)'
        )
        parser.add_argument(
            '--database', type=str, default=None,
            help='School database to run against'
        )

    def handle(self, *args, **options):
        with DatabaseContext(options['database']), ActorContext(source='command'):
            if options['academic_year_id']:
                try:
                    academic_year = AcademicYear.objects.get(pk=options['academic_year_id'])
                except (AcademicYear.DoesNotExist, ValidationError):
                    raise CommandError(f"Academic year {options['academic_year_id']} not found")
            else:
                academic_year = AcademicYear.get_current()
                if academic_year is None:
                    self.stdout.write(self.style.WARNING('No current academic year set; rows will have none'))

            try:
                created = PromotionService.backfill_history(academic_year)
            except PromotionError as e:
                raise CommandError(str(e))

        if created:
            self.stdout.write(self.style.SUCCESS(f"Created {created} history record(s)"))
        else:
            self.stdout.write('All students already have history records')
