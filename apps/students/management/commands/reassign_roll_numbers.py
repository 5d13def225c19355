# students/management/commands/reassign_roll_numbers.py

"""
Reassign roll numbers alphabetically.

USAGE EXAMPLES:
===============

# 1. Renumber every class
python manage.py reassign_roll_numbers

# 2. Renumber one class
python manage.py reassign_roll_numbers --class-id <uuid>

# 3. Renumber every class of one school database
python manage.py reassign_roll_numbers --database school_abc
"""

from django.core.management.base import BaseCommand, CommandError
from django.core.exceptions import ValidationError
import logging

from schoolhub.managers import DatabaseContext
from academics.models import SchoolClass
from students.utils import reassign_roll_numbers
from utils.context import ActorContext

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Reassign roll numbers for all students in alphabetical order'

    def add_arguments(self, parser):
        parser.add_argument(
            '--class-id', type=str, default=None,
            help='Only renumber this class'
        )
        parser.add_argument(
            '--database', type=str, default=None,
            help='School database to run against'
        )

    def handle(self, *args, **options):
        with DatabaseContext(options['database']), ActorContext(source='command'):
            if options['class_id']:
                try:
                    classes = [SchoolClass.objects.get(pk=options['class_id'])]
                except (SchoolClass.DoesNotExist, ValidationError):
                    raise CommandError(f"Class with ID {options['class_id']} not found")
            else:
                classes = list(SchoolClass.objects.all())

            for school_class in classes:
                roll_numbers = reassign_roll_numbers(school_class)
                self.stdout.write(f"  {school_class}: {len(roll_numbers)} student(s)")

        self.stdout.write(self.style.SUCCESS(f"Roll numbers reassigned for {len(classes)} class(es)"))
