# apps/students/migrations/0001_initial.py

from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was created (in school's operational timezone)", verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was last updated (in school's operational timezone)", verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('first_name', models.CharField(max_length=50, verbose_name='First Name')),
                ('middle_name', models.CharField(blank=True, max_length=50, verbose_name='Middle Name')),
                ('last_name', models.CharField(max_length=50, verbose_name='Last Name')),
                ('roll_number', models.PositiveIntegerField(blank=True, help_text='Position in the class roster, renumbered alphabetically', null=True, verbose_name='Roll Number')),
                ('enrollment_year', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='Enrollment Year')),
                ('is_transferred', models.BooleanField(default=False, verbose_name='Is Transferred')),
                ('transferred_to', models.CharField(blank=True, help_text='Name of the school the student moved to', max_length=200, verbose_name='Transferred To')),
                ('school_class', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='students', to='academics.schoolclass', verbose_name='Current Class')),
            ],
            options={
                'verbose_name': 'Student',
                'verbose_name_plural': 'Students',
                'ordering': ['school_class', 'roll_number', 'first_name', 'last_name'],
                'indexes': [models.Index(fields=['school_class', 'roll_number'], name='student_class_roll_idx')],
            },
        ),
        migrations.CreateModel(
            name='StudentClassHistory',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was created (in school's operational timezone)", verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was last updated (in school's operational timezone)", verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('year', models.PositiveSmallIntegerField(verbose_name='Calendar Year')),
                ('roll_number', models.PositiveIntegerField(blank=True, null=True, verbose_name='Roll Number')),
                ('status', models.CharField(choices=[('active', 'Active'), ('promoted', 'Promoted'), ('transferred', 'Transferred'), ('graduated', 'Graduated')], db_index=True, default='active', max_length=20, verbose_name='Status')),
                ('promoted_date', models.DateField(blank=True, null=True, verbose_name='Closed On')),
                ('remarks', models.TextField(blank=True, verbose_name='Remarks')),
                ('academic_year', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='student_histories', to='academics.academicyear', verbose_name='Academic Year')),
                ('school_class', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='student_histories', to='academics.schoolclass', verbose_name='Class')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='class_histories', to='students.student', verbose_name='Student')),
            ],
            options={
                'verbose_name': 'Student Class History',
                'verbose_name_plural': 'Student Class Histories',
                'ordering': ['-year', '-created_at'],
                'indexes': [models.Index(fields=['school_class', 'academic_year'], name='history_class_year_idx'), models.Index(fields=['student', 'status'], name='history_student_status_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('status', 'active')), fields=('student',), name='unique_active_class_history')],
            },
        ),
    ]
