# apps/results/migrations/0001_initial.py

from django.db import migrations, models
import django.db.models.deletion
from django.core.validators import MinValueValidator, MaxValueValidator
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0001_initial'),
        ('students', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ResultSetting',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was created (in school's operational timezone)", verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was last updated (in school's operational timezone)", verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('total_terms', models.PositiveSmallIntegerField(default=3, validators=[MinValueValidator(1), MaxValueValidator(12)], verbose_name='Total Terms')),
                ('result_type', models.CharField(choices=[('gpa', 'GPA'), ('percentage', 'Percentage')], default='gpa', max_length=20, verbose_name='Result Type')),
                ('calculation_method', models.CharField(choices=[('simple', 'Simple'), ('weighted', 'Weighted')], default='simple', max_length=20, verbose_name='Calculation Method')),
                ('evaluation_per_term', models.BooleanField(default=False, verbose_name='Evaluate Practical/Activities Every Term')),
                ('academic_year', models.OneToOneField(blank=True, help_text='Leave empty for the school-wide setting', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='result_setting', to='academics.academicyear', verbose_name='Academic Year')),
            ],
            options={
                'verbose_name': 'Result Setting',
                'verbose_name_plural': 'Result Settings',
            },
        ),
        migrations.CreateModel(
            name='Term',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was created (in school's operational timezone)", verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was last updated (in school's operational timezone)", verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('name', models.CharField(max_length=100, verbose_name='Term Name')),
                ('sequence', models.PositiveSmallIntegerField(help_text='Creation order inside the setting', verbose_name='Sequence')),
                ('weight', models.PositiveSmallIntegerField(blank=True, null=True, validators=[MaxValueValidator(100)], verbose_name='Weight (%)')),
                ('exam_date', models.DateField(blank=True, null=True, verbose_name='Exam Date')),
                ('publish_date', models.DateField(blank=True, null=True, verbose_name='Publish Date')),
                ('start_date', models.DateField(blank=True, null=True, verbose_name='Start Date')),
                ('end_date', models.DateField(blank=True, null=True, verbose_name='End Date')),
                ('academic_year', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='terms', to='academics.academicyear', verbose_name='Academic Year')),
                ('result_setting', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='terms', to='results.resultsetting', verbose_name='Result Setting')),
            ],
            options={
                'verbose_name': 'Term',
                'verbose_name_plural': 'Terms',
                'ordering': ['result_setting', 'sequence'],
                'constraints': [models.UniqueConstraint(fields=('result_setting', 'sequence'), name='unique_term_sequence')],
            },
        ),
        migrations.CreateModel(
            name='ExtraCurricularActivity',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was created (in school's operational timezone)", verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was last updated (in school's operational timezone)", verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('activity_name', models.CharField(max_length=100, verbose_name='Activity')),
                ('full_marks', models.PositiveIntegerField(verbose_name='Full Marks')),
                ('pass_marks', models.PositiveIntegerField(default=0, verbose_name='Pass Marks')),
                ('school_class', models.ForeignKey(blank=True, help_text='Leave empty to apply to every class taking the subject', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='activities', to='academics.schoolclass', verbose_name='Class')),
                ('subject', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activities', to='academics.subject', verbose_name='Subject')),
            ],
            options={
                'verbose_name': 'Extra-curricular Activity',
                'verbose_name_plural': 'Extra-curricular Activities',
                'ordering': ['subject', 'activity_name'],
            },
        ),
        migrations.CreateModel(
            name='Result',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was created (in school's operational timezone)", verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was last updated (in school's operational timezone)", verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('marks_theory', models.DecimalField(decimal_places=2, default=0, max_digits=7, validators=[MinValueValidator(0)], verbose_name='Theory Marks')),
                ('marks_practical', models.DecimalField(decimal_places=2, default=0, max_digits=7, validators=[MinValueValidator(0)], verbose_name='Practical Marks')),
                ('gpa', models.DecimalField(decimal_places=2, default=0, max_digits=3, verbose_name='GPA')),
                ('percentage', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True, verbose_name='Percentage')),
                ('exam_type', models.CharField(blank=True, max_length=100, verbose_name='Exam Type')),
                ('exam_date', models.DateField(blank=True, null=True, verbose_name='Exam Date')),
                ('remarks', models.TextField(blank=True, verbose_name='Remarks')),
                ('academic_year', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='results', to='academics.academicyear', verbose_name='Academic Year')),
                ('school_class', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='results', to='academics.schoolclass', verbose_name='Class')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='students.student', verbose_name='Student')),
                ('subject', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='results', to='academics.subject', verbose_name='Subject')),
                ('term', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='results', to='results.term', verbose_name='Term')),
            ],
            options={
                'verbose_name': 'Result',
                'verbose_name_plural': 'Results',
                'indexes': [models.Index(fields=['school_class', 'academic_year'], name='result_class_year_idx'), models.Index(fields=['student', 'academic_year'], name='result_student_year_idx')],
                'constraints': [models.UniqueConstraint(fields=('student', 'subject', 'term', 'academic_year'), name='unique_result_per_term')],
            },
        ),
        migrations.CreateModel(
            name='ResultActivity',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was created (in school's operational timezone)", verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was last updated (in school's operational timezone)", verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('marks', models.DecimalField(decimal_places=2, max_digits=7, validators=[MinValueValidator(0)], verbose_name='Marks')),
                ('activity', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='result_marks', to='results.extracurricularactivity', verbose_name='Activity')),
                ('result', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activities', to='results.result', verbose_name='Result')),
            ],
            options={
                'verbose_name': 'Result Activity',
                'verbose_name_plural': 'Result Activities',
                'constraints': [models.UniqueConstraint(fields=('result', 'activity'), name='unique_result_activity')],
            },
        ),
        migrations.CreateModel(
            name='FinalResult',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was created (in school's operational timezone)", verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, editable=False, help_text="When this record was last updated (in school's operational timezone)", verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('final_theory_marks', models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True, verbose_name='Final Theory Marks')),
                ('final_practical_marks', models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True, verbose_name='Final Practical Marks')),
                ('final_percentage', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True, verbose_name='Final Percentage')),
                ('final_gpa', models.DecimalField(blank=True, decimal_places=2, max_digits=3, null=True, verbose_name='Final GPA')),
                ('final_grade', models.CharField(blank=True, max_length=5, verbose_name='Final Grade')),
                ('final_division', models.CharField(blank=True, max_length=30, verbose_name='Final Division')),
                ('is_passed', models.BooleanField(default=False, verbose_name='Passed')),
                ('result_type', models.CharField(choices=[('gpa', 'GPA'), ('percentage', 'Percentage')], max_length=20, verbose_name='Result Type')),
                ('calculation_method', models.CharField(choices=[('simple', 'Simple'), ('weighted', 'Weighted')], max_length=20, verbose_name='Calculation Method')),
                ('rank', models.PositiveIntegerField(blank=True, null=True, verbose_name='Rank')),
                ('remarks', models.CharField(blank=True, max_length=255, verbose_name='Remarks')),
                ('term_breakdown', models.JSONField(blank=True, default=dict, verbose_name='Term Breakdown')),
                ('academic_year', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='final_results', to='academics.academicyear', verbose_name='Academic Year')),
                ('school_class', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='final_results', to='academics.schoolclass', verbose_name='Class')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='final_results', to='students.student', verbose_name='Student')),
                ('subject', models.ForeignKey(blank=True, help_text='Empty for the overall result', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='final_results', to='academics.subject', verbose_name='Subject')),
            ],
            options={
                'verbose_name': 'Final Result',
                'verbose_name_plural': 'Final Results',
                'ordering': ['school_class', 'rank'],
                'indexes': [models.Index(fields=['school_class', 'academic_year'], name='final_result_class_year_idx')],
                'constraints': [models.UniqueConstraint(fields=('student', 'school_class', 'academic_year', 'subject'), name='unique_final_result_subject'), models.UniqueConstraint(condition=models.Q(('subject__isnull', True)), fields=('student', 'school_class', 'academic_year'), name='unique_final_result_overall')],
            },
        ),
    ]
