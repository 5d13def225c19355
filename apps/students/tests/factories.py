from students.models import Student


def make_student(first_name, last_name='Sharma', school_class=None, middle_name='', roll_number=None):
    return Student.objects.create(
        first_name=first_name,
        middle_name=middle_name,
        last_name=last_name,
        school_class=school_class,
        roll_number=roll_number,
    )
