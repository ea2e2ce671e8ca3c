"""Sample record types shared by the test suite."""

from __future__ import annotations

import datetime
from enum import Enum

from recordspine.metadata import (
    Column,
    ConflictAction,
    ForeignKeyAction,
    Model,
    table,
)


class Grade(Enum):
    FRESHMAN = 1
    SOPHOMORE = 2
    JUNIOR = 3
    SENIOR = 4


@table(name="School")
class School(Model):
    name = Column(str, not_null=True, unique=True, on_unique_conflict=ConflictAction.IGNORE)
    city = Column(str, index_groups=["location"])
    country = Column(str, index_groups=["location"])


@table(name="Student")
class Student(Model):
    name = Column(str, not_null=True, unique=True, on_unique_conflict=ConflictAction.IGNORE)
    age = Column(int, index=True)
    active = Column(bool)
    grade = Column(Grade)
    enrolled = Column(datetime.date)
    school = Column(School, on_delete=ForeignKeyAction.CASCADE)


class Note(Model):
    """No ``@table``: table ``Note``, key column ``Id``."""

    body = Column(str)
    score = Column(float)
    payload = Column(bytes)


@table(name="Courses", id="CourseId")
class Course(Model):
    code = Column(str, name="CourseCode", length=8, unique_groups=["term_code"])
    term = Column(int, unique_groups=["term_code"], on_unique_conflicts=[ConflictAction.REPLACE])


class Person(Model):
    __abstract__ = True

    first_name = Column(str)
    last_name = Column(str)


@table(name="Teacher")
class Teacher(Person):
    subject = Column(str)


ALL_RECORDS = [School, Student, Note, Course, Teacher]
