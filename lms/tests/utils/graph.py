"""
Seed helpers: a small, fully known course graph in the in-memory repo.

Layout:
    Course "Algebra" (teacher T, students S and S2 enrolled)
        Module "Basics": activities A (S: completed), B (S: pending), C (S: approved)
        Module "Empty":  no activities
    Course "Biology" (student OTHER enrolled only)
        Module "Cells": activity D
"""
from __future__ import annotations

from dataclasses import dataclass

from lms.learning.models import Activity, Course, FeedbackStatus, Module
from lms.learning.repo_memory import InMemoryLearningRepo


@dataclass
class Graph:
    repo: InMemoryLearningRepo
    algebra: Course
    biology: Course
    basics: Module
    empty: Module
    cells: Module
    a: Activity
    b: Activity
    c: Activity
    d: Activity


TEACHER = "teacher-1"
STUDENT = "student-1"
STUDENT_2 = "student-2"
OTHER = "student-other"


def build_graph() -> Graph:
    repo = InMemoryLearningRepo()
    repo.add_user(TEACHER, first_name="Tina", last_name="Teach", role="teacher")
    repo.add_user(STUDENT, first_name="Sam", last_name="Student", email="sam@example.org")
    repo.add_user(STUDENT_2, first_name="Ana", last_name="Second")
    repo.add_user(OTHER, first_name="Olle", last_name="Other")

    assignment = repo.add_activity_type("Assignment")
    lecture = repo.add_activity_type("Lecture")

    algebra = repo.add_course("Algebra", description="Numbers and letters")
    biology = repo.add_course("Biology")
    basics = repo.add_module(algebra.id, "Basics")
    empty = repo.add_module(algebra.id, "Empty")
    cells = repo.add_module(biology.id, "Cells")

    a = repo.add_activity(basics.id, "A", activity_type_id=assignment.id)
    b = repo.add_activity(basics.id, "B", activity_type_id=lecture.id)
    c = repo.add_activity(basics.id, "C", activity_type_id=assignment.id)
    d = repo.add_activity(cells.id, "D", activity_type_id=assignment.id)

    repo.enroll(TEACHER, algebra.id)
    repo.enroll(STUDENT, algebra.id)
    repo.enroll(STUDENT_2, algebra.id)
    repo.enroll(OTHER, biology.id)

    repo.set_feedback(STUDENT, a.id, FeedbackStatus.COMPLETED, "well done")
    repo.set_feedback(STUDENT, b.id, FeedbackStatus.PENDING)
    repo.set_feedback(STUDENT, c.id, "Godkänd")
    repo.set_feedback(STUDENT_2, a.id, FeedbackStatus.APPROVED)
    repo.set_feedback(OTHER, d.id, FeedbackStatus.COMPLETED)

    repo.add_document("syllabus.pdf", "/docs/syllabus.pdf", course_id=algebra.id)
    repo.add_document("basics.md", "/docs/basics.md", module_id=basics.id)
    repo.add_document("a.txt", "/docs/a.txt", activity_id=a.id)

    return Graph(repo=repo, algebra=algebra, biology=biology, basics=basics, empty=empty, cells=cells, a=a, b=b, c=c, d=d)
