"""Use case layer for the Learning read side.

Re-export common use cases for convenient imports in tests.
"""

from .activities import (
    GetActivityInput,
    GetActivityUseCase,
    GetParticipantFeedbackInput,
    GetParticipantFeedbackUseCase,
    ListActivitiesInput,
    ListActivitiesUseCase,
    ListActivityTypesInput,
    ListActivityTypesUseCase,
)
from .courses import (
    GetCourseInput,
    GetCourseUseCase,
    ListCoursesInput,
    ListCoursesUseCase,
    ListParticipantsInput,
    ListParticipantsUseCase,
)
from .documents import GetDocumentInput, GetDocumentUseCase, ListDocumentsInput, ListDocumentsUseCase
from .modules import GetModuleInput, GetModuleUseCase, ListModulesInput, ListModulesUseCase
from .users import GetUserInput, GetUserUseCase, ListUsersInput, ListUsersUseCase

__all__ = [
    "GetActivityInput",
    "GetActivityUseCase",
    "GetCourseInput",
    "GetCourseUseCase",
    "GetDocumentInput",
    "GetDocumentUseCase",
    "GetModuleInput",
    "GetModuleUseCase",
    "GetParticipantFeedbackInput",
    "GetParticipantFeedbackUseCase",
    "GetUserInput",
    "GetUserUseCase",
    "ListActivitiesInput",
    "ListActivitiesUseCase",
    "ListActivityTypesInput",
    "ListActivityTypesUseCase",
    "ListCoursesInput",
    "ListCoursesUseCase",
    "ListDocumentsInput",
    "ListDocumentsUseCase",
    "ListModulesInput",
    "ListModulesUseCase",
    "ListParticipantsInput",
    "ListParticipantsUseCase",
    "ListUsersInput",
    "ListUsersUseCase",
]
