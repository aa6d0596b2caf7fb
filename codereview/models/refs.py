"""Tagged references to documents living in other collections.

A reference is ``{kind, id}``; callers resolve it with an explicit ``match`` over
``kind`` to pick the collection.
"""

from pydantic import BaseModel

from .enums import AssignmentKind, ResourceKind


class AssignmentTarget(BaseModel):
    """What an assignment points at: a cohort, a student (user) or a project."""

    kind: AssignmentKind
    id: str


class RelatedResource(BaseModel):
    """The resource a notification is about."""

    kind: ResourceKind
    id: str
