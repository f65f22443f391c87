# models.py
from pydantic import BaseModel


class Student(BaseModel):
    id: int
    name: str


# Listing view of a group: member ids only
class GroupSummary(BaseModel):
    id: int
    groupName: str
    members: list[int]


class Group(BaseModel):
    id: int
    groupName: str

    # A group owns its students, in creation order
    members: list[Student] = []

    def summary(self) -> GroupSummary:
        return GroupSummary(
            id=self.id,
            groupName=self.groupName,
            members=[student.id for student in self.members],
        )
