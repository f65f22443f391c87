# store.py
import logging
import threading

from models import Group, GroupSummary, Student

logger = logging.getLogger(__name__)


class GroupNotFoundError(LookupError):
    def __init__(self, group_id):
        super().__init__(f"Group {group_id} not found")
        self.group_id = group_id


class GroupValidationError(ValueError):
    pass


class GroupStore:
    """In-memory registry of groups and the students they own.

    Group ids and student ids both come from counters that only grow, so an
    id is never handed out twice, even after the group holding it is deleted.
    Every operation takes the store lock; FastAPI runs sync endpoints on a
    thread pool.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._groups: dict[int, Group] = {}
        self._next_group_id = 0
        self.total_students = 0

    def list_groups(self) -> list[GroupSummary]:
        with self._lock:
            return [group.summary() for group in self._groups.values()]

    def list_students(self) -> list[Student]:
        with self._lock:
            students = []
            for group in self._groups.values():
                students.extend(group.members)
            return students

    def create_group(self, group_name: str, member_names: list[str]) -> GroupSummary:
        # Validate before touching state
        if not isinstance(group_name, str):
            raise GroupValidationError("groupName must be a string")
        if not isinstance(member_names, (list, tuple)):
            raise GroupValidationError("members must be a list of names")
        for name in member_names:
            if not isinstance(name, str):
                raise GroupValidationError("every member name must be a string")

        with self._lock:
            # Each student takes the next global id
            members = []
            for name in member_names:
                members.append(Student(id=self.total_students, name=name))
                self.total_students += 1

            group = Group(id=self._next_group_id, groupName=group_name, members=members)
            self._groups[group.id] = group
            self._next_group_id += 1

        logger.info(
            "Created group %d (%r) with %d member(s)", group.id, group.groupName, len(members)
        )
        return group.summary()

    def get_group(self, group_id: int) -> Group:
        with self._lock:
            group = self._groups.get(group_id)
            if group is None:
                logger.debug("Lookup for unknown group %s", group_id)
                raise GroupNotFoundError(group_id)
            return group.model_copy(deep=True)

    def delete_group(self, group_id: int) -> None:
        with self._lock:
            if group_id not in self._groups:
                raise GroupNotFoundError(group_id)
            del self._groups[group_id]
        logger.info("Deleted group %d", group_id)

    def reset(self) -> None:
        with self._lock:
            self._groups.clear()
            self._next_group_id = 0
            self.total_students = 0
