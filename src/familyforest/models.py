"""Data classes for family tree entities and the positioned tree they produce."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNKNOWN = "unknown"


class ParentChildKind(str, Enum):
    BIOLOGICAL = "biological"
    ADOPTED = "adopted"
    STEP = "step"
    FOSTER = "foster"


class SpousalKind(str, Enum):
    MARRIED = "married"
    DIVORCED = "divorced"
    SEPARATED = "separated"
    PARTNER = "partner"


@dataclass
class Person:
    id: str
    first_name: str
    last_name: str | None = None
    birth_date: str | None = None  # ISO format YYYY-MM-DD or None
    death_date: str | None = None  # ISO format YYYY-MM-DD or None
    gender: Gender = Gender.UNKNOWN
    bio: str | None = None
    image_url: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in [self.first_name, self.last_name] if p)

    def birth_sort_key(self) -> tuple[int, str]:
        """Sort key for "oldest first"; undated people sort after every dated one."""
        if self.birth_date:
            return (0, self.birth_date)
        return (1, "")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "birthDate": self.birth_date,
            "deathDate": self.death_date,
            "gender": self.gender.value,
            "bio": self.bio,
            "imageUrl": self.image_url,
        }


@dataclass
class ParentChildRelation:
    parent_id: str
    child_id: str
    kind: ParentChildKind = ParentChildKind.BIOLOGICAL


@dataclass
class SpousalRelation:
    spouse1_id: str
    spouse2_id: str
    kind: SpousalKind = SpousalKind.MARRIED
    start_date: str | None = None
    end_date: str | None = None


# ============================================================================
# Tree nodes
# ============================================================================


@dataclass(eq=False)
class PersonNode:
    """A single person in the rendered forest."""

    person: Person
    children: list["TreeNode"] = field(default_factory=list)
    generation: int = 0
    x: float = 0.0
    y: float = 0.0

    kind = "person"

    @property
    def members(self) -> tuple[Person, ...]:
        return (self.person,)

    @property
    def lead(self) -> Person:
        return self.person

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "person": self.person.to_dict(),
            "generation": self.generation,
            "x": self.x,
            "y": self.y,
            "children": [c.to_dict() for c in self.children],
        }


@dataclass(eq=False)
class CoupleNode:
    """
    Two spouses rendered as one family unit.

    `person_a` is the member the traversal reached (a descendant or a root
    candidate); `person_b` is the spouse merged in next to them.
    """

    person_a: Person
    person_b: Person
    children: list["TreeNode"] = field(default_factory=list)
    generation: int = 0
    x: float = 0.0
    y: float = 0.0
    marriage_gap: float = 0.0
    node_width: float = 0.0

    kind = "couple"

    @property
    def members(self) -> tuple[Person, ...]:
        return (self.person_a, self.person_b)

    @property
    def lead(self) -> Person:
        return self.person_a

    def member_positions(self) -> tuple[float, float]:
        """x of person_a and person_b, one slot either side of the couple centre."""
        offset = (self.node_width + self.marriage_gap) / 2
        return (self.x - offset, self.x + offset)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "personA": self.person_a.to_dict(),
            "personB": self.person_b.to_dict(),
            "generation": self.generation,
            "x": self.x,
            "y": self.y,
            "children": [c.to_dict() for c in self.children],
        }


TreeNode = PersonNode | CoupleNode


@dataclass(frozen=True)
class Edge:
    kind: str  # "parent-child" or "spouse"
    from_id: str
    to_id: str

    def to_dict(self) -> dict:
        return {"kind": self.kind, "fromId": self.from_id, "toId": self.to_id}


PARENT_CHILD = "parent-child"
SPOUSE = "spouse"


@dataclass
class Layout:
    roots: list[TreeNode]
    edges: list[Edge]

    def iter_nodes(self) -> Iterator[TreeNode]:
        """Pre-order walk over every node in the forest."""
        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> dict:
        return {
            "roots": [r.to_dict() for r in self.roots],
            "edges": [e.to_dict() for e in self.edges],
        }
