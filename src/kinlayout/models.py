"""Data classes for family chart entities."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

PARTNER = "partner"
PARENT_CHILD = "parent_child"
SIBLING = "sibling"


@dataclass(frozen=True)
class Person:
    id: str
    name: str | None = None
    birth_date: str | None = None  # ISO format YYYY-MM-DD or None
    birth_date_unknown: bool = False
    creation_order: int | None = None
    is_deceased: bool = False

    @classmethod
    def from_record(cls, record: Mapping) -> "Person":
        return cls(
            id=str(record["id"]),
            name=record.get("name"),
            birth_date=record.get("birth_date"),
            birth_date_unknown=bool(record.get("birth_date_unknown", False)),
            creation_order=record.get("creation_order"),
            is_deceased=bool(record.get("is_deceased", False)),
        )

    @property
    def has_known_birth(self) -> bool:
        return bool(self.birth_date) and not self.birth_date_unknown


@dataclass(frozen=True)
class Relationship:
    id: str
    type: str  # partner, parent_child, sibling
    person_a: str  # parent for parent_child
    person_b: str  # child for parent_child
    status: str | None = None  # current, divorced, separated, deceased
    parent_type: str | None = None  # biological, adoptive, None
    is_primary_parent_set: bool = False

    @classmethod
    def from_record(cls, record: Mapping) -> "Relationship":
        # Accept both the external field names and the storage column names
        return cls(
            id=str(record["id"]),
            type=record.get("type") or record.get("relationship_type"),
            person_a=str(record.get("person_a", record.get("person_a_id"))),
            person_b=str(record.get("person_b", record.get("person_b_id"))),
            status=record.get("status", record.get("relationship_status")),
            parent_type=record.get("parent_type"),
            is_primary_parent_set=bool(record.get("is_primary_parent_set", False)),
        )


@dataclass(frozen=True)
class ParentLink:
    parent_id: str
    parent_type: str | None
    is_primary: bool


@dataclass(frozen=True)
class PartnerLink:
    partner_id: str
    status: str
    relationship_id: str


@dataclass(frozen=True)
class PrimaryParentSet:
    parent_type: str  # adoptive, biological, unknown
    parent_ids: tuple[str, ...]


@dataclass(frozen=True)
class LayoutPosition:
    id: str
    x: float
    y: float

    def as_dict(self) -> dict:
        return {"id": self.id, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class GridPosition:
    """Generational coordinates before pixel conversion."""

    id: str
    half_col: float
    row: int


def coerce_people(people: Iterable) -> list[Person]:
    """Accept Person instances or plain mappings."""
    return [p if isinstance(p, Person) else Person.from_record(p) for p in people]


def coerce_relationships(relationships: Iterable) -> list[Relationship]:
    """Accept Relationship instances or plain mappings."""
    return [
        r if isinstance(r, Relationship) else Relationship.from_record(r)
        for r in relationships
    ]
