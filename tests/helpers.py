from itertools import count

from kinlayout.models import PARENT_CHILD, PARTNER, SIBLING, Person, Relationship

_ids = count(1)


def people(*ids, **birth_dates):
    return [
        Person(pid, name=pid, birth_date=birth_dates.get(pid), creation_order=i)
        for i, pid in enumerate(ids)
    ]


def partner(a, b, status="current"):
    return Relationship(f"r{next(_ids)}", PARTNER, a, b, status=status)


def parent(p, c, parent_type="biological", primary=False):
    return Relationship(
        f"r{next(_ids)}", PARENT_CHILD, p, c, parent_type=parent_type, is_primary_parent_set=primary
    )


def parents(a, b, *children):
    return [parent(p, c) for c in children for p in (a, b)]


def sibling(a, b):
    return Relationship(f"r{next(_ids)}", SIBLING, a, b)
