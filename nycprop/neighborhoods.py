"""Adjacency between rolling-sales neighborhood labels.

Labels are the Department of Finance sales neighborhoods (``EAST VILLAGE``,
``UPPER WEST SIDE (79-96)``, ...). The table is hand-maintained and
symmetric: declaring A next to B also puts A in B's list.
"""

from __future__ import annotations

_ADJACENT: dict[str, list[str]] = {
    # Manhattan
    "ALPHABET CITY": ["EAST VILLAGE", "LOWER EAST SIDE"],
    "EAST VILLAGE": ["LOWER EAST SIDE", "GREENWICH VILLAGE-CENTRAL", "GRAMERCY",
                     "KIPS BAY", "ALPHABET CITY"],
    "LOWER EAST SIDE": ["CHINATOWN", "SOHO", "LITTLE ITALY"],
    "CHINATOWN": ["LITTLE ITALY", "CIVIC CENTER", "TRIBECA"],
    "LITTLE ITALY": ["SOHO"],
    "SOHO": ["TRIBECA", "GREENWICH VILLAGE-CENTRAL", "GREENWICH VILLAGE-WEST"],
    "TRIBECA": ["CIVIC CENTER", "FINANCIAL"],
    "CIVIC CENTER": ["FINANCIAL", "SOUTHBRIDGE"],
    "FINANCIAL": ["SOUTHBRIDGE", "BATTERY PARK CITY"],
    "GREENWICH VILLAGE-CENTRAL": ["GREENWICH VILLAGE-WEST", "FLATIRON", "CHELSEA"],
    "GREENWICH VILLAGE-WEST": ["CHELSEA"],
    "CHELSEA": ["FLATIRON", "CLINTON", "MIDTOWN WEST", "FASHION"],
    "FLATIRON": ["GRAMERCY", "MURRAY HILL", "FASHION"],
    "GRAMERCY": ["KIPS BAY", "MURRAY HILL"],
    "KIPS BAY": ["MURRAY HILL"],
    "MURRAY HILL": ["MIDTOWN EAST", "MIDTOWN CBD"],
    "MIDTOWN EAST": ["MIDTOWN CBD", "UPPER EAST SIDE (59-79)"],
    "MIDTOWN CBD": ["MIDTOWN WEST", "FASHION"],
    "MIDTOWN WEST": ["CLINTON", "FASHION", "UPPER WEST SIDE (59-79)"],
    "CLINTON": ["UPPER WEST SIDE (59-79)"],
    "UPPER EAST SIDE (59-79)": ["UPPER EAST SIDE (79-96)"],
    "UPPER EAST SIDE (79-96)": ["UPPER EAST SIDE (96-110)"],
    "UPPER EAST SIDE (96-110)": ["HARLEM-EAST"],
    "UPPER WEST SIDE (59-79)": ["UPPER WEST SIDE (79-96)"],
    "UPPER WEST SIDE (79-96)": ["UPPER WEST SIDE (96-116)"],
    "UPPER WEST SIDE (96-116)": ["MANHATTAN VALLEY", "MORNINGSIDE HEIGHTS"],
    "MANHATTAN VALLEY": ["MORNINGSIDE HEIGHTS", "HARLEM-CENTRAL"],
    "MORNINGSIDE HEIGHTS": ["HARLEM-CENTRAL", "HARLEM-WEST"],
    "HARLEM-CENTRAL": ["HARLEM-EAST", "HARLEM-UPPER", "HARLEM-WEST"],
    "HARLEM-WEST": ["HARLEM-UPPER"],
    "HARLEM-UPPER": ["WASHINGTON HEIGHTS LOWER"],
    "WASHINGTON HEIGHTS LOWER": ["WASHINGTON HEIGHTS UPPER"],
    "WASHINGTON HEIGHTS UPPER": ["INWOOD"],
    # Brooklyn
    "WILLIAMSBURG-NORTH": ["WILLIAMSBURG-SOUTH", "WILLIAMSBURG-EAST", "GREENPOINT"],
    "WILLIAMSBURG-SOUTH": ["WILLIAMSBURG-EAST", "WILLIAMSBURG-CENTRAL"],
    "WILLIAMSBURG-EAST": ["WILLIAMSBURG-CENTRAL", "BUSHWICK"],
    "WILLIAMSBURG-CENTRAL": ["BEDFORD STUYVESANT"],
    "GREENPOINT": ["WILLIAMSBURG-EAST"],
    "BUSHWICK": ["BEDFORD STUYVESANT", "OCEAN HILL"],
    "BEDFORD STUYVESANT": ["CLINTON HILL", "CROWN HEIGHTS", "OCEAN HILL"],
    "CLINTON HILL": ["FORT GREENE", "CROWN HEIGHTS"],
    "FORT GREENE": ["DOWNTOWN-FULTON MALL", "BOERUM HILL"],
    "DOWNTOWN-FULTON MALL": ["BROOKLYN HEIGHTS", "DOWNTOWN-METROTECH", "BOERUM HILL"],
    "DOWNTOWN-METROTECH": ["BROOKLYN HEIGHTS"],
    "BROOKLYN HEIGHTS": ["COBBLE HILL"],
    "COBBLE HILL": ["CARROLL GARDENS", "BOERUM HILL"],
    "CARROLL GARDENS": ["RED HOOK", "GOWANUS"],
    "BOERUM HILL": ["GOWANUS", "PARK SLOPE"],
    "GOWANUS": ["PARK SLOPE", "PARK SLOPE SOUTH"],
    "PARK SLOPE": ["PARK SLOPE SOUTH", "PROSPECT HEIGHTS", "WINDSOR TERRACE"],
    "PARK SLOPE SOUTH": ["WINDSOR TERRACE", "SUNSET PARK"],
    "PROSPECT HEIGHTS": ["CROWN HEIGHTS"],
    "CROWN HEIGHTS": ["FLATBUSH-LEFFERTS GARDEN"],
    "FLATBUSH-LEFFERTS GARDEN": ["FLATBUSH-CENTRAL", "FLATBUSH-EAST"],
    "FLATBUSH-CENTRAL": ["FLATBUSH-EAST", "KENSINGTON", "MIDWOOD"],
    "WINDSOR TERRACE": ["KENSINGTON"],
    # Queens
    "LONG ISLAND CITY": ["ASTORIA", "SUNNYSIDE"],
    "ASTORIA": ["SUNNYSIDE", "JACKSON HEIGHTS"],
    "SUNNYSIDE": ["WOODSIDE"],
    "WOODSIDE": ["JACKSON HEIGHTS"],
    "JACKSON HEIGHTS": ["ELMHURST", "CORONA"],
    "ELMHURST": ["CORONA", "REGO PARK"],
    "REGO PARK": ["FOREST HILLS"],
    "FOREST HILLS": ["KEW GARDENS"],
    # Bronx
    "MOTT HAVEN/PORT MORRIS": ["MELROSE/CONCOURSE", "HUNTS POINT"],
    "MELROSE/CONCOURSE": ["HIGHBRIDGE/MORRIS HEIGHTS", "MORRISANIA/LONGWOOD"],
    "HIGHBRIDGE/MORRIS HEIGHTS": ["FORDHAM", "UNIVERSITY HEIGHTS"],
    "FORDHAM": ["BEDFORD PARK/NORWOOD", "UNIVERSITY HEIGHTS"],
    "BEDFORD PARK/NORWOOD": ["KINGSBRIDGE/JEROME PARK"],
    "KINGSBRIDGE/JEROME PARK": ["RIVERDALE"],
}


def _build_table(pairs: dict[str, list[str]]) -> dict[str, frozenset[str]]:
    table: dict[str, set[str]] = {}
    for name, neighbors in pairs.items():
        for other in neighbors:
            table.setdefault(name, set()).add(other)
            table.setdefault(other, set()).add(name)
    return {k: frozenset(v) for k, v in table.items()}


ADJACENCY: dict[str, frozenset[str]] = _build_table(_ADJACENT)


def adjacent_neighborhoods(name: str) -> list[str]:
    """Sorted neighbors of a label; empty for unknown labels."""
    return sorted(ADJACENCY.get(name.strip().upper(), ()))


def compatible_neighborhoods(name: str, include_adjacent: bool = True) -> list[str]:
    """The label itself first, then its neighbors when requested."""
    own = name.strip().upper()
    if not include_adjacent:
        return [own]
    return [own] + [n for n in adjacent_neighborhoods(own) if n != own]


def is_same_neighborhood(subject: str, other: str) -> bool:
    """Substring containment either way, as sales labels vary in suffixes."""
    a = subject.strip().upper()
    b = other.strip().upper()
    if not a or not b:
        return False
    return a in b or b in a


def is_adjacent_neighborhood(subject: str, other: str) -> bool:
    """True for a listed neighbor that is not the same neighborhood."""
    if is_same_neighborhood(subject, other):
        return False
    other_up = other.strip().upper()
    if not other_up:
        return False
    return any(
        n in other_up or other_up in n
        for n in ADJACENCY.get(subject.strip().upper(), ())
    )
