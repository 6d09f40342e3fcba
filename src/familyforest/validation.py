"""Data-quality checks for indexed family tree data."""

import networkx as nx

from familyforest.graph import GraphIndex


def validate_index(index: GraphIndex) -> list[str]:
    """
    Validate the family tree data for:
    - Cycles in parent-child relationships
    - Impossible ages (child born before parent, parent younger than 12)
    - Death before birth
    - More than two recorded parents

    Returns a list of warning messages.
    """
    warnings: list[str] = []

    # Check for cycles
    try:
        cycle = nx.find_cycle(index.lineage, orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    # birth_date is ISO format (YYYY-MM-DD) which can be compared as strings
    for parent_id, child_id in index.lineage.edges():
        parent = index.people[parent_id]
        child = index.people[child_id]

        if parent.birth_date and child.birth_date:
            if child.birth_date < parent.birth_date:
                warnings.append(
                    f"Impossible: {child.full_name} born before parent {parent.full_name}"
                )
            else:
                try:
                    parent_year = int(parent.birth_date[:4])
                    child_year = int(child.birth_date[:4])
                except ValueError:
                    continue
                if child_year - parent_year < 12:
                    warnings.append(
                        f"Suspicious: {parent.full_name} was less than 12 years "
                        f"old when {child.full_name} was born"
                    )

    for person in index.people.values():
        if person.birth_date and person.death_date and person.death_date < person.birth_date:
            warnings.append(f"Impossible: {person.full_name} died before being born")

        parent_count = index.lineage.in_degree(person.id)
        if parent_count > 2:
            warnings.append(f"Suspicious: {person.full_name} has {parent_count} recorded parents")

    return warnings
