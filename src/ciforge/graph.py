from __future__ import annotations

from typing import Dict, List

from .model import Job


def _find_cycle(needs: Dict[str, List[str]]) -> List[str]:
    """Return one dependency cycle as a path of job names, or [] if there is none."""
    visiting: List[str] = []
    done: set[str] = set()

    def visit(name: str) -> List[str]:
        if name in done:
            return []
        if name in visiting:
            return visiting[visiting.index(name):] + [name]
        visiting.append(name)
        for need in needs[name]:
            cycle = visit(need)
            if cycle:
                return cycle
        visiting.pop()
        done.add(name)
        return []

    for name in needs:
        cycle = visit(name)
        if cycle:
            return cycle
    return []


def check_jobs(jobs: List[Job]) -> None:
    """
    Reject job lists the emitters would render into broken YAML.

    Raises ValueError for a name that is not a bare token, duplicate names,
    a `needs` entry naming no job in the list, or a dependency cycle.
    """
    names = [j.name for j in jobs]
    for name in names:
        if not name or any(c.isspace() for c in name):
            raise ValueError(f"Job name must be a single token without spaces: {name!r}")

    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise ValueError(f"Duplicate job names found: {dupes}")

    for j in jobs:
        for need in j.needs:
            if need not in names:
                raise ValueError(f"Job '{j.name}' needs missing job '{need}'. Known jobs: {sorted(names)}")

    cycle = _find_cycle({j.name: list(j.needs) for j in jobs})
    if cycle:
        raise ValueError(f"Job graph has a cycle: {' -> '.join(cycle)}")
