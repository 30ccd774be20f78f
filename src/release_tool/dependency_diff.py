from dataclasses import replace
from typing import Dict, List, Mapping, Tuple

from .dependency import Dependency, ProjectRename
from .structured_logging import get_manifest_logger


def to_dep_map(deps: List[Dependency]) -> Dict[str, Dependency]:
    """Index dependencies by name; a later duplicate wins."""
    return {dep.name: dep for dep in deps}


def updated_deps(previous: List[Dependency], deps: List[Dependency]) -> List[Dependency]:
    """
    Return the dependencies that are new or whose commit changed.

    Updated entries carry the old commit in ``previous``. The result is sorted
    by name.
    """
    updated = []
    pm, cm = to_dep_map(previous), to_dep_map(deps)
    for name, current in cm.items():
        old = pm.get(name)
        if old is None:
            updated.append(current)
        elif old.commit != current.commit:
            updated.append(replace(current, previous=old.commit))

    return sorted(updated, key=lambda dep: dep.name)


def rename_dependencies(
    deps: List[Dependency], renames: Mapping[str, ProjectRename]
) -> None:
    """
    Apply tracked project renames to a dependency list in place.

    Args:
        deps: Dependency list; renamed entries are replaced in their slot
        renames: Short display name to rename pair
    """
    if not renames:
        return

    rename_map: Dict[str, Tuple[str, str]] = {
        rename.old: (shortname, rename.new) for shortname, rename in renames.items()
    }

    logger = get_manifest_logger()
    for i, dep in enumerate(deps):
        if dep.name in rename_map:
            shortname, new_name = rename_map[dep.name]
            logger.debug("dependency_renamed", shortname=shortname, old=dep.name, new=new_name)
            deps[i] = replace(dep, name=new_name)
