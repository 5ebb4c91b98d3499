"""
Class equivalence groups.

Classes listed together in one configured group are treated as the same
class when deciding whether a matched pair is a class mismatch. The mapping
is built once from configuration; every lookup afterwards is a dict access.
"""

from typing import Dict, Iterable, Optional, Sequence

from ..core.errors import ConfigError


class ClassEquivalenceResolver:
    """Map raw class ids to canonical group ids."""

    def __init__(self, class_groups: Optional[Iterable[Sequence[str]]] = None,
                 ignore_case: bool = False):
        """
        Build the lookup table.

        Args:
            class_groups: Disjoint groups of interchangeable class ids. The
                first member of a group is its canonical id.
            ignore_case: Case-fold class ids before lookup

        Raises:
            ConfigError: A group is malformed or a class id is listed in two
                different groups.
        """
        self.ignore_case = ignore_case
        self._canonical: Dict[str, str] = {}
        self._owner: Dict[str, int] = {}
        self._groups = []

        for group_index, group in enumerate(class_groups or ()):
            if isinstance(group, (str, bytes)) or not isinstance(group, (list, tuple)):
                raise ConfigError(f"Class group {group_index} must be a list of class names, got {group!r}")
            members = []
            for class_id in group:
                if not isinstance(class_id, str) or not class_id.strip():
                    raise ConfigError(
                        f"Class group {group_index} contains an invalid class name: {class_id!r}"
                    )
                key = self._normalize(class_id)
                if key not in members:
                    members.append(key)
            if not members:
                raise ConfigError(f"Class group {group_index} is empty")

            group_id = members[0]
            for key in members:
                if key in self._owner:
                    raise ConfigError(
                        f"Class '{key}' appears in more than one class group "
                        f"(groups {self._owner[key]} and {group_index})"
                    )
                self._owner[key] = group_index
                self._canonical[key] = group_id
            self._groups.append(tuple(members))

    def _normalize(self, class_id: str) -> str:
        return class_id.casefold() if self.ignore_case else class_id

    @property
    def groups(self):
        return tuple(self._groups)

    def canonical(self, class_id: str) -> str:
        """Return the group id for a class; unlisted classes are their own group."""
        key = self._normalize(class_id)
        return self._canonical.get(key, key)

    def same_class(self, a: str, b: str) -> bool:
        return self.canonical(a) == self.canonical(b)

    def __call__(self, a: str, b: str) -> bool:
        return self.same_class(a, b)
