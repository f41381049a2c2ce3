from typing import Dict, FrozenSet, Set

_EMPTY: FrozenSet[int] = frozenset()


class InteractionSet:
    """Items each training user already rated; used to filter them out of recs."""

    def __init__(self):
        self._rated: Dict[int, Set[int]] = {}

    def record(self, user_index: int, item_index: int) -> None:
        self._rated.setdefault(user_index, set()).add(item_index)

    def rated_items(self, user_index: int) -> FrozenSet[int]:
        # validation-only / query-only users were never recorded
        rated = self._rated.get(user_index)
        return frozenset(rated) if rated else _EMPTY
