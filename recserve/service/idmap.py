from typing import Dict, Generic, Hashable, List, Optional, TypeVar

K = TypeVar("K", bound=Hashable)


class IdentityMap(Generic[K]):
    """Raw id <-> contiguous index, first seen first indexed."""

    def __init__(self):
        self._index: Dict[K, int] = {}
        self._keys: List[K] = []

    def __len__(self) -> int:
        return len(self._keys)

    def add(self, key: K) -> int:
        idx = self._index.get(key)
        if idx is None:
            idx = len(self._keys)
            self._index[key] = idx
            self._keys.append(key)
        return idx

    def lookup_index(self, key: K) -> Optional[int]:
        return self._index.get(key)

    def lookup_key(self, index: int) -> K:
        # only indices handed out by add() are valid; no negative wrap-around
        if index < 0 or index >= len(self._keys):
            raise IndexError(f"index {index} out of range for map of {len(self._keys)} keys")
        return self._keys[index]

    def keys(self) -> List[K]:
        return list(self._keys)
