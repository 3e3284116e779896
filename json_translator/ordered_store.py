from typing import Dict, Iterable, Iterator, List, Optional, Tuple


class OrderedKeyValueStore:
    """
    An insertion-ordered mapping of string keys to string values.

    Keys are kept in the order they were first set. Setting an existing key
    replaces its value without moving it, so a document read from disk is
    written back with the same key order.
    """

    def __init__(self):
        self._keys: List[str] = []
        self._values: Dict[str, str] = {}

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "OrderedKeyValueStore":
        store = cls()
        for key, value in pairs:
            store.set(key, value)
        return store

    def set(self, key: str, value: str) -> None:
        if key not in self._values:
            self._keys.append(key)
        self._values[key] = value

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)

    def keys(self) -> List[str]:
        return list(self._keys)

    def values(self) -> List[str]:
        return [self._values[key] for key in self._keys]

    def items(self) -> Iterator[Tuple[str, str]]:
        for key in self._keys:
            yield key, self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedKeyValueStore):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __repr__(self) -> str:
        pairs = ", ".join(f"{key!r}: {value!r}" for key, value in self.items())
        return f"OrderedKeyValueStore({{{pairs}}})"
