import logging
from typing import List, Tuple

from json_translator.ordered_store import OrderedKeyValueStore

logger = logging.getLogger(__name__)


def merge_documents(
        source: OrderedKeyValueStore,
        existing: OrderedKeyValueStore
) -> Tuple[OrderedKeyValueStore, List[str]]:
    """
    Reconcile a freshly read source document with the previous output document.

    A key needs translation if:
    1. The key is new (exists in source, not in the existing output).
    2. The existing value is identical to the source value, meaning the text
       was copied over untranslated.
    Any other existing value is a prior translation and is carried over as is.

    Args:
        source: The source-language document, in its file order.
        existing: The previously written output document, possibly empty.

    Returns:
        A tuple of the merged store, which has exactly the keys of ``source`` in
        the same order, and the keys that still need translation, in source order.
    """
    merged = OrderedKeyValueStore()
    untranslated_keys: List[str] = []

    for key, source_value in source.items():
        merged.set(key, source_value)

        existing_value = existing.get(key)
        if existing_value is None or existing_value == source_value:
            untranslated_keys.append(key)
        else:
            merged.set(key, existing_value)

    dropped = [key for key in existing if key not in source]
    if dropped:
        logger.info("Dropping %d key(s) no longer present in the source document.", len(dropped))
        logger.debug("Dropped keys: %s", ", ".join(dropped))

    return merged, untranslated_keys


def select_entries(store: OrderedKeyValueStore, keys: List[str]) -> OrderedKeyValueStore:
    """Return a new store holding only ``keys`` from ``store``, in the order given."""
    selected = OrderedKeyValueStore()
    for key in keys:
        value = store.get(key)
        if value is not None:
            selected.set(key, value)
    return selected


def apply_translations(merged: OrderedKeyValueStore, translated: OrderedKeyValueStore) -> int:
    """
    Write translated values into ``merged`` under their keys.

    Keys keep their position in ``merged``; keys it does not hold are ignored.

    Returns:
        int: The number of values applied.
    """
    applied = 0
    for key, value in translated.items():
        if key in merged:
            merged.set(key, value)
            applied += 1
    return applied
