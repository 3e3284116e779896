"""
Batch translation of untranslated entries.

Values are sent to the translation call in consecutive batches, one batch at a
time. Each value must occupy exactly one line of the request so that answers
can be matched back to keys by position; literal newlines are therefore hidden
behind NEWLINE_PLACEHOLDER for the round trip.
"""
import logging
from typing import List, Optional, Tuple

from tqdm import tqdm

from json_translator.exceptions import TranslationMismatch
from json_translator.ordered_store import OrderedKeyValueStore
from json_translator.translation_client import NEWLINE_PLACEHOLDER, build_system_prompt

logger = logging.getLogger(__name__)


def protect_newlines(value: str) -> str:
    return value.replace("\n", NEWLINE_PLACEHOLDER)


def restore_newlines(value: str) -> str:
    return value.replace(NEWLINE_PLACEHOLDER, "\n")


def clean_translation(translation: str) -> str:
    """Remove only leading and trailing whitespace from a returned line."""
    return translation.strip()


def partition_batches(store: OrderedKeyValueStore, batch_size: int) -> List[List[Tuple[str, str]]]:
    """
    Split a store into consecutive batches of ``(key, protected_value)`` pairs.

    Args:
        store: The entries to translate.
        batch_size: The maximum number of entries per batch.

    Returns:
        List[List[Tuple[str, str]]]: Batches in key order; only the last may be short.
    """
    if batch_size < 1:
        raise ValueError(f"batch size must be a positive integer, got {batch_size}")

    entries = [(key, protect_newlines(value)) for key, value in store.items()]
    return [entries[i:i + batch_size] for i in range(0, len(entries), batch_size)]


async def translate_batch(
        batch: List[Tuple[str, str]],
        client,
        target_language: str,
        system_instructions: str,
        model: str
) -> List[Tuple[str, str]]:
    """
    Translate one batch, passing blank values through untouched.

    Args:
        batch: ``(key, protected_value)`` pairs.
        client: An object with an async ``translate(texts, target_language,
            system_instructions, model)`` method returning a list of lines.
        target_language: Display name of the target language.
        system_instructions: The system prompt for the call.
        model: The model identifier.

    Returns:
        List[Tuple[str, str]]: ``(key, translated_value)`` pairs in batch order,
        with newlines restored.

    Raises:
        TranslationMismatch: If the number of returned lines differs from the
            number of non-blank values sent.
    """
    results = [value for _, value in batch]

    non_blank_indices = [i for i, (_, value) in enumerate(batch) if restore_newlines(value).strip()]
    texts_to_send = [batch[i][1] for i in non_blank_indices]

    if texts_to_send:
        translated_texts = await client.translate(texts_to_send, target_language, system_instructions, model)
        if len(translated_texts) != len(texts_to_send):
            logger.error(
                "Translation mismatch: sent %d text(s), received %d line(s). Keys in batch: %s",
                len(texts_to_send), len(translated_texts), ", ".join(key for key, _ in batch)
            )
            raise TranslationMismatch(sent=len(texts_to_send), received=len(translated_texts))

        for index, translated_text in zip(non_blank_indices, translated_texts):
            results[index] = clean_translation(translated_text)
    else:
        logger.debug("Batch holds only blank values; skipping the translation call.")

    return [(key, restore_newlines(value)) for (key, _), value in zip(batch, results)]


async def translate_values(
        store: OrderedKeyValueStore,
        target_language: str,
        batch_size: int,
        client,
        model: str,
        custom_prompt: Optional[str] = None
) -> OrderedKeyValueStore:
    """
    Translate every value of ``store`` into ``target_language``.

    Batches are translated strictly one after another. The first failing
    batch aborts the whole run.

    Args:
        store: The untranslated entries, in the order they should be translated.
        target_language: Display name of the target language.
        batch_size: Maximum number of entries per translation call.
        client: The translation call (see ``translate_batch``).
        model: The model identifier.
        custom_prompt: Extra instructions appended to the system prompt.

    Returns:
        OrderedKeyValueStore: Translated values under the original keys, in the
        original order.
    """
    translated = OrderedKeyValueStore()
    batches = partition_batches(store, batch_size)
    if not batches:
        return translated

    system_instructions = build_system_prompt(custom_prompt)
    logger.info(
        "Translating %d value(s) into %s in %d batch(es) of up to %d.",
        len(store), target_language, len(batches), batch_size
    )

    for batch_number, batch in enumerate(tqdm(batches, desc=f"Translating to {target_language}", unit="batch"), 1):
        logger.debug("Sending batch %d/%d (%d entries).", batch_number, len(batches), len(batch))
        for key, value in await translate_batch(batch, client, target_language, system_instructions, model):
            translated.set(key, value)

    return translated
