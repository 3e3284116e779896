"""
Incremental translation of one flat JSON document.

The output document doubles as the translation cache: values that already
differ from the source are kept, and only new or still-untranslated keys are
sent to the model. Nothing is written until every batch has been translated.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from json_translator.batch_translator import translate_values
from json_translator.json_codec import read_json_file, write_json_file
from json_translator.merge import apply_translations, merge_documents, select_entries

logger = logging.getLogger(__name__)


@dataclass
class TranslationResult:
    """Summary of one translation run."""
    output_path: str
    total_keys: int
    translated_keys: int
    carried_over_keys: int
    untranslated_keys: List[str] = field(default_factory=list)
    dry_run: bool = False


def resolve_output_path(
        input_file: str,
        language_code: str,
        output_dir: Optional[str] = None,
        filename: Optional[str] = None
) -> str:
    """
    Work out where the translated document goes.

    Args:
        input_file: Path of the source document.
        language_code: Target language code, the default file name.
        output_dir: Output directory; defaults to the input file's directory.
        filename: File name without extension; defaults to ``language_code``.

    Returns:
        str: ``<output_dir>/<filename>.json``.
    """
    if not output_dir:
        output_dir = os.path.dirname(input_file)
    return os.path.join(output_dir, f"{filename or language_code}.json")


async def translate_file(
        input_file: str,
        output_file: str,
        target_language: str,
        batch_size: int,
        client,
        model: str,
        custom_prompt: Optional[str] = None,
        dry_run: bool = False
) -> TranslationResult:
    """
    Translate ``input_file`` into ``output_file``, reusing earlier translations.

    Args:
        input_file: The source document. It must exist.
        output_file: The translated document. Read first if it exists, then rewritten.
        target_language: Display name of the target language.
        batch_size: Maximum number of values per translation call.
        client: The translation call (see ``batch_translator.translate_batch``).
            May be None for a dry run.
        model: The model identifier.
        custom_prompt: Extra instructions appended to the system prompt.
        dry_run: Report the untranslated keys without calling the API or writing.

    Returns:
        TranslationResult: What was translated and what was carried over.
    """
    source = read_json_file(input_file)
    existing = read_json_file(output_file, missing_ok=True)
    logger.info(
        "Read %d key(s) from '%s' and %d existing translation(s) from '%s'.",
        len(source), input_file, len(existing), output_file
    )

    merged, untranslated_keys = merge_documents(source, existing)
    carried_over = len(merged) - len(untranslated_keys)
    logger.info("%d key(s) need translation, %d carried over.", len(untranslated_keys), carried_over)

    if dry_run:
        for key in untranslated_keys:
            logger.info("[Dry Run] Would translate key '%s'.", key)
        logger.info("[Dry Run] Would write translated content to '%s'.", output_file)
        return TranslationResult(
            output_path=output_file,
            total_keys=len(merged),
            translated_keys=0,
            carried_over_keys=carried_over,
            untranslated_keys=untranslated_keys,
            dry_run=True
        )

    translated_count = 0
    if untranslated_keys:
        to_translate = select_entries(merged, untranslated_keys)
        translated = await translate_values(
            to_translate,
            target_language,
            batch_size,
            client,
            model,
            custom_prompt=custom_prompt
        )
        translated_count = apply_translations(merged, translated)

    write_json_file(output_file, merged)
    logger.info("Wrote %d key(s) to '%s'.", len(merged), output_file)

    return TranslationResult(
        output_path=output_file,
        total_keys=len(merged),
        translated_keys=translated_count,
        carried_over_keys=carried_over,
        untranslated_keys=untranslated_keys
    )
