"""Command-line entry point: translate the values of a flat JSON file with the OpenAI API."""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from json_translator.app_config import (
    AppConfig,
    create_openai_client,
    load_app_config,
    setup_logger_from_config
)
from json_translator.exceptions import ConfigurationError, TranslatorError
from json_translator.languages import code_to_language_name
from json_translator.translation_client import OpenAITranslationClient
from json_translator.translator import TranslationResult, resolve_output_path, translate_file

VERSION = "0.1.12"

logger = logging.getLogger("json_translator.cli")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="json-translator",
        description="Translate JSON file values using the OpenAI API."
    )
    parser.add_argument(
        "--input", "-i",
        default="locales/en.json",
        help="Input JSON file path (default: locales/en.json)",
    )
    parser.add_argument(
        "--language", "-l",
        required=True,
        help="Target language code for translation (e.g., zh, es, fr)",
    )
    parser.add_argument(
        "--batch-size", "-b",
        type=int,
        default=None,
        dest="batch_size",
        help="Number of texts to translate in each batch (default: from config, else 100)",
    )
    parser.add_argument(
        "--env", "-e",
        default=None,
        help="Path to .env file (default: .env in the working directory, if present)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory for translated files (default: same as input file)",
    )
    parser.add_argument(
        "--filename", "-f",
        default=None,
        help="Custom output filename without extension (default: language code)",
    )
    parser.add_argument(
        "--model", "-m",
        default=None,
        help="OpenAI model to use for translation, e.g. gpt-4o or gpt-4o-mini (default: from config, else gpt-4o-mini)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to a YAML configuration file (default: $TRANSLATOR_CONFIG_FILE or config.yaml)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Report the keys that need translation without calling the API or writing files",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {VERSION}",
    )
    return parser


async def run_translation(args: argparse.Namespace, app_config: AppConfig) -> TranslationResult:
    """Resolve the run's settings from flags and configuration, then translate the file."""
    batch_size = args.batch_size if args.batch_size is not None else app_config.batch_size
    if batch_size < 1:
        raise ConfigurationError(f"batch size must be a positive integer, got {batch_size}")

    model = args.model or app_config.model_name
    dry_run = args.dry_run or app_config.dry_run
    output_file = resolve_output_path(args.input, args.language, args.output, args.filename)
    target_language = code_to_language_name(args.language, app_config.language_names)
    logger.info("Translating '%s' to %s (%s) with model '%s'.", args.input, target_language, args.language, model)

    if dry_run:
        logger.info("Running in dry-run mode, OpenAI client will not be initialized")
        return await translate_file(
            args.input, output_file, target_language, batch_size, None, model,
            custom_prompt=app_config.custom_prompt, dry_run=True
        )

    openai_client = create_openai_client(app_config)
    try:
        return await translate_file(
            args.input,
            output_file,
            target_language,
            batch_size,
            OpenAITranslationClient(openai_client, temperature=app_config.temperature),
            model,
            custom_prompt=app_config.custom_prompt
        )
    finally:
        await openai_client.close()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the translator.

    Returns:
        int: The process exit status; 0 on success, 1 on any translator error.
    """
    args = build_arg_parser().parse_args(argv)

    try:
        app_config = load_app_config(config_file=args.config, env_file=args.env)
    except ConfigurationError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    try:
        setup_logger_from_config(app_config, args.log_level)
    except OSError as exc:
        sys.stderr.write(f"Error: could not set up logging: {exc}\n")
        return 1

    try:
        result = asyncio.run(run_translation(args, app_config))
    except TranslatorError as exc:
        logger.critical("Translation failed: %s", exc)
        return 1

    if result.dry_run:
        print(f"Dry run complete. {len(result.untranslated_keys)} key(s) would be translated into {result.output_path}")
    else:
        logger.info(
            "Translated %d key(s), carried over %d existing translation(s).",
            result.translated_keys, result.carried_over_keys
        )
        print(f"Translation complete. Output saved to {result.output_path}")
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
