from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .errors import ConfigurationError, PotrError
from .providers import build_translator
from .runner import CatalogTranslator, RunCounters
from .schemas import ENGINES, FilterSettings, RunSettings, TranslatorSettings
from .utils.cancellation import CancellationToken, install_interrupt_handler
from .utils.logging_config import setup_logging

log = logging.getLogger("potr")

# Engine -> environment variable holding its API key
API_KEY_ENV = {
    "openai": "POTR_API_KEY_OPENAI",
    "azure-openai": "POTR_API_KEY_AZURE_OPENAI",
    "deepl": "POTR_API_KEY_DEEPL",
}


# -----------------------------------------------------------------------------
# Options
# -----------------------------------------------------------------------------
def build_parser(env: Mapping[str, str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="potr",
        description="Translate PO files with OpenAI, Azure OpenAI or DeepL.",
    )
    parser.add_argument("-p", "--po", dest="po_file_path", required=True, help="PO file to translate.")
    parser.add_argument("-o", "--output", dest="output_file_path", help="Output PO file. Defaults to overwriting the input.")
    parser.add_argument(
        "-t",
        "--target-lang",
        default=env.get("POTR_TARGET_LANG", "en"),
        help="Target language, as an ISO-639-1 code (default: en).",
    )
    parser.add_argument(
        "-e",
        "--engine",
        default=env.get("POTR_ENGINE", "openai"),
        help=f"Translation engine: {', '.join(ENGINES)} (default: openai).",
    )
    parser.add_argument("-k", "--api-key", help="API key. Defaults to POTR_API_KEY_<ENGINE>.")
    parser.add_argument(
        "--api-base",
        default=env.get("POTR_API_BASE_AZURE_OPENAI"),
        help='API base URL, e.g. "https://your-resource-name.openai.azure.com".',
    )
    parser.add_argument(
        "--api-version",
        default=env.get("POTR_API_VERSION_AZURE_OPENAI"),
        help='Azure OpenAI API version, e.g. "2023-05-15".',
    )
    parser.add_argument(
        "--api-deployment-id",
        default=env.get("POTR_API_DEPLOYMENT_ID_AZURE_OPENAI"),
        help="Azure OpenAI deployment id.",
    )
    parser.add_argument("-m", "--model", default=env.get("POTR_MODEL"), help="Model name, e.g. gpt-4o-mini.")

    parser.add_argument("--skip-translation", "--st", action="store_true", help="Skip translation, only rewrite the PO file.")
    parser.add_argument(
        "--process-translated",
        "--pt",
        action="store_true",
        help="Process translated messages. By default, translated messages are skipped.",
    )
    parser.add_argument(
        "--process-code-blocks",
        "--pc",
        action="store_true",
        help="Process code blocks (starting with ```). By default, code blocks are skipped.",
    )
    parser.add_argument(
        "--process-formula-blocks",
        "--pf",
        action="store_true",
        help="Process formula blocks (starting with $$). By default, formula blocks are skipped.",
    )
    parser.add_argument(
        "--process-markdown-images",
        "--pi",
        action="store_true",
        help="Process markdown image references. By default, images are skipped.",
    )
    parser.add_argument("--skip-text", action="store_true", help="Skip regular text messages.")
    parser.add_argument("-l", "--limit", type=int, default=0, help="Maximum number of messages to translate (0 = no limit).")
    parser.add_argument("--source", help="Only translate messages referenced from source files matching this regex.")
    parser.add_argument("--include", help="Only translate messages matching this regex.")
    parser.add_argument("--exclude", help="Do not translate messages matching this regex.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print verbose logs.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_api_key(engine: str, explicit: Optional[str], env: Mapping[str, str]) -> str:
    if explicit:
        return explicit
    var = API_KEY_ENV.get(engine)
    return env.get(var, "") if var else ""


def settings_from_args(args: argparse.Namespace, env: Mapping[str, str]) -> RunSettings:
    """Build validated run settings. Raises ConfigurationError on bad input."""
    engine = (args.engine or "").strip().lower().replace("_", "-")
    try:
        filters = FilterSettings(
            skip_translation=args.skip_translation,
            skip_translated=not args.process_translated,
            skip_code_blocks=not args.process_code_blocks,
            skip_formula_blocks=not args.process_formula_blocks,
            skip_markdown_images=not args.process_markdown_images,
            skip_text=args.skip_text,
            source_regex=args.source,
            include_regex=args.include,
            exclude_regex=args.exclude,
            message_limit=args.limit,
        )
        translator = TranslatorSettings(
            engine=engine,
            target_lang=args.target_lang,
            api_key=resolve_api_key(engine, args.api_key, env),
            api_base=args.api_base,
            api_version=args.api_version,
            api_deployment_id=args.api_deployment_id,
            model=args.model,
        )
        return RunSettings(
            po_file_path=args.po_file_path,
            output_file_path=args.output_file_path,
            filters=filters,
            translator=translator,
        )
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid options: {problems}") from e


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------
async def run(settings: RunSettings, token: Optional[CancellationToken] = None) -> RunCounters:
    translator = build_translator(settings.translator)
    token = token or CancellationToken()
    install_interrupt_handler(token)
    log.info(
        "Translating %s -> %s with %s (%s)",
        settings.po_file_path,
        settings.output_file_path,
        settings.translator.engine,
        settings.translator.target_lang,
    )
    log.debug("Translator settings: %s", settings.translator.public_copy())
    return await CatalogTranslator(settings, translator, token).run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    env = dict(os.environ)
    args = build_parser(env).parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        settings = settings_from_args(args, env)
        counters = asyncio.run(run(settings))
    except PotrError as e:
        log.error("%s", e)
        print(f"potr: error: {e}", file=sys.stderr)
        return 1

    log.info("Done: %s", counters)
    return 0


if __name__ == "__main__":
    sys.exit(main())
