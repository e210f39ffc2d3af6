"""
Download translations from the server and compile one ARB bundle per language.

The whole document is fetched once; each language is then compiled and
written independently, so a failure in one language never affects another.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from tqdm import tqdm

from translocale.api_client import fetch_all_translations
from translocale.arb_builder import (
    build_translation_bundle,
    write_arb_file,
    write_fallbacks_file,
)
from translocale.models import TranslationsResponse

logger = logging.getLogger(__name__)


@dataclass
class DownloadSummary:
    """Result of one download run."""
    languages: List[str] = field(default_factory=list)
    written_files: List[str] = field(default_factory=list)
    failed_languages: List[str] = field(default_factory=list)
    fallbacks_file: Optional[str] = None

    @property
    def completed(self) -> int:
        return len(self.written_files)

    @property
    def failed(self) -> int:
        return len(self.failed_languages)


def completion_percent(translation_count: int, total_keys: int) -> int:
    if total_keys <= 0:
        return 0
    return round(translation_count / total_keys * 100)


def format_language_listing(response: TranslationsResponse) -> List[str]:
    """One human-readable line per available language."""
    lines = []
    for language in response.languages:
        percent = completion_percent(language.translation_count, response.meta.total_keys)
        lines.append(
            f"{language.language_code}: {language.name} ({language.native_name}) - {percent}% complete"
        )
    return lines


def select_languages(
    available: Sequence[str],
    requested: Optional[Sequence[str]],
    configured: Sequence[str],
    all_languages: bool = False
) -> List[str]:
    """
    Decide which languages to compile.

    ``all_languages`` wins, then an explicit request, then the configured
    list. Unavailable languages are reported and dropped.
    """
    if all_languages:
        return list(available)

    if requested:
        candidates, origin = list(requested), 'requested'
    else:
        candidates, origin = list(configured), 'configured'

    unavailable = [language for language in candidates if language not in available]
    if unavailable:
        logger.warning(
            f"The following {origin} languages are not available: {', '.join(unavailable)}"
        )
    return [language for language in candidates if language in available]


def process_languages(
    response: TranslationsResponse,
    languages: Sequence[str],
    output_dir: str
) -> DownloadSummary:
    """
    Compile and write one ARB file per language.

    An error while compiling or writing a language is logged and counted;
    the remaining languages are still processed.
    """
    summary = DownloadSummary(languages=list(languages))
    for language_code in tqdm(languages, desc="Compiling translations", unit="language"):
        try:
            language = response.find_language(language_code)
            if language is None:
                raise LookupError(f"Language '{language_code}' not found in response")
            bundle = build_translation_bundle(language, response.meta)
            arb_path = write_arb_file(bundle, output_dir)
            logger.info(f"Generated ARB file: {arb_path}")
            summary.written_files.append(arb_path)
        except Exception as e:
            logger.error(f"Error processing translations for {language_code}: {e}")
            summary.failed_languages.append(language_code)

    if response.meta.fallbacks:
        try:
            summary.fallbacks_file = write_fallbacks_file(response.meta.fallbacks, output_dir)
            logger.info(f"Generated fallbacks file: {summary.fallbacks_file}")
        except OSError as e:
            logger.warning(f"Failed to create fallbacks file: {e}")
    return summary


def log_summary(response: TranslationsResponse, summary: DownloadSummary) -> None:
    meta = response.meta
    logger.info("Translation download completed.")
    logger.info(f"   Languages processed: {len(summary.languages)}")
    logger.info(f"   Successfully downloaded: {summary.completed}")
    if summary.failed:
        logger.info(f"   Failed: {summary.failed} ({', '.join(summary.failed_languages)})")
    logger.info(f"   Total keys: {meta.total_keys}")
    logger.info(f"   Total translations: {meta.total_translations}")
    logger.info(f"   Version: {meta.version}")
    logger.info(f"   Last modified: {meta.last_modified}")
    logger.info(f"   Available languages: {', '.join(meta.supported_locales)}")


async def download_translations(
    base_url: str,
    api_key: str,
    output_dir: str,
    configured_languages: Sequence[str],
    requested_languages: Optional[Sequence[str]] = None,
    all_languages: bool = False
) -> DownloadSummary:
    """
    Run the download flow end to end.

    Args:
        base_url: Root URL of the Translocale server.
        api_key: Project API key.
        output_dir: Directory receiving the ARB files; created if missing.
        configured_languages: Languages from the configuration file.
        requested_languages: Languages given on the command line, if any.
        all_languages: Compile every language the server returned.

    Returns:
        DownloadSummary: What was written and what failed.

    Raises:
        FatalFetchError: If the translations can't be fetched or decoded.
    """
    logger.info("Fetching all translations...")
    response = await fetch_all_translations(base_url, api_key)

    languages = select_languages(
        response.language_codes, requested_languages, configured_languages, all_languages
    )
    if not languages:
        logger.error("No available languages to process. Aborting.")
        return DownloadSummary()

    if not os.path.isdir(output_dir):
        os.makedirs(output_dir, exist_ok=True)
        logger.info(f"Created output directory: {output_dir}")

    logger.info(f"Processing {len(languages)} languages: {', '.join(languages)}")
    summary = process_languages(response, languages, output_dir)
    log_summary(response, summary)
    return summary


async def list_available_languages(base_url: str, api_key: str) -> List[str]:
    """Fetch the translations document and describe the languages it holds."""
    response = await fetch_all_translations(base_url, api_key)
    return format_language_listing(response)
