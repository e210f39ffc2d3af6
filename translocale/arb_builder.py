"""Assembly of per-language translation bundles and their ARB serialization."""
import json
import logging
import os
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from translocale.identifiers import (
    is_valid_identifier,
    sanitize_placeholder_name,
    transform_key_to_identifier,
)
from translocale.message_format import analyze_message
from translocale.models import (
    BundleEntry,
    LanguageData,
    MessageKind,
    Placeholder,
    PlaceholderKind,
    TranslationBundle,
    TranslationMetadata,
)

logger = logging.getLogger(__name__)

DESCRIPTION_TEMPLATE = 'Auto-generated from Translocale key: {key}'
ARB_FILE_TEMPLATE = 'app_{language_code}.arb'
FALLBACKS_FILE_NAME = 'l10n_fallbacks.json'

# Reserved bundle-level keys.
LOCALE_KEY = '@@locale'
LANGUAGE_NAME_KEY = '@@languageName'
NATIVE_NAME_KEY = '@@nativeName'
IS_RTL_KEY = '@@isRtl'
KEY_MAPPING_KEY = '@@translocaleKeyMapping'
VERSION_KEY = '@@version'
LAST_MODIFIED_KEY = '@@lastModified'


def filter_placeholders_for_plural_message(placeholders: List[Placeholder]) -> List[Placeholder]:
    """
    Keep the plural count and any text placeholder whose raw name is already legal.

    Names containing ``#`` or spaces would break the generated plural syntax.
    """
    return [
        placeholder for placeholder in placeholders
        if placeholder.kind is PlaceholderKind.INTEGER or is_valid_identifier(placeholder.name)
    ]


def build_placeholder_metadata(placeholders: List[Placeholder]) -> Dict[str, Dict[str, str]]:
    """Map sanitized placeholder names to their ``{type, example, format?}`` records."""
    metadata: Dict[str, Dict[str, str]] = {}
    for placeholder in placeholders:
        record = {
            'type': placeholder.kind.value,
            'example': placeholder.example,
        }
        if placeholder.format is not None:
            record['format'] = placeholder.format
        metadata[sanitize_placeholder_name(placeholder.name)] = record
    return metadata


def build_entry(api_key: str, value_text: str) -> BundleEntry:
    """Analyze one raw translation and assemble its bundle entry."""
    analyzed = analyze_message(value_text)

    placeholders = list(analyzed.placeholders)
    if analyzed.message_kind is MessageKind.PLURAL:
        placeholders = filter_placeholders_for_plural_message(placeholders)
        dropped = [p.name for p in analyzed.placeholders if p not in placeholders]
        if dropped:
            logger.warning(
                "Dropped placeholders %s from plural message '%s'; they are not valid identifiers.",
                dropped, api_key
            )

    return BundleEntry(
        identifier=transform_key_to_identifier(api_key),
        raw_key=api_key,
        text=analyzed.normalized_text,
        description=DESCRIPTION_TEMPLATE.format(key=api_key),
        placeholders=MappingProxyType(build_placeholder_metadata(placeholders)),
    )


def build_key_mapping(translations: Mapping[str, str]) -> Dict[str, str]:
    """Raw server key -> member name, used to round-trip over-the-air updates."""
    return {api_key: transform_key_to_identifier(api_key) for api_key in translations}


def build_translation_bundle(language: LanguageData, meta: TranslationMetadata) -> TranslationBundle:
    """
    Compile one language into a translation bundle.

    Entries follow the iteration order of ``language.translations``. When two
    raw keys produce the same member name the later one replaces the earlier
    one in place and a warning is logged; both keys remain in the key mapping.

    Args:
        language: The decoded language data.
        meta: The run-wide translation metadata.

    Returns:
        TranslationBundle: The assembled, immutable bundle.
    """
    entries: Dict[str, BundleEntry] = {}
    for api_key, value_text in language.translations.items():
        entry = build_entry(api_key, value_text)
        previous = entries.get(entry.identifier)
        if previous is not None:
            logger.warning(
                "Keys '%s' and '%s' both map to '%s' in '%s'; keeping the value of '%s'.",
                previous.raw_key, api_key, entry.identifier, language.language_code, api_key
            )
        entries[entry.identifier] = entry

    return TranslationBundle(
        locale=language.language_code,
        language_name=language.name,
        native_name=language.native_name,
        is_rtl=language.is_rtl,
        entries=tuple(entries.values()),
        key_mapping=MappingProxyType(build_key_mapping(language.translations)),
        version=meta.version,
        last_modified=meta.last_modified,
    )


def bundle_to_arb(bundle: TranslationBundle) -> Dict[str, Any]:
    """Lay a bundle out as an ordered ARB document."""
    arb: Dict[str, Any] = {
        LOCALE_KEY: bundle.locale,
        LANGUAGE_NAME_KEY: bundle.language_name,
        NATIVE_NAME_KEY: bundle.native_name,
    }
    if bundle.is_rtl:
        arb[IS_RTL_KEY] = True

    for entry in bundle.entries:
        arb[entry.identifier] = entry.text
        arb[f'@{entry.identifier}'] = entry.metadata()

    arb[KEY_MAPPING_KEY] = json.dumps(dict(bundle.key_mapping), ensure_ascii=False, separators=(',', ':'))
    arb[VERSION_KEY] = bundle.version
    arb[LAST_MODIFIED_KEY] = bundle.last_modified
    return arb


def dump_arb(arb: Dict[str, Any]) -> str:
    return json.dumps(arb, ensure_ascii=False, indent=2)


def convert_language_to_arb(language: LanguageData, meta: TranslationMetadata) -> str:
    """Build a language's bundle and return it as ARB JSON text."""
    return dump_arb(bundle_to_arb(build_translation_bundle(language, meta)))


def write_arb_file(bundle: TranslationBundle, output_dir: str) -> str:
    """
    Write a bundle to ``<output_dir>/app_<locale>.arb``.

    Returns:
        str: The path of the written file.
    """
    arb_path = os.path.join(output_dir, ARB_FILE_TEMPLATE.format(language_code=bundle.locale))
    with open(arb_path, 'w', encoding='utf-8') as f:
        f.write(dump_arb(bundle_to_arb(bundle)))
    return arb_path


def write_fallbacks_file(fallbacks: Mapping[str, str], output_dir: str) -> Optional[str]:
    """Write the locale fallback table; nothing is written for an empty table."""
    if not fallbacks:
        return None
    fallbacks_path = os.path.join(output_dir, FALLBACKS_FILE_NAME)
    with open(fallbacks_path, 'w', encoding='utf-8') as f:
        json.dump(dict(fallbacks), f, ensure_ascii=False, indent=2)
    return fallbacks_path
