"""Data model shared by the download, analysis and bundle-assembly steps."""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


class PlaceholderKind(Enum):
    """Placeholder types understood by the localization generator."""
    TEXT = 'String'
    INTEGER = 'int'


class MessageKind(Enum):
    PLURAL = 'plural'
    SELECT = 'select'
    SIMPLE = 'simple'


class RepairStatus(Enum):
    REPAIRED = 'repaired'
    UNCHANGED = 'unchanged'
    UNREPAIRABLE = 'unrepairable'


@dataclass(frozen=True)
class RepairResult:
    """Outcome of the default-case repair step of message analysis."""
    status: RepairStatus
    reason: Optional[str] = None

    @classmethod
    def repaired(cls, reason: str) -> 'RepairResult':
        return cls(RepairStatus.REPAIRED, reason)

    @classmethod
    def unchanged(cls) -> 'RepairResult':
        return cls(RepairStatus.UNCHANGED)

    @classmethod
    def unrepairable(cls, reason: str) -> 'RepairResult':
        return cls(RepairStatus.UNREPAIRABLE, reason)


@dataclass(frozen=True)
class Placeholder:
    """
    A variable referenced by a translation message.

    ``name`` is the token exactly as it appears in the message; it is only
    sanitized when the bundle is serialized.
    """
    name: str
    kind: PlaceholderKind
    example: str
    format: Optional[str] = None


@dataclass(frozen=True)
class AnalyzedMessage:
    normalized_text: str
    placeholders: Tuple[Placeholder, ...]
    message_kind: MessageKind
    repair: RepairResult = field(default_factory=RepairResult.unchanged)


def _as_int(value: Any) -> int:
    if value is None:
        return 0
    return int(value)


def _as_text(value: Any) -> str:
    if value is None:
        return ''
    return str(value)


@dataclass(frozen=True)
class LanguageData:
    """One language of the server response: metadata plus key -> text map."""
    language_code: str
    name: str
    native_name: str
    is_rtl: bool
    translation_count: int
    translations: Mapping[str, str]

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'LanguageData':
        translations = {
            str(key): _as_text(value) for key, value in data['translations'].items()
        }
        return cls(
            language_code=_as_text(data['languageCode']),
            name=_as_text(data.get('name')),
            native_name=_as_text(data.get('nativeName')),
            is_rtl=bool(data.get('isRtl') or False),
            translation_count=_as_int(data.get('translationCount')),
            translations=MappingProxyType(translations),
        )


@dataclass(frozen=True)
class TranslationMetadata:
    """Bundle-wide facts shared read-only by every language of one run."""
    total_keys: int
    total_translations: int
    language_count: int
    format: str
    version: str
    last_modified: str
    supported_locales: Tuple[str, ...]
    fallbacks: Mapping[str, str]
    project: Mapping[str, Any]

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'TranslationMetadata':
        supported_locales = tuple(str(locale) for locale in data.get('supportedLocales') or [])
        fallbacks = {
            str(key): str(value) for key, value in (data.get('fallbacks') or {}).items()
        }
        return cls(
            total_keys=_as_int(data.get('totalKeys')),
            total_translations=_as_int(data.get('totalTranslations')),
            language_count=_as_int(data.get('languageCount')),
            format=_as_text(data.get('format') or 'json'),
            version=_as_text(data.get('version')),
            last_modified=_as_text(data.get('lastModified')),
            supported_locales=supported_locales,
            fallbacks=MappingProxyType(fallbacks),
            project=MappingProxyType(dict(data.get('project') or {})),
        )


@dataclass(frozen=True)
class TranslationsResponse:
    languages: Tuple[LanguageData, ...]
    meta: TranslationMetadata

    @classmethod
    def from_json(cls, document: Dict[str, Any]) -> 'TranslationsResponse':
        languages = tuple(LanguageData.from_json(item) for item in document['data'])
        return cls(languages=languages, meta=TranslationMetadata.from_json(document['meta']))

    @property
    def language_codes(self) -> Tuple[str, ...]:
        return tuple(language.language_code for language in self.languages)

    def find_language(self, language_code: str) -> Optional[LanguageData]:
        for language in self.languages:
            if language.language_code == language_code:
                return language
        return None


@dataclass(frozen=True)
class BundleEntry:
    """One assembled message: member name, text and its ARB metadata."""
    identifier: str
    raw_key: str
    text: str
    description: str
    placeholders: Mapping[str, Mapping[str, str]]

    def metadata(self) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {'description': self.description}
        if self.placeholders:
            metadata['placeholders'] = {
                name: dict(record) for name, record in self.placeholders.items()
            }
        return metadata


@dataclass(frozen=True)
class TranslationBundle:
    """A compiled, ready-to-serialize translation document for one language."""
    locale: str
    language_name: str
    native_name: str
    is_rtl: bool
    entries: Tuple[BundleEntry, ...]
    key_mapping: Mapping[str, str]
    version: str
    last_modified: str
