import os
from unittest.mock import patch

import pytest

from translocale.models import TranslationsResponse


@pytest.fixture
def translations_document():
    """A server response with three languages, one of them right-to-left."""
    return {
        "data": [
            {
                "languageCode": "en",
                "name": "English",
                "nativeName": "English",
                "translationCount": 4,
                "translations": {
                    "common.save": "Save",
                    "greeting.hello": "Hello {name}!",
                    "cart.items": "{count, plural, one{1 item}}",
                    "profile.pronoun": "{gender, select, male{He} female{She}}",
                },
            },
            {
                "languageCode": "es",
                "name": "Spanish",
                "nativeName": "Español",
                "translationCount": 2,
                "translations": {"common.save": "Guardar", "greeting.hello": "¡Hola {name}!"},
            },
            {
                "languageCode": "ar",
                "name": "Arabic",
                "nativeName": "العربية",
                "isRtl": True,
                "translationCount": 1,
                "translations": {"common.save": "حفظ"},
            },
        ],
        "meta": {
            "totalKeys": 4,
            "totalTranslations": 7,
            "languageCount": 3,
            "format": "json",
            "version": "12",
            "lastModified": "2024-05-01T10:00:00Z",
            "supportedLocales": ["en", "es", "ar"],
            "fallbacks": {"es_MX": "es"},
            "project": {"name": "Demo"},
        },
    }


@pytest.fixture
def translations_response(translations_document):
    return TranslationsResponse.from_json(translations_document)


@pytest.fixture
def clean_environment(tmp_path, monkeypatch):
    """Run from an empty project directory with no translocale variables set."""
    monkeypatch.chdir(tmp_path)
    with patch.dict(os.environ, {}, clear=True):
        yield tmp_path
