"""Client for the Translocale public translations endpoint."""
import logging
from typing import Any, Dict, Optional

import httpx
import jsonschema

from translocale.errors import FatalFetchError
from translocale.models import TranslationsResponse

logger = logging.getLogger(__name__)

TRANSLATIONS_ENDPOINT = '/api/v1/public/translations'
API_KEY_HEADER = 'X-API-Key'
DEFAULT_TIMEOUT_SECONDS = 30.0

# Only what decoding relies on is required; optional fields get defaults.
TRANSLATIONS_RESPONSE_SCHEMA = {
    "type": "object",
    "required": ["data", "meta"],
    "properties": {
        "data": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["languageCode", "translations"],
                "properties": {
                    "languageCode": {"type": "string"},
                    "name": {"type": ["string", "null"]},
                    "nativeName": {"type": ["string", "null"]},
                    "isRtl": {"type": ["boolean", "null"]},
                    "translationCount": {"type": ["integer", "null"]},
                    "translations": {"type": "object"}
                }
            }
        },
        "meta": {
            "type": "object",
            "properties": {
                "totalKeys": {"type": ["integer", "null"]},
                "totalTranslations": {"type": ["integer", "null"]},
                "languageCount": {"type": ["integer", "null"]},
                "version": {"type": ["string", "null"]},
                "lastModified": {"type": ["string", "null"]},
                "supportedLocales": {"type": ["array", "null"], "items": {"type": "string"}},
                "fallbacks": {
                    "type": ["object", "null"],
                    "additionalProperties": {"type": "string"}
                },
                "project": {"type": ["object", "null"]}
            }
        }
    }
}


def decode_translations_response(document: Any) -> TranslationsResponse:
    """
    Validate and decode the translations document.

    Raises:
        FatalFetchError: If the document does not have the expected shape.
    """
    try:
        jsonschema.validate(instance=document, schema=TRANSLATIONS_RESPONSE_SCHEMA)
    except jsonschema.ValidationError as schema_exc:
        raise FatalFetchError(
            f"Translations response did not match the expected schema: {schema_exc.message}"
        ) from schema_exc
    return TranslationsResponse.from_json(document)


def build_translations_url(base_url: str) -> str:
    return base_url.rstrip('/') + TRANSLATIONS_ENDPOINT


async def fetch_all_translations(
    base_url: str,
    api_key: str,
    client: Optional[httpx.AsyncClient] = None
) -> TranslationsResponse:
    """
    Fetch every language's translations in a single request.

    There is no retry: any failure aborts the run.

    Args:
        base_url: Root URL of the Translocale server.
        api_key: Project API key sent in the ``X-API-Key`` header.
        client: Optional client to reuse; one is created and closed otherwise.

    Returns:
        TranslationsResponse: The decoded document.

    Raises:
        FatalFetchError: On transport errors, non-200 responses and malformed documents.
    """
    url = build_translations_url(base_url)
    headers: Dict[str, str] = {
        API_KEY_HEADER: api_key,
        'Content-Type': 'application/json',
    }

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SECONDS)
    try:
        logger.debug("Requesting translations from %s", url)
        response = await client.get(url, headers=headers)
    except httpx.RequestError as e:
        raise FatalFetchError(f"Request to {url} failed: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    if response.status_code != 200:
        raise FatalFetchError(
            f"API request failed with status {response.status_code}: {response.text}"
        )

    try:
        document = response.json()
    except ValueError as e:
        raise FatalFetchError(f"API response is not valid UTF-8 JSON: {e}") from e

    return decode_translations_response(document)
