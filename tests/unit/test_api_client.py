import json
import unittest

import httpx

from translocale.api_client import (
    build_translations_url,
    decode_translations_response,
    fetch_all_translations,
)
from translocale.errors import FatalFetchError


def sample_document():
    return {
        "data": [
            {
                "languageCode": "en",
                "name": "English",
                "nativeName": "English",
                "isRtl": False,
                "translationCount": 2,
                "translations": {"common.save": "Save", "common.cancel": "Cancel"},
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
            "totalKeys": 2,
            "totalTranslations": 3,
            "languageCount": 2,
            "format": "json",
            "version": "3",
            "lastModified": "2024-05-01T10:00:00Z",
            "supportedLocales": ["en", "ar"],
            "fallbacks": {"ar_EG": "ar"},
            "project": {"name": "Demo"},
        },
    }


class TestDecodeTranslationsResponse(unittest.TestCase):
    def test_full_document(self):
        response = decode_translations_response(sample_document())

        self.assertEqual(response.language_codes, ('en', 'ar'))
        arabic = response.find_language('ar')
        self.assertTrue(arabic.is_rtl)
        self.assertEqual(arabic.native_name, 'العربية')
        self.assertEqual(dict(arabic.translations), {'common.save': 'حفظ'})
        self.assertEqual(response.meta.supported_locales, ('en', 'ar'))
        self.assertEqual(dict(response.meta.fallbacks), {'ar_EG': 'ar'})
        self.assertIsNone(response.find_language('fr'))

    def test_optional_fields_get_defaults(self):
        document = {
            "data": [{"languageCode": "en", "translations": {"k": "v", "n": 5, "empty": None}}],
            "meta": {},
        }
        response = decode_translations_response(document)
        english = response.languages[0]

        self.assertEqual(english.name, '')
        self.assertEqual(english.native_name, '')
        self.assertFalse(english.is_rtl)
        self.assertEqual(english.translation_count, 0)
        self.assertEqual(dict(english.translations), {'k': 'v', 'n': '5', 'empty': ''})
        self.assertEqual(response.meta.total_keys, 0)
        self.assertEqual(response.meta.version, '')
        self.assertEqual(response.meta.supported_locales, ())
        self.assertEqual(dict(response.meta.fallbacks), {})

    def test_missing_required_fields_are_fatal(self):
        missing_translations = sample_document()
        del missing_translations['data'][0]['translations']
        missing_data = sample_document()
        del missing_data['data']
        missing_meta = sample_document()
        del missing_meta['meta']

        for document in (missing_translations, missing_data, missing_meta, [], None):
            with self.assertRaises(FatalFetchError):
                decode_translations_response(document)


class TestFetchAllTranslations(unittest.IsolatedAsyncioTestCase):
    async def _fetch(self, handler):
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_all_translations('https://example.test/', 'tl_test_key', client=client)

    def test_url_building(self):
        self.assertEqual(
            build_translations_url('https://example.test/'),
            'https://example.test/api/v1/public/translations'
        )

    async def test_successful_fetch(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=sample_document())

        response = await self._fetch(handler)

        self.assertEqual(response.language_codes, ('en', 'ar'))
        self.assertEqual(len(requests), 1)
        self.assertEqual(requests[0].headers['X-API-Key'], 'tl_test_key')
        self.assertEqual(str(requests[0].url), 'https://example.test/api/v1/public/translations')

    async def test_non_success_status_is_fatal(self):
        def handler(request):
            return httpx.Response(401, text='invalid api key')

        with self.assertRaises(FatalFetchError) as ctx:
            await self._fetch(handler)
        self.assertIn('401', str(ctx.exception))

    async def test_invalid_json_is_fatal(self):
        def handler(request):
            return httpx.Response(200, text='<html>oops</html>')

        with self.assertRaises(FatalFetchError):
            await self._fetch(handler)

    async def test_non_utf8_body_is_fatal(self):
        def handler(request):
            return httpx.Response(200, content=b'{"data": "\xff\xfe\xfa"}')

        with self.assertRaises(FatalFetchError):
            await self._fetch(handler)

    async def test_schema_violation_is_fatal(self):
        def handler(request):
            return httpx.Response(200, text=json.dumps({"data": "nope", "meta": {}}))

        with self.assertRaises(FatalFetchError):
            await self._fetch(handler)

    async def test_transport_error_is_fatal(self):
        def handler(request):
            raise httpx.ConnectError('connection refused', request=request)

        with self.assertRaises(FatalFetchError):
            await self._fetch(handler)


if __name__ == '__main__':
    unittest.main()
