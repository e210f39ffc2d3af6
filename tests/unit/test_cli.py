from unittest.mock import AsyncMock, patch

import pytest

from translocale.cli import build_parser, main
from translocale.download_translations import DownloadSummary
from translocale.errors import FatalFetchError, GeneratorFailedError


class TestParser:
    def test_download_options(self):
        args = build_parser().parse_args(['download', '-k', 'tl_key', '-l', 'en,es', '-l', 'fr', '-o', 'out'])
        assert args.command == 'download'
        assert args.api_key == 'tl_key'
        assert args.languages == ['en,es', 'fr']
        assert args.output == 'out'
        assert args.all_languages is False

    def test_fix_arb_default_directory(self):
        assert build_parser().parse_args(['fix-arb']).dir == 'lib/l10n'

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['--version'])
        assert 'Translocale CLI v' in capsys.readouterr().out


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert 'usage' in capsys.readouterr().out

    def test_fix_arb_missing_directory(self, tmp_path):
        assert main(['fix-arb', '--dir', str(tmp_path / 'missing')]) == 1

    def test_download_passes_split_languages(self, clean_environment):
        summary = DownloadSummary(languages=['en', 'es', 'fr'])
        with patch('translocale.cli.download_translations', new=AsyncMock(return_value=summary)) as mock_download:
            assert main(['download', '-k', 'tl_key', '-u', 'https://example.test', '-l', 'en, es', '-l', 'fr']) == 0

        kwargs = mock_download.call_args.kwargs
        assert kwargs['api_key'] == 'tl_key'
        assert kwargs['base_url'] == 'https://example.test'
        assert kwargs['requested_languages'] == ['en', 'es', 'fr']
        assert kwargs['output_dir'] == 'lib/l10n'

    def test_download_with_nothing_selected_fails(self, clean_environment):
        with patch('translocale.cli.download_translations', new=AsyncMock(return_value=DownloadSummary())):
            assert main(['download', '-k', 'tl_key']) == 1

    def test_fatal_fetch_error_exits_non_zero(self, clean_environment):
        with patch('translocale.cli.download_translations', new=AsyncMock(side_effect=FatalFetchError('status 401'))):
            assert main(['download', '-k', 'tl_key']) == 1

    def test_list_languages(self, clean_environment):
        listing = AsyncMock(return_value=['en: English (English) - 100% complete'])
        with patch('translocale.cli.list_available_languages', new=listing):
            assert main(['download', '-k', 'tl_key', '--list']) == 0
        listing.assert_awaited_once()

    def test_gen_l10n_failure_exits_non_zero(self, clean_environment):
        with patch('translocale.cli.run_gen_l10n', side_effect=GeneratorFailedError('boom')):
            assert main(['gen-l10n']) == 1

    def test_gen_l10n_uses_configured_arb_dir(self, clean_environment):
        with patch('translocale.cli.run_gen_l10n', return_value='lib/flutter_gen/gen_l10n') as mock_run:
            assert main(['gen-l10n', '--force']) == 0
        mock_run.assert_called_once_with('lib/l10n', force=True)
