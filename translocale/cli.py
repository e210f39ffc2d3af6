"""Command line entry point: ``translocale download | fix-arb | gen-l10n``."""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from translocale import __version__
from translocale.app_config import DEFAULT_OUTPUT_DIR, load_app_config
from translocale.arb_fixer import fix_arb_directory
from translocale.download_translations import download_translations, list_available_languages
from translocale.errors import TranslocaleError
from translocale.gen_l10n import run_gen_l10n
from translocale.logging_config import setup_logger


def _split_languages(values: Optional[List[str]]) -> Optional[List[str]]:
    if not values:
        return None
    languages = []
    for value in values:
        languages.extend(code.strip() for code in value.split(',') if code.strip())
    return languages


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='translocale',
        description='Download Translocale translations and compile them into ARB files.'
    )
    parser.add_argument('-v', '--version', action='version', version=f'Translocale CLI v{__version__}')
    subparsers = parser.add_subparsers(dest='command')

    download = subparsers.add_parser('download', help='Download translations and generate ARB files')
    download.add_argument('-k', '--api-key', help='API key for the Translocale service')
    download.add_argument('-u', '--url', help='Base URL for the Translocale API')
    download.add_argument('-o', '--output', help='Output directory for ARB files')
    download.add_argument('-l', '--languages', action='append',
                          help='Comma-separated list of language codes to download')
    download.add_argument('-a', '--all-languages', action='store_true',
                          help='Download all available languages from the server')
    download.add_argument('--list', action='store_true', help='List available languages from the server')

    fix_arb = subparsers.add_parser('fix-arb', help='Remove invalid placeholders from plural messages')
    fix_arb.add_argument('-d', '--dir', default=DEFAULT_OUTPUT_DIR, help='Directory containing ARB files')

    gen_l10n = subparsers.add_parser('gen-l10n', help="Run Flutter's gen-l10n on the ARB files")
    gen_l10n.add_argument('-a', '--auto-download', action='store_true',
                          help='Download translations before generating')
    gen_l10n.add_argument('-f', '--force', action='store_true',
                          help='Force regeneration of localization files')
    return parser


async def _download(args: argparse.Namespace) -> int:
    config = load_app_config(require_api_key=not args.api_key)
    logger = config.logger
    api_key = args.api_key or config.api_key
    base_url = args.url or config.base_url

    if getattr(args, 'list', False):
        logger.info("Available languages:")
        for line in await list_available_languages(base_url, api_key):
            logger.info(f"   - {line}")
        return 0

    summary = await download_translations(
        base_url=base_url,
        api_key=api_key,
        output_dir=getattr(args, 'output', None) or config.output_dir,
        configured_languages=config.languages,
        requested_languages=_split_languages(getattr(args, 'languages', None)),
        all_languages=getattr(args, 'all_languages', False),
    )
    return 0 if summary.languages else 1


def _fix_arb(args: argparse.Namespace) -> int:
    logger = setup_logger('INFO', None, True)
    try:
        fixed_files = fix_arb_directory(args.dir)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    if fixed_files:
        logger.info("Next step: run 'translocale gen-l10n' to regenerate localization classes.")
    return 0


def _gen_l10n(args: argparse.Namespace) -> int:
    if args.auto_download:
        exit_code = asyncio.run(_download(argparse.Namespace(api_key=None, url=None)))
        if exit_code:
            return exit_code
    config = load_app_config(require_api_key=False)
    run_gen_l10n(config.output_dir, force=args.force)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == 'download':
            return asyncio.run(_download(args))
        if args.command == 'fix-arb':
            return _fix_arb(args)
        return _gen_l10n(args)
    except TranslocaleError as e:
        logging.getLogger('translocale').error(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
