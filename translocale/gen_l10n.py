"""Thin wrapper around ``flutter gen-l10n``, the external class generator."""
import glob
import logging
import os
import shutil
import subprocess
from typing import List, Optional

import yaml

from translocale.errors import GeneratorFailedError, MissingGeneratedOutputError

logger = logging.getLogger(__name__)

L10N_YAML_PATH = 'l10n.yaml'
DEFAULT_GEN_OUTPUT_DIR = 'lib/flutter_gen/gen_l10n'
TEMPLATE_ARB_FILE = 'app_en.arb'
OUTPUT_LOCALIZATION_FILE = 'app_localizations.dart'

# Places older Flutter versions put generated classes.
ALTERNATIVE_OUTPUT_DIRS = [
    '.dart_tool/flutter_gen/gen_l10n',
    '.dart_tool/gen_l10n',
    'lib/gen_l10n',
    'lib/generated',
]


def read_l10n_output_dir(l10n_yaml_path: str = L10N_YAML_PATH) -> Optional[str]:
    """Return ``output-dir`` from ``l10n.yaml`` if the file sets it."""
    if not os.path.exists(l10n_yaml_path):
        return None
    try:
        with open(l10n_yaml_path, 'r', encoding='utf-8') as f:
            l10n_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not parse {l10n_yaml_path}: {e}")
        return None
    if isinstance(l10n_config, dict) and l10n_config.get('output-dir'):
        return str(l10n_config['output-dir'])
    return None


def build_gen_l10n_command(arb_dir: str, gen_output_dir: str, has_l10n_yaml: bool) -> List[str]:
    command = ['flutter', 'gen-l10n']
    if not has_l10n_yaml:
        command.extend([
            f'--arb-dir={arb_dir}',
            f'--template-arb-file={TEMPLATE_ARB_FILE}',
            f'--output-localization-file={OUTPUT_LOCALIZATION_FILE}',
            f'--output-dir={gen_output_dir}',
            '--no-synthetic-package',
        ])
    return command


def _dart_files(directory: str) -> List[str]:
    return sorted(glob.glob(os.path.join(directory, '*.dart')))


def _clean_generated_files(gen_output_dir: str) -> None:
    for dart_file in _dart_files(gen_output_dir):
        os.remove(dart_file)
    logger.info(f"Cleared existing generated files in {gen_output_dir}")


def _recover_generated_files(gen_output_dir: str) -> str:
    """Copy generated classes from a known alternative location into place."""
    for location in ALTERNATIVE_OUTPUT_DIRS:
        if os.path.isdir(location) and os.listdir(location):
            logger.info(f"Found generated files in: {location}")
            os.makedirs(gen_output_dir, exist_ok=True)
            for dart_file in _dart_files(location):
                shutil.copy2(dart_file, os.path.join(gen_output_dir, os.path.basename(dart_file)))
            return location
    raise MissingGeneratedOutputError(
        f"No generated localization files found in {gen_output_dir} or any known location."
    )


def _locate_localization_file(gen_output_dir: str) -> str:
    """Return the path of the generated localizations class, wherever flutter put it."""
    expected_path = os.path.join(gen_output_dir, OUTPUT_LOCALIZATION_FILE)
    if os.path.exists(expected_path):
        return expected_path
    for location in ALTERNATIVE_OUTPUT_DIRS:
        candidate = os.path.join(location, OUTPUT_LOCALIZATION_FILE)
        if os.path.exists(candidate):
            logger.info(f"Found {OUTPUT_LOCALIZATION_FILE} at: {candidate}")
            return candidate
    raise MissingGeneratedOutputError(f"Generated {OUTPUT_LOCALIZATION_FILE} not found.")


def run_gen_l10n(arb_dir: str, force: bool = False, l10n_yaml_path: str = L10N_YAML_PATH) -> str:
    """
    Run ``flutter gen-l10n`` and make sure it produced something.

    Already written ARB files are never touched.

    Args:
        arb_dir: Directory holding the ARB files.
        force: Delete previously generated ``.dart`` files first.
        l10n_yaml_path: Path of Flutter's localization config.

    Returns:
        str: The directory holding the generated classes.

    Raises:
        GeneratorFailedError: If flutter exits with a non-zero status.
        MissingGeneratedOutputError: If no generated files can be found.
    """
    has_l10n_yaml = os.path.exists(l10n_yaml_path)
    gen_output_dir = read_l10n_output_dir(l10n_yaml_path) or DEFAULT_GEN_OUTPUT_DIR
    logger.info(f"Generated files will be placed in: {gen_output_dir}")

    if force and os.path.isdir(gen_output_dir):
        _clean_generated_files(gen_output_dir)

    command = build_gen_l10n_command(arb_dir, gen_output_dir, has_l10n_yaml)
    try:
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=True
        )
    except subprocess.CalledProcessError as gen_exc:
        raise GeneratorFailedError(f"flutter gen-l10n failed: {gen_exc.stderr}") from gen_exc
    except FileNotFoundError as gen_exc:
        raise GeneratorFailedError("flutter executable not found on PATH") from gen_exc

    if result.stdout:
        logger.debug(result.stdout)

    if not os.path.isdir(gen_output_dir) or not os.listdir(gen_output_dir):
        logger.warning(f"No files were generated in {gen_output_dir}; searching alternative locations.")
        _recover_generated_files(gen_output_dir)

    _locate_localization_file(gen_output_dir)
    logger.info("flutter gen-l10n completed successfully")
    return gen_output_dir
