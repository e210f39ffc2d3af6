import glob
import json
import logging
import os
from typing import Any, Dict, List, Tuple

from translocale.identifiers import is_valid_identifier
from translocale.message_format import classify_message
from translocale.models import MessageKind

logger = logging.getLogger(__name__)

COUNT_PLACEHOLDER_NAME = 'count'


def is_count_placeholder(name: str) -> bool:
    """The plural count is always kept, whatever its metadata says."""
    return name.lower() == COUNT_PLACEHOLDER_NAME


def fix_plural_placeholders(placeholders: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Drop placeholder records whose keys are not legal identifiers.

    Args:
        placeholders: The ``placeholders`` mapping of one message's metadata.

    Returns:
        A tuple of the kept placeholders (original order) and the removed keys.
    """
    kept: Dict[str, Any] = {}
    removed: List[str] = []
    for name, record in placeholders.items():
        if is_count_placeholder(name) or is_valid_identifier(name):
            kept[name] = record
        else:
            removed.append(name)
    return kept, removed


def fix_arb_document(arb: Dict[str, Any]) -> List[str]:
    """
    Clean the placeholder metadata of every plural message in an ARB document.

    The document is modified in place; keys keep their order.

    Returns:
        List[str]: The message keys whose metadata was rewritten.
    """
    fixed_keys = []
    for key in list(arb.keys()):
        if key.startswith('@'):
            continue
        value = arb[key]
        if not isinstance(value, str) or classify_message(value) is not MessageKind.PLURAL:
            continue

        metadata = arb.get(f'@{key}')
        if not isinstance(metadata, dict) or not isinstance(metadata.get('placeholders'), dict):
            continue

        kept, removed = fix_plural_placeholders(metadata['placeholders'])
        if removed:
            for name in removed:
                logger.info("Removing problematic placeholder '%s' from '%s'.", name, key)
            new_metadata = dict(metadata)
            new_metadata['placeholders'] = kept
            arb[f'@{key}'] = new_metadata
            fixed_keys.append(key)
    return fixed_keys


def fix_arb_file(arb_path: str) -> bool:
    """
    Rewrite one ARB file if any of its plural messages carried illegal placeholders.

    Returns:
        bool: True if the file was rewritten.
    """
    with open(arb_path, 'r', encoding='utf-8') as f:
        arb = json.load(f)
    if not isinstance(arb, dict):
        raise ValueError(f"'{arb_path}' does not contain a JSON object.")

    fixed_keys = fix_arb_document(arb)
    if not fixed_keys:
        return False

    with open(arb_path, 'w', encoding='utf-8') as f:
        f.write(json.dumps(arb, ensure_ascii=False, indent=2))
    return True


def fix_arb_directory(arb_dir: str) -> int:
    """
    Fix every ``*.arb`` file in a directory.

    A file that can't be read or parsed is logged and skipped.

    Args:
        arb_dir: Directory holding the generated ARB files.

    Returns:
        int: The number of files that were rewritten.

    Raises:
        FileNotFoundError: If the directory is missing or holds no ARB files.
    """
    if not os.path.isdir(arb_dir):
        raise FileNotFoundError(f"Directory not found: {arb_dir}")

    arb_files = sorted(glob.glob(os.path.join(arb_dir, '*.arb')))
    if not arb_files:
        raise FileNotFoundError(f"No ARB files found in {arb_dir}")

    logger.info(f"Found {len(arb_files)} ARB file(s) to process in '{arb_dir}'.")
    fixed_files = 0
    for arb_path in arb_files:
        file_name = os.path.basename(arb_path)
        try:
            if fix_arb_file(arb_path):
                logger.info(f"Fixed and saved: {file_name}")
                fixed_files += 1
            else:
                logger.info(f"No issues found in: {file_name}")
        except (OSError, ValueError) as e:
            logger.error(f"Error processing {file_name}: {e}")

    logger.info(f"Completed processing {len(arb_files)} file(s); fixed issues in {fixed_files}.")
    return fixed_files
