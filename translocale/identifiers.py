import re

# Characters allowed in a single segment of a synthesized member name.
INVALID_KEY_CHARS = re.compile(r'[^a-zA-Z0-9_]')
# Characters allowed in a placeholder name ($ is legal in Dart identifiers).
INVALID_PLACEHOLDER_CHARS = re.compile(r'[^a-zA-Z0-9_$]')
IDENTIFIER_PATTERN = re.compile(r'[a-zA-Z_$][a-zA-Z0-9_$]*')
LEADING_DIGIT = re.compile(r'^[0-9]')

PLACEHOLDER_FALLBACK_NAME = 'param'


def transform_key_to_identifier(api_key: str) -> str:
    """
    Transform a dotted server key into a camel-cased member name.

    ``common.buttons.save`` becomes ``commonButtonsSave``. Single-segment keys
    are only cleaned, never re-cased.

    Args:
        api_key: The raw key as stored on the translation server.

    Returns:
        A non-empty string matching the identifier grammar.
    """
    parts = api_key.split('.')

    cleaned_parts = []
    for part in parts:
        part = INVALID_KEY_CHARS.sub('_', part)
        if LEADING_DIGIT.match(part):
            part = f'_{part}'
        cleaned_parts.append(part)

    result = '_'.join(cleaned_parts)

    if len(cleaned_parts) > 1:
        words = result.split('_')
        result = words[0].lower() + ''.join(
            word[0].upper() + word[1:].lower() for word in words[1:] if word
        )

    # Camel-casing drops the underscores that guarded digit-led segments.
    if not result or LEADING_DIGIT.match(result):
        result = f'_{result}'
    return result


def sanitize_placeholder_name(name: str) -> str:
    """Replace anything that can't appear in an identifier; never fails."""
    sanitized = INVALID_PLACEHOLDER_CHARS.sub('_', name)
    if LEADING_DIGIT.match(sanitized):
        sanitized = f'_{sanitized}'
    if not sanitized:
        sanitized = PLACEHOLDER_FALLBACK_NAME
    return sanitized


def is_valid_identifier(name: str) -> bool:
    """Check whether a placeholder name can be used as-is by the code generator."""
    if ' ' in name or '#' in name or '-' in name:
        return False
    return IDENTIFIER_PATTERN.fullmatch(name) is not None
