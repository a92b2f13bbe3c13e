"""Read and write OpenAPI documents as JSON or YAML."""
import json
import logging
import os

import yaml

from apisnip.errors import EncodeError, ParseError, UnsupportedFormat

logger = logging.getLogger(__name__)

FORMATS = ('json', 'yaml')

EXTENSIONS = {
    '.json': 'json',
    '.yaml': 'yaml',
    '.yml': 'yaml',
}


class PlainDumper(yaml.SafeDumper):
    """Writes nodes shared through anchors in full instead of as aliases."""

    def ignore_aliases(self, data):
        return True


def detect_format(file_path, default=None):
    """
    Pick the serialization format from a file name or URL path.

    Args:
        file_path (str): Path or URL path
        default (str, optional): Returned when the extension is unknown

    Raises:
        UnsupportedFormat: The extension is unknown and no default is given
    """
    suffix = os.path.splitext(file_path.split('?', 1)[0])[1].lower()
    if suffix in EXTENSIONS:
        return EXTENSIONS[suffix]
    if default is not None:
        return default
    raise UnsupportedFormat("Unsupported file format. Use .json, .yaml, or .yml")


def sniff_format(text):
    return 'json' if text.lstrip()[:1] in ('{', '[') else 'yaml'


def decode(text, fmt):
    """
    Parse document text into a tree of dicts and lists.

    Raises:
        ParseError: The text is not valid in the given format
    """
    try:
        if fmt == 'json':
            return json.loads(text)
        if fmt == 'yaml':
            return yaml.safe_load(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse JSON: {e}") from e
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e
    raise UnsupportedFormat(f"Unknown format '{fmt}'")


def encode(tree, fmt):
    """
    Serialize a tree, keeping its key order.

    Raises:
        EncodeError: The tree holds values the format cannot express
    """
    try:
        if fmt == 'json':
            # YAML input may carry dates, written back as ISO strings
            return json.dumps(tree, indent=2, ensure_ascii=False, default=str) + '\n'
        if fmt == 'yaml':
            try:
                return yaml.dump(tree, Dumper=PlainDumper, default_flow_style=False, sort_keys=False,
                                 allow_unicode=True)
            except RecursionError:
                # A node that contains itself can only be written as an alias
                return yaml.safe_dump(tree, default_flow_style=False, sort_keys=False, allow_unicode=True)
    except (TypeError, ValueError, RecursionError, yaml.YAMLError) as e:
        raise EncodeError(f"Failed to write {fmt.upper()}: {e}") from e
    raise UnsupportedFormat(f"Unknown format '{fmt}'")


def read_spec(file_path):
    """
    Load an OpenAPI specification tree from a file.

    Returns:
        tuple: (tree, format)
    """
    fmt = detect_format(file_path)
    try:
        with open(file_path, 'r', encoding='utf-8') as file:
            text = file.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Cannot read {file_path}: {e}") from e
    logger.debug("Read %d characters from %s", len(text), file_path)
    return decode(text, fmt), fmt


def write_spec(tree, output_file, fmt=None):
    """
    Save an OpenAPI specification tree to a file.

    The tree is fully encoded before the file is opened, so a failure leaves
    no partial output behind.
    """
    fmt = fmt or detect_format(output_file)
    text = encode(tree, fmt)
    with open(output_file, 'w', encoding='utf-8') as file:
        file.write(text)
    logger.debug("Wrote %d characters to %s", len(text), output_file)
    return output_file
