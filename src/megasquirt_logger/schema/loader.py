"""Load a Megasquirt INI schema file into plain section/key/value mappings."""

import configparser
import logging
from pathlib import Path

from megasquirt_logger.core.exceptions import CompileError

logger = logging.getLogger(__name__)

DATALOG_SECTION = "Datalog"
DATALOG_ENTRY_KEY = "entry"


class _ShadowedOptions(dict):
    """Option dict that accumulates repeated keys instead of replacing them.

    configparser stores each raw option value as a list of lines and joins
    them with newlines once the file is read, so repeated keys end up as
    one newline-separated value.
    """

    def __setitem__(self, key, value):
        current = self.get(key)
        if isinstance(current, list) and isinstance(value, list):
            current.extend(value)
            return
        super().__setitem__(key, value)


class SchemaSource:
    """Parsed schema file.

    ``sections`` maps section -> key -> last value of that key, which is what
    the channel compiler consumes. ``shadows()`` returns every value of a
    repeated key.
    """

    def __init__(self, values: dict[str, dict[str, list[str]]]):
        self._values = values

    @property
    def sections(self) -> dict[str, dict[str, str]]:
        return {
            section: {key: shadows[-1] if shadows else "" for key, shadows in keys.items()}
            for section, keys in self._values.items()
        }

    def shadows(self, section: str, key: str) -> list[str]:
        return list(self._values.get(section, {}).get(key, []))

    @property
    def datalog_entries(self) -> list[str]:
        return self.shadows(DATALOG_SECTION, DATALOG_ENTRY_KEY)


def _new_parser() -> configparser.RawConfigParser:
    parser = configparser.RawConfigParser(
        dict_type=_ShadowedOptions,
        strict=False,
        allow_no_value=True,
        delimiters=("=",),
        comment_prefixes=(";", "#"),
        inline_comment_prefixes=(";",),
        empty_lines_in_values=False,
        interpolation=None,
    )
    # Channel names are case sensitive
    parser.optionxform = str
    return parser


def parse_schema(text: str, source: str = "<string>") -> SchemaSource:
    """Parse schema text.

    Raises:
        CompileError: If the text is not a readable INI document.
    """
    parser = _new_parser()
    # Schemas indent freely and never use continuation lines
    text = "\n".join(line.strip() for line in text.splitlines())
    try:
        parser.read_string(text, source=source)
    except configparser.Error as e:
        raise CompileError(f"Unable to parse schema {source}: {e}") from e

    values: dict[str, dict[str, list[str]]] = {}
    for section in parser.sections():
        values[section] = {
            key: value.split("\n") if value is not None else []
            for key, value in parser.items(section, raw=True)
        }
    return SchemaSource(values)


def load_schema(path: str | Path) -> SchemaSource:
    """Read and parse a schema file.

    Raises:
        CompileError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise CompileError(f"Unable to read schema {path}: {e}") from e

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        # Firmware-shipped schemas are usually ISO-8859-1
        logger.debug("Schema %s is not UTF-8, decoding as latin-1", path)
        text = data.decode("latin-1")

    schema = parse_schema(text, source=str(path))
    logger.info("Loaded schema %s with %d sections", path, len(schema.sections))
    return schema
