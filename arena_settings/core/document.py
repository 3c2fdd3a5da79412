from __future__ import annotations

import logging
import math
import os
import re
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

COMMENT_PREFIXES = ("#", ";")

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?")

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_UNESCAPES = {"n": "\n", "r": "\r", "t": "\t"}


def _escape_char(char: str) -> str:
    if char in _ESCAPES:
        return _ESCAPES[char]
    if char.isprintable():
        return char
    # Anything str.splitlines() could break on must stay on one line.
    code = ord(char)
    return f"\\u{code:04x}" if code <= 0xFFFF else f"\\U{code:08x}"


class SettingsError(Exception):
    """Base class for every settings persistence failure."""


class DocumentNotFoundError(SettingsError, FileNotFoundError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Settings file not found: {path}")


class DocumentParseError(SettingsError, ValueError):
    def __init__(self, message: str, path: Path | str | None = None, line: int | None = None) -> None:
        self.path = path
        self.line = line
        where = ""
        if path is not None:
            where = f"{path}:{line}: " if line is not None else f"{path}: "
        elif line is not None:
            where = f"line {line}: "
        super().__init__(f"{where}{message}")


class FieldNotFoundError(DocumentParseError):
    def __init__(self, section: str, name: str) -> None:
        self.section = section
        self.name = name
        super().__init__(f"Missing field [{section}] {name}")


class FieldTypeError(DocumentParseError):
    def __init__(self, section: str, name: str, expected: str, actual: str) -> None:
        self.section = section
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(f"Field [{section}] {name} holds {actual}, expected {expected}")


class DocumentIOError(SettingsError):
    def __init__(self, message: str, path: Path) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")


class ValueKind(str, Enum):
    INT = "int"
    BOOL = "bool"
    FLOAT = "float"
    STRING = "string"
    INT_ARRAY = "int array"
    FLOAT_ARRAY = "float array"


@dataclass(slots=True)
class Value:
    kind: ValueKind
    data: Any

    def text(self) -> str:
        if self.kind is ValueKind.BOOL:
            return "True" if self.data else "False"
        if self.kind is ValueKind.FLOAT:
            return repr(float(self.data))
        if self.kind is ValueKind.INT:
            return str(int(self.data))
        if self.kind is ValueKind.STRING:
            return str(self.data)
        if self.kind is ValueKind.FLOAT_ARRAY:
            return "{ " + ", ".join(repr(float(v)) for v in self.data) + " }"
        return "{ " + ", ".join(str(int(v)) for v in self.data) + " }"

    def encode(self) -> str:
        if self.kind is ValueKind.STRING:
            return '"' + "".join(_escape_char(char) for char in str(self.data)) + '"'
        return self.text()


@dataclass(slots=True)
class Section:
    name: str
    comment: str | None = None
    fields: dict[str, Value] = field(default_factory=dict)


def _finite(section: str, name: str, value: float) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"[{section}] {name} must be a finite number, got {number!r}")
    return number


def _parse_scalar(raw: str) -> Value | None:
    lowered = raw.lower()
    if lowered in {"true", "false"}:
        return Value(ValueKind.BOOL, lowered == "true")
    if _INT_RE.fullmatch(raw):
        return Value(ValueKind.INT, int(raw))
    if _FLOAT_RE.fullmatch(raw):
        return Value(ValueKind.FLOAT, float(raw))
    return None


def _parse_array(raw: str) -> Value:
    inner = raw[1:-1].strip()
    if not inner:
        return Value(ValueKind.INT_ARRAY, [])
    elements = [part.strip() for part in inner.split(",")]
    parsed: list[Value] = []
    for element in elements:
        value = _parse_scalar(element)
        if value is None or value.kind not in {ValueKind.INT, ValueKind.FLOAT}:
            raise ValueError(f"array element {element!r} is not numeric")
        parsed.append(value)
    if all(value.kind is ValueKind.INT for value in parsed):
        return Value(ValueKind.INT_ARRAY, [value.data for value in parsed])
    return Value(ValueKind.FLOAT_ARRAY, [float(value.data) for value in parsed])


def _unquote(raw: str) -> str:
    body = raw[1:-1]
    out: list[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        index += 1
        if char == '"':
            raise ValueError("unescaped quote inside string")
        if char != "\\":
            out.append(char)
            continue
        if index >= len(body):
            raise ValueError("dangling escape at end of string")
        marker = body[index]
        index += 1
        if marker in ("u", "U"):
            width = 4 if marker == "u" else 8
            digits = body[index:index + width]
            if len(digits) != width or not all(c in "0123456789abcdefABCDEF" for c in digits):
                raise ValueError(f"bad \\{marker} escape")
            code = int(digits, 16)
            if code > 0x10FFFF:
                raise ValueError(f"bad \\{marker} escape")
            out.append(chr(code))
            index += width
        else:
            out.append(_UNESCAPES.get(marker, marker))
    return "".join(out)


def parse_value(raw: str) -> Value:
    if raw.startswith("{"):
        if not raw.endswith("}"):
            raise ValueError("unterminated array")
        return _parse_array(raw)
    if raw.startswith('"'):
        if len(raw) < 2 or not raw.endswith('"'):
            raise ValueError("unterminated string")
        return Value(ValueKind.STRING, _unquote(raw))
    scalar = _parse_scalar(raw)
    if scalar is not None:
        return scalar
    return Value(ValueKind.STRING, raw)


class Document:
    """Sectioned key/value settings document.

    Fields are addressed by ``(section, name)`` and carry a tagged value. Typed
    getters check the tag; setters create the section or field when absent.
    """

    def __init__(self) -> None:
        self._sections: dict[str, Section] = {}

    @classmethod
    def parse(cls, text: str, source: Path | str | None = None) -> Document:
        doc = cls()
        current: Section | None = None
        pending_comment: list[str] = []
        for lineno, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            if line.startswith(COMMENT_PREFIXES):
                pending_comment.append(line[1:].strip())
                continue
            if line.startswith("["):
                if not line.endswith("]"):
                    raise DocumentParseError("Unterminated section header", source, lineno)
                name = line[1:-1].strip()
                if not name:
                    raise DocumentParseError("Empty section name", source, lineno)
                current = doc.section(name)
                if pending_comment:
                    current.comment = "\n".join(pending_comment)
                pending_comment = []
                continue
            pending_comment = []
            if "=" not in line:
                raise DocumentParseError(f"Expected 'Key = Value', got {line!r}", source, lineno)
            if current is None:
                raise DocumentParseError("Field declared before any section", source, lineno)
            key, _, raw_value = line.partition("=")
            key = key.strip()
            if not key:
                raise DocumentParseError("Empty field name", source, lineno)
            if key in current.fields:
                raise DocumentParseError(f"Duplicate field {key!r} in [{current.name}]", source, lineno)
            try:
                current.fields[key] = parse_value(raw_value.strip())
            except ValueError as exc:
                raise DocumentParseError(f"Invalid value for {key!r}: {exc}", source, lineno) from exc
        return doc

    @classmethod
    def load(cls, path: Path | str) -> Document:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise DocumentNotFoundError(path) from exc
        except UnicodeDecodeError as exc:
            raise DocumentParseError(f"File is not valid UTF-8 ({exc.reason})", path) from exc
        except OSError as exc:
            raise DocumentIOError(f"Unable to read settings ({exc.strerror})", path) from exc
        doc = cls.parse(text, source=path)
        logger.debug("Parsed %d section(s) from %s", len(doc._sections), path)
        return doc

    def dumps(self) -> str:
        blocks: list[str] = []
        for section in self._sections.values():
            lines: list[str] = []
            if section.comment:
                lines.extend(f"# {comment_line}" for comment_line in section.comment.splitlines())
            lines.append(f"[{section.name}]")
            lines.extend(f"{key} = {value.encode()}" for key, value in section.fields.items())
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks) + "\n" if blocks else ""

    def save(self, path: Path | str) -> None:
        path = Path(path)
        payload = self.dumps()
        temp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            temp_path = Path(temp_name)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(temp_path, path)
        except OSError as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise DocumentIOError(f"Unable to write settings ({exc.strerror or exc})", path) from exc
        logger.debug("Wrote %d section(s) to %s", len(self._sections), path)

    def copy(self) -> Document:
        clone = Document()
        for name, section in self._sections.items():
            clone._sections[name] = Section(
                name,
                section.comment,
                {key: Value(value.kind, list(value.data) if isinstance(value.data, list) else value.data)
                 for key, value in section.fields.items()},
            )
        return clone

    # ---- structure ----
    def section(self, name: str) -> Section:
        existing = self._sections.get(name)
        if existing is None:
            existing = Section(name)
            self._sections[name] = existing
        return existing

    def has_section(self, name: str) -> bool:
        return name in self._sections

    def has_field(self, section: str, name: str) -> bool:
        return section in self._sections and name in self._sections[section].fields

    def sections(self) -> list[str]:
        return list(self._sections)

    def fields(self, section: str) -> dict[str, Value]:
        if section not in self._sections:
            return {}
        return dict(self._sections[section].fields)

    def get_comment(self, section: str) -> str | None:
        existing = self._sections.get(section)
        return existing.comment if existing is not None else None

    def set_comment(self, section: str, comment: str | None) -> None:
        self.section(section).comment = comment

    def _get(self, section: str, name: str) -> Value:
        try:
            return self._sections[section].fields[name]
        except KeyError:
            raise FieldNotFoundError(section, name) from None

    def _set(self, section: str, name: str, value: Value) -> None:
        self.section(section).fields[name] = value

    # ---- typed access ----
    def get_int(self, section: str, name: str) -> int:
        value = self._get(section, name)
        if value.kind is not ValueKind.INT:
            raise FieldTypeError(section, name, ValueKind.INT.value, value.kind.value)
        return int(value.data)

    def set_int(self, section: str, name: str, value: int) -> None:
        self._set(section, name, Value(ValueKind.INT, int(value)))

    def get_bool(self, section: str, name: str) -> bool:
        value = self._get(section, name)
        if value.kind is not ValueKind.BOOL:
            raise FieldTypeError(section, name, ValueKind.BOOL.value, value.kind.value)
        return bool(value.data)

    def set_bool(self, section: str, name: str, value: bool) -> None:
        self._set(section, name, Value(ValueKind.BOOL, bool(value)))

    def get_float(self, section: str, name: str) -> float:
        value = self._get(section, name)
        if value.kind not in {ValueKind.FLOAT, ValueKind.INT}:
            raise FieldTypeError(section, name, ValueKind.FLOAT.value, value.kind.value)
        return float(value.data)

    def set_float(self, section: str, name: str, value: float) -> None:
        self._set(section, name, Value(ValueKind.FLOAT, _finite(section, name, value)))

    def get_string(self, section: str, name: str) -> str:
        value = self._get(section, name)
        if value.kind in {ValueKind.INT_ARRAY, ValueKind.FLOAT_ARRAY}:
            raise FieldTypeError(section, name, ValueKind.STRING.value, value.kind.value)
        return value.text()

    def set_string(self, section: str, name: str, value: str) -> None:
        self._set(section, name, Value(ValueKind.STRING, str(value)))

    def get_float_array(self, section: str, name: str) -> list[float]:
        value = self._get(section, name)
        if value.kind not in {ValueKind.FLOAT_ARRAY, ValueKind.INT_ARRAY}:
            raise FieldTypeError(section, name, ValueKind.FLOAT_ARRAY.value, value.kind.value)
        return [float(v) for v in value.data]

    def set_float_array(self, section: str, name: str, values: list[float] | tuple[float, ...]) -> None:
        self._set(section, name, Value(ValueKind.FLOAT_ARRAY, [_finite(section, name, v) for v in values]))

    def get_int_array(self, section: str, name: str) -> list[int]:
        value = self._get(section, name)
        if value.kind is not ValueKind.INT_ARRAY:
            raise FieldTypeError(section, name, ValueKind.INT_ARRAY.value, value.kind.value)
        return [int(v) for v in value.data]

    def set_int_array(self, section: str, name: str, values: list[int] | tuple[int, ...]) -> None:
        self._set(section, name, Value(ValueKind.INT_ARRAY, [int(v) for v in values]))
