from __future__ import annotations

import math
import re
from typing import Any, List

from php_code import (
    GeneratedClass,
    GeneratedMethod,
    GeneratedParameter,
    PhpLiteral,
    PhpNamespace,
)

INDENT = "    "
WRAP_LENGTH = 120

# characters that force a double-quoted PHP string
_SPECIAL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_DOUBLE_QUOTED_ESCAPES = {
    "\n": "\\n", "\r": "\\r", "\t": "\\t", "\x0b": "\\v", "\x0c": "\\f",
    "\x1b": "\\e", "\\": "\\\\", "$": "\\$", '"': '\\"',
}
# string keys PHP casts to int when used as array keys
_INT_KEY = re.compile(r"0|-?[1-9][0-9]*")


def dump_value(value: Any) -> str:
    """Python value -> PHP literal source."""
    if isinstance(value, PhpLiteral):
        return value.code
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NAN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        text = repr(value)
        return text if any(c in text for c in ".eE") else text + ".0"
    if isinstance(value, str):
        return _dump_string(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(dump_value(v) for v in value) + "]"
    if isinstance(value, dict):
        entries = [(_array_key(k), v) for k, v in value.items()]
        if [k for k, _ in entries] == list(range(len(entries))):
            return dump_value([v for _, v in entries])
        items = [f"{dump_value(k)} => {dump_value(v)}" for k, v in entries]
        return "[" + ", ".join(items) + "]"
    raise ValueError(f"Cannot dump {type(value).__name__} as a PHP literal")


def _array_key(key: Any) -> Any:
    if isinstance(key, str) and _INT_KEY.fullmatch(key):
        number = int(key)
        # beyond PHP_INT_MAX the key stays a string
        if -(2 ** 63) <= number < 2 ** 63:
            return number
    return key


def _dump_string(s: str) -> str:
    if not _SPECIAL_CHARS.search(s):
        return "'" + s.replace("\\", "\\\\").replace("'", "\\'") + "'"

    out = []
    for ch in s:
        if ch in _DOUBLE_QUOTED_ESCAPES:
            out.append(_DOUBLE_QUOTED_ESCAPES[ch])
        elif _SPECIAL_CHARS.match(ch):
            out.append("\\x%02x" % ord(ch))
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


class PsrPrinter:
    """
    Renders generated classes in PSR-12 layout: four-space indents,
    braces of classes and methods on their own line, one blank line
    between members.
    """

    def print_file(self, namespace: PhpNamespace) -> str:
        return "<?php\n\n" + self.print_namespace(namespace)

    def print_namespace(self, namespace: PhpNamespace) -> str:
        parts: List[str] = []
        if namespace.name:
            parts.append(f"namespace {namespace.name};\n\n")

        if namespace.uses:
            uses = []
            for alias, original in namespace.uses.items():
                short = original.rpartition("\\")[2]
                uses.append(f"use {original};" if alias == short else f"use {original} as {alias};")
            parts.append("\n".join(uses) + "\n\n")

        parts.append("\n".join(self.print_class(c, namespace) for c in namespace.classes))
        return "".join(parts)

    def print_class(self, cls: GeneratedClass, namespace: PhpNamespace) -> str:
        header = f"{cls.kind} {cls.name}"
        if cls.implements:
            keyword = "extends" if cls.kind == "interface" else "implements"
            header += f" {keyword} " + ", ".join(namespace.simplify_name(i) for i in cls.implements)

        members: List[str] = []
        if cls.properties:
            members.append("\n".join(f"{INDENT}{p.visibility} ${p.name};" for p in cls.properties))
        for method in cls.methods.values():
            members.append(self.print_method(method, namespace))

        body = "\n\n".join(members)
        return header + "\n{\n" + (body + "\n" if body else "") + "}\n"

    def print_method(self, method: GeneratedMethod, namespace: PhpNamespace) -> str:
        modifiers = ("final " if method.is_final else "") + method.visibility + " " \
            + ("static " if method.is_static else "")
        return_type = ""
        if method.return_type:
            return_type = ": " + namespace.simplify_type(method.return_type)

        params = [self._print_parameter(p, namespace) for p in method.parameters]
        signature = f"{INDENT}{modifiers}function {method.name}(" + ", ".join(params) + ")" + return_type
        if len(signature) > WRAP_LENGTH:
            inner = ",\n".join(f"{INDENT * 2}{p}" for p in params)
            signature = f"{INDENT}{modifiers}function {method.name}(\n{inner}\n{INDENT}){return_type} {{"
        else:
            signature += f"\n{INDENT}{{"

        lines = [signature]
        for line in method.body.split("\n") if method.body else []:
            lines.append(f"{INDENT * 2}{line}" if line else "")
        lines.append(f"{INDENT}}}")
        return "\n".join(lines)

    def _print_parameter(self, param: GeneratedParameter, namespace: PhpNamespace) -> str:
        out = ""
        if param.type:
            type_name = namespace.simplify_type(param.type)
            if param.nullable and type_name.lower() not in ("mixed", "null"):
                if "|" in type_name:
                    if "null" not in type_name.lower().split("|"):
                        type_name += "|null"
                else:
                    type_name = "?" + type_name
            out = type_name + " "
        out += f"${param.name}"
        if param.has_default:
            out += " = " + dump_value(param.default)
        return out
