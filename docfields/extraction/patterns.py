"""Regex pattern registry for document identifiers and labelled fields.

Generic rules (identity numbers, IBAN, dates, phones...) are applied to
every document and report all matches. Field rules are grouped per
document type, each capturing the value after a label such as
``Nombre:`` or ``Importe:``; only their first match is reported.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from docfields.profiles import FieldGroup


@dataclass(frozen=True)
class PatternRule:
    """A named, compiled extraction rule."""

    name: str
    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, name: str, regex: str, flags: int = 0) -> "PatternRule":
        return cls(name, re.compile(regex, flags))


@dataclass(frozen=True)
class PatternRegistry:
    """Read-only table of generic rules and per-group field rules."""

    generic: Mapping[str, PatternRule]
    fields: Mapping[FieldGroup, tuple[PatternRule, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def field_rules(self, group: FieldGroup) -> tuple[PatternRule, ...]:
        return self.fields.get(group, ())


_DATE = r"[0-3]?[0-9][/-][0-1]?[0-9][/-][0-9]{2,4}"
_PERSON_NAME = r"([A-ZÁÉÍÓÚÑ][A-Za-záéíóúñ\s]+)"

# (name, regex, flags)
_GENERIC_RULES: list[tuple[str, str, int]] = [
    ("NIF", r"\b[0-9]{8}[A-Z]\b", 0),
    ("NIE", r"\b[XYZ][0-9]{7}[A-Z]\b", 0),
    ("PASSPORT", r"\b[A-Z]{3}[0-9]{6}\b", 0),
    ("IBAN", r"\bES[0-9]{22}\b", 0),
    ("SOCIAL_SECURITY", r"\b[0-9]{2}\s?[0-9]{8}\s?[0-9]{2}\b", 0),
    ("DATE", rf"\b{_DATE}\b", 0),
    ("POSTAL_CODE", r"\b[0-9]{5}\b", 0),
    ("PHONE", r"\b[6-9][0-9]{8}\b|\b[0-9]{3}\s?[0-9]{3}\s?[0-9]{3}\b", 0),
    (
        "EMAIL",
        r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b",
        re.IGNORECASE,
    ),
]

# Ordered by extraction priority within each group
_FIELD_RULES: dict[FieldGroup, list[tuple[str, str]]] = {
    FieldGroup.PERSONAL: [
        ("NAME", rf"\b(?:nombres?|name)\b[:\s]*{_PERSON_NAME}"),
        ("SURNAME", rf"\b(?:apellidos?|surname)\b[:\s]*{_PERSON_NAME}"),
        (
            "ADDRESS",
            r"\b(?:domicilio|dirección|address)\b[:\s]*"
            r"([A-Za-záéíóúñºª0-9\s,./\-]+)",
        ),
    ],
    FieldGroup.INVOICE: [
        ("AMOUNT", r"\b(?:total|importe)[:\s]*([0-9]+[,.]?[0-9]*)(?=[\s€]|$)"),
        ("INVOICE_DATE", rf"\b(?:fecha|date)[:\s]*({_DATE})"),
    ],
    FieldGroup.CONTRACT: [
        ("CLAUSE", r"cl[áa]usula\s*([0-9]+)"),
        ("VALIDITY", r"\b(?:vigencia|validez)[:\s]*([^.]+)"),
    ],
    FieldGroup.MEDICAL: [
        ("DIAGNOSIS", r"\b(?:diagnóstico|diagnosis)[:\s]*([^.]+)"),
        ("MEDICATION", r"\b(?:medicamento|tratamiento)[:\s]*([^.]+)"),
    ],
}


def build_registry() -> PatternRegistry:
    """Compile the default generic and field rules into a registry."""
    generic = {
        name: PatternRule.compile(name, regex, flags)
        for name, regex, flags in _GENERIC_RULES
    }
    fields = {
        group: tuple(
            PatternRule.compile(name, regex, re.IGNORECASE) for name, regex in rules
        )
        for group, rules in _FIELD_RULES.items()
    }
    return PatternRegistry(
        generic=MappingProxyType(generic),
        fields=MappingProxyType(fields),
    )


DEFAULT_REGISTRY = build_registry()
