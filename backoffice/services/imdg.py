"""
Compatibilité des marchandises dangereuses (classes IMDG).

Deux classes sont compatibles si aucune des deux règles ne cite l'autre.
Une classe absente ou inconnue est considérée compatible.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Iterable


@dataclass(frozen=True)
class IMDGRule:
    imdg_class: str
    incompatible_with: tuple[str, ...]
    description: str


IMDG_RULES: tuple[IMDGRule, ...] = (
    IMDGRule(
        "Classe 1",
        ("Classe 2.1", "Classe 2.2", "Classe 2.3", "Classe 3", "Classe 4.1", "Classe 4.2", "Classe 4.3",
         "Classe 5.1", "Classe 5.2", "Classe 6.1", "Classe 6.2", "Classe 7", "Classe 8", "Classe 9"),
        "Explosifs - Incompatibles avec toutes les autres classes",
    ),
    IMDGRule(
        "Classe 2.1",
        ("Classe 1", "Classe 5.1", "Classe 5.2", "Classe 6.1", "Classe 6.2", "Classe 8", "Classe 7"),
        "Gaz inflammables",
    ),
    IMDGRule("Classe 2.2", (), "Gaz non inflammables, non toxiques"),
    IMDGRule(
        "Classe 2.3",
        ("Classe 1", "Classe 5.1", "Classe 6.1", "Classe 6.2", "Classe 8"),
        "Gaz toxiques",
    ),
    IMDGRule(
        "Classe 3",
        ("Classe 1", "Classe 5.1", "Classe 5.2", "Classe 6.1", "Classe 8"),
        "Liquides inflammables",
    ),
    IMDGRule(
        "Classe 4.1",
        ("Classe 1", "Classe 5.1", "Classe 5.2", "Classe 6.1", "Classe 8"),
        "Solides inflammables",
    ),
    IMDGRule(
        "Classe 4.2",
        ("Classe 1", "Classe 3", "Classe 4.1", "Classe 4.3", "Classe 5.1", "Classe 5.2", "Classe 6.1", "Classe 8"),
        "Matières auto-inflammables",
    ),
    IMDGRule(
        "Classe 4.3",
        ("Classe 1", "Classe 3", "Classe 5.1", "Classe 5.2", "Classe 6.1", "Classe 8"),
        "Réagissant dangereusement à l'eau",
    ),
    IMDGRule(
        "Classe 5.1",
        ("Classe 1", "Classe 2.1", "Classe 3", "Classe 4.1", "Classe 4.2", "Classe 4.3", "Classe 5.2",
         "Classe 6.1", "Classe 8"),
        "Comburants",
    ),
    IMDGRule(
        "Classe 5.2",
        ("Classe 1", "Classe 2.1", "Classe 3", "Classe 4.1", "Classe 4.2", "Classe 4.3", "Classe 5.1",
         "Classe 6.1", "Classe 8"),
        "Peroxydes organiques",
    ),
    IMDGRule(
        "Classe 6.1",
        ("Classe 1", "Classe 2.1", "Classe 2.3", "Classe 3", "Classe 4.1", "Classe 4.2", "Classe 4.3",
         "Classe 5.1", "Classe 5.2", "Classe 8"),
        "Substances toxiques",
    ),
    IMDGRule(
        "Classe 6.2",
        ("Classe 1", "Classe 2.1", "Classe 2.3", "Classe 3", "Classe 4.1", "Classe 4.2", "Classe 4.3",
         "Classe 5.1", "Classe 5.2", "Classe 6.1", "Classe 7", "Classe 8", "Classe 9"),
        "Substances infectieuses - Toujours isoler",
    ),
    IMDGRule(
        "Classe 7",
        ("Classe 1", "Classe 2.1", "Classe 6.2"),
        "Radioactifs - Transport spécial",
    ),
    IMDGRule(
        "Classe 8",
        ("Classe 1", "Classe 2.1", "Classe 2.3", "Classe 3", "Classe 4.1", "Classe 4.2", "Classe 4.3",
         "Classe 5.1", "Classe 5.2", "Classe 6.1", "Classe 6.2"),
        "Corrosifs",
    ),
    IMDGRule(
        "Classe 9",
        ("Classe 1", "Classe 5.1"),
        "Divers (lithium : à éloigner des classes 1 et 5.1)",
    ),
)

_RULES_BY_CLASS = {rule.imdg_class: rule for rule in IMDG_RULES}


@dataclass(frozen=True)
class IMDGConflict:
    class1: str
    class2: str
    description: str


def are_classes_compatible(class1: str | None, class2: str | None) -> bool:
    if not class1 or not class2:
        return True

    rule1 = _RULES_BY_CLASS.get(class1)
    rule2 = _RULES_BY_CLASS.get(class2)
    if not rule1 or not rule2:
        return True

    return class2 not in rule1.incompatible_with and class1 not in rule2.incompatible_with


def incompatible_classes(imdg_class: str) -> list[str]:
    rule = _RULES_BY_CLASS.get(imdg_class)
    return list(rule.incompatible_with) if rule else []


def check_container_compatibility(classes: Iterable[str | None]) -> tuple[bool, list[IMDGConflict]]:
    valid = [c for c in classes if c]
    conflicts = []
    for class1, class2 in combinations(valid, 2):
        if are_classes_compatible(class1, class2):
            continue
        desc1 = _RULES_BY_CLASS[class1].description
        desc2 = _RULES_BY_CLASS[class2].description
        conflicts.append(IMDGConflict(class1, class2, f"{desc1} incompatible avec {desc2}"))

    return not conflicts, conflicts


def is_known_class(imdg_class: str) -> bool:
    return imdg_class in _RULES_BY_CLASS
