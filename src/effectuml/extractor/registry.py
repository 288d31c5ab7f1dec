"""Action-type registry: discriminator literal -> message class name.

Message classes are the variants of a small set of categories (commands,
documents, events). A class is a variant when it extends or implements one
of the category bases and declares a `type` discriminator field:

    export class OpenSidenavCommand implements CommandAction {
        readonly type = LayoutCommandTypes.OpenSidenav;
    }

The registry is built once per analyzed file from the file itself and its
import graph, and is never shared between files.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from tree_sitter import Node

from effectuml.extractor.tree import SourceUnit, node_text, string_value

logger = logging.getLogger(__name__)

DISCRIMINATOR_FIELD = "type"

_WHITESPACE = re.compile(r"\s+")


class ActionCategory(str, Enum):
    COMMAND = "CommandAction"
    DOCUMENT = "DocumentAction"
    EVENT = "EventAction"

    @classmethod
    def from_base_name(cls, name: str) -> ActionCategory | None:
        for category in cls:
            if category.value == name:
                return category
        return None


@dataclass(frozen=True)
class ActionVariant:
    """A message class together with its discriminator."""

    name: str
    category: ActionCategory
    discriminator: str
    value: str | None = None


def reference_text(node: Node) -> str:
    """Source text of a reference expression with whitespace removed."""
    return _WHITESPACE.sub("", node_text(node))


def _last_segment(text: str) -> str:
    return text.rsplit(".", 1)[-1]


def base_type_names(class_node: Node) -> list[str]:
    """Names in a class's extends/implements clauses, without type arguments."""
    names: list[str] = []
    for heritage in class_node.children:
        if heritage.type != "class_heritage":
            continue
        for clause in heritage.named_children:
            if clause.type == "extends_clause":
                bases = clause.children_by_field_name("value")
            elif clause.type == "implements_clause":
                bases = clause.named_children
            else:
                continue
            for base in bases:
                if base.type == "comment":
                    continue
                if base.type == "generic_type":
                    base = base.child_by_field_name("name") or base
                names.append(_last_segment(reference_text(base)))
    return names


def class_fields(class_node: Node) -> Iterator[Node]:
    body = class_node.child_by_field_name("body")
    if body is None:
        return
    for member in body.named_children:
        if member.type == "public_field_definition":
            yield member


def collect_enum_values(units: Iterable[SourceUnit]) -> dict[str, str]:
    """Map `Enum.Member` references to their string values.

    Members without a string initializer are skipped. The first declaration
    of a reference wins.
    """
    values: dict[str, str] = {}
    for unit in units:
        for enum_node in unit.enums():
            name_node = enum_node.child_by_field_name("name")
            body = enum_node.child_by_field_name("body")
            if name_node is None or body is None:
                continue
            enum_name = node_text(name_node)
            for member in body.named_children:
                if member.type != "enum_assignment":
                    continue
                member_name = member.child_by_field_name("name")
                value = member.child_by_field_name("value")
                if member_name is None or value is None or value.type != "string":
                    continue
                values.setdefault(f"{enum_name}.{node_text(member_name)}", string_value(value))
    return values


_WRAPPER_EXPRESSIONS = ("as_expression", "satisfies_expression", "parenthesized_expression", "non_null_expression")


def unwrap_expression(node: Node) -> Node:
    """Strip `as`, `satisfies`, parentheses and `!` around an expression."""
    while node.type in _WRAPPER_EXPRESSIONS:
        inner = next((c for c in node.named_children if c.type != "comment"), None)
        if inner is None:
            break
        node = inner
    return node


def _discriminator_of(class_node: Node) -> Node | None:
    for field_node in class_fields(class_node):
        name = field_node.child_by_field_name("name")
        if name is not None and node_text(name) == DISCRIMINATOR_FIELD:
            value = field_node.child_by_field_name("value")
            return unwrap_expression(value) if value is not None else None
    return None


def collect_variants(units: Iterable[SourceUnit], enum_values: dict[str, str]) -> list[ActionVariant]:
    """Enumerate the message classes declared in the given units, in order."""
    variants: list[ActionVariant] = []
    for unit in units:
        for class_node in unit.classes():
            category = None
            for base in base_type_names(class_node):
                category = ActionCategory.from_base_name(base)
                if category is not None:
                    break
            if category is None:
                continue

            name_node = class_node.child_by_field_name("name")
            discriminator = _discriminator_of(class_node)
            if name_node is None or discriminator is None:
                logger.debug("Skipping %s class without a `type` field in %s", category.value, unit.path)
                continue

            if discriminator.type == "string":
                key = value = string_value(discriminator)
            else:
                key = reference_text(discriminator)
                value = enum_values.get(key)
            variants.append(
                ActionVariant(
                    name=node_text(name_node),
                    category=category,
                    discriminator=key,
                    value=value,
                )
            )
    return variants


class ActionTypeRegistry:
    """Lookup from discriminator (reference text or string value) to class name.

    Discriminators are not unique by construction; the first variant
    registered for a key wins.
    """

    def __init__(self, variants: Iterable[ActionVariant], enum_values: dict[str, str] | None = None) -> None:
        self._variants = list(variants)
        self._enum_values = dict(enum_values or {})
        self._by_key: dict[str, ActionVariant] = {}
        for variant in self._variants:
            self._by_key.setdefault(variant.discriminator, variant)
            if variant.value is not None:
                self._by_key.setdefault(variant.value, variant)

    @classmethod
    def from_unit(cls, unit: SourceUnit) -> ActionTypeRegistry:
        """Build the registry for one file: its imports first, then the file itself."""
        units = [*unit.import_graph(), unit]
        return cls.from_units(units)

    @classmethod
    def from_units(cls, units: Iterable[SourceUnit]) -> ActionTypeRegistry:
        units = list(units)
        enum_values = collect_enum_values(units)
        registry = cls(collect_variants(units, enum_values), enum_values)
        logger.debug(
            "Action registry: %d variant(s) from %d unit(s)", len(registry), len(units)
        )
        return registry

    def __len__(self) -> int:
        return len(self._variants)

    def __contains__(self, literal: object) -> bool:
        return isinstance(literal, str) and self.lookup(literal) is not None

    @property
    def variants(self) -> list[ActionVariant]:
        return list(self._variants)

    def lookup(self, literal: str) -> ActionVariant | None:
        variant = self._by_key.get(literal)
        if variant is None and literal in self._enum_values:
            variant = self._by_key.get(self._enum_values[literal])
        return variant

    def resolve(self, literal: str) -> str:
        """Class name for a discriminator, or the literal itself when unknown."""
        variant = self.lookup(literal)
        if variant is None:
            return literal
        return variant.name
