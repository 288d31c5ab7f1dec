"""Extract @Effect() members and their input/output message types from a source unit."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from tree_sitter import Node

from effectuml.errors import MalformedAnnotationArgumentsError
from effectuml.extractor.registry import ActionTypeRegistry, reference_text, unwrap_expression
from effectuml.extractor.tree import SourceUnit, node_text, string_value
from effectuml.models import EffectDefinition

logger = logging.getLogger(__name__)

EFFECT_DECORATOR = "Effect"
OF_TYPE_OPERATOR = "ofType"

_MEMBER_TYPES = ("public_field_definition", "method_definition")
_REFERENCE_TYPES = ("identifier", "member_expression")
_SKIPPED_NODES = ("comment",)


@dataclass
class Annotation:
    """A decorator on a class member: its name and ordered argument nodes."""

    name: str
    arguments: list[Node] = field(default_factory=list)
    is_call: bool = False


@dataclass
class MemberDescriptor:
    """An instance member with its tagged attribute list."""

    name: str
    annotations: list[Annotation]
    body: Node | None
    declared_type: Node | None

    @property
    def is_effect(self) -> bool:
        return any(a.name == EFFECT_DECORATOR for a in self.annotations)

    @property
    def tagging_annotations(self) -> list[Annotation]:
        return [a for a in self.annotations if a.name != EFFECT_DECORATOR]


def _meaningful(nodes: list[Node]) -> list[Node]:
    return [n for n in nodes if n.type not in _SKIPPED_NODES]


def parse_annotation(decorator: Node) -> Annotation:
    expr = next((c for c in decorator.named_children if c.type not in _SKIPPED_NODES), None)
    if expr is None:
        return Annotation(name="")
    if expr.type == "call_expression":
        function = expr.child_by_field_name("function")
        arguments = expr.child_by_field_name("arguments")
        name = reference_text(function) if function is not None else ""
        args = _meaningful(arguments.named_children) if arguments is not None else []
        return Annotation(name=name.rsplit(".", 1)[-1], arguments=args, is_call=True)
    return Annotation(name=reference_text(expr).rsplit(".", 1)[-1])


def _is_static(member: Node) -> bool:
    return any(child.type == "static" for child in member.children)


def _describe(member: Node, decorators: list[Node]) -> MemberDescriptor | None:
    name_node = member.child_by_field_name("name")
    if name_node is None:
        return None
    name = node_text(name_node)
    if member.type == "method_definition":
        if name == "constructor":
            return None
        body = member.child_by_field_name("body")
        declared = member.child_by_field_name("return_type")
    else:
        body = member.child_by_field_name("value")
        declared = member.child_by_field_name("type")
    own = [c for c in member.children if c.type == "decorator"]
    return MemberDescriptor(
        name=name,
        annotations=[parse_annotation(d) for d in (*decorators, *own)],
        body=body,
        declared_type=declared,
    )


def iter_instance_members(class_node: Node) -> Iterator[MemberDescriptor]:
    """Fields and methods of a class body, static members and constructors excluded.

    Method decorators are siblings preceding the method in the class body;
    field decorators are children of the field itself. Both are collected.
    """
    body = class_node.child_by_field_name("body")
    if body is None:
        return
    pending: list[Node] = []
    for child in body.named_children:
        if child.type == "decorator":
            pending.append(child)
            continue
        if child.type in _SKIPPED_NODES:
            continue
        if child.type in _MEMBER_TYPES and not _is_static(child):
            descriptor = _describe(child, pending)
            if descriptor is not None:
                yield descriptor
        pending = []


def _walk(node: Node) -> Iterator[Node]:
    """Iterative pre-order traversal."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def find_of_type_call(node: Node) -> Node | None:
    """First `ofType(...)` or `x.ofType(...)` call in pre-order."""
    for candidate in _walk(node):
        if candidate.type != "call_expression":
            continue
        function = candidate.child_by_field_name("function")
        if function is None:
            continue
        if function.type == "identifier" and node_text(function) == OF_TYPE_OPERATOR:
            return candidate
        if function.type == "member_expression":
            prop = function.child_by_field_name("property")
            if prop is not None and node_text(prop) == OF_TYPE_OPERATOR:
                return candidate
    return None


def discriminator_literals(call: Node) -> list[str]:
    """Discriminators passed to an ofType call: references by text, strings by value."""
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return []
    literals = []
    for arg in _meaningful(arguments.named_children):
        arg = unwrap_expression(arg)
        if arg.type == "string":
            literals.append(string_value(arg))
        elif arg.type in _REFERENCE_TYPES:
            literals.append(reference_text(arg))
        else:
            logger.debug("Ignoring ofType argument of kind %s: %s", arg.type, node_text(arg))
    return literals


def _unwrap(type_node: Node) -> Node:
    while type_node.type in ("type_annotation", "parenthesized_type"):
        inner = next((c for c in type_node.named_children if c.type not in _SKIPPED_NODES), None)
        if inner is None:
            break
        type_node = inner
    return type_node


def type_arguments(declared: Node | None) -> list[Node]:
    """Generic arguments of a declared type (`Observable<A, B>` -> [A, B])."""
    if declared is None:
        return []
    type_node = _unwrap(declared)
    if type_node.type != "generic_type":
        return []
    args = type_node.child_by_field_name("type_arguments")
    if args is None:
        return []
    return _meaningful(args.named_children)


class EffectsExtractor:
    """Finds @Effect() members in one source unit and describes them.

    The action-type registry and the type-alias table cover the unit and its
    import graph; both are built lazily, once per extractor.
    """

    def __init__(self, unit: SourceUnit) -> None:
        self.unit = unit
        self._registry: ActionTypeRegistry | None = None
        self._aliases: dict[str, Node] | None = None
        self._graph: list[SourceUnit] | None = None

    def _units(self) -> list[SourceUnit]:
        if self._graph is None:
            self._graph = [*self.unit.import_graph(), self.unit]
        return self._graph

    @property
    def registry(self) -> ActionTypeRegistry:
        if self._registry is None:
            self._registry = ActionTypeRegistry.from_units(self._units())
        return self._registry

    @property
    def type_aliases(self) -> dict[str, Node]:
        if self._aliases is None:
            aliases: dict[str, Node] = {}
            # The local file shadows its imports
            for unit in reversed(self._units()):
                for alias in unit.type_aliases():
                    name = alias.child_by_field_name("name")
                    value = alias.child_by_field_name("value")
                    if name is not None and value is not None:
                        aliases.setdefault(node_text(name), value)
            self._aliases = aliases
        return self._aliases

    def members(self) -> list[MemberDescriptor]:
        return [m for class_node in self.unit.classes() for m in iter_instance_members(class_node)]

    def effect_members(self) -> list[MemberDescriptor]:
        return [m for m in self.members() if m.is_effect]

    def extract(self) -> list[EffectDefinition]:
        effects = [self.describe(member) for member in self.effect_members()]
        logger.info("Extracted %d effect(s) from %s", len(effects), self.unit.path)
        return effects

    def describe(self, member: MemberDescriptor) -> EffectDefinition:
        explicit = self.explicit_references(member)
        if explicit is not None:
            inputs = [self.registry.resolve(ref) for ref in explicit[0]]
            outputs = [self.registry.resolve(ref) for ref in explicit[1]]
        else:
            inputs = self.input_types(member)
            outputs = self.output_types(member)
        return EffectDefinition(
            name=member.name,
            tagging_decorators=tuple(a.name for a in member.tagging_annotations),
            input_types=inputs,
            output_types=outputs,
        )

    def explicit_references(self, member: MemberDescriptor) -> tuple[list[str], list[str]] | None:
        """Inputs/outputs passed as the two arguments of the first tagging decorator.

        Raises:
            MalformedAnnotationArgumentsError: any argument count other than 0 or 2,
                or an argument that is neither a reference nor an array of references.
        """
        tagging = member.tagging_annotations
        if not tagging:
            return None
        annotation = tagging[0]
        if not annotation.arguments:
            return None
        if len(annotation.arguments) != 2:
            raise MalformedAnnotationArgumentsError(
                member.name,
                annotation.name,
                f"expected 2 arguments (inputs, outputs), got {len(annotation.arguments)}",
            )
        inputs, outputs = (
            self._references(member, annotation, arg) for arg in annotation.arguments
        )
        return inputs, outputs

    def _references(self, member: MemberDescriptor, annotation: Annotation, arg: Node) -> list[str]:
        if arg.type in _REFERENCE_TYPES:
            return [reference_text(arg)]
        if arg.type == "array":
            refs = []
            for element in _meaningful(arg.named_children):
                if element.type not in _REFERENCE_TYPES:
                    raise MalformedAnnotationArgumentsError(
                        member.name,
                        annotation.name,
                        f"array element {node_text(element)!r} is not a reference",
                    )
                refs.append(reference_text(element))
            return refs
        raise MalformedAnnotationArgumentsError(
            member.name,
            annotation.name,
            f"argument {node_text(arg)!r} is neither a reference nor an array of references",
        )

    def input_types(self, member: MemberDescriptor) -> list[str] | None:
        if member.body is None:
            return None
        call = find_of_type_call(member.body)
        if call is None:
            return None
        resolved = []
        for literal in discriminator_literals(call):
            name = self.registry.resolve(literal)
            if name == literal and literal not in self.registry:
                logger.warning(
                    "Unresolved discriminator %r in effect %s (%s)",
                    literal, member.name, self.unit.path,
                )
            resolved.append(name)
        return resolved or None

    def output_types(self, member: MemberDescriptor) -> list[str] | None:
        names: list[str] = []
        for arg in type_arguments(member.declared_type):
            names.extend(self.type_names(arg))
        return names or None

    def type_names(self, type_node: Node, _seen: frozenset[str] = frozenset()) -> list[str]:
        """Flatten a type into member names: unions split, union aliases expanded."""
        type_node = _unwrap(type_node)
        if type_node.type == "union_type":
            names = []
            for part in _meaningful(type_node.named_children):
                names.extend(self.type_names(part, _seen))
            return names
        text = " ".join(node_text(type_node).split())
        alias = self.type_aliases.get(text) if type_node.type == "type_identifier" else None
        if alias is not None and text not in _seen and _unwrap(alias).type == "union_type":
            return self.type_names(alias, _seen | {text})
        return [text]


def extract_effects(unit: SourceUnit) -> list[EffectDefinition]:
    """All effect definitions of a unit, in declaration order. Empty if none."""
    return EffectsExtractor(unit).extract()
