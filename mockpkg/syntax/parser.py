"""Tree-sitter powered Go parser producing declaration-level syntax trees."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Tuple

from tree_sitter import Node, Parser
from tree_sitter_languages import get_parser

from ..errors import ParseError
from ..logging import get_logger
from .nodes import (
    ArrayType,
    BasicLit,
    Binary,
    Call,
    ChanDir,
    ChanType,
    CompositeLit,
    Conversion,
    Decl,
    DeclKind,
    Expr,
    ExprKind,
    FieldDecl,
    FuncDecl,
    FuncLit,
    FuncType,
    GenericType,
    Ident,
    IdentType,
    ImportSpec,
    InterfaceType,
    MapType,
    MethodSpec,
    NegatedType,
    OtherExpr,
    Param,
    PointerType,
    Position,
    QualifiedType,
    Receiver,
    Selector,
    SliceType,
    StructType,
    SyntaxFile,
    TypeExpr,
    TypeOperand,
    TypeParam,
    TypeSpec,
    Unary,
    UnionType,
    ValueSpec,
)

_TYPE_NODES = frozenset(
    {
        "type_identifier",
        "qualified_type",
        "pointer_type",
        "slice_type",
        "array_type",
        "implicit_length_array_type",
        "map_type",
        "channel_type",
        "function_type",
        "struct_type",
        "interface_type",
        "generic_type",
        "parenthesized_type",
        "negated_type",
        "type_elem",
        "constraint_elem",
        "constraint_term",
        "union_type",
    }
)

_LITERAL_KINDS = {
    "int_literal": ExprKind.INT,
    "float_literal": ExprKind.FLOAT,
    "imaginary_literal": ExprKind.IMAG,
    "rune_literal": ExprKind.RUNE,
}

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

_ESCAPE = re.compile(r"\\(x[0-9A-Fa-f]{2}|u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}|[0-7]{3}|.)")

logger = get_logger("syntax")


def unquote(literal: str) -> str:
    """Decode a Go interpreted (``"..."``), raw (`` `...` ``) or rune (``'x'``) literal."""
    if len(literal) >= 2 and literal[0] == "`" and literal[-1] == "`":
        return literal[1:-1].replace("\r", "")
    if len(literal) >= 2 and literal[0] in "\"'" and literal[-1] == literal[0]:
        body = literal[1:-1]
    else:
        body = literal

    def _replace(match: re.Match[str]) -> str:
        escape = match.group(1)
        if escape in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[escape]
        if escape[0] in "xuU":
            return chr(int(escape[1:], 16))
        if escape[0].isdigit():
            return chr(int(escape, 8))
        return escape

    return _ESCAPE.sub(_replace, body)


class GoParser:
    """Parses Go files into :class:`SyntaxFile` declaration trees.

    Function bodies are parsed for syntax errors but otherwise discarded.
    """

    def __init__(self) -> None:
        self._parser: Parser = get_parser("go")

    def parse_file(self, path: Path) -> SyntaxFile:
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise ParseError(path, 1, 1, f"cannot read file: {exc}") from exc
        return self.parse_source(path, source)

    def parse_source(self, path: Path, source: bytes) -> SyntaxFile:
        tree = self._parser.parse(source)
        root = tree.root_node
        error = _first_error(root)
        if error is not None:
            row, column = error.start_point
            reason = f"expected {error.type}" if error.is_missing else "syntax error"
            raise ParseError(path, row + 1, column + 1, reason)
        syntax = _Converter(path, source).convert(root)
        logger.debug("Parsed %s: package %s, %d declarations", path, syntax.package, len(syntax.decls))
        return syntax


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node


class _Converter:
    """Converts a tree-sitter ``source_file`` into :class:`SyntaxFile`."""

    def __init__(self, path: Path, source: bytes) -> None:
        self.path = path
        self.source = source

    def convert(self, root: Node) -> SyntaxFile:
        package: Optional[str] = None
        imports: List[ImportSpec] = []
        decls: List[Decl] = []
        for child in root.named_children:
            node_type = child.type
            if node_type == "comment":
                continue
            if node_type == "package_clause":
                package = self._package_name(child)
            elif node_type == "import_declaration":
                specs = self._imports(child)
                imports.extend(specs)
                decls.extend(specs)
            elif node_type == "function_declaration":
                decls.append(self._function(child))
            elif node_type == "method_declaration":
                decls.append(self._method(child))
            elif node_type == "type_declaration":
                decls.extend(self._types(child))
            elif node_type == "const_declaration":
                decls.extend(self._values(child, DeclKind.CONST))
            elif node_type == "var_declaration":
                decls.extend(self._values(child, DeclKind.VAR))
            else:
                self._fail(child, "non-declaration statement outside function body")
        if package is None:
            raise ParseError(self.path, 1, 1, "expected 'package' clause")
        return SyntaxFile(
            path=self.path,
            package=package,
            imports=tuple(imports),
            decls=tuple(decls),
        )

    # -- helpers ------------------------------------------------------------

    def _text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    @staticmethod
    def _pos(node: Node) -> Position:
        row, column = node.start_point
        return Position(row + 1, column + 1)

    def _fail(self, node: Node, reason: str) -> None:
        pos = self._pos(node)
        raise ParseError(self.path, pos.line, pos.column, reason)

    @staticmethod
    def _named(node: Node) -> List[Node]:
        return [child for child in node.named_children if child.type != "comment"]

    def _field(self, node: Node, name: str) -> Node:
        child = node.child_by_field_name(name)
        if child is None:
            self._fail(node, f"missing {name} in {node.type}")
        assert child is not None
        return child

    # -- declarations -------------------------------------------------------

    def _package_name(self, node: Node) -> str:
        for child in self._named(node):
            return self._text(child)
        self._fail(node, "missing package name")
        return ""

    def _imports(self, node: Node) -> List[ImportSpec]:
        specs: List[ImportSpec] = []
        for child in self._named(node):
            if child.type == "import_spec":
                specs.append(self._import_spec(child))
            elif child.type == "import_spec_list":
                for spec in self._named(child):
                    if spec.type == "import_spec":
                        specs.append(self._import_spec(spec))
        return specs

    def _import_spec(self, node: Node) -> ImportSpec:
        name_node = node.child_by_field_name("name")
        path_node = self._field(node, "path")
        return ImportSpec(
            name=self._text(name_node) if name_node is not None else None,
            path=unquote(self._text(path_node)),
            pos=self._pos(node),
        )

    def _function(self, node: Node) -> FuncDecl:
        type_params_node = node.child_by_field_name("type_parameters")
        return FuncDecl(
            name=self._text(self._field(node, "name")),
            receiver=None,
            type_params=self._type_params(type_params_node) if type_params_node else (),
            type=self._signature(node),
            has_body=node.child_by_field_name("body") is not None,
            pos=self._pos(node),
        )

    def _method(self, node: Node) -> FuncDecl:
        receiver_list = self._field(node, "receiver")
        receivers = self._params(receiver_list)
        if len(receivers) != 1:
            self._fail(receiver_list, "method has multiple receivers")
        receiver = receivers[0]
        return FuncDecl(
            name=self._text(self._field(node, "name")),
            receiver=Receiver(name=receiver.name, type=receiver.type, pos=self._pos(receiver_list)),
            type_params=(),
            type=self._signature(node),
            has_body=node.child_by_field_name("body") is not None,
            pos=self._pos(node),
        )

    def _types(self, node: Node) -> List[TypeSpec]:
        specs: List[TypeSpec] = []
        for child in self._named(node):
            if child.type in {"type_spec", "type_alias"}:
                specs.append(self._type_spec(child))
            elif child.type == "type_spec_list":
                specs.extend(
                    self._type_spec(spec)
                    for spec in self._named(child)
                    if spec.type in {"type_spec", "type_alias"}
                )
        return specs

    def _type_spec(self, node: Node) -> TypeSpec:
        type_params_node = node.child_by_field_name("type_parameters")
        return TypeSpec(
            name=self._text(self._field(node, "name")),
            type_params=self._type_params(type_params_node) if type_params_node else (),
            type=self._type(self._field(node, "type")),
            alias=node.type == "type_alias",
            pos=self._pos(node),
        )

    def _values(self, node: Node, kind: DeclKind) -> List[ValueSpec]:
        spec_type = "const_spec" if kind is DeclKind.CONST else "var_spec"
        raw_specs: List[Node] = []
        for child in self._named(node):
            if child.type == spec_type:
                raw_specs.append(child)
            elif child.type.endswith("_spec_list"):
                raw_specs.extend(spec for spec in self._named(child) if spec.type == spec_type)

        specs: List[ValueSpec] = []
        previous: Optional[ValueSpec] = None
        for index, spec in enumerate(raw_specs):
            names = tuple(self._text(name) for name in spec.children_by_field_name("name") if name.is_named)
            type_node = spec.child_by_field_name("type")
            value_node = spec.child_by_field_name("value")
            type_expr = self._type(type_node) if type_node is not None else None
            values: Tuple[Expr, ...] = ()
            if value_node is not None:
                values = tuple(self._expr(value) for value in self._named(value_node))
            if kind is DeclKind.CONST and not values:
                if type_expr is not None or previous is None:
                    self._fail(spec, "missing init expr for const declaration")
                assert previous is not None
                type_expr, values = previous.type, previous.values
            value_spec = ValueSpec(
                kind=kind,
                names=names,
                type=type_expr,
                values=values,
                iota=index,
                pos=self._pos(spec),
            )
            if kind is DeclKind.CONST and value_node is not None:
                previous = value_spec
            specs.append(value_spec)
        return specs

    # -- signatures ---------------------------------------------------------

    def _signature(self, node: Node) -> FuncType:
        params = self._params(self._field(node, "parameters"))
        result_node = node.child_by_field_name("result")
        results: Tuple[Param, ...] = ()
        if result_node is not None:
            if result_node.type == "parameter_list":
                results = self._params(result_node)
            else:
                results = (Param(name=None, type=self._type(result_node)),)
        return FuncType(params=params, results=results, pos=self._pos(node))

    def _params(self, node: Node) -> Tuple[Param, ...]:
        params: List[Param] = []
        for child in self._named(node):
            if child.type == "parameter_declaration":
                type_expr = self._type(self._field(child, "type"))
                names = child.children_by_field_name("name")
                if not names:
                    params.append(Param(name=None, type=type_expr))
                for name in names:
                    params.append(Param(name=self._text(name), type=type_expr))
            elif child.type == "variadic_parameter_declaration":
                name_node = child.child_by_field_name("name")
                params.append(
                    Param(
                        name=self._text(name_node) if name_node is not None else None,
                        type=self._type(self._field(child, "type")),
                        variadic=True,
                    )
                )
        for param in params[:-1]:
            if param.variadic:
                self._fail(node, "can only use ... with final parameter in list")
        return tuple(params)

    def _type_params(self, node: Node) -> Tuple[TypeParam, ...]:
        result: List[TypeParam] = []
        for child in self._named(node):
            constraint_node = self._field(child, "type")
            if constraint_node.type == "type_constraint":
                constraint = self._terms(constraint_node)
            else:
                constraint = self._type(constraint_node)
            for name in child.children_by_field_name("name"):
                if not name.is_named:
                    continue
                result.append(TypeParam(name=self._text(name), constraint=constraint))
        return tuple(result)

    # -- types --------------------------------------------------------------

    def _terms(self, node: Node) -> TypeExpr:
        terms = tuple(self._union_terms(node))
        if len(terms) == 1:
            return terms[0]
        return UnionType(terms=terms, pos=self._pos(node))

    def _union_terms(self, node: Node) -> List[TypeExpr]:
        terms: List[TypeExpr] = []
        for child in self._named(node):
            if child.type == "union_type":
                terms.extend(self._union_terms(child))
            else:
                terms.append(self._type(child))
        return terms

    def _type(self, node: Node) -> TypeExpr:
        node_type = node.type
        pos = self._pos(node)
        if node_type in {"type_identifier", "identifier", "package_identifier"}:
            return IdentType(name=self._text(node), pos=pos)
        if node_type == "qualified_type":
            return QualifiedType(
                package=self._text(self._field(node, "package")),
                name=self._text(self._field(node, "name")),
                pos=pos,
            )
        if node_type == "pointer_type":
            return PointerType(elem=self._type(self._named(node)[0]), pos=pos)
        if node_type == "slice_type":
            return SliceType(elem=self._type(self._field(node, "element")), pos=pos)
        if node_type == "array_type":
            return ArrayType(
                length=self._expr(self._field(node, "length")),
                elem=self._type(self._field(node, "element")),
                pos=pos,
            )
        if node_type == "implicit_length_array_type":
            return ArrayType(length=None, elem=self._type(self._field(node, "element")), pos=pos)
        if node_type == "map_type":
            return MapType(
                key=self._type(self._field(node, "key")),
                value=self._type(self._field(node, "value")),
                pos=pos,
            )
        if node_type == "channel_type":
            return ChanType(dir=self._chan_dir(node), elem=self._type(self._field(node, "value")), pos=pos)
        if node_type == "function_type":
            return self._signature(node)
        if node_type == "struct_type":
            return self._struct(node)
        if node_type == "interface_type":
            return self._interface(node)
        if node_type == "generic_type":
            arguments = self._field(node, "type_arguments")
            return GenericType(
                base=self._type(self._field(node, "type")),
                args=tuple(self._type(arg) for arg in self._named(arguments)),
                pos=pos,
            )
        if node_type == "parenthesized_type":
            return self._type(self._named(node)[0])
        if node_type == "union_type":
            return UnionType(terms=tuple(self._union_terms(node)), pos=pos)
        if node_type == "negated_type":
            return NegatedType(elem=self._type(self._named(node)[0]), pos=pos)
        if node_type in {"type_elem", "constraint_elem"}:
            return self._terms(node)
        if node_type == "constraint_term":
            inner = self._type(self._named(node)[0])
            if any(child.type == "~" for child in node.children):
                return NegatedType(elem=inner, pos=pos)
            return inner
        self._fail(node, f"unexpected {node_type} in type position")
        raise AssertionError("unreachable")

    def _chan_dir(self, node: Node) -> ChanDir:
        tokens = [child.type for child in node.children if not child.is_named]
        if tokens and tokens[0] == "<-":
            return ChanDir.RECV
        if "<-" in tokens:
            return ChanDir.SEND
        return ChanDir.BOTH

    def _struct(self, node: Node) -> StructType:
        fields: List[FieldDecl] = []
        for body in self._named(node):
            if body.type != "field_declaration_list":
                continue
            for decl in self._named(body):
                if decl.type != "field_declaration":
                    continue
                names = tuple(self._text(name) for name in decl.children_by_field_name("name"))
                type_expr = self._type(self._field(decl, "type"))
                embedded = not names
                if embedded and any(child.type == "*" for child in decl.children):
                    type_expr = PointerType(elem=type_expr, pos=type_expr.pos)
                tag_node = decl.child_by_field_name("tag")
                fields.append(
                    FieldDecl(
                        names=names,
                        type=type_expr,
                        embedded=embedded,
                        tag=unquote(self._text(tag_node)) if tag_node is not None else None,
                    )
                )
        return StructType(fields=tuple(fields), pos=self._pos(node))

    def _interface(self, node: Node) -> InterfaceType:
        methods: List[MethodSpec] = []
        embeds: List[TypeExpr] = []
        elements = self._named(node)
        # Older grammars wrap the elements in a body node.
        if len(elements) == 1 and elements[0].type in {"method_spec_list", "interface_body"}:
            elements = self._named(elements[0])
        for element in elements:
            if element.child_by_field_name("parameters") is not None and element.child_by_field_name("name") is not None:
                methods.append(
                    MethodSpec(name=self._text(self._field(element, "name")), type=self._signature(element))
                )
            elif element.type in _TYPE_NODES:
                embeds.append(self._type(element))
            else:
                self._fail(element, f"unexpected {element.type} in interface")
        return InterfaceType(methods=tuple(methods), embeds=tuple(embeds), pos=self._pos(node))

    # -- expressions --------------------------------------------------------

    def _expr(self, node: Node) -> Expr:
        node_type = node.type
        pos = self._pos(node)
        if node_type in {"identifier", "true", "false", "nil", "iota"}:
            return Ident(name=self._text(node), pos=pos)
        if node_type in _LITERAL_KINDS:
            return BasicLit(kind=_LITERAL_KINDS[node_type], value=self._text(node), pos=pos)
        if node_type in {"interpreted_string_literal", "raw_string_literal"}:
            return BasicLit(kind=ExprKind.STRING, value=unquote(self._text(node)), pos=pos)
        if node_type == "selector_expression":
            return Selector(
                operand=self._expr(self._field(node, "operand")),
                field=self._text(self._field(node, "field")),
                pos=pos,
            )
        if node_type == "binary_expression":
            return Binary(
                op=self._text(self._field(node, "operator")),
                left=self._expr(self._field(node, "left")),
                right=self._expr(self._field(node, "right")),
                pos=pos,
            )
        if node_type == "unary_expression":
            return Unary(
                op=self._text(self._field(node, "operator")),
                operand=self._expr(self._field(node, "operand")),
                pos=pos,
            )
        if node_type == "parenthesized_expression":
            return self._expr(self._named(node)[0])
        if node_type == "call_expression":
            arguments = node.child_by_field_name("arguments")
            args: Tuple[Expr, ...] = ()
            if arguments is not None:
                args = tuple(self._expr(arg) for arg in self._named(arguments))
            return Call(func=self._expr(self._field(node, "function")), args=args, pos=pos)
        if node_type == "type_conversion_expression":
            return Conversion(
                type=self._type(self._field(node, "type")),
                operand=self._expr(self._field(node, "operand")),
                pos=pos,
            )
        if node_type == "composite_literal":
            type_node = node.child_by_field_name("type")
            return CompositeLit(type=self._type(type_node) if type_node is not None else None, pos=pos)
        if node_type == "func_literal":
            return FuncLit(type=self._signature(node), pos=pos)
        if node_type in _TYPE_NODES:
            return TypeOperand(type=self._type(node), pos=pos)
        return OtherExpr(text=self._text(node), pos=pos)


def parse_file(path: Path, parser: GoParser | None = None) -> SyntaxFile:
    """Parse a single file with a fresh or supplied :class:`GoParser`."""
    return (parser or GoParser()).parse_file(path)


__all__ = ["GoParser", "parse_file", "unquote"]
