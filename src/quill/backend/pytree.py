"""Tree backend: nodes → Python `ast` nodes, unparsed by `ast.unparse`.

The `ast` module is treated as an external backend: its node classes are
the target vocabulary, its `ast.stmt` / `ast.expr` hierarchy decides where
an expression needs an `ast.Expr` wrapper, `ast.parse` reads raw fragments,
and `ast.unparse` turns the finished tree into text.

Unlike the text backend this one is strict: any value or construct with no
counterpart in the vocabulary raises UnsupportedValueError. The only
recovered failure is a raw fragment that does not parse, which degrades to
a string constant.

| Node              | ast                                              |
|-------------------|--------------------------------------------------|
| literals          | Constant                                         |
| Reference         | Name, or the expression it was minted from       |
| Declaration       | Assign / AnnAssign / FunctionDef (for functions) |
| Conditional       | If                                               |
| IterateOver       | For                                              |
| IterateKeys       | For over source.keys()                           |
| CountedLoop       | init; While(cond) { body; update }               |
| WhileLoop         | While                                            |
| Block, Program    | flattened statements / Module                    |
| ObjectLiteral     | Dict                                             |
| ArrayLiteral      | List                                             |
| FunctionLiteral   | Lambda, or a FunctionDef hoisted before the      |
|                   | enclosing statement when it has statements       |
| Call, MethodCall  | Call                                             |
| NumericOp         | BinOp / Compare                                  |
| LogicalOp         | BoolOp                                           |
| UnaryOp           | UnaryOp; ++ and -- as AugAssign statements, or   |
|                   | NamedExpr on a plain name in expressions         |
| PropertyAccess    | Attribute / Subscript                            |
| TemplateLiteral   | JoinedStr                                        |
| TypeAlias         | TypeAlias                                        |
| Interface         | ClassDef(Protocol)                               |
"""

from __future__ import annotations

import ast

from ..nodes import (
    ArrayLiteral,
    Block,
    BoolLiteral,
    Call,
    Conditional,
    CountedLoop,
    Declaration,
    FunctionLiteral,
    Interface,
    IterateKeys,
    IterateOver,
    LogicalOp,
    MethodCall,
    NumberLiteral,
    NumericOp,
    ObjectLiteral,
    Param,
    Program,
    PropertyAccess,
    Raw,
    Reference,
    StringLiteral,
    TemplateLiteral,
    TypeAlias,
    UnaryOp,
    UPDATE_OPS,
    Value,
    WhileLoop,
)
from ..types import (
    ArrayType,
    FunctionType,
    Generic,
    IntersectionType,
    ObjectType,
    Primitive,
    Type,
    TypeVariable,
    UnionType,
    UnknownType,
)


class UnsupportedValueError(TypeError):
    """Raised when a value has no conversion to the target vocabulary."""


def to_statements(node: Value) -> list[ast.stmt]:
    """Convert node into the statements it stands for."""
    return _Serializer().statements(node)


def to_expression(node: Value) -> ast.expr:
    """Convert node into a single expression.

    Fails for function literals with statements, which need an enclosing
    statement to hoist their definition in front of.
    """
    serializer = _Serializer()
    result = serializer.expression(node)
    if serializer.hoisted:
        raise UnsupportedValueError("function literal with statements needs an enclosing statement")
    return result


def to_tree(node: Value) -> ast.Module:
    """Convert node into a module holding its statements."""
    module = ast.Module(body=to_statements(node), type_ignores=[])
    return ast.fix_missing_locations(module)


def unparse(node: Value) -> str:
    """Convert node and hand the tree to `ast.unparse`."""
    return ast.unparse(to_tree(node))


_BIN_OPS: dict[str, type[ast.operator]] = {
    "+": ast.Add,
    "-": ast.Sub,
    "*": ast.Mult,
    "/": ast.Div,
    "%": ast.Mod,
    "**": ast.Pow,
}

_COMPARE_OPS: dict[str, type[ast.cmpop]] = {
    ">": ast.Gt,
    "<": ast.Lt,
    ">=": ast.GtE,
    "<=": ast.LtE,
    "==": ast.Eq,
}

_BOOL_OPS: dict[str, type[ast.boolop]] = {
    "&&": ast.And,
    "||": ast.Or,
}

_UNARY_OPS: dict[str, type[ast.unaryop]] = {
    "!": ast.Not,
    "-": ast.USub,
    "+": ast.UAdd,
}


class _Serializer:
    def __init__(self) -> None:
        # definitions to place before the statement being converted
        self.hoisted: list[ast.stmt] = []
        self.count = 0

    # ── Classification ──────────────────────────────────────

    def statements(self, value: Value) -> list[ast.stmt]:
        outer = self.hoisted
        self.hoisted = []
        try:
            result = self._convert(value)
            if isinstance(result, list):
                stmts = result
            elif isinstance(result, ast.stmt):
                stmts = [result]
            elif isinstance(result, ast.expr):
                stmts = [ast.Expr(value=result)]
            else:
                raise UnsupportedValueError(f"cannot convert {type(value).__name__}")
            return self.hoisted + stmts
        finally:
            self.hoisted = outer

    def expression(self, value: Value) -> ast.expr:
        if isinstance(value, Raw):
            return _raw_expression(value.text)
        if isinstance(value, UnaryOp) and value.op in UPDATE_OPS:
            return self._update_expression(value)
        result = self._convert(value)
        if isinstance(result, ast.expr):
            return result
        raise UnsupportedValueError(
            f"{type(value).__name__} converts to a statement and cannot be used as an expression"
        )

    # ── Dispatch ────────────────────────────────────────────

    def _convert(self, value: Value) -> ast.AST | list[ast.stmt]:
        match value:
            case Program(statements=statements) | Block(statements=statements):
                return self._flatten(statements)
            case Declaration():
                return self._declaration(value)
            case Conditional(condition=cond, then_branch=then_branch, else_branch=else_branch):
                orelse = self._flatten(else_branch.statements) if else_branch is not None else []
                return ast.If(test=self.expression(cond), body=self._body(then_branch), orelse=orelse)
            case IterateOver(name=name, source=source, body=body):
                return ast.For(
                    target=_store(name),
                    iter=self.expression(source),
                    body=self._body(body),
                    orelse=[],
                )
            case IterateKeys(name=name, source=source, body=body):
                keys = ast.Call(
                    func=ast.Attribute(value=self.expression(source), attr="keys", ctx=ast.Load()),
                    args=[],
                    keywords=[],
                )
                return ast.For(target=_store(name), iter=keys, body=self._body(body), orelse=[])
            case CountedLoop(init=init, condition=cond, update=update, body=body):
                return self._counted_loop(init, cond, update, body)
            case WhileLoop(condition=cond, body=body):
                return ast.While(test=self.expression(cond), body=self._body(body), orelse=[])
            case TypeAlias(name=name, typ=typ, type_params=type_params):
                return ast.TypeAlias(
                    name=_store(name),
                    type_params=_type_params(type_params),
                    value=self._annotation(typ),
                )
            case Interface(name=name, properties=properties, type_params=type_params):
                return self._interface(name, properties, type_params)
            case Raw(text=text):
                return _raw_statements(text)
            case UnaryOp(op=op, operand=operand) if op in UPDATE_OPS:
                augop = ast.Add() if op == "++" else ast.Sub()
                return ast.AugAssign(target=self._target(operand), op=augop, value=ast.Constant(value=1))
            case _:
                return self._expr(value)

    # ── Statements ──────────────────────────────────────────

    def _flatten(self, values: tuple[Value, ...]) -> list[ast.stmt]:
        out: list[ast.stmt] = []
        for v in values:
            out.extend(self.statements(v))
        return out

    def _body(self, block: Block) -> list[ast.stmt]:
        return self._flatten(block.statements) or [ast.Pass()]

    def _declaration(self, decl: Declaration) -> ast.stmt:
        if not decl.name.isidentifier():
            raise UnsupportedValueError(f"invalid binding name {decl.name!r}")
        if isinstance(decl.value, FunctionLiteral):
            return self._function_def(decl.name, decl.value)
        value = self.expression(decl.value)
        if decl.typ is not None:
            return ast.AnnAssign(
                target=_store(decl.name),
                annotation=self._annotation(decl.typ),
                value=value,
                simple=1,
            )
        return ast.Assign(targets=[_store(decl.name)], value=value)

    def _function_def(self, name: str, func: FunctionLiteral) -> ast.FunctionDef:
        body = self._flatten(func.body.statements)
        if func.body.result is not None:
            outer = self.hoisted
            self.hoisted = []
            value = self.expression(func.body.result)
            body.extend(self.hoisted)
            self.hoisted = outer
            body.append(ast.Return(value=value))
        returns = self._annotation(func.return_type) if func.return_type is not None else None
        return ast.FunctionDef(
            name=name,
            args=self._arguments(func.params, annotate=True),
            body=body or [ast.Pass()],
            decorator_list=[],
            returns=returns,
            type_params=_type_params(func.type_params),
        )

    def _counted_loop(self, init: Value, cond: Value, update: Value, body: Block) -> list[ast.stmt]:
        out = self.statements(init) if init is not None else []
        test = self.expression(cond) if cond is not None else ast.Constant(value=True)
        loop_body = self._flatten(body.statements)
        if update is not None:
            loop_body.extend(self.statements(update))
        out.append(ast.While(test=test, body=loop_body or [ast.Pass()], orelse=[]))
        return out

    def _interface(self, name: str, properties: dict[str, Type], type_params: tuple[str, ...]) -> ast.ClassDef:
        fields: list[ast.stmt] = []
        for key, typ in properties.items():
            if not key.isidentifier():
                raise UnsupportedValueError(f"invalid field name {key!r}")
            fields.append(
                ast.AnnAssign(target=_store(key), annotation=self._annotation(typ), value=None, simple=1)
            )
        return ast.ClassDef(
            name=name,
            bases=[_load("Protocol")],
            keywords=[],
            body=fields or [ast.Pass()],
            decorator_list=[],
            type_params=_type_params(type_params),
        )

    def _target(self, value: Value) -> ast.expr:
        match value:
            case Reference(expr=expr) if expr is not None:
                return self._target(expr)
            case Reference(name=name) if name.isidentifier():
                return _store(name)
            case PropertyAccess(obj=obj, prop=prop, computed=False) if not prop.isidentifier():
                return ast.Subscript(value=self.expression(obj), slice=ast.Constant(value=prop), ctx=ast.Store())
            case PropertyAccess(obj=obj, prop=prop, computed=False):
                return ast.Attribute(value=self.expression(obj), attr=prop, ctx=ast.Store())
            case PropertyAccess(obj=obj, prop=prop, computed=True):
                return ast.Subscript(value=self.expression(obj), slice=self.expression(prop), ctx=ast.Store())
            case _:
                raise UnsupportedValueError(f"cannot assign to {type(value).__name__}")

    # ── Expressions ─────────────────────────────────────────

    def _expr(self, value: Value) -> ast.AST:
        match value:
            case None | bool() | int() | float() | str():
                return ast.Constant(value=value)
            case dict():
                return self._dict(value)
            case list() | tuple():
                return ast.List(elts=[self.expression(e) for e in value], ctx=ast.Load())
            case NumberLiteral(value=v) | StringLiteral(value=v) | BoolLiteral(value=v):
                return ast.Constant(value=v)
            case Reference(expr=expr) if expr is not None:
                return self.expression(expr)
            case Reference(name=name):
                return _reference(name)
            case ObjectLiteral(properties=properties):
                return self._dict(properties)
            case ArrayLiteral(elements=elements):
                return ast.List(elts=[self.expression(e) for e in elements], ctx=ast.Load())
            case FunctionLiteral(body=body) if body.statements:
                return self._hoist(value)
            case FunctionLiteral(params=params, body=body):
                result = self.expression(body.result)
                return ast.Lambda(args=self._arguments(params, annotate=False), body=result)
            case Call(callee=callee, args=args):
                return ast.Call(func=self.expression(callee), args=[self.expression(a) for a in args], keywords=[])
            case MethodCall(obj=obj, method=method, args=args):
                func = ast.Attribute(value=self.expression(obj), attr=method, ctx=ast.Load())
                return ast.Call(func=func, args=[self.expression(a) for a in args], keywords=[])
            case PropertyAccess(obj=obj, prop=prop, computed=False) if not prop.isidentifier():
                return ast.Subscript(value=self.expression(obj), slice=ast.Constant(value=prop), ctx=ast.Load())
            case PropertyAccess(obj=obj, prop=prop, computed=False):
                return ast.Attribute(value=self.expression(obj), attr=prop, ctx=ast.Load())
            case PropertyAccess(obj=obj, prop=prop, computed=True):
                return ast.Subscript(value=self.expression(obj), slice=self.expression(prop), ctx=ast.Load())
            case NumericOp(left=left, op=op, right=right):
                return self._numeric(left, op, right)
            case LogicalOp(left=left, op=op, right=right):
                return self._logical(left, op, right)
            case UnaryOp(op=op, operand=operand) if op in _UNARY_OPS:
                return ast.UnaryOp(op=_UNARY_OPS[op](), operand=self.expression(operand))
            case TemplateLiteral(quasis=quasis, expressions=expressions):
                return self._template(quasis, expressions)
            case Param():
                raise UnsupportedValueError("parameters are only valid inside a function literal")
            case _:
                raise UnsupportedValueError(f"unsupported value of type {type(value).__name__}")

    def _hoist(self, func: FunctionLiteral) -> ast.Name:
        """Define func in front of the enclosing statement and refer to it by name."""
        name = f"_fn{self.count}"
        self.count += 1
        definition = self._function_def(name, func)
        self.hoisted.append(definition)
        return _load(name)

    def _update_expression(self, node: UnaryOp) -> ast.expr:
        """`++x` as `(x := x + 1)`, `x++` as `(x := x + 1) - 1`."""
        target = self._target(node.operand)
        if not isinstance(target, ast.Name):
            raise UnsupportedValueError(f"{node.op} on {type(node.operand).__name__} cannot be used as an expression")
        step, undo = (ast.Add, ast.Sub) if node.op == "++" else (ast.Sub, ast.Add)
        value = ast.BinOp(left=_load(target.id), op=step(), right=ast.Constant(value=1))
        assign = ast.NamedExpr(target=target, value=value)
        if node.prefix:
            return assign
        return ast.BinOp(left=assign, op=undo(), right=ast.Constant(value=1))

    def _dict(self, properties: dict) -> ast.Dict:
        keys: list[ast.expr | None] = []
        values: list[ast.expr] = []
        for key, v in properties.items():
            if not isinstance(key, str):
                raise UnsupportedValueError(f"unsupported object key of type {type(key).__name__}")
            keys.append(ast.Constant(value=key))
            values.append(self.expression(v))
        return ast.Dict(keys=keys, values=values)

    def _numeric(self, left: Value, op: str, right: Value) -> ast.expr:
        if op in _COMPARE_OPS:
            return ast.Compare(
                left=self.expression(left),
                ops=[_COMPARE_OPS[op]()],
                comparators=[self.expression(right)],
            )
        if op not in _BIN_OPS:
            raise UnsupportedValueError(f"unknown numeric operator {op!r}")
        return ast.BinOp(left=self.expression(left), op=_BIN_OPS[op](), right=self.expression(right))

    def _logical(self, left: Value, op: str, right: Value) -> ast.BoolOp:
        if op not in _BOOL_OPS:
            raise UnsupportedValueError(f"unknown logical operator {op!r}")
        values: list[ast.expr] = []
        # a && b && c is one BoolOp, as Python writes it
        if isinstance(left, LogicalOp) and left.op == op:
            values.extend(self._logical(left.left, op, left.right).values)
        else:
            values.append(self.expression(left))
        values.append(self.expression(right))
        return ast.BoolOp(op=_BOOL_OPS[op](), values=values)

    def _template(self, quasis: tuple[str, ...], expressions: tuple[Value, ...]) -> ast.JoinedStr:
        parts: list[ast.expr] = []
        if quasis[0]:
            parts.append(ast.Constant(value=quasis[0]))
        for expr, quasi in zip(expressions, quasis[1:]):
            parts.append(ast.FormattedValue(value=self.expression(expr), conversion=-1, format_spec=None))
            if quasi:
                parts.append(ast.Constant(value=quasi))
        return ast.JoinedStr(values=parts)

    def _arguments(self, params: tuple[Param, ...], annotate: bool) -> ast.arguments:
        args: list[ast.arg] = []
        for p in params:
            ann = self._annotation(p.typ) if annotate and p.typ is not None else None
            args.append(ast.arg(arg=p.name, annotation=ann))
        return ast.arguments(
            posonlyargs=[],
            args=args,
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=[],
        )

    # ── Types ───────────────────────────────────────────────

    def _annotation(self, typ: Type) -> ast.expr:
        match typ:
            case Primitive(name=name) | TypeVariable(name=name):
                return _load(name)
            case Generic(name=name, args=()):
                return _load(name)
            case Generic(name=name, args=args):
                return _subscript(name, [self._annotation(a) for a in args])
            case ObjectType(properties=properties):
                keys: list[ast.expr | None] = []
                values: list[ast.expr] = []
                for key, v in properties.items():
                    keys.append(ast.Constant(value=key))
                    values.append(self._annotation(v) if isinstance(v, Type) else _literal_type(v))
                return _subscript("TypedDict", [ast.Dict(keys=keys, values=values)])
            case ArrayType(element=element):
                return _subscript("list", [self._annotation(element)])
            case FunctionType(params=params, ret=ret):
                param_list = ast.List(elts=[self._annotation(p) for p in params], ctx=ast.Load())
                return _subscript("Callable", [param_list, self._annotation(ret)])
            case UnionType(members=members) if members:
                result = self._annotation(members[0])
                for m in members[1:]:
                    result = ast.BinOp(left=result, op=ast.BitOr(), right=self._annotation(m))
                return result
            case IntersectionType(members=members) if members:
                return _subscript("Intersection", [self._annotation(m) for m in members])
            case UnknownType():
                return _load("Any")
            case _:
                raise UnsupportedValueError(f"unsupported type {typ!r}")


# ── Helpers ─────────────────────────────────────────────────


def _load(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _store(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Store())


def _subscript(name: str, args: list[ast.expr]) -> ast.Subscript:
    index = args[0] if len(args) == 1 else ast.Tuple(elts=args, ctx=ast.Load())
    return ast.Subscript(value=_load(name), slice=index, ctx=ast.Load())


def _literal_type(value: object) -> ast.expr:
    if value is None or isinstance(value, (bool, int, float, str)):
        return _subscript("Literal", [ast.Constant(value=value)])
    raise UnsupportedValueError(f"unsupported literal type value of type {type(value).__name__}")


def _type_params(names: tuple[str, ...]) -> list[ast.type_param]:
    return [ast.TypeVar(name=n) for n in names]


def _reference(name: str) -> ast.expr:
    """Name for a plain binding; a hand-built dotted name like `a.b` is parsed."""
    if name.isidentifier():
        return _load(name)
    try:
        return ast.parse(name, mode="eval").body
    except (SyntaxError, ValueError) as e:
        raise UnsupportedValueError(f"reference {name!r} is not a valid expression") from e


def _raw_statements(text: str) -> list[ast.stmt]:
    try:
        return ast.parse(text).body
    except (SyntaxError, ValueError):
        return [ast.Expr(value=ast.Constant(value=text))]


def _raw_expression(text: str) -> ast.expr:
    try:
        return ast.parse(text, mode="eval").body
    except (SyntaxError, ValueError):
        return ast.Constant(value=text)
