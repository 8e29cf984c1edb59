"""Text backend: nodes → formatted source.

Best-effort: any value that is not a known node (bare numbers, strings,
booleans, foreign objects) is rendered through a JSON fallback instead of
failing.

Indentation is threaded through the recursion as a string argument; the
printer holds no per-call state.
"""

from __future__ import annotations

from ..nodes import (
    ArrayLiteral,
    BinaryOp,
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
    Node,
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
from ..types import Type
from .util import escape_template, fallback_json, format_number, is_identifier, quote_string

INDENT: str = "  "


def to_source(node: Value) -> str:
    """Render a node (or bare value) as source text."""
    return _Printer().render(node, "")


def reindent(text: str, indent: str) -> str:
    """Prefix every non-empty line of text with indent."""
    lines = text.split("\n")
    return "\n".join(indent + line if line else "" for line in lines)


class _Printer:
    # Expression precedence (higher binds tighter)
    _PREC_ARROW: int = 2
    _PREC_OR: int = 4
    _PREC_AND: int = 5
    _PREC_EQUALITY: int = 9
    _PREC_COMPARE: int = 10
    _PREC_SUM: int = 12
    _PREC_PRODUCT: int = 13
    _PREC_POWER: int = 14
    _PREC_PREFIX: int = 15
    _PREC_POSTFIX: int = 16
    _PREC_MEMBER: int = 18
    _PREC_PRIMARY: int = 20

    _BIN_PREC: dict[str, int] = {
        "||": _PREC_OR,
        "&&": _PREC_AND,
        "==": _PREC_EQUALITY,
        "<": _PREC_COMPARE,
        "<=": _PREC_COMPARE,
        ">": _PREC_COMPARE,
        ">=": _PREC_COMPARE,
        "+": _PREC_SUM,
        "-": _PREC_SUM,
        "*": _PREC_PRODUCT,
        "/": _PREC_PRODUCT,
        "%": _PREC_PRODUCT,
        "**": _PREC_POWER,
    }

    # ── Dispatch ────────────────────────────────────────────

    def render(self, value: Value, indent: str) -> str:
        match value:
            case Program(statements=statements):
                return "\n".join(self._statement(s, indent) for s in statements)
            case Block():
                return self._block(value, indent)
            case Declaration():
                return self._declaration(value) + ";"
            case Conditional(condition=cond, then_branch=then_branch, else_branch=else_branch):
                out = f"if ({self.render(cond, indent)}) {self._block(then_branch, indent)}"
                if else_branch is not None:
                    out += f" else {self._block(else_branch, indent)}"
                return out
            case IterateOver(name=name, source=source, body=body):
                return f"for (const {name} of {self.render(source, indent)}) {self._block(body, indent)}"
            case IterateKeys(name=name, source=source, body=body):
                return f"for (const {name} in {self.render(source, indent)}) {self._block(body, indent)}"
            case CountedLoop(init=init, condition=cond, update=update, body=body):
                init_str = self._inline(init)
                cond_str = self._inline(cond)
                update_str = self._inline(update)
                return f"for ({init_str}; {cond_str}; {update_str}) {self._block(body, indent)}"
            case WhileLoop(condition=cond, body=body):
                return f"while ({self.render(cond, indent)}) {self._block(body, indent)}"
            case TypeAlias(name=name, typ=typ, type_params=type_params):
                return f"type {name}{_type_params(type_params)} = {typ.render()};"
            case Interface(name=name, properties=properties, type_params=type_params):
                header = f"interface {name}{_type_params(type_params)}"
                if not properties:
                    return header + " {}"
                members = [f"{INDENT}{_key(k)}: {t.render()};" for k, t in properties.items()]
                return header + " {\n" + "\n".join(members) + "\n}"
            case Raw(text=text):
                return text
            case Node():
                return self._expr(value, indent)
            case _:
                return fallback_json(value)

    # ── Statements / Blocks ─────────────────────────────────

    def _statement(self, value: Value, indent: str) -> str:
        """Render value as one statement of a block whose body sits at indent."""
        if isinstance(value, (Conditional, IterateOver, IterateKeys, CountedLoop, WhileLoop, Block)):
            return indent + self.render(value, indent)
        text = self.render(value, "")
        if _is_expression(value):
            text += ";"
        return reindent(text, indent)

    def _block(self, block: Block, indent: str, returns: bool = False) -> str:
        inner = indent + INDENT
        lines = [self._statement(s, inner) for s in block.statements]
        if returns and block.result is not None:
            lines.append(reindent(f"return {self.render(block.result, '')};", inner))
        if not lines:
            return "{}"
        return "{\n" + "\n".join(lines) + "\n" + indent + "}"

    def _declaration(self, decl: Declaration) -> str:
        return f"{decl.kind} {decl.name}{_annotation(decl.typ)} = {self.render(decl.value, '')}"

    def _inline(self, value: Value) -> str:
        """Render a counted-loop clause: no trailing semicolon, empty for None."""
        if value is None:
            return ""
        if isinstance(value, Declaration):
            return self._declaration(value)
        return self.render(value, "")

    # ── Expressions ─────────────────────────────────────────

    def _prec(self, value: Value) -> int:
        if isinstance(value, Reference) and value.expr is not None:
            return self._prec(value.expr)
        if isinstance(value, BinaryOp):
            return self._BIN_PREC.get(value.op, self._PREC_PRIMARY)
        if isinstance(value, UnaryOp):
            if value.op in UPDATE_OPS and not value.prefix:
                return self._PREC_POSTFIX
            return self._PREC_PREFIX
        if isinstance(value, FunctionLiteral):
            return self._PREC_ARROW
        if isinstance(value, (Call, MethodCall, PropertyAccess)):
            return self._PREC_MEMBER
        return self._PREC_PRIMARY

    def _operand(self, value: Value, parent_prec: int, indent: str, side: str = "") -> str:
        prec = self._prec(value)
        text = self.render(value, indent)
        shape = value.expr if isinstance(value, Reference) and value.expr is not None else value
        need_parens = prec < parent_prec
        if prec == parent_prec and isinstance(shape, BinaryOp):
            # ** is right-associative, everything else left-associative
            if parent_prec == self._PREC_POWER:
                need_parens = side == "left"
            else:
                need_parens = side == "right"
        if parent_prec == self._PREC_POWER and side == "left" and _is_unary(shape):
            # a unary expression cannot be the base of **
            need_parens = True
        if need_parens:
            return f"({text})"
        return text

    def _expr(self, node: Node, indent: str) -> str:
        match node:
            case NumberLiteral(value=value, typ=typ):
                return format_number(value) + _annotation(typ)
            case StringLiteral(value=value, typ=typ):
                return quote_string(value) + _annotation(typ)
            case BoolLiteral(value=value, typ=typ):
                return ("true" if value else "false") + _annotation(typ)
            case Reference(name=name):
                return name
            case ObjectLiteral(properties=properties, typ=typ):
                if not properties:
                    return "{}" + _annotation(typ)
                parts = [f"{_key(k)}: {self.render(v, indent)}" for k, v in properties.items()]
                return "{ " + ", ".join(parts) + " }" + _annotation(typ)
            case ArrayLiteral(elements=elements, typ=typ):
                if not elements:
                    return "[]" + _annotation(typ)
                parts = [self.render(e, indent) for e in elements]
                return "[ " + ", ".join(parts) + " ]" + _annotation(typ)
            case FunctionLiteral(params=params, body=body, return_type=ret, type_params=tps):
                params_str = ", ".join(_param(p) for p in params)
                header = f"{_type_params(tps)}({params_str}){_annotation(ret)}"
                return f"{header} => {self._block(body, indent, returns=True)}"
            case Call(callee=callee, args=args):
                func = self._operand(callee, self._PREC_MEMBER, indent)
                return f"{func}({self._args(args, indent)})"
            case MethodCall(obj=obj, method=method, args=args):
                receiver = self._operand(obj, self._PREC_MEMBER, indent)
                return f"{receiver}.{method}({self._args(args, indent)})"
            case PropertyAccess(obj=obj, prop=prop, computed=computed):
                receiver = self._operand(obj, self._PREC_MEMBER, indent)
                if computed:
                    return f"{receiver}[{self.render(prop, indent)}]"
                if not is_identifier(prop):
                    return f"{receiver}[{quote_string(prop)}]"
                return f"{receiver}.{prop}"
            case NumericOp(left=left, op=op, right=right) | LogicalOp(left=left, op=op, right=right):
                op_prec = self._BIN_PREC[op]
                left_str = self._operand(left, op_prec, indent, "left")
                right_str = self._operand(right, op_prec, indent, "right")
                return f"{left_str} {op} {right_str}"
            case UnaryOp(op=op, operand=operand, prefix=prefix):
                if op in UPDATE_OPS and not prefix:
                    return f"{self._operand(operand, self._PREC_POSTFIX, indent)}{op}"
                inner = self._operand(operand, self._PREC_PREFIX, indent)
                if op in ("-", "+") and inner.startswith(op):
                    inner = f"({inner})"
                return f"{op}{inner}"
            case TemplateLiteral(quasis=quasis, expressions=expressions):
                out = "`" + escape_template(quasis[0])
                for expr, quasi in zip(expressions, quasis[1:]):
                    out += "${" + self.render(expr, indent) + "}" + escape_template(quasi)
                return out + "`"
            case Param():
                return _param(node)
            case _:
                return fallback_json(node)

    def _args(self, args: tuple[Value, ...], indent: str) -> str:
        return ", ".join(self.render(a, indent) for a in args)


# ── Helpers ─────────────────────────────────────────────────


def _is_expression(value: Value) -> bool:
    """Check if value is expression-shaped, i.e. needs `;` as a statement."""
    return not isinstance(
        value,
        (Declaration, TypeAlias, Interface, Raw, Program, Conditional, IterateOver, IterateKeys, CountedLoop, WhileLoop, Block),
    )


def _is_unary(value: Value) -> bool:
    """Check if value renders as a prefix unary expression or a negative number."""
    match value:
        case UnaryOp(op=op):
            return op not in UPDATE_OPS
        case NumberLiteral(value=number):
            return number < 0
        case bool():
            return False
        case int() | float():
            return value < 0
        case _:
            return False


def _annotation(typ: Type | None) -> str:
    return f": {typ.render()}" if typ is not None else ""


def _type_params(type_params: tuple[str, ...]) -> str:
    if not type_params:
        return ""
    return "<" + ", ".join(type_params) + ">"


def _param(param: Param) -> str:
    return param.name + _annotation(param.typ)


def _key(name: str) -> str:
    return name if is_identifier(name) else quote_string(name)
