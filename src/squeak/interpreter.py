import logging
import os
import sys
from typing import Dict, List as PyList, Optional, Tuple
from . import ast_nodes as ast
from .tokens import TokenType
from .parser import parse_file
from .environment import Environment, Signal, Unwinder
from .errors import (
    RuntimeFault, NotCallable, UnrecognizedExpression, UnrecognizedStatement,
    UnrecognizedOperator, UnrecognizedOperandType, IllegalArgument, IllegalOperation,
)
from .objects import (
    Object, Instance, Callable, Bindable, Number, String, Boolean, List, ObjectInstance,
    Function, Method, builtins, truthy, is_equal, type_name, render,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class Interpreter:
    """Tree-walking evaluator for parsed Squeak programs.

    The runtime environment holds the builtins and anything the host declares,
    the global environment is its only child. `environment` always points at
    the innermost scope of whatever is currently executing.
    """

    def __init__(self, wd: str = ".", out=None, importing: Tuple[str, ...] = ()):
        self.wd = wd
        self.out = out if out is not None else sys.stdout
        self.exports: Dict[str, Optional[Object]] = {}
        self.runtime = Environment(values=builtins())
        self.globals = Environment(self.runtime)
        self.environment = self.globals
        # Absolute paths of the files being imported on the way to this interpreter.
        self.importing = importing

    def interpret(self, program: PyList[ast.Statement]):
        for stmt in program:
            unwinder = self.execute(stmt)
            if unwinder is not None:
                # Nothing on the way up knew how to handle it.
                raise RuntimeFault(f"unexpected unwinder: {unwinder.signal.name.lower()}")

    def declare(self, name: str, obj: Optional[Object]):
        logger.debug("Declaring %s in runtime environment", name)
        self.runtime.declare(name, obj)

    def resolve(self, name: str, level: int = 0) -> Optional[Object]:
        return self.environment.resolve(name, level)

    def execute(self, stmt: ast.Statement) -> Optional[Unwinder]:
        if isinstance(stmt, ast.ExpressionStatement):
            self.evaluate(stmt.expression)
        elif isinstance(stmt, ast.Declaration):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.declare(stmt.name, value)
        elif isinstance(stmt, ast.Block):
            return self.execute_block(stmt.body, Environment(self.environment))
        elif isinstance(stmt, ast.If):
            if truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then)
            elif stmt.otherwise is not None:
                return self.execute(stmt.otherwise)
        elif isinstance(stmt, ast.While):
            return self.loop(stmt)
        elif isinstance(stmt, ast.Noop):
            pass
        elif isinstance(stmt, ast.Function):
            self.environment.declare(stmt.name, Function(stmt, self.environment))
        elif isinstance(stmt, ast.Return):
            value = None
            if stmt.expression is not None:
                value = self.evaluate(stmt.expression)
            return Unwinder(Signal.RETURN, value)
        elif isinstance(stmt, ast.Break):
            return Unwinder(Signal.BREAK)
        elif isinstance(stmt, ast.Continue):
            return Unwinder(Signal.CONTINUE)
        elif isinstance(stmt, ast.Import):
            self.import_file(stmt)
        elif isinstance(stmt, ast.Export):
            self.exports[stmt.name] = self.evaluate(stmt.value)
        else:
            raise UnrecognizedStatement(type(stmt).__name__)
        return None

    def execute_block(self, statements: PyList[ast.Statement], environment: Environment) -> Optional[Unwinder]:
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                unwinder = self.execute(stmt)
                if unwinder is not None:
                    return unwinder
        finally:
            self.environment = previous
        return None

    def loop(self, stmt: ast.While) -> Optional[Unwinder]:
        while truthy(self.evaluate(stmt.condition)):
            unwinder = self.execute(stmt.body)
            if unwinder is None or unwinder.signal == Signal.CONTINUE:
                continue
            if unwinder.signal == Signal.BREAK:
                break
            return unwinder
        return None

    def import_file(self, stmt: ast.Import):
        source = self.evaluate(stmt.source)
        if not isinstance(source, String):
            raise IllegalArgument(f"{render(source)} is not a valid import value")
        path = os.path.abspath(os.path.join(self.wd, source.value))
        if path in self.importing:
            raise IllegalOperation(f"import cycle through {path}")
        program = parse_file(path)
        child = Interpreter(os.path.dirname(path), self.out, self.importing + (path,))
        child.interpret(program)
        logger.debug("Imported %s exporting %s", path, sorted(child.exports))
        # Exports land in the current scope, so an import inside a block stays
        # local to that block.
        for name, value in child.exports.items():
            self.environment.adopt(name, value)

    def evaluate(self, expr: ast.Expression) -> Optional[Object]:
        if isinstance(expr, ast.IntegerLiteral):
            return Number(float(expr.value))
        elif isinstance(expr, ast.FloatLiteral):
            return Number(expr.value)
        elif isinstance(expr, ast.StringLiteral):
            return String(expr.value)
        elif isinstance(expr, ast.BooleanLiteral):
            return Boolean(expr.value)
        elif isinstance(expr, ast.NilLiteral):
            return None
        elif isinstance(expr, ast.ListLiteral):
            return List(self.evaluate(item) for item in expr.items)
        elif isinstance(expr, ast.ObjectLiteral):
            return ObjectInstance({k: self.evaluate(v) for k, v in expr.properties.items()})
        elif isinstance(expr, ast.Grouping):
            return self.evaluate(expr.group)
        elif isinstance(expr, ast.Prefix):
            return self.prefix(expr)
        elif isinstance(expr, ast.Infix):
            return self.infix(expr)
        elif isinstance(expr, ast.Logical):
            return self.logical(expr)
        elif isinstance(expr, ast.Variable):
            if not expr.resolved:
                return self.environment.locate(expr.name, expr.level).values[expr.name]
            return self.environment.resolve(expr.name, expr.level)
        elif isinstance(expr, ast.Assignment):
            value = self.evaluate(expr.value)
            if not expr.resolved:
                self.environment.locate(expr.name, expr.level).values[expr.name] = value
            else:
                self.environment.assign(expr.name, value, expr.level)
            return value
        elif isinstance(expr, ast.GetProp):
            return self.get_prop(expr)
        elif isinstance(expr, ast.SetProp):
            return self.set_prop(expr)
        elif isinstance(expr, ast.GetIndex):
            return self.get_index(expr)
        elif isinstance(expr, ast.SetIndex):
            return self.set_index(expr)
        elif isinstance(expr, ast.Call):
            return self.call(expr)
        elif isinstance(expr, ast.Method):
            return Method(expr)
        raise UnrecognizedExpression(type(expr).__name__)

    def get_prop(self, expr: ast.GetProp):
        obj = self.evaluate(expr.target)
        if not isinstance(obj, Instance):
            raise IllegalArgument(f"{type_name(obj)} cannot invoke property getter")
        prop = obj.get(expr.property)
        if isinstance(prop, Bindable):
            return prop.bind(obj)
        return prop

    def set_prop(self, expr: ast.SetProp):
        value = self.evaluate(expr.value)
        obj = self.evaluate(expr.target.target)
        if not isinstance(obj, Instance):
            raise IllegalArgument(f"{type_name(obj)} cannot invoke property setter")
        return obj.put(expr.target.property, value)

    def get_index(self, expr: ast.GetIndex):
        obj = self.evaluate(expr.target)
        if not isinstance(obj, List):
            raise IllegalArgument(f"{type_name(obj)} cannot invoke indexing")
        return obj.items[obj.index(self.evaluate(expr.index))]

    def set_index(self, expr: ast.SetIndex):
        value = self.evaluate(expr.value)
        obj = self.evaluate(expr.target.target)
        if not isinstance(obj, List):
            raise IllegalArgument(f"{type_name(obj)} cannot store indexed items")
        obj.items[obj.index(self.evaluate(expr.target.index))] = value
        return value

    def call(self, expr: ast.Call):
        callee = self.evaluate(expr.callee)
        if not isinstance(callee, Callable):
            raise NotCallable(render(callee))
        if callee.arity() != len(expr.args):
            raise IllegalArgument(
                f"function accepts {callee.arity()} parameters but was provided {len(expr.args)} arguments"
            )
        args = [self.evaluate(arg) for arg in expr.args]
        return callee.call(self, args)

    def logical(self, expr: ast.Logical):
        # Short-circuits and yields the deciding operand itself.
        left = self.evaluate(expr.lhs)
        if expr.operator.type == TokenType.AND:
            if not truthy(left):
                return left
            return self.evaluate(expr.rhs)
        if expr.operator.type == TokenType.OR:
            if truthy(left):
                return left
            return self.evaluate(expr.rhs)
        raise UnrecognizedOperator(f"{expr.operator.lexeme} as logical operator")

    def prefix(self, expr: ast.Prefix):
        obj = self.evaluate(expr.target)
        if expr.operator.type == TokenType.BANG:
            return Boolean(not truthy(obj))
        if expr.operator.type == TokenType.MINUS:
            return self.apply_op(TokenType.STAR, obj, Number(-1.0))
        raise UnrecognizedOperator(f"{expr.operator.lexeme} as prefix operator")

    def infix(self, expr: ast.Infix):
        lhs = self.evaluate(expr.lhs)
        rhs = self.evaluate(expr.rhs)
        return self.apply_op(expr.operator.type, lhs, rhs, expr.operator.lexeme)

    def apply_op(self, op: TokenType, lhs, rhs, lexeme: str = ''):
        if op == TokenType.PLUS:
            # The left operand decides between concatenation and addition.
            if isinstance(lhs, String):
                return String(lhs.value + strings(rhs).value)
            if isinstance(lhs, Number):
                return Number(lhs.value + numbers(rhs).value)
            raise UnrecognizedOperandType(f"cannot add {type_name(lhs)}")
        if op == TokenType.MINUS:
            return Number(numbers(lhs).value - numbers(rhs).value)
        if op == TokenType.STAR:
            return Number(numbers(lhs).value * numbers(rhs).value)
        if op == TokenType.SLASH:
            dividend = numbers(lhs).value
            divisor = numbers(rhs).value
            if divisor == 0:
                raise IllegalArgument("division by zero")
            return Number(dividend / divisor)
        if op == TokenType.LT:
            return Boolean(numbers(lhs).value < numbers(rhs).value)
        if op == TokenType.GT:
            return Boolean(numbers(lhs).value > numbers(rhs).value)
        if op == TokenType.LTE:
            less = self.apply_op(TokenType.LT, lhs, rhs)
            return less if less.value else Boolean(is_equal(lhs, rhs))
        if op == TokenType.GTE:
            greater = self.apply_op(TokenType.GT, lhs, rhs)
            return greater if greater.value else Boolean(is_equal(lhs, rhs))
        if op == TokenType.EQEQ:
            return Boolean(is_equal(lhs, rhs))
        if op == TokenType.NEQ:
            return Boolean(not is_equal(lhs, rhs))
        raise UnrecognizedOperator(f"{lexeme or op.name} as infix operator")


def numbers(obj) -> Number:
    if not isinstance(obj, Number):
        raise UnrecognizedOperandType(f"{type_name(obj)} is not a Number")
    return obj


def strings(obj) -> String:
    if not isinstance(obj, String):
        raise UnrecognizedOperandType(f"{type_name(obj)} is not a String")
    return obj
