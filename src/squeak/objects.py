"""Runtime values of Squeak programs.

Numbers, strings and booleans are immutable value types. Lists and object
instances are reference types that are shared between every variable holding
them; `clone` is the only way to obtain an independent copy. nil is
represented by Python's None.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List as PyList, Optional
from . import ast_nodes as ast
from .environment import Environment, Signal, Unwinder
from .errors import RuntimeFault, IllegalArgument, IllegalOperation, FailedAssertion


class Object(ABC):
    @abstractmethod
    def clone(self) -> "Object":
        ...


class Instance(Object):
    """An object with dynamic properties."""

    @abstractmethod
    def get(self, name: str) -> Optional[Object]:
        ...

    @abstractmethod
    def put(self, name: str, value: Optional[Object]) -> Optional[Object]:
        ...


class Callable(Object):
    @abstractmethod
    def arity(self) -> int:
        ...

    @abstractmethod
    def call(self, interpreter, args: PyList[Optional[Object]]) -> Optional[Object]:
        ...


class Bindable(Object):
    """A method that must be bound to a receiver before it can be called."""

    @abstractmethod
    def bind(self, this: Object) -> Callable:
        ...


def render(obj: Optional[Object]) -> str:
    if obj is None:
        return "nil"
    return str(obj)


def type_name(obj: Optional[Object]) -> str:
    if obj is None:
        return "nil"
    return type(obj).__name__


def truthy(obj: Optional[Object]) -> bool:
    # Only false and nil are falsy.
    if obj is None:
        return False
    if isinstance(obj, Boolean):
        return obj.value
    return True


def is_equal(lhs: Optional[Object], rhs: Optional[Object]) -> bool:
    if lhs is None and rhs is None:
        return True
    if type(lhs) is not type(rhs):
        return False
    if isinstance(lhs, (Number, String, Boolean)):
        return lhs.value == rhs.value
    # Lists, objects and callables are only equal to themselves.
    return lhs is rhs


def clone(obj: Optional[Object]) -> Optional[Object]:
    if obj is None:
        return None
    return obj.clone()


@dataclass(frozen=True)
class Number(Object):
    value: float

    def __str__(self):
        text = f"{self.value:f}"
        if '.' in text:
            text = text.rstrip('0').rstrip('.')
        return text

    def clone(self):
        return Number(self.value)


@dataclass(frozen=True)
class String(Object):
    value: str

    def __str__(self):
        return self.value

    def clone(self):
        return String(self.value)


@dataclass(frozen=True)
class Boolean(Object):
    value: bool

    def __str__(self):
        return "true" if self.value else "false"

    def clone(self):
        return Boolean(self.value)


class ObjectInstance(Instance):
    def __init__(self, properties: Optional[Dict[str, Optional[Object]]] = None):
        self.properties: Dict[str, Optional[Object]] = dict(properties) if properties else {}

    def __str__(self):
        body = ", ".join(f"{k}: {render(v)}" for k, v in self.properties.items())
        return f"Object {{{body}}}"

    def __repr__(self):
        return f"ObjectInstance({self.properties!r})"

    def clone(self):
        return ObjectInstance({k: clone(v) for k, v in self.properties.items()})

    def get(self, name):
        # Missing properties read as nil so scripts can test for presence.
        return self.properties.get(name)

    def put(self, name, value):
        self.properties[name] = value
        return value


class List(Instance):
    def __init__(self, items: Optional[Iterable[Optional[Object]]] = None):
        self.items: PyList[Optional[Object]] = list(items) if items is not None else []

    def __str__(self):
        return "[" + ",".join(render(item) for item in self.items) + "]"

    def __repr__(self):
        return f"List({self.items!r})"

    def __len__(self):
        return len(self.items)

    def clone(self):
        return List(clone(item) for item in self.items)

    def get(self, name):
        method = LIST_METHODS.get(name)
        if method is None:
            return None
        return method.bind(self)

    def put(self, name, value):
        raise IllegalOperation("cannot mutate prototype of list data structure")

    def index(self, value: Optional[Object]) -> int:
        if not isinstance(value, Number):
            raise IllegalArgument(f"{type_name(value)} cannot be used as index")
        if not math.isfinite(value.value):
            raise IllegalArgument(f"{value} cannot be used as index")
        i = int(value.value)
        if value.value < 0 or i >= len(self.items):
            raise IllegalArgument(f"index {i} is out of range")
        return i


class Function(Callable):
    """A named function closing over the environment it was declared in."""

    def __init__(self, declaration: ast.Function, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    def __str__(self):
        return f"function:{self.declaration.name}"

    def clone(self):
        return Function(self.declaration, self.closure)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, args):
        environment = Environment(self.closure)
        for name, arg in zip(self.declaration.params, args):
            environment.declare(name, arg)
        return returned(interpreter.execute_block(self.declaration.body.body, environment))


class Method(Bindable):
    def __init__(self, declaration: ast.Method):
        self.declaration = declaration

    def __str__(self):
        return "method"

    def clone(self):
        return Method(self.declaration)

    def bind(self, this):
        if not isinstance(this, ObjectInstance):
            raise IllegalArgument(f"{type_name(this)} cannot be binding target for object method")
        return BoundMethod(self.declaration, this)


class BoundMethod(Callable):
    def __init__(self, declaration: ast.Method, this: ObjectInstance):
        self.declaration = declaration
        self.this = this

    def __str__(self):
        return "method"

    def clone(self):
        return BoundMethod(self.declaration, self.this)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, args):
        # Methods see `this` and the globals, never the scope they were written in.
        closure = Environment(interpreter.globals, {"this": self.this})
        environment = Environment(closure)
        for name, arg in zip(self.declaration.params, args):
            environment.declare(name, arg)
        return returned(interpreter.execute_block(self.declaration.body.body, environment))


def returned(unwinder: Optional[Unwinder]) -> Optional[Object]:
    if unwinder is None:
        return None
    if unwinder.signal != Signal.RETURN:
        raise RuntimeFault(f"unexpected unwinding source {unwinder.signal.name.lower()}")
    return unwinder.value


class Builtin(Callable):
    def __init__(self, name: str, arity: int, fn):
        self.name = name
        self._arity = arity
        self.fn = fn

    def __str__(self):
        return f"builtin:{self.name}"

    def clone(self):
        return Builtin(self.name, self._arity, self.fn)

    def arity(self):
        return self._arity

    def call(self, interpreter, args):
        return self.fn(interpreter, args)


class BuiltinMethod(Bindable):
    """A natively implemented method, called as fn(this, interpreter, args)."""

    def __init__(self, name: str, arity: int, fn):
        self.name = name
        self._arity = arity
        self.fn = fn

    def __str__(self):
        return f"builtin:{self.name}"

    def clone(self):
        return BuiltinMethod(self.name, self._arity, self.fn)

    def bind(self, this):
        return BoundBuiltinMethod(self, this)


class BoundBuiltinMethod(Callable):
    def __init__(self, method: BuiltinMethod, this: Object):
        self.method = method
        self.this = this

    def __str__(self):
        return f"builtin:{self.method.name}"

    def clone(self):
        return BoundBuiltinMethod(self.method, self.this)

    def arity(self):
        return self.method._arity

    def call(self, interpreter, args):
        return self.method.fn(self.this, interpreter, args)


def _list_add(this, interpreter, args):
    this.items.append(args[0])
    return this

def _list_length(this, interpreter, args):
    return Number(float(len(this.items)))

def _list_find(this, interpreter, args):
    for i, item in enumerate(this.items):
        if is_equal(args[0], item):
            return Number(float(i))
    return Number(-1.0)

def _list_contains(this, interpreter, args):
    return Boolean(any(is_equal(args[0], item) for item in this.items))

def _list_remove(this, interpreter, args):
    del this.items[this.index(args[0])]
    return this


LIST_METHODS = {
    "add": BuiltinMethod("add", 1, _list_add),
    "length": BuiltinMethod("length", 0, _list_length),
    "find": BuiltinMethod("find", 1, _list_find),
    "contains": BuiltinMethod("contains", 1, _list_contains),
    "remove": BuiltinMethod("remove", 1, _list_remove),
}


def _print(interpreter, args):
    interpreter.out.write(render(args[0]))

def _println(interpreter, args):
    interpreter.out.write(render(args[0]) + "\n")

def _clone(interpreter, args):
    return clone(args[0])

def _panic(interpreter, args):
    raise RuntimeFault(render(args[0]))

def _assert(interpreter, args):
    if not truthy(args[0]):
        raise FailedAssertion(render(args[0]))


def builtins() -> Dict[str, Builtin]:
    return {
        "print": Builtin("print", 1, _print),
        "println": Builtin("println", 1, _println),
        "clone": Builtin("clone", 1, _clone),
        "panic": Builtin("panic", 1, _panic),
        "assert": Builtin("assert", 1, _assert),
    }


def from_python(value: Any) -> Optional[Object]:
    """Converts plain Python data (as produced by json) into Squeak objects."""
    if value is None:
        return None
    if isinstance(value, bool):
        return Boolean(value)
    if isinstance(value, (int, float)):
        return Number(float(value))
    if isinstance(value, str):
        return String(value)
    if isinstance(value, dict):
        return ObjectInstance({str(k): from_python(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return List(from_python(v) for v in value)
    raise TypeError(f"cannot convert {type(value).__name__} to object")
