from dataclasses import dataclass, field
from typing import Dict, List, Optional
from .tokens import Token

# Statements and expressions form two unrelated families. Nodes are frozen
# since a parsed tree is shared by every closure created from it.

@dataclass(frozen=True)
class Statement:
    pass

@dataclass(frozen=True)
class Expression:
    pass

# Statements

@dataclass(frozen=True)
class ExpressionStatement(Statement):
    expression: Expression

@dataclass(frozen=True)
class Declaration(Statement):
    name: str
    initializer: Optional[Expression] = None

@dataclass(frozen=True)
class Block(Statement):
    body: List[Statement] = field(default_factory=list)

@dataclass(frozen=True)
class If(Statement):
    condition: Expression
    then: Statement
    otherwise: Optional[Statement] = None

@dataclass(frozen=True)
class While(Statement):
    condition: Expression
    body: Block

@dataclass(frozen=True)
class Noop(Statement):
    pass

@dataclass(frozen=True)
class Function(Statement):
    name: str
    params: List[str]
    body: Block

@dataclass(frozen=True)
class Return(Statement):
    expression: Optional[Expression] = None

@dataclass(frozen=True)
class Break(Statement):
    pass

@dataclass(frozen=True)
class Continue(Statement):
    pass

@dataclass(frozen=True)
class Import(Statement):
    source: Expression

@dataclass(frozen=True)
class Export(Statement):
    name: str
    value: Expression

# Expressions

@dataclass(frozen=True)
class Variable(Expression):
    name: str
    # Number of environment hops from the scope of use to the declaring scope.
    level: int = 0
    # False when no enclosing scope declared the name at parse time.
    resolved: bool = True

@dataclass(frozen=True)
class Assignment(Expression):
    name: str
    value: Expression
    level: int = 0
    resolved: bool = True

@dataclass(frozen=True)
class GetIndex(Expression):
    target: Expression
    index: Expression

@dataclass(frozen=True)
class SetIndex(Expression):
    target: GetIndex
    value: Expression

@dataclass(frozen=True)
class GetProp(Expression):
    target: Expression
    property: str

@dataclass(frozen=True)
class SetProp(Expression):
    target: GetProp
    value: Expression

@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int

@dataclass(frozen=True)
class FloatLiteral(Expression):
    value: float

@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str

@dataclass(frozen=True)
class BooleanLiteral(Expression):
    value: bool

@dataclass(frozen=True)
class NilLiteral(Expression):
    pass

@dataclass(frozen=True)
class ListLiteral(Expression):
    items: List[Expression] = field(default_factory=list)

@dataclass(frozen=True)
class ObjectLiteral(Expression):
    properties: Dict[str, Expression] = field(default_factory=dict)

@dataclass(frozen=True)
class Grouping(Expression):
    group: Expression

@dataclass(frozen=True)
class Prefix(Expression):
    operator: Token
    target: Expression

@dataclass(frozen=True)
class Infix(Expression):
    operator: Token
    lhs: Expression
    rhs: Expression

@dataclass(frozen=True)
class Logical(Expression):
    operator: Token
    lhs: Expression
    rhs: Expression

@dataclass(frozen=True)
class Call(Expression):
    callee: Expression
    args: List[Expression] = field(default_factory=list)

@dataclass(frozen=True)
class Method(Expression):
    """An anonymous function literal.

    Unlike a named Function it does not capture its lexical surroundings. It
    sees its parameters, the instance it is bound to as `this`, and globals.
    """
    params: List[str]
    body: Block
