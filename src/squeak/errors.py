class RuntimeFault(Exception):
    """Base class of every error raised while executing a Squeak program."""

    description = "runtime error"

    def __init__(self, message=None):
        if message:
            super().__init__(f"{self.description}: {message}")
        else:
            super().__init__(self.description)
        self.detail = message


class NotCallable(RuntimeFault):
    description = "not callable"


class UnrecognizedExpression(RuntimeFault):
    description = "unrecognized expression"


class UnrecognizedStatement(RuntimeFault):
    description = "unrecognized statement"


class UnrecognizedOperator(RuntimeFault):
    description = "unrecognized operator"


class UnrecognizedOperandType(RuntimeFault):
    description = "unrecognized operand type"


class ObjectNotDeclared(RuntimeFault):
    description = "variable not declared"


class IllegalArgument(RuntimeFault):
    description = "illegal argument"


class IllegalOperation(RuntimeFault):
    description = "illegal operation"


class FailedAssertion(RuntimeFault):
    description = "assertion failed"
