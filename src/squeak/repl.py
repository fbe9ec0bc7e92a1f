import sys
from .parser import parse
from .interpreter import Interpreter


def unbalanced(source: str) -> bool:
    return source.count('{') > source.count('}')


def run_repl(interpreter=None, read=input, out=None):
    out = out if out is not None else sys.stdout
    interpreter = interpreter if interpreter is not None else Interpreter(".", out)
    out.write("Squeak REPL\n")
    out.write("Type 'exit' to quit.\n")

    while True:
        try:
            line = read(">>> ")
            if line.strip() == "exit":
                break

            # Keep reading while a block is still open
            lines = [line]
            while unbalanced("\n".join(lines)):
                lines.append(read("... "))
            program = parse("\n".join(lines))
            interpreter.interpret(program)
            out.write("\n")

        except EOFError:
            break
        except Exception as e:
            out.write(f"Error: {e}\n")

    return interpreter


if __name__ == "__main__":
    run_repl()
