import sys
import os
import argparse
import logging
from .parser import parse_file, ParseError
from .errors import RuntimeFault
from .interpreter import Interpreter
from .hooks import request_object, response_object
from .objects import render
from .repl import run_repl

logger = logging.getLogger(__name__)


def parse_headers(values):
    headers = {}
    for value in values or []:
        name, sep, content = value.partition(':')
        if not sep:
            raise argparse.ArgumentTypeError(f"header must be NAME:VALUE, got {value!r}")
        headers[name.strip()] = content.strip()
    return headers


def run_file(path, args):
    program = parse_file(path)
    interpreter = Interpreter(os.path.dirname(os.path.abspath(path)), sys.stdout)
    headers = parse_headers(args.header)
    if args.request:
        method, url = args.request
        interpreter.declare("request", request_object(method, url, headers))
    if args.response_body or args.status_code is not None:
        body = b""
        if args.response_body:
            with open(args.response_body, 'rb') as f:
                body = f.read()
        status_code = args.status_code if args.status_code is not None else 200
        interpreter.declare("response", response_object(status_code, str(status_code), headers, body))
    interpreter.interpret(program)
    for name, value in interpreter.exports.items():
        logger.debug("export %s = %s", name, render(value))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Squeak hook scripting language")
    parser.add_argument('script', nargs='?', help="Script file to run")
    parser.add_argument('--request', nargs=2, metavar=('METHOD', 'URL'),
                        help="Declare a request object for the script")
    parser.add_argument('--header', action='append', metavar='NAME:VALUE',
                        help="Header for the declared request or response, may be repeated")
    parser.add_argument('--response-body', metavar='FILE',
                        help="Declare a response object whose body is read from FILE")
    parser.add_argument('--status-code', type=int, help="Status code of the declared response")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.script:
        run_repl()
        return 0

    try:
        run_file(args.script, args)
    except ParseError as e:
        print(f"Syntax Error: {e}", file=sys.stderr)
        return 1
    except (RuntimeFault, argparse.ArgumentTypeError, OSError, ValueError) as e:
        print(f"Runtime Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
