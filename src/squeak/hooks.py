"""Bridges between an HTTP exchange and the hook scripts that augment it.

The host builds a `request` object before dispatching and a `response` object
once the exchange completed, then runs the matching hook with `run_hook`.
"""
import logging
from typing import Dict, Mapping, Optional, Union
from .decoding import Builder
from .interpreter import Interpreter
from .objects import BuiltinMethod, Number, Object, ObjectInstance, String
from .parser import parse

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def headers_object(headers: Optional[Mapping]) -> ObjectInstance:
    obj = ObjectInstance()
    if headers is None:
        return obj
    for name, value in headers.items():
        if isinstance(value, (list, tuple)):
            value = ", ".join(value)
        obj.put(name, String(str(value)))
    return obj


def request_object(method: str, url: str, headers: Optional[Mapping] = None) -> ObjectInstance:
    return ObjectInstance({
        "method": String(method),
        "url": String(url),
        "headers": headers_object(headers),
    })


def response_object(status_code: int, status: str, headers: Optional[Mapping] = None,
                    body: Union[bytes, str] = b"") -> ObjectInstance:
    # Decoding is deferred until the script asks for it and done at most once.
    decoded: Dict[str, Optional[Object]] = {}

    def decoder(name, decode):
        def fn(this, interpreter, args):
            if name not in decoded:
                decoded[name] = decode(body)
            return decoded[name]
        return BuiltinMethod(name, 0, fn)

    return ObjectInstance({
        "status_code": Number(float(status_code)),
        "status": String(status),
        "headers": headers_object(headers),
        "json": decoder("json", Builder.from_json),
        "xml": decoder("xml", Builder.from_xml),
    })


def run_hook(source, wd: str = ".", out=None, **objects) -> Dict[str, Optional[Object]]:
    """Runs a hook script with the given objects declared and returns its exports."""
    program = parse(source)
    interpreter = Interpreter(wd, out)
    for name, obj in objects.items():
        interpreter.declare(name, obj)
    logger.debug("Running hook in %s with %s", wd, sorted(objects))
    interpreter.interpret(program)
    return interpreter.exports
