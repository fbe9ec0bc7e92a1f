import json
import logging
from typing import List as PyList, Optional, Union
from xml.parsers import expat
from .objects import Object, ObjectInstance, List, String, from_python

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def local_name(name: str) -> str:
    return name.rpartition(':')[2]


class Builder:
    """Decodes JSON and XML documents into Squeak objects."""

    def __init__(self):
        self.obj: Optional[Object] = None

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> Optional[Object]:
        builder = cls()
        builder.unmarshal_json(data)
        return builder.obj

    @classmethod
    def from_xml(cls, data: Union[str, bytes]) -> Optional[Object]:
        builder = cls()
        builder.unmarshal_xml(data)
        return builder.obj

    def unmarshal_json(self, data: Union[str, bytes]):
        if not data:
            self.obj = None
            return
        self.obj = from_python(json.loads(data))

    def unmarshal_xml(self, data: Union[str, bytes]):
        if not data:
            self.obj = None
            return

        stack: PyList[ObjectInstance] = []
        # Each open element collects its non-blank text runs; the last one wins.
        texts: PyList[Optional[str]] = []

        def element(attrs) -> ObjectInstance:
            attributes = ObjectInstance({local_name(k): String(v) for k, v in attrs.items()})
            return ObjectInstance({"_attributes": attributes})

        def start(name, attrs):
            el = element(attrs)
            name = local_name(name)
            if stack:
                parent = stack[-1]
                sibling = parent.get(name)
                if isinstance(sibling, List):
                    sibling.items.append(el)
                elif sibling is not None:
                    parent.put(name, List([sibling, el]))
                else:
                    parent.put(name, el)
            stack.append(el)
            texts.append(None)

        def end(name):
            el = stack.pop()
            text = texts.pop()
            if text is not None:
                el.put("_inner", String(text))
            if not stack:
                self.obj = el

        def chardata(data):
            if stack and data.strip():
                texts[-1] = data

        parser = expat.ParserCreate()
        parser.buffer_text = True
        parser.StartElementHandler = start
        parser.EndElementHandler = end
        parser.CharacterDataHandler = chardata
        try:
            parser.Parse(data, True)
        except expat.ExpatError as e:
            raise ValueError(f"invalid xml document: {e}") from e
        logger.debug("Decoded xml document into %s", type(self.obj).__name__)
