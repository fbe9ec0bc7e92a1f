import unittest
from squeak.decoding import Builder
from squeak.objects import Number, String, Boolean, List, ObjectInstance

class TestJSON(unittest.TestCase):
    def test_object(self):
        obj = Builder.from_json(b'{"name": "crookdc", "age": 27, "active": true, "manager": null}')
        self.assertIsInstance(obj, ObjectInstance)
        self.assertEqual(obj.get("name"), String("crookdc"))
        self.assertEqual(obj.get("age"), Number(27.0))
        self.assertEqual(obj.get("active"), Boolean(True))
        self.assertIsNone(obj.get("manager"))

    def test_array(self):
        obj = Builder.from_json('[1, "two", [3], {"four": 4}]')
        self.assertIsInstance(obj, List)
        self.assertEqual(obj.items[:2], [Number(1.0), String("two")])
        self.assertEqual(obj.items[2].items, [Number(3.0)])
        self.assertEqual(obj.items[3].get("four"), Number(4.0))

    def test_scalars(self):
        self.assertEqual(Builder.from_json("12.5"), Number(12.5))
        self.assertEqual(Builder.from_json('"text"'), String("text"))
        self.assertIsNone(Builder.from_json("null"))

    def test_empty(self):
        self.assertIsNone(Builder.from_json(b""))
        self.assertIsNone(Builder.from_json(""))

    def test_malformed(self):
        with self.assertRaises(ValueError):
            Builder.from_json("{not json")


class TestXML(unittest.TestCase):
    def test_element_shapes(self):
        doc = b'<user id="7"><name>crookdc</name><tag>a</tag><tag>b</tag><tag>c</tag></user>'
        obj = Builder.from_xml(doc)
        self.assertIsInstance(obj, ObjectInstance)
        self.assertEqual(obj.get("_attributes").get("id"), String("7"))
        self.assertIsNone(obj.get("_inner"))
        self.assertEqual(obj.get("name").get("_inner"), String("crookdc"))
        tags = obj.get("tag")
        self.assertIsInstance(tags, List)
        self.assertEqual([t.get("_inner") for t in tags.items], [String("a"), String("b"), String("c")])

    def test_empty_element_has_no_attributes(self):
        obj = Builder.from_xml("<empty/>")
        self.assertEqual(obj.get("_attributes").properties, {})
        self.assertIsNone(obj.get("_inner"))

    def test_last_text_run_wins(self):
        obj = Builder.from_xml("<note>first<br/>second\n</note>")
        self.assertEqual(obj.get("_inner"), String("second\n"))
        self.assertIsInstance(obj.get("br"), ObjectInstance)

    def test_namespaces_use_local_names(self):
        obj = Builder.from_xml('<s:envelope xmlns:s="urn:x" s:kind="a"><s:body>ok</s:body></s:envelope>')
        self.assertEqual(obj.get("_attributes").get("kind"), String("a"))
        self.assertEqual(obj.get("body").get("_inner"), String("ok"))

    def test_empty(self):
        self.assertIsNone(Builder.from_xml(b""))

    def test_malformed(self):
        with self.assertRaises(ValueError):
            Builder.from_xml("<open><unclosed></open>")

if __name__ == '__main__':
    unittest.main()
