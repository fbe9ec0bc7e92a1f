import io
import unittest
from squeak.interpreter import Interpreter
from squeak.errors import RuntimeFault, IllegalArgument, FailedAssertion
from squeak.objects import (
    Number, String, Boolean, List, ObjectInstance, Builtin, BuiltinMethod,
    builtins, render, truthy, is_equal, clone, from_python, type_name,
)

class TestValues(unittest.TestCase):
    def test_number_rendering(self):
        cases = {
            1.0: "1",
            100.0: "100",
            3.14: "3.14",
            -2.5: "-2.5",
            0.0: "0",
            0.1: "0.1",
        }
        for value, expected in cases.items():
            with self.subTest(value=value):
                self.assertEqual(str(Number(value)), expected)

    def test_rendering(self):
        self.assertEqual(render(None), "nil")
        self.assertEqual(render(Boolean(True)), "true")
        self.assertEqual(render(String("hi")), "hi")
        self.assertEqual(render(List([Number(1.0), None, String("a")])), "[1,nil,a]")
        self.assertEqual(
            render(ObjectInstance({"name": String("crookdc"), "age": Number(27.0)})),
            "Object {name: crookdc, age: 27}"
        )
        self.assertEqual(render(ObjectInstance()), "Object {}")

    def test_type_name(self):
        self.assertEqual(type_name(None), "nil")
        self.assertEqual(type_name(Number(1.0)), "Number")
        self.assertEqual(type_name(List()), "List")

    def test_truthy(self):
        self.assertFalse(truthy(None))
        self.assertFalse(truthy(Boolean(False)))
        for obj in [Boolean(True), Number(0.0), String(""), List(), ObjectInstance()]:
            with self.subTest(obj=obj):
                self.assertTrue(truthy(obj))

    def test_is_equal(self):
        items = List()
        self.assertTrue(is_equal(None, None))
        self.assertTrue(is_equal(Number(2.0), Number(2.0)))
        self.assertTrue(is_equal(items, items))
        self.assertFalse(is_equal(List(), List()))
        self.assertFalse(is_equal(String("1"), Number(1.0)))
        self.assertFalse(is_equal(None, Boolean(False)))

    def test_clone_is_deep(self):
        inner = List([Number(1.0)])
        original = ObjectInstance({"items": inner, "name": String("x")})
        copy = clone(original)
        self.assertIsNot(copy, original)
        self.assertIsNot(copy.get("items"), inner)
        copy.get("items").items.append(Number(2.0))
        self.assertEqual(len(inner), 1)
        self.assertIsNone(clone(None))

    def test_object_instance(self):
        obj = ObjectInstance()
        self.assertIsNone(obj.get("missing"))
        self.assertEqual(obj.put("name", String("x")), String("x"))
        self.assertEqual(obj.get("name"), String("x"))

    def test_list_index(self):
        items = List([Number(1.0), Number(2.0)])
        self.assertEqual(items.index(Number(1.0)), 1)
        for index in [Number(2.0), Number(-1.0), Number(float("inf")), Number(float("nan")), String("0"), None]:
            with self.subTest(index=index):
                with self.assertRaises(IllegalArgument):
                    items.index(index)

    def test_list_methods_are_bound(self):
        interpreter = Interpreter(".", io.StringIO())
        items = List()
        add = items.get("add")
        self.assertEqual(add.arity(), 1)
        self.assertIs(add.call(interpreter, [Number(1.0)]), items)
        self.assertEqual(items.get("length").call(interpreter, []), Number(1.0))
        self.assertIsNone(items.get("missing"))

    def test_builtin_method_binds_any_receiver(self):
        method = BuiltinMethod("echo", 0, lambda this, interpreter, args: this)
        receiver = ObjectInstance()
        self.assertIs(method.bind(receiver).call(None, []), receiver)

    def test_from_python(self):
        obj = from_python({"name": "crookdc", "age": 27, "tags": ["a", None], "active": True})
        self.assertEqual(obj.get("name"), String("crookdc"))
        self.assertEqual(obj.get("age"), Number(27.0))
        self.assertEqual(obj.get("tags").items, [String("a"), None])
        self.assertEqual(obj.get("active"), Boolean(True))
        with self.assertRaises(TypeError):
            from_python(object())


class TestBuiltins(unittest.TestCase):
    def setUp(self):
        self.out = io.StringIO()
        self.interpreter = Interpreter(".", self.out)
        self.builtins = builtins()

    def call(self, name, *args):
        return self.builtins[name].call(self.interpreter, list(args))

    def test_all_builtins_take_one_argument(self):
        self.assertEqual(sorted(self.builtins), ["assert", "clone", "panic", "print", "println"])
        for name, builtin in self.builtins.items():
            with self.subTest(name=name):
                self.assertIsInstance(builtin, Builtin)
                self.assertEqual(builtin.arity(), 1)

    def test_print(self):
        self.assertIsNone(self.call("print", Number(1.0)))
        self.call("print", None)
        self.call("println", String("done"))
        self.assertEqual(self.out.getvalue(), "1nildone\n")

    def test_clone(self):
        items = List([String("a")])
        copy = self.call("clone", items)
        self.assertIsNot(copy, items)
        self.assertEqual(copy.items, items.items)

    def test_panic(self):
        with self.assertRaises(RuntimeFault) as ctx:
            self.call("panic", String("boom"))
        self.assertEqual(str(ctx.exception), "runtime error: boom")

    def test_assert(self):
        self.assertIsNone(self.call("assert", Boolean(True)))
        with self.assertRaises(FailedAssertion):
            self.call("assert", None)

if __name__ == '__main__':
    unittest.main()
