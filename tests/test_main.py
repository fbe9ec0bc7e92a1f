import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from squeak.main import main
from squeak.interpreter import Interpreter
from squeak.repl import run_repl, unbalanced
from squeak.objects import Number

def reader(lines):
    it = iter(lines)

    def read(prompt):
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return read

class TestRepl(unittest.TestCase):
    def test_unbalanced(self):
        self.assertTrue(unbalanced("function f() {"))
        self.assertFalse(unbalanced("{ }"))
        self.assertFalse(unbalanced("var a = 1;"))

    def test_session_keeps_state(self):
        out = io.StringIO()
        interpreter = run_repl(read=reader(["var a = 1;", "a = a + 1;", "print(a);"]), out=out)
        self.assertEqual(interpreter.globals.resolve("a"), Number(2.0))
        self.assertIn("2\n", out.getvalue())

    def test_continuation_lines(self):
        out = io.StringIO()
        lines = ["function double(n) {", "return n * 2;", "}", "print(double(21));", "exit"]
        run_repl(read=reader(lines), out=out)
        self.assertIn("42", out.getvalue())

    def test_errors_do_not_end_the_session(self):
        out = io.StringIO()
        interpreter = run_repl(read=reader(["var = ;", "missing;", "var ok = true;"]), out=out)
        self.assertEqual(out.getvalue().count("Error: "), 2)
        self.assertIn("variable not declared: missing", out.getvalue())
        self.assertEqual(interpreter.globals.resolve("ok").value, True)

    def test_failed_import_does_not_end_the_session(self):
        out = io.StringIO()
        with tempfile.TemporaryDirectory() as wd:
            interpreter = Interpreter(wd, out)
            run_repl(interpreter, read=reader(['import "nope.sqk";', "println(1);"]), out=out)
        self.assertEqual(out.getvalue().count("Error: "), 1)
        self.assertIn("nope.sqk", out.getvalue())
        self.assertIn("1\n", out.getvalue())


class TestMain(unittest.TestCase):
    def run_main(self, argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def write(self, wd, name, content):
        path = os.path.join(wd, name)
        with open(path, "w") as f:
            f.write(content)
        return path

    def test_run_script(self):
        with tempfile.TemporaryDirectory() as wd:
            self.write(wd, "lib.sqk", 'export "hello" as greeting;')
            script = self.write(wd, "main.sqk", 'import "lib.sqk"; println(greeting);')
            code, out, err = self.run_main([script])
        self.assertEqual(code, 0)
        self.assertEqual(out, "hello\n")
        self.assertEqual(err, "")

    def test_request_and_response_objects(self):
        with tempfile.TemporaryDirectory() as wd:
            body = self.write(wd, "body.json", '{"id": 12}')
            script = self.write(
                wd, "hook.sqk",
                "print(request.method + \" \" + request.headers.Accept + \" \");"
                "print(response.status_code + response.json().id);"
            )
            code, out, err = self.run_main([
                script, "--request", "GET", "http://localhost",
                "--header", "Accept: text/plain",
                "--response-body", body, "--status-code", "201",
            ])
        self.assertEqual(code, 0, err)
        self.assertEqual(out, "GET text/plain 213")

    def test_syntax_error(self):
        with tempfile.TemporaryDirectory() as wd:
            script = self.write(wd, "broken.sqk", "var a = ;")
            code, out, err = self.run_main([script])
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("Syntax Error: "))

    def test_runtime_error(self):
        with tempfile.TemporaryDirectory() as wd:
            script = self.write(wd, "panic.sqk", 'panic("nope");')
            code, out, err = self.run_main([script])
        self.assertEqual(code, 1)
        self.assertIn("Runtime Error: runtime error: nope", err)

    def test_missing_script(self):
        with tempfile.TemporaryDirectory() as wd:
            code, out, err = self.run_main([os.path.join(wd, "missing.sqk")])
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("Runtime Error: "))

    def test_malformed_header(self):
        with tempfile.TemporaryDirectory() as wd:
            script = self.write(wd, "ok.sqk", ";")
            code, out, err = self.run_main([script, "--request", "GET", "/", "--header", "nocolon"])
        self.assertEqual(code, 1)
        self.assertIn("NAME:VALUE", err)

if __name__ == '__main__':
    unittest.main()
