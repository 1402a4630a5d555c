import contextlib
import io
import logging
import os
import tempfile
import unittest

from framemixer.main import build_parser, main, output_path
from framemixer.errors import FrameError
from framemixer.post.renderers import MixRenderer, ParamRenderer

CRAFTS = """<?xml version="1.0"?>
<quatos_configuration>
  <craft id="quadPlus" config="quad_plus">
    <ports>
      <port rotation="1">1</port><port rotation="-1">2</port>
      <port rotation="1">3</port><port rotation="-1">4</port>
    </ports>
  </craft>
  <craft id="inline" config="custom" motors="4">
    <geometry>
      <motor rotation="1" port="1">0.3,0.0</motor>
      <motor rotation="-1" port="2">0.1,0.0</motor>
      <motor rotation="1" port="3">-0.1,0.0</motor>
      <motor rotation="-1" port="4">-0.3,0.0</motor>
    </geometry>
  </craft>
</quatos_configuration>
"""


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.xml = os.path.join(self.tmp.name, "crafts.xml")
        with open(self.xml, "w", encoding="utf-8") as f:
            f.write(CRAFTS)
        self.cwd = os.getcwd()

    def tearDown(self):
        os.chdir(self.cwd)
        logger = logging.getLogger("framemixer")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        self.tmp.cleanup()

    def run_main(self, *argv):
        stdout = io.StringIO()
        stderr = io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def test_param_to_stdout(self):
        code, out, _ = self.run_main(self.xml)
        self.assertEqual(code, 0)
        self.assertIn("Craft=quadPlus\n", out)
        self.assertIn("#define DEFAULT_MOT_FRAME\t", out)

    def test_mix_to_default_file(self):
        os.chdir(self.tmp.name)
        code, out, _ = self.run_main(self.xml, "-c", "quadPlus", "-m", "-p", "-o")
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        with open(os.path.join(self.tmp.name, "quadPlus.mix"), encoding="utf-8") as f:
            text = f.read()
        self.assertTrue(text.startswith("[META]\nConfigId=4\n"))
        self.assertNotIn("[QUATOS]", text)

    def test_default_file_name_uses_selected_craft(self):
        os.chdir(self.tmp.name)
        code, _, _ = self.run_main(self.xml, "-o")
        self.assertEqual(code, 0)
        self.assertTrue(os.path.exists(os.path.join(self.tmp.name, "quadPlus.param")))

    def test_explicit_output_and_log_file(self):
        target = os.path.join(self.tmp.name, "table.h")
        log_file = os.path.join(self.tmp.name, "run.log")
        code, _, _ = self.run_main(self.xml, "-o", target, "-d", "--log-file", log_file)
        self.assertEqual(code, 0)
        with open(target, encoding="utf-8") as f:
            self.assertIn("#define DEFAULT_QUATOS_J_ROLL", f.read())
        with open(log_file, encoding="utf-8") as f:
            self.assertIn("Parsed craft data", f.read())

    def test_unknown_craft(self):
        code, out, err = self.run_main(self.xml, "-c", "missing")
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("[ingestion]", err)

    def test_missing_file(self):
        code, _, _ = self.run_main(os.path.join(self.tmp.name, "nope.xml"))
        self.assertEqual(code, 1)

    def test_degenerate_craft(self):
        code, _, err = self.run_main(self.xml, "-c", "inline")
        self.assertEqual(code, 1)
        self.assertIn("[mixer]", err)

    def test_version(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), self.assertRaises(SystemExit) as ctx:
            main(["--version"])
        self.assertEqual(ctx.exception.code, 0)
        self.assertTrue(stdout.getvalue().strip())


class TestOutputPath(unittest.TestCase):
    def test_explicit(self):
        self.assertEqual(output_path("out.txt", "quad", ParamRenderer()), "out.txt")

    def test_default_names(self):
        self.assertEqual(output_path("", "quad", ParamRenderer()), "quad.param")
        self.assertEqual(output_path("", "quad", MixRenderer()), "quad.mix")

    def test_no_craft_id(self):
        with self.assertRaises(FrameError):
            output_path("", "", MixRenderer())

    def test_parser_defaults(self):
        args = build_parser().parse_args(["crafts.xml"])
        self.assertIsNone(args.output)
        self.assertIsNone(args.craft_id)
        self.assertFalse(args.pid or args.mix or args.debug or args.plot)


if __name__ == "__main__":
    unittest.main()
