import logging
import tempfile
import unittest
from pathlib import Path

from rational import Rational, RationalConfig, load_config, setup_logging
from rational.log import HANDLER_NAME


class RationalConfigTests(unittest.TestCase):
    def test_defaults(self):
        config = RationalConfig()
        self.assertEqual(config.overflow, "widen")
        self.assertEqual(config.int_bits, 64)
        self.assertEqual(config.log_level, "WARNING")
        self.assertIsNone(config.effective_int_bits)

    def test_wrap_policy(self):
        config = RationalConfig.from_mapping({"overflow": "wrap", "int_bits": 32})
        self.assertEqual(config.effective_int_bits, 32)
        value = config.from_int(2 ** 31 - 1) + 1
        self.assertEqual(value, Rational(-(2 ** 31), 1))
        self.assertEqual(config.new(2, -4), Rational(-1, 2))
        self.assertEqual(config.parse("3/9").int_bits, 32)

    def test_log_level_is_case_insensitive(self):
        self.assertEqual(RationalConfig(log_level="debug").log_level, "DEBUG")

    def test_validation(self):
        cases = [
            {"overflow": "saturate"},
            {"int_bits": 1},
            {"int_bits": "64"},
            {"int_bits": True},
            {"log_level": "chatty"},
            {"precision": 10},
        ]
        for values in cases:
            with self.subTest(values=values):
                with self.assertRaises(ValueError):
                    RationalConfig.from_mapping(values)


class LoadConfigTests(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory(prefix="rational_config_")
        self.addCleanup(self._tmpdir.cleanup)
        self.path = Path(self._tmpdir.name) / "rational.toml"

    def test_load_config(self):
        self.path.write_text(
            '[rational]\noverflow = "wrap"\nint_bits = 16\nlog_level = "info"\n'
        )
        config = load_config(self.path)
        self.assertEqual(config, RationalConfig("wrap", 16, "INFO"))

    def test_missing_table_uses_defaults(self):
        self.path.write_text('[other]\nvalue = 1\n')
        self.assertEqual(load_config(self.path), RationalConfig())

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_config(self.path)


class SetupLoggingTests(unittest.TestCase):
    def setUp(self):
        self.logger = logging.getLogger("rational.tests.console")
        self.addCleanup(self._reset)

    def _reset(self):
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
        self.logger.setLevel(logging.NOTSET)

    def test_setup_logging_is_idempotent(self):
        setup_logging("debug", logger=self.logger)
        setup_logging(logging.ERROR, logger=self.logger)
        self.assertEqual(len(self.logger.handlers), 1)
        self.assertEqual(self.logger.handlers[0].get_name(), HANDLER_NAME)
        self.assertEqual(self.logger.level, logging.ERROR)

    def test_config_apply_configures_package_logger(self):
        package_logger = logging.getLogger("rational")
        before = list(package_logger.handlers)
        level = package_logger.level

        def restore():
            for handler in list(package_logger.handlers):
                if handler not in before:
                    package_logger.removeHandler(handler)
            package_logger.setLevel(level)

        self.addCleanup(restore)
        logger = RationalConfig(log_level="debug").apply()
        self.assertIs(logger, package_logger)
        self.assertEqual(logger.level, logging.DEBUG)


if __name__ == "__main__":  # pragma: no cover - direct execution helper
    unittest.main()
