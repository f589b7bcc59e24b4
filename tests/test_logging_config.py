import logging
import unittest
from unittest.mock import patch

from receptionist.config.logging_config import LOG_FORMAT, configure_logging, redact


class TestLoggingConfig(unittest.TestCase):
    def tearDown(self):
        logger = logging.getLogger("receptionist")
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()

    def test_configure_logging(self):
        logger = configure_logging(log_to_file=False)
        self.assertIsInstance(logger, logging.Logger)
        self.assertEqual(logger.name, "receptionist")
        self.assertFalse(logger.propagate)

        self.assertEqual(len(logger.handlers), 1)
        handler = logger.handlers[0]
        self.assertIsInstance(handler, logging.StreamHandler)
        self.assertEqual(handler.formatter._fmt, "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        self.assertEqual(LOG_FORMAT, handler.formatter._fmt)

    def test_level_override(self):
        logger = configure_logging("debug", log_to_file=False)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_reconfiguring_does_not_duplicate_handlers(self):
        first = configure_logging(log_to_file=False)
        second = configure_logging(log_to_file=False)
        self.assertEqual(len(second.handlers), 1)
        self.assertEqual(len(second.filters), 1)
        self.assertIs(first, second)

    def test_file_logging_failure_keeps_console(self):
        with patch("receptionist.config.logging_config.LOG_DIR") as log_dir:
            log_dir.mkdir.side_effect = PermissionError("read-only")
            logger = configure_logging()
        self.assertEqual(len(logger.handlers), 1)

    def test_secrets_are_redacted_before_formatting(self):
        logger = configure_logging(log_to_file=False)
        with self.assertLogs("receptionist", level="INFO") as captured:
            logger.info("Authorization: Bearer %s", "sk-proj-abcdef123456")
        self.assertNotIn("abcdef123456", captured.output[0])
        self.assertIn("Bearer [REDACTED]", captured.output[0])


class TestRedact(unittest.TestCase):
    def test_masks_known_credential_shapes(self):
        self.assertEqual(redact("key sk-abcdefghijkl"), "key sk-[REDACTED]")
        self.assertEqual(redact("secret ek_68a1b2c3"), "secret ek_[REDACTED]")
        self.assertEqual(
            redact("https://api.telegram.org/bot123456:AAH-token/sendMessage"),
            "https://api.telegram.org/bot[REDACTED]/sendMessage",
        )

    def test_leaves_ordinary_text_alone(self):
        self.assertEqual(redact("Booked apt_1718 for Amit"), "Booked apt_1718 for Amit")


if __name__ == "__main__":
    unittest.main()
