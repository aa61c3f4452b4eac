#!/usr/bin/env python3
"""Test suite for logging configuration"""

import logging
import os
import tempfile
import unittest

from pyddkf.logger import (
    LogContext, LoggerConfig, LogLevel, get_logger, setup_logger,
)


class TestLogger(unittest.TestCase):

    def tearDown(self):
        for name in ('pyddkf', 'pyddkf.test', 'pyddkf.test.module'):
            logger = logging.getLogger(name)
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            logger.setLevel(logging.NOTSET)
            logger.propagate = True

    def test_setup_logger_level_and_handlers(self):
        logger = setup_logger('pyddkf.test', 'DEBUG')
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)

        # setting up again replaces the handlers
        setup_logger('pyddkf.test', 'INFO')
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.INFO)

    def test_trace_level(self):
        logger = get_logger('pyddkf.test')
        logger.setLevel(LogLevel.TRACE.value)
        with self.assertLogs('pyddkf.test', level=LogLevel.TRACE.value) as cm:
            logger.trace("satellite %d", 7)
        self.assertIn('TRACE', cm.output[0])
        self.assertIn('satellite 7', cm.output[0])

    def test_unknown_level(self):
        with self.assertRaises(ValueError):
            setup_logger('pyddkf.test', 'VERBOSE')

    def test_log_context(self):
        logger = setup_logger('pyddkf.test', 'WARNING', console=False)
        with LogContext(logger, 'DEBUG'):
            self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(logger.level, logging.WARNING)

    def test_file_output(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'kalman.log')
            logger = setup_logger('pyddkf.test', 'INFO', log_file=path, console=False)
            logger.info("epoch processed")
            for handler in logger.handlers:
                handler.flush()
            with open(path) as fh:
                self.assertIn('epoch processed', fh.read())
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

    def test_module_levels_from_dict(self):
        config = LoggerConfig()
        config.configure_from_dict({
            'default_level': 'WARNING',
            'console': False,
            'module_levels': {'pyddkf.test.module': 'TRACE'},
        })
        self.assertEqual(config.get_level_for_module('pyddkf.test.module'), 'TRACE')
        self.assertEqual(config.get_level_for_module('pyddkf.other'), 'WARNING')

        config.setup_all_loggers()
        module_logger = logging.getLogger('pyddkf.test.module')
        self.assertEqual(module_logger.level, LogLevel.TRACE.value)
        self.assertFalse(module_logger.propagate)


if __name__ == '__main__':
    unittest.main()
