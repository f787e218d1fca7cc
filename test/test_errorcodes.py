#!/usr/bin/env python

""" Test suite for smsmodem.errorcodes and the vendor error exceptions """

import unittest

from smsmodem.errorcodes import classifyError, errorMessage, UNKNOWN_ERROR_MESSAGE
from smsmodem.exceptions import commandError, CmeError, CmsError, PinRequiredError, PukRequiredError, \
    IncorrectPinError, SmscNumberUnknownError, SecurityException, CommandFailure


class TestClassifyError(unittest.TestCase):
    """ Tests recognising +CME ERROR and +CMS ERROR result codes """

    def test_cmeError(self):
        self.assertEqual(classifyError('+CME ERROR: 11'), ('CME', '11', 'SIM PIN required'))
        self.assertEqual(classifyError('+CME ERROR:100'), ('CME', '100', 'Unknown error'))

    def test_cmsError(self):
        self.assertEqual(classifyError('+CMS ERROR: 330'), ('CMS', '330', 'SMSC address unknown'))
        self.assertEqual(classifyError('+CMS ERROR: 538'), ('CMS', '538', 'Invalid parameter'))

    def test_unknownCode(self):
        """ Tests that codes missing from the tables are still classified """
        self.assertEqual(classifyError('+CME ERROR: 9999'), ('CME', '9999', UNKNOWN_ERROR_MESSAGE))
        self.assertEqual(errorMessage('XYZ', '1'), UNKNOWN_ERROR_MESSAGE)

    def test_notAnError(self):
        for line in ('OK', 'ERROR', '+CSQ: 10,99', 'COMMAND NOT SUPPORT', ''):
            self.assertEqual(classifyError(line), None)


class TestCommandError(unittest.TestCase):
    """ Tests building vendor error exceptions """

    def test_specialized(self):
        """ Tests that well-known codes produce their specific exception classes """
        tests = ((('CME', '11'), PinRequiredError),
                 (('CME', '12'), PukRequiredError),
                 (('CME', 16), IncorrectPinError),
                 (('CMS', '330'), SmscNumberUnknownError))
        for (errorType, code), errorClass in tests:
            error = commandError(errorType, code, 'AT')
            self.assertIsInstance(error, errorClass)
            self.assertEqual(error.code, str(code))
            self.assertEqual(error.type, errorType)
        self.assertIsInstance(commandError('CME', '11'), SecurityException)

    def test_generic(self):
        error = commandError('CME', '100', 'AT+CSQ', ['+CME ERROR: 100'])
        self.assertIs(type(error), CmeError)
        self.assertIsInstance(error, CommandFailure)
        self.assertEqual(error.command, 'AT+CSQ')
        self.assertEqual(error.data, ['+CME ERROR: 100'])
        self.assertEqual(error.err, 'Unknown error')
        self.assertEqual(str(error), 'CME ERROR 100 (Unknown error)')
        error = commandError('CMS', '538')
        self.assertIs(type(error), CmsError)
        self.assertEqual(error.data, [])
        self.assertEqual(str(error), 'CMS ERROR 538 (Invalid parameter)')


if __name__ == "__main__":
    unittest.main()
