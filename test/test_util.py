#!/usr/bin/env python

""" Test suite for smsmodem.util """

import unittest, re
from datetime import datetime, timedelta

from smsmodem.util import allLinesMatching, lineMatching, lineStartingWith, parseNotificationFields, \
    parseTextModeTimeStr, SimpleOffsetTzInfo

class TestUtil(unittest.TestCase):
    """ Tests misc utilities from smsmodem.util """

    def test_lineStartingWith(self):
        """ Tests function: lineStartingWith """
        lines = ['12345', 'abc', 'defghi', 'abcdef', 'efg']
        result = lineStartingWith('abc', lines)
        self.assertEqual(result, 'abc')
        result = lineStartingWith('d', lines)
        self.assertEqual(result, 'defghi')
        result = lineStartingWith('zzz', lines)
        self.assertEqual(result, None)

    def test_lineMatching(self):
        """ Tests function: lineMatching """
        lines = ['12345', 'abc', 'defghi', 'abcdef', 'efg']
        result = lineMatching(r'^abc.*$', lines)
        self.assertEqual(result.string, 'abc')
        result = lineMatching(re.compile(r'^\d+$'), lines)
        self.assertEqual(result.string, '12345')
        result = lineMatching(r'^ZZZ\d+$', lines)
        self.assertEqual(result, None)

    def test_allLinesMatching(self):
        """ Tests function: allLinesMatching """
        lines = ['12345', 'abc', 'defghi', 'abcdef', 'efg']
        result = allLinesMatching(re.compile(r'^abc.*$'), lines)
        self.assertIsInstance(result, list)
        self.assertEqual([(i, m.string) for i, m in result], [(1, 'abc'), (3, 'abcdef')])
        result = allLinesMatching(r'^ZZZ$', lines)
        self.assertEqual(result, [])

    def test_parseNotificationFields(self):
        """ Tests function: parseNotificationFields """
        tests = (('+CMTI: "SM",3', ['SM', '3']),
                 ('+CMTI:"ME", 12', ['ME', '12']),
                 ('+CLIP: "+27821234567",145,,,"Someone, Else"', ['+27821234567', '145', '', '', 'Someone, Else']),
                 ('RING', []))
        for line, expected in tests:
            self.assertEqual(parseNotificationFields(line), expected)

    def test_parseTextModeTimeStr(self):
        """ Tests function: parseTextModeTimeStr """
        result = parseTextModeTimeStr('18/12/17,16:00:57+04')
        self.assertEqual(result.replace(tzinfo=None), datetime(2018, 12, 17, 16, 0, 57))
        self.assertEqual(result.utcoffset(), timedelta(minutes=60))
        result = parseTextModeTimeStr('13/01/02,23:30:00-08')
        self.assertEqual(result.utcoffset(), timedelta(minutes=-120))

    def test_SimpleOffsetTzInfo(self):
        """ Basic test for the SimpleOffsetTzInfo class """
        tests = (2, -4, 0, 3.5)
        for hours in tests:
            tz = SimpleOffsetTzInfo(hours * 60)
            self.assertEqual(tz.utcoffset(None), timedelta(hours=hours))
            self.assertEqual(tz.dst(None), timedelta(0))
            self.assertIsInstance(tz.__repr__(), str)


if __name__ == "__main__":
    unittest.main()
