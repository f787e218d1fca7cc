#!/usr/bin/env python
# -*- coding: utf-8 -*-

""" Helper functions for parsing modem replies """

from datetime import datetime, timedelta, tzinfo
import re

# Splits on commas that are not inside a double-quoted string
_FIELD_SPLIT_REGEX = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')


class SimpleOffsetTzInfo(tzinfo):
    """ Very simple implementation of datetime.tzinfo offering set timezone offset for datetime instances """

    def __init__(self, offsetInMinutes=0):
        """ Constructs a new tzinfo instance using an amount of minutes as an offset

        :param offsetInMinutes: The timezone offset, in minutes (may be negative)
        :type offsetInMinutes: int
        """
        self.offsetInMinutes = offsetInMinutes

    def utcoffset(self, dt):
        return timedelta(minutes=self.offsetInMinutes)

    def dst(self, dt):
        return timedelta(0)

    def __repr__(self):
        return 'smsmodem.util.SimpleOffsetTzInfo({0})'.format(self.offsetInMinutes)


def parseTextModeTimeStr(timeStr):
    """ Parses the specified SMS text mode time string

    The time stamp format is "yy/MM/dd,hh:mm:ss±zz"
    (yy = year, MM = month, dd = day, hh = hour, mm = minute, ss = second, zz = time zone
    [Note: the unit of time zone is a quarter of an hour])

    :param timeStr: The time string to parse
    :type timeStr: str

    :return: datetime object representing the specified time string
    :rtype: datetime.datetime
    """
    msgTime = timeStr[:-3]
    tzOffsetMinutes = int(timeStr[-3:]) * 15
    return datetime.strptime(msgTime, '%y/%m/%d,%H:%M:%S').replace(tzinfo=SimpleOffsetTzInfo(tzOffsetMinutes))


def parseNotificationFields(line):
    """ Returns the comma-separated fields following the first colon of the specified line

    Commas inside double-quoted values do not split fields; the quotes themselves are removed.
    Example: '+CMTI: "SM",3' returns ['SM', '3']; a line without a colon has no fields

    :rtype: list
    """
    colon = line.find(':')
    plain = line[colon + 1:].strip()
    if colon == -1 or len(plain) == 0:
        return []
    return [field.strip().strip('"') for field in _FIELD_SPLIT_REGEX.split(plain)]


def lineStartingWith(string, lines):
    """ Searches through the specified list of strings and returns the
    first line starting with the specified search string, or None if not found
    """
    for line in lines:
        if line.startswith(string):
            return line
    return None


def lineMatching(pattern, lines):
    """ Searches through the specified list of strings and returns the regular expression
    match for the first line that matches the specified pattern, or None if no match was found

    :type pattern: Regular expression string or compiled pattern to use
    :type lines: List of lines to search

    :rtype: re.Match
    """
    regex = re.compile(pattern)
    for line in lines:
        m = regex.match(line)
        if m:
            return m
    return None


def allLinesMatching(pattern, lines):
    """ Like lineMatching, but returns (index, match) tuples for all lines that match the specified pattern

    :rtype: list
    """
    regex = re.compile(pattern)
    result = []
    for i, line in enumerate(lines):
        m = regex.match(line)
        if m:
            result.append((i, m))
    return result
