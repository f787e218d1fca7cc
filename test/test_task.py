#!/usr/bin/env python

""" Test suite for smsmodem.task """

import re, unittest

from smsmodem.task import Task, Response, compilePattern
from smsmodem.exceptions import TaskAlreadySettledError, TimeoutException, PatternMismatchError


class TestTask(unittest.TestCase):
    """ Tests settling tasks """

    def test_emptyCommand(self):
        """ Tests that a task cannot be created without a command """
        self.assertRaises(ValueError, Task, '')

    def test_ids(self):
        """ Tests that every task gets a unique id, also reflected in its timeout timer key """
        first = Task('AT')
        second = Task('AT')
        self.assertNotEqual(first.id, second.id)
        self.assertNotEqual(first.timeoutKey, second.timeoutKey)
        self.assertTrue(first.timeoutKey.startswith('timeout:'))

    def test_timeoutAt(self):
        task = Task('AT', timeout=5)
        self.assertAlmostEqual(task.timeoutAt - task.createdAt, 5)
        self.assertEqual(Task('AT').timeoutAt, None)

    def test_patternCompiled(self):
        """ Tests that string patterns are compiled in multi-line mode """
        task = Task('AT', '^OK$')
        self.assertTrue(task.expectedPattern.search('+CSQ: 1,2\nOK'))
        pattern = re.compile('OK')
        self.assertIs(compilePattern(pattern), pattern)
        self.assertEqual(compilePattern(None), None)

    def test_accept(self):
        task = Task('AT+CSQ', 'OK')
        self.assertTrue(task.pending)
        task.accept(['+CSQ: 1,2', 'OK'], {'rssi': '1'})
        self.assertFalse(task.pending)
        self.assertTrue(task.wait(0))
        response = task.future.result(0)
        self.assertIsInstance(response, Response)
        self.assertEqual(response.command, 'AT+CSQ')
        self.assertEqual(response.data, ['+CSQ: 1,2', 'OK'])
        self.assertEqual(response.transformedData, {'rssi': '1'})

    def test_reject(self):
        """ Tests that rejecting a task fills in the failed command """
        task = Task('AT', 'OK')
        failure = TimeoutException()
        task.reject(failure)
        self.assertIs(task.future.exception(0), failure)
        self.assertEqual(failure.command, 'AT')

    def test_settleTwice(self):
        """ Tests that the strict settle methods raise when the task is already settled """
        task = Task('AT', 'OK')
        task.accept(['OK'])
        self.assertRaises(TaskAlreadySettledError, task.accept, ['OK'])
        self.assertRaises(TaskAlreadySettledError, task.reject, TimeoutException('AT'))
        self.assertEqual(task.future.result(0).data, ['OK'])

    def test_trySettle(self):
        """ Tests that only the first of several racing settle attempts wins """
        task = Task('AT', 'OK')
        self.assertTrue(task.tryReject(PatternMismatchError('AT', ['ERR'], task.expectedPattern)))
        self.assertFalse(task.tryAccept(['OK']))
        self.assertFalse(task.tryReject(TimeoutException('AT')))
        self.assertIsInstance(task.future.exception(0), PatternMismatchError)

    def test_notCancellable(self):
        """ Tests that callers cannot cancel a task's future """
        task = Task('AT', 'OK')
        self.assertFalse(task.future.cancel())
        self.assertTrue(task.tryAccept(['OK']))


if __name__ == "__main__":
    unittest.main()
