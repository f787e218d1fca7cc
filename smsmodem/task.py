""" Queued AT command exchanges ("tasks") and their results """

import itertools, re, threading, time
from concurrent.futures import Future

from .exceptions import TaskAlreadySettledError


def compilePattern(pattern):
    """ Compiles an expected-reply pattern; strings are compiled in multi-line mode, None is passed through """
    if pattern == None or hasattr(pattern, 'search'):
        return pattern
    return re.compile(pattern, re.MULTILINE)


class Response(object):
    """ Successful reply to a queued command """

    def __init__(self, command, data, transformedData=None):
        self.command = command
        # The reply lines, as read from the modem
        self.data = data
        # Output of the task's transform function (None if no transform was used)
        self.transformedData = transformedData

    def __repr__(self):
        return 'Response({0!r}, {1!r}, {2!r})'.format(self.command, self.data, self.transformedData)


class Task(object):
    """ A single pending command/response exchange

    A task is settled (accepted or rejected) exactly once. The strict accept() and reject()
    methods raise TaskAlreadySettledError on a second attempt; the tryAccept() and tryReject()
    methods are used where several parties race to settle the task (reply, timeout, write failure).
    """

    _ids = itertools.count(1)

    def __init__(self, command, expectedPattern=None, transform=None, timeout=0, writeTerm='\r'):
        """
        :param command: The command to write to the modem, without line terminator
        :type command: str
        :param expectedPattern: The pattern a successful reply must match; if None, no reply is expected
        :type expectedPattern: str or compiled regular expression
        :param transform: Function that converts the reply lines into a structured result
        :type transform: func
        :param timeout: Maximum time to wait for a reply, in seconds (0 disables the timeout)
        :type timeout: int or float
        :param writeTerm: The terminating sequence to append to the written command
        :type writeTerm: str
        """
        if not command:
            raise ValueError('Task command must not be empty')
        self.id = next(Task._ids)
        self.command = command
        self.expectedPattern = compilePattern(expectedPattern)
        self.transform = transform
        self.timeout = timeout
        self.writeTerm = writeTerm
        self.createdAt = time.time()
        self.timeoutAt = self.createdAt + timeout if timeout else None
        self.future = Future()
        # Mark the future as running so that callers cannot cancel it
        self.future.set_running_or_notify_cancel()
        self._lock = threading.Lock()
        self._settledEvent = threading.Event()
        self._settled = False

    @property
    def timeoutKey(self):
        """ Name of this task's timeout timer """
        return 'timeout:{0}:{1}'.format(self.id, self.command)

    @property
    def pending(self):
        return not self._settled

    def _markSettled(self):
        with self._lock:
            if self._settled:
                return False
            self._settled = True
            return True

    def accept(self, data, transformedData=None):
        """ Resolves this task's future with the specified reply lines

        :raise TaskAlreadySettledError: if the task has already been settled
        """
        if not self.tryAccept(data, transformedData):
            raise TaskAlreadySettledError(self)

    def reject(self, failure):
        """ Rejects this task's future with the specified failure (a CommandFailure instance)

        :raise TaskAlreadySettledError: if the task has already been settled
        """
        if not self.tryReject(failure):
            raise TaskAlreadySettledError(self)

    def tryAccept(self, data, transformedData=None):
        """ Like accept(), but returns False instead of raising if the task is already settled """
        if not self._markSettled():
            return False
        self.future.set_result(Response(self.command, data, transformedData))
        self._settledEvent.set()
        return True

    def tryReject(self, failure):
        """ Like reject(), but returns False instead of raising if the task is already settled """
        if not self._markSettled():
            return False
        if getattr(failure, 'command', False) == None:
            failure.command = self.command
        self.future.set_exception(failure)
        self._settledEvent.set()
        return True

    def wait(self, timeout=None):
        """ Blocks until this task has been settled

        :return: True if the task is settled
        :rtype: bool
        """
        return self._settledEvent.wait(timeout)

    def __repr__(self):
        return 'Task({0}, {1!r})'.format(self.id, self.command)
