#!/usr/bin/env python

""" AT command queue: serializes commands onto the serial port and correlates replies

Every command is wrapped in a Task and appended to a FIFO queue. A single dispatch
thread writes the task at the head of the queue, waits until the task has been
settled (by a matching reply, an error reply or its timeout), and only then moves on
to the next task after a short pacing delay. At most one command is ever awaiting a
reply. Frames read while no command is awaiting a reply (and notification lines
mixed into a reply) are treated as unsolicited notifications.
"""

import re, logging, threading
from collections import deque

from .serial_comms import SerialComms
from .task import Task
from .timers import TimerRegistry
from .errorcodes import classifyError
from .exceptions import CommandFailure, TimeoutException, PatternMismatchError, TransformRejected, \
    InterruptedException, commandError


class CommandEngine(SerialComms):
    """ Queues AT commands and matches the modem's replies to them """

    log = logging.getLogger('smsmodem.engine.CommandEngine')

    # Default maximum time to wait for a reply to a command (in seconds)
    DEFAULT_TIMEOUT = 15
    # Default time to wait after a command has been settled before writing the next one (in seconds)
    DEFAULT_COMMAND_DELAY = 0.1
    # Time to wait before the next command if writing to the serial port failed (in seconds)
    WRITE_FAILURE_BACKOFF = 0.5
    # Timer keys
    TIMEOUT_KEY_PREFIX = 'timeout:'
    PACING_TIMER_KEY = 'pacing'
    # Lines that are always unsolicited notifications (unless the current command explicitly expects them)
    UNSOLICITED_REGEX = re.compile(r'^(\+CMTI:|\+CDSI:|\+CMT:|\+CDS:|\+CBM:|\+CRING:|RING$|\+CLIP:)')

    def __init__(self, port, baudrate=9600, timeout=DEFAULT_TIMEOUT, commandDelay=DEFAULT_COMMAND_DELAY, retry=0,
                 echoSuppression=False, autoOpen=False, openCallbackFunc=None, unsolicitedCallbackFunc=None,
                 fatalErrorCallbackFunc=None, **kwargs):
        """ Constructor

        :param timeout: Maximum time to wait for a reply to a command, in seconds (0 disables timeouts)
        :type timeout: int or float
        :param commandDelay: Time to wait between two commands, in seconds
        :type commandDelay: int or float
        :param retry: Number of times callers should retry a failed command (not used by the engine itself)
        :type retry: int
        :param echoSuppression: If True, a frame that is identical to the command just written is ignored (command echo)
        :type echoSuppression: bool
        :param autoOpen: If True, connect() is called by the constructor
        :type autoOpen: bool
        :param openCallbackFunc: function to call (without arguments) once the port has been opened
        :param unsolicitedCallbackFunc: function to call with the lines of unhandled unsolicited notifications

        Any other keyword arguments are passed on to SerialComms (bytesize, parity, stopbits, rtscts, exclusive)
        """
        super(CommandEngine, self).__init__(port, baudrate, dataCallbackFunc=self._handleFrame,
                                            fatalErrorCallbackFunc=fatalErrorCallbackFunc, **kwargs)
        self.timeout = timeout
        self.commandDelay = commandDelay
        self.retry = retry
        self.echoSuppression = echoSuppression
        self.openCallback = openCallbackFunc or self._placeholderCallback
        self.unsolicitedCallback = unsolicitedCallbackFunc or self._placeholderCallback

        self._pending = deque() # Tasks waiting to be written; the head is the task in flight (if any)
        self._workAvailable = threading.Condition() # Guards self._pending, self._dispatching and self._closed
        self._dispatching = False
        self._closed = False # Set by close(); new tasks are rejected until the next connect()
        self._dispatchThread = None
        self._inFlight = None # The task awaiting a reply
        self._inFlightLock = threading.Lock()
        self._timers = TimerRegistry()

        if autoOpen:
            self.connect()

    def connect(self):
        """ Opens the serial port, starts processing queued commands and calls the "open" callback """
        self.log.info('Connecting to modem on port %s at %dbps', self.port, self.baudrate)
        super(CommandEngine, self).connect()
        with self._workAvailable:
            self._dispatching = True
            self._closed = False
        self._dispatchThread = threading.Thread(target=self._dispatchLoop, name='smsmodem-dispatch')
        self._dispatchThread.daemon = True
        self._dispatchThread.start()
        self.openCallback()

    def close(self):
        """ Stops processing commands, rejects all queued commands and closes the serial port """
        self.log.info('Closing modem on port %s', self.port)
        with self._workAvailable:
            self._dispatching = False
            self._closed = True
            queued = list(self._pending)
            self._pending.clear()
            self._workAvailable.notify_all()
        self._timers.cancelByPrefix(self.TIMEOUT_KEY_PREFIX)
        self._timers.cancel(self.PACING_TIMER_KEY)
        for task in queued:
            task.tryReject(InterruptedException('Modem closed before {0} completed'.format(task.command)))
        if self._dispatchThread != None and threading.current_thread() is not self._dispatchThread:
            self._dispatchThread.join()
        super(CommandEngine, self).close()

    @property
    def inFlightTask(self):
        """ :return: The task whose command has been written and is awaiting a reply, or None """
        with self._inFlightLock:
            return self._inFlight

    @property
    def queueLength(self):
        """ :return: The number of queued tasks (including the one in flight) """
        with self._workAvailable:
            return len(self._pending)

    def createTask(self, command, expectedPattern=None, transform=None, timeout=None, writeTerm='\r', after=None):
        """ Queues an AT command for writing to the modem

        :param command: The command to write, without line terminator
        :type command: str
        :param expectedPattern: Regular expression that a successful reply must match (searched in the
                                newline-joined reply lines). If None, the command is accepted as soon
                                as it has been written, without waiting for a reply.
        :type expectedPattern: str or compiled regular expression
        :param transform: Function that receives the reply lines and returns the structured result
                          (stored in the response's "transformedData" attribute); it may raise
                          TransformRejected to reject the reply
        :type transform: func
        :param timeout: Maximum time to wait for a reply, in seconds; defaults to the engine's timeout (0 disables)
        :type timeout: int or float
        :param writeTerm: The terminating sequence to append to the command
        :type writeTerm: str
        :param after: Future of a previously queued command; if that command fails, this command is
                      not written and fails with the same exception
        :type after: concurrent.futures.Future

        :return: Future that resolves to a smsmodem.task.Response, or fails with a CommandFailure
                 (or with InterruptedException if the engine has been closed)
        :rtype: concurrent.futures.Future
        """
        if timeout == None:
            timeout = self.timeout
        task = Task(command, expectedPattern, transform, timeout, writeTerm)
        if after != None:
            after.add_done_callback(lambda previous: self._handlePreviousDone(task, previous))
        with self._workAvailable:
            if self._closed:
                self.log.debug('modem closed, rejecting task: %s', task)
                task.tryReject(InterruptedException('Modem closed; {0} not written'.format(task.command)))
                return task.future
            if timeout and task.pending:
                self._timers.schedule(timeout, task.timeoutKey, lambda: self._handleTimeout(task))
            self._pending.append(task)
            self._workAvailable.notify()
        self.log.debug('task created: %s', task)
        return task.future

    def _handlePreviousDone(self, task, previous):
        """ Called when the command that the specified task depends on has been settled """
        failure = previous.exception()
        if failure != None and task.tryReject(failure):
            self.log.debug('task aborted: %s', task)
            self._timers.cancel(task.timeoutKey)

    def _handleTimeout(self, task):
        """ Called by a task's timeout timer """
        if task.tryReject(TimeoutException(task.command, task.timeout)):
            self.log.debug('task timed out: %s', task)

    def _dispatchLoop(self):
        """ Dispatch thread main loop

        Writes queued commands one at a time, in queue order
        """
        while True:
            with self._workAvailable:
                while self._dispatching and len(self._pending) == 0:
                    self._workAvailable.wait()
                if not self._dispatching:
                    return
                task = self._pending[0]
            delay = self._dispatch(task)
            with self._workAvailable:
                if len(self._pending) > 0 and self._pending[0] is task:
                    self._pending.popleft()
            if delay > 0:
                self._timers.schedule(delay, self.PACING_TIMER_KEY).wait()

    def _dispatch(self, task):
        """ Writes the task's command and blocks until the task has been settled

        :return: The time to wait before dispatching the next task
        """
        if not task.pending:
            # Timed out while queued
            self.log.debug('skipping settled task: %s', task)
            return 0
        with self._inFlightLock:
            self._inFlight = task
        try:
            self.log.debug('write: %s', task.command)
            try:
                self.write(task.command + task.writeTerm)
                self.drain()
            except CommandFailure as failure:
                self.log.debug('%s failed: %s', task, failure)
                task.tryReject(failure)
                return self.WRITE_FAILURE_BACKOFF
            if task.expectedPattern == None:
                # No reply expected
                task.tryAccept([])
            task.wait()
            return self.commandDelay
        finally:
            with self._inFlightLock:
                self._inFlight = None
            self._timers.cancel(task.timeoutKey)

    def _handleFrame(self, lines):
        """ Called by the read thread for every frame read from the modem """
        task = self.inFlightTask
        if task == None or not task.pending:
            self._handleUnsolicited(lines)
            return
        if self.echoSuppression and '\n'.join(lines) == task.command:
            self.log.debug('ignoring command echo: %s', task.command)
            return
        notifications = [line for line in lines if self.UNSOLICITED_REGEX.match(line) and not self._expects(task, line)]
        if len(notifications) > 0:
            self._handleUnsolicited(notifications)
            lines = [line for line in lines if line not in notifications]
            if len(lines) == 0:
                return
        self._correlate(task, lines)

    def _expects(self, task, line):
        return task.expectedPattern != None and task.expectedPattern.search(line) != None

    def _correlate(self, task, lines):
        """ Settles the task in flight using the specified reply lines """
        pattern = task.expectedPattern
        errorLine = any('ERROR' in line for line in lines)
        if errorLine or (pattern != None and not pattern.search('\n'.join(lines))):
            settled = task.tryReject(self._classifyFailure(task, lines))
        else:
            settled = self._accept(task, lines)
        if settled:
            self.log.debug('task settled: %s', task)
        else:
            self.log.debug('discarding reply to settled task %s: %s', task, lines)

    def _classifyFailure(self, task, lines):
        """ :return: the failure describing an unexpected or error reply """
        for line in lines:
            vendorError = classifyError(line)
            if vendorError:
                errorType, code, message = vendorError
                return commandError(errorType, code, task.command, lines)
        return PatternMismatchError(task.command, lines, task.expectedPattern)

    def _accept(self, task, lines):
        if task.transform == None:
            return task.tryAccept(lines)
        try:
            transformedData = task.transform(lines)
        except CommandFailure as failure:
            if len(failure.data) == 0:
                failure.data = lines
            return task.tryReject(failure)
        except Exception as e:
            # Malformed reply: only this task fails
            self.log.debug('transform failed for %s: %r', task, e)
            return task.tryReject(TransformRejected('Failed to process reply: {0}'.format(e), task.command, lines))
        return task.tryAccept(lines, transformedData)

    def _handleUnsolicited(self, lines):
        """ Handler for unsolicited notifications from the modem

        This method simply spawns a separate thread to handle the actual notification
        (in order to release the read thread so that the handlers are able to write back to the modem, etc)
        """
        thread = threading.Thread(target=self._processUnsolicited, kwargs={'lines': lines})
        thread.daemon = True
        thread.start()

    def _processUnsolicited(self, lines):
        """ Implementation of _handleUnsolicited() to be run in a separate thread """
        self.log.debug('unsolicited notification: %s', lines)
        self.unsolicitedCallback(lines)
