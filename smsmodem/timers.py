""" Named, cancelable timers

Used by the command engine for per-command timeouts and for the pacing delay
between commands.
"""

import itertools, logging, threading


class NamedTimer(object):
    """ A single cancelable delay, identified by a string key """

    def __init__(self, registry, key, delay, callback=None):
        self.key = key
        self.delay = delay
        self.fired = False
        self.cancelled = False
        self._registry = registry
        self._callback = callback
        self._lock = threading.Lock()
        self._finished = threading.Event()
        self._timer = threading.Timer(delay, self._fire)
        self._timer.daemon = True

    def start(self):
        self._timer.start()

    def _fire(self):
        with self._lock:
            if self.cancelled:
                return
            self.fired = True
        self._registry._remove(self)
        try:
            if self._callback != None:
                self._callback()
        finally:
            self._finished.set()

    def cancel(self):
        """ Cancels this timer. Does nothing if the timer has already fired or been cancelled

        :return: True if the timer was cancelled by this call
        :rtype: bool
        """
        with self._lock:
            if self.fired or self.cancelled:
                return False
            self.cancelled = True
        self._timer.cancel()
        self._finished.set()
        return True

    def wait(self, timeout=None):
        """ Blocks until the timer fires or is cancelled

        :return: True if the timer fired, False if it was cancelled (or the wait timed out)
        :rtype: bool
        """
        self._finished.wait(timeout)
        return self.fired

    def __repr__(self):
        return 'NamedTimer({0!r}, {1})'.format(self.key, self.delay)


class TimerRegistry(object):
    """ Keeps track of all active named timers of one owner

    Scheduling a timer under a key that is already in use cancels and replaces
    the existing timer. Entries are removed when their timer fires or is cancelled.
    """

    log = logging.getLogger('smsmodem.timers.TimerRegistry')

    def __init__(self):
        self._timers = {}
        self._lock = threading.Lock()
        self._keyCounter = itertools.count(1)

    def schedule(self, delay, key=None, callback=None):
        """ Starts a new timer

        :param delay: Time to wait, in seconds
        :type delay: int or float
        :param key: The name of the timer; a unique key is generated if not specified
        :type key: str
        :param callback: Function (without arguments) to call when the timer fires
        :type callback: func

        :return: The started timer
        :rtype: smsmodem.timers.NamedTimer
        """
        if key == None:
            key = 'timer_{0}'.format(next(self._keyCounter))
        timer = NamedTimer(self, key, delay, callback)
        with self._lock:
            existing = self._timers.pop(key, None)
            if existing != None:
                self.log.debug('replacing timer: %s', key)
                existing.cancel()
            self._timers[key] = timer
        timer.start()
        return timer

    def cancel(self, key):
        """ Cancels the timer with the specified key; does nothing if no such timer exists

        :return: True if a timer was cancelled
        :rtype: bool
        """
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer != None:
            return timer.cancel()
        return False

    def cancelByPrefix(self, prefix):
        """ Cancels every active timer whose key starts with the specified prefix

        :return: The number of timers cancelled
        :rtype: int
        """
        with self._lock:
            matching = [key for key in self._timers if key.startswith(prefix)]
            timers = [self._timers.pop(key) for key in matching]
        cancelled = 0
        for timer in timers:
            if timer.cancel():
                cancelled += 1
        if cancelled:
            self.log.debug('cancelled %d timer(s) with prefix: %s', cancelled, prefix)
        return cancelled

    def keys(self):
        with self._lock:
            return list(self._timers.keys())

    def _remove(self, timer):
        with self._lock:
            if self._timers.get(timer.key) is timer:
                del self._timers[timer.key]

    def __contains__(self, key):
        with self._lock:
            return key in self._timers

    def __len__(self):
        with self._lock:
            return len(self._timers)
