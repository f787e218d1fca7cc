""" Module defines exceptions used by smsmodem """

from .errorcodes import errorMessage


class GsmModemException(Exception):
    """ Base exception raised for error conditions when interacting with the GSM modem """


class InvalidStateException(GsmModemException):
    """ Raised when an API method call is invoked on an object that is in an incorrect state """


class TaskAlreadySettledError(InvalidStateException):
    """ Raised if a task is accepted or rejected more than once.

    This always indicates a programming error; it is never delivered to callers via a future.
    """

    def __init__(self, task):
        super(TaskAlreadySettledError, self).__init__('Task {0} has already been settled'.format(task))
        self.task = task


class InterruptedException(InvalidStateException):
    """ Raised when execution of an AT command is interrupted by a state change (e.g. the modem was closed).
    May contain another exception that was the cause of the interruption """

    def __init__(self, message, cause=None):
        """ @param cause: the exception that caused this interruption (if any) """
        super(InterruptedException, self).__init__(message)
        self.cause = cause


class CommandFailure(GsmModemException):
    """ Base class of every failure delivered to the caller of a queued AT command

    :ivar command: the command that failed
    :ivar data: the lines received from the modem (empty if nothing was read)
    :ivar err: human-readable description of the failure
    :ivar code: the vendor error code (string), only set for +CME/+CMS errors
    """

    def __init__(self, err, command=None, data=None, code=None):
        super(CommandFailure, self).__init__(err)
        self.err = err
        self.command = command
        self.data = data if data != None else []
        self.code = code


class WriteFailure(CommandFailure):
    """ Raised if the command could not be written to the serial port """

    def __init__(self, cause, command=None):
        super(WriteFailure, self).__init__('Write failed: {0}'.format(cause), command)
        self.cause = cause


class DrainFailure(CommandFailure):
    """ Raised if the serial port could not be drained after writing a command """

    def __init__(self, cause, command=None):
        super(DrainFailure, self).__init__('Drain failed: {0}'.format(cause), command)
        self.cause = cause


class TimeoutException(CommandFailure):
    """ Raised when no matching response to a command was received in time """

    def __init__(self, command=None, timeout=None, data=None):
        if timeout != None:
            err = 'No response to {0} within {1}s'.format(command, timeout)
        else:
            err = 'Timed out waiting for response to {0}'.format(command)
        super(TimeoutException, self).__init__(err, command, data)
        self.timeout = timeout


class PatternMismatchError(CommandFailure):
    """ Raised when the modem's reply does not match the reply expected for the command """

    def __init__(self, command, data, expectedPattern=None):
        pattern = expectedPattern.pattern if expectedPattern != None else None
        err = 'Expected data {0}, does not match real data received {1}, for command {2}'.format(pattern, '\n'.join(data), command)
        super(PatternMismatchError, self).__init__(err, command, data)
        self.expectedPattern = expectedPattern


class TransformRejected(CommandFailure):
    """ Raised by a response post-processor if the reply is semantically invalid (e.g. SIM not ready) """


class VendorError(CommandFailure):
    """ Raised if the modem returns a +CME ERROR or +CMS ERROR result code

    Use commandError() to construct the most specific subclass for a code.
    """

    type = None

    def __init__(self, command, code, data=None):
        code = str(code)
        self.description = errorMessage(self.type, code)
        super(VendorError, self).__init__(self.description, command, data, code)

    def __str__(self):
        return '{0} ERROR {1} ({2})'.format(self.type, self.code, self.description)


class CmeError(VendorError):
    """ ME error result code : +CME ERROR: <error> """

    type = 'CME'


class SecurityException(CmeError):
    """ Security-related CME error """


class PinRequiredError(SecurityException):
    """ Raised if an operation failed because the SIM card's PIN has not been entered """

    def __init__(self, command, code='11', data=None):
        super(PinRequiredError, self).__init__(command, code, data)


class PukRequiredError(SecurityException):
    """ Raised if an operation failed because the SIM card's PUK is required (SIM locked) """

    def __init__(self, command, code='12', data=None):
        super(PukRequiredError, self).__init__(command, code, data)


class IncorrectPinError(SecurityException):
    """ Raised if an incorrect PIN is entered """

    def __init__(self, command, code='16', data=None):
        super(IncorrectPinError, self).__init__(command, code, data)


class CmsError(VendorError):
    """ Message service failure result code: +CMS ERROR: <er> """

    type = 'CMS'


class SmscNumberUnknownError(CmsError):
    """ Raised if the SMSC (service centre) address is missing when trying to send an SMS message """

    def __init__(self, command, code='330', data=None):
        super(SmscNumberUnknownError, self).__init__(command, code, data)


# Specialized exception classes for well-known error codes
_SPECIALIZED_ERRORS = {('CME', '11'): PinRequiredError,
                       ('CME', '12'): PukRequiredError,
                       ('CME', '16'): IncorrectPinError,
                       ('CMS', '330'): SmscNumberUnknownError}


def commandError(type, code, command=None, data=None):
    """ Returns the most specific VendorError instance for the specified error type and code

    :param type: The error class: "CME" or "CMS"
    :type type: str
    :param code: The numeric error code, as returned by the modem
    :type code: str or int

    :rtype: VendorError
    """
    code = str(code)
    errorClass = _SPECIALIZED_ERRORS.get((type, code))
    if errorClass == None:
        errorClass = CmeError if type == 'CME' else CmsError
    return errorClass(command, code, data)
