#!/usr/bin/env python

""" High-level API for an attached GSM modem

Every operation queues one or more AT commands and returns a concurrent.futures.Future
that resolves to a smsmodem.task.Response (with the reply lines in "data" and, where
applicable, a structured result in "transformedData"), or fails with a
smsmodem.exceptions.CommandFailure.
"""

import re, logging

from .engine import CommandEngine
from .exceptions import CommandFailure, TransformRejected, InterruptedException
from .sms import ReceivedSms, SentSms, decodeTextModeSms, decodeTextModeSmsList
from .util import lineMatching, lineStartingWith, parseNotificationFields


class SmsModem(CommandEngine):
    """ Main class for interacting with an attached GSM modem """

    log = logging.getLogger('smsmodem.modem.SmsModem')

    # Expected reply of commands that simply succeed or fail
    OK_PATTERN = re.compile(r'^OK$', re.MULTILINE)
    # Expected reply of identification queries (any non-empty reply)
    ANY_PATTERN = re.compile(r'\S')
    # Prompt issued by the modem when it is ready to receive the SMS text
    PROMPT_PATTERN = re.compile(r'>')
    # The following are both expected patterns and line parsers; multi-line mode because
    # the reply line may be preceded by a command echo
    # Used for parsing signal strength query responses
    CSQ_REGEX = re.compile(r'^\+CSQ:\s*(\d+),\s*(\d+)', re.MULTILINE)
    # Used for parsing clock query responses
    CCLK_REGEX = re.compile(r'^\+CCLK:\s*"([^,]+),([^"]+)"', re.MULTILINE)
    # Used for parsing SMS service centre address query responses
    CSCA_REGEX = re.compile(r'^\+CSCA:\s*"([^"]*)"(?:,(\d+))?', re.MULTILINE)
    # Used for parsing network registration query responses
    CREG_REGEX = re.compile(r'^\+CREG:\s*(\d),\s*(\d)', re.MULTILINE)
    # Used for parsing SIM PIN status query responses
    CPIN_REGEX = re.compile(r'^\+CPIN:\s*(.+)$', re.MULTILINE)
    # Used for parsing sent SMS message references
    CMGS_REGEX = re.compile(r'^\+CMGS:\s*(\d+)', re.MULTILINE)
    # Used for parsing new SMS message indications
    CMTI_REGEX = re.compile(r'^\+CMTI:', re.MULTILINE)

    # Network registration status codes that mean "not registered"
    CREG_FAILURES = {'0': 'Not searching for network',
                     '2': 'Searching for network',
                     '3': 'Registration denied',
                     '4': 'Unknown registration status'}

    def __init__(self, port, baudrate=9600, smsReceivedCallbackFunc=None, **kwargs):
        """ Constructor

        :param port: The serial port the modem is attached to
        :param baudrate: The serial port speed
        :param smsReceivedCallbackFunc: function to call with a smsmodem.sms.ReceivedSms for every new SMS message

        See smsmodem.engine.CommandEngine for the other supported keyword arguments.
        """
        self.smsReceivedCallback = smsReceivedCallbackFunc or self._placeholderCallback
        super(SmsModem, self).__init__(port, baudrate, **kwargs)

    def customCommand(self, command, expectedPattern=None, transform=None, timeout=None, writeTerm='\r', after=None):
        """ Queues an arbitrary AT command; see CommandEngine.createTask() """
        return self.createTask(command, expectedPattern, transform, timeout, writeTerm, after)

    def _set(self, command, expectedPattern=None, transform=None, timeout=None):
        """ Queues a command that is expected to reply with "OK" unless specified otherwise """
        return self.createTask(command, expectedPattern or self.OK_PATTERN, transform, timeout)

    def _query(self, command, expectedPattern=None, transform=None, timeout=None):
        """ Queues a command that is expected to reply with any data unless specified otherwise """
        return self.createTask(command, expectedPattern or self.ANY_PATTERN, transform, timeout)

    # Configuration

    def echoOff(self, expectedPattern=None):
        """ Disables command echo """
        return self._set('ATE0', expectedPattern)

    def activateErrorCodes(self, mode=1, expectedPattern=None):
        """ Selects the +CME ERROR result code format

        :param mode: 0 to disable +CME ERROR codes (plain ERROR), 1 for numeric codes, 2 for verbose messages
        """
        return self._set('AT+CMEE={0}'.format(mode), expectedPattern)

    def activateStatusReport(self, expectedPattern=None):
        """ Requests SMS status reports for sent messages (text mode SMS parameters) """
        return self._set('AT+CSMP=49,167,0,0', expectedPattern)

    def setSmsMode(self, mode, expectedPattern=None):
        """ Selects the SMS message format: 0 for PDU mode, 1 for text mode """
        return self._set('AT+CMGF={0}'.format(mode), expectedPattern)

    def setSmsReceivedListener(self, expectedPattern=None):
        """ Enables +CMTI new message indications (required for the SMS received callback) """
        return self._set('AT+CNMI=2,1,0,2,0', expectedPattern)

    def resetModem(self, expectedPattern=None):
        """ Resets the modem's configuration to the stored profile """
        return self._set('ATZ', expectedPattern)

    def saveConfiguration(self, expectedPattern=None):
        """ Stores the current configuration in the modem's user profile """
        return self._set('AT&W', expectedPattern)

    def currentConfiguration(self, expectedPattern=None):
        """ Reads the modem's current configuration profile """
        return self._query('AT&V', expectedPattern)

    # SIM card security

    def setPinCode(self, pin, expectedPattern=None):
        """ Enters the SIM card PIN """
        return self._set('AT+CPIN="{0}"'.format(pin), expectedPattern)

    def checkPinCode(self, expectedPattern=None):
        """ Checks whether the SIM card is ready (i.e. no PIN/PUK is required)

        Resolves with transformedData 'READY'; fails with TransformRejected if a code is still required
        """
        return self._query('AT+CPIN?', expectedPattern or self.CPIN_REGEX, self._parseCpin)

    def unlockSimPin(self, pin, expectedPattern=None):
        """ Disables the PIN lock of the SIM card """
        return self._set('AT+CLCK="SC",0,"{0}"'.format(pin), expectedPattern)

    def lockSimPin(self, pin, expectedPattern=None):
        """ Enables the PIN lock of the SIM card """
        return self._set('AT+CLCK="SC",1,"{0}"'.format(pin), expectedPattern)

    def changePin(self, oldPin, newPin, expectedPattern=None):
        """ Changes the SIM card PIN """
        return self._set('AT+CPWD="SC","{0}","{1}"'.format(oldPin, newPin), expectedPattern)

    # Network and device information

    def checkGsmNetwork(self, expectedPattern=None):
        """ Checks that the modem is registered with the GSM network (home network or roaming)

        Resolves with transformedData {'mode': ..., 'status': ...}; fails with TransformRejected otherwise
        """
        return self._query('AT+CREG?', expectedPattern or self.CREG_REGEX, self._parseCreg)

    def modemId(self, expectedPattern=None):
        """ Reads the modem's identification information """
        return self._query('ATI', expectedPattern)

    def manufacturer(self, expectedPattern=None):
        """ Reads the modem's manufacturer's name """
        return self._query('AT+CGMI', expectedPattern)

    def model(self, expectedPattern=None):
        """ Reads the modem's model name """
        return self._query('AT+CGMM', expectedPattern)

    def revision(self, expectedPattern=None):
        """ Reads the modem's software revision """
        return self._query('AT+CGMR', expectedPattern)

    def imei(self, expectedPattern=None):
        """ Reads the modem's serial number (IMEI number) """
        return self._query('AT+CGSN', expectedPattern)

    def imsi(self, expectedPattern=None):
        """ Reads the IMSI (International Mobile Subscriber Identity) of the SIM card """
        return self._query('AT+CIMI', expectedPattern)

    def clock(self, expectedPattern=None):
        """ Reads the modem's real-time clock; transformedData is {'date': 'yy/MM/dd', 'time': 'hh:mm:ss±zz'} """
        return self._query('AT+CCLK?', expectedPattern or self.CCLK_REGEX, self._parseCclk)

    def signalStrength(self, expectedPattern=None):
        """ Reads the signal quality; transformedData is {'rssi': ..., 'ber': ...} (as returned by the modem) """
        return self._query('AT+CSQ', expectedPattern or self.CSQ_REGEX, self._parseCsq)

    def smsCenter(self, expectedPattern=None):
        """ Reads the SMS service centre address; transformedData is {'number': ..., 'type': ...} """
        return self._query('AT+CSCA?', expectedPattern or self.CSCA_REGEX, self._parseCsca)

    # SMS messages

    def readSms(self, index, expectedPattern=None):
        """ Reads the SMS message stored at the specified index (text mode)

        transformedData is a smsmodem.sms.ReceivedSms
        """
        def transform(lines):
            return self._receivedSms(decodeTextModeSms(lines), index)
        return self._query('AT+CMGR={0}'.format(index), expectedPattern, transform)

    def listSms(self, status='ALL', expectedPattern=None):
        """ Lists stored SMS messages with the specified text mode status ("REC UNREAD", "REC READ", "ALL", ...)

        transformedData is a list of smsmodem.sms.ReceivedSms
        """
        def transform(lines):
            return [self._receivedSms(fields, fields['index']) for fields in decodeTextModeSmsList(lines)]
        return self._set('AT+CMGL="{0}"'.format(status), expectedPattern, transform)

    def deleteSms(self, index, expectedPattern=None):
        """ Deletes the SMS message stored at the specified index """
        return self._set('AT+CMGD={0}'.format(index), expectedPattern)

    def deleteAllSms(self, expectedPattern=None):
        """ Deletes all stored SMS messages """
        return self._set('AT+CMGD=1,4', expectedPattern)

    def setReceiver(self, number, expectedPattern=None, after=None):
        """ Starts a text-mode SMS message to the specified number; the modem replies with a ">" prompt """
        return self.createTask('AT+CMGS="{0}"'.format(number), expectedPattern or self.PROMPT_PATTERN, after=after)

    def setTextMessage(self, text, expectedPattern=None, transform=None, after=None):
        """ Sends the SMS text after setReceiver(), terminated with CTRL+Z

        transformedData is the message reference assigned by the modem (int), unless another transform is specified
        """
        return self.createTask(text + chr(26), expectedPattern or self.CMGS_REGEX, transform or self._parseCmgs,
                               writeTerm='', after=after)

    def sendSms(self, number, text):
        """ Sends an SMS text message (switches the modem to text mode first)

        The commands are queued back-to-back so that no other command can be written while the
        modem waits for the message text. If any step fails, the remaining ones are not written
        and the returned future fails with that step's exception.

        transformedData of the resulting response is a smsmodem.sms.SentSms
        """
        with self._workAvailable:
            modeSet = self.setSmsMode(1)
            prompted = self.setReceiver(number, after=modeSet)
            return self.setTextMessage(text, transform=lambda lines: SentSms(number, text, self._parseCmgs(lines)),
                                       after=prompted)

    # Calls

    def dial(self, number, expectedPattern=None):
        """ Starts a voice call to the specified number """
        return self._set('ATD{0};'.format(number), expectedPattern)

    def hangup(self, expectedPattern=None):
        """ Ends the current call """
        return self._set('ATH', expectedPattern)

    # Reply post-processors

    def _parseCsq(self, lines):
        csqMatch = lineMatching(self.CSQ_REGEX, lines)
        if not csqMatch:
            raise TransformRejected('No +CSQ signal quality in reply', data=lines)
        return {'rssi': csqMatch.group(1), 'ber': csqMatch.group(2)}

    def _parseCclk(self, lines):
        cclkMatch = lineMatching(self.CCLK_REGEX, lines)
        if not cclkMatch:
            raise TransformRejected('No +CCLK clock value in reply', data=lines)
        return {'date': cclkMatch.group(1), 'time': cclkMatch.group(2)}

    def _parseCsca(self, lines):
        cscaMatch = lineMatching(self.CSCA_REGEX, lines)
        if not cscaMatch:
            raise TransformRejected('No +CSCA service centre address in reply', data=lines)
        return {'number': cscaMatch.group(1), 'type': cscaMatch.group(2)}

    def _parseCreg(self, lines):
        cregMatch = lineMatching(self.CREG_REGEX, lines)
        if not cregMatch:
            raise TransformRejected('No +CREG network registration status in reply', data=lines)
        mode, status = cregMatch.groups()
        if status in self.CREG_FAILURES:
            raise TransformRejected(self.CREG_FAILURES[status], data=lines)
        # 1: registered, home network, 5: registered, roaming
        return {'mode': mode, 'status': status}

    def _parseCpin(self, lines):
        cpinLine = lineStartingWith('+CPIN', lines)
        cpinMatch = self.CPIN_REGEX.match(cpinLine) if cpinLine != None else None
        if not cpinMatch:
            raise TransformRejected('No +CPIN status in reply', data=lines)
        status = cpinMatch.group(1).strip()
        if status != 'READY':
            raise TransformRejected('SIM card not ready: {0} required'.format(status), data=lines)
        return status

    def _parseCmgs(self, lines):
        cmgsMatch = lineMatching(self.CMGS_REGEX, lines)
        if not cmgsMatch:
            # Some modems do not return a message reference
            return None
        return int(cmgsMatch.group(1))

    def _receivedSms(self, fields, index):
        return ReceivedSms(self, fields['status'], fields['number'], fields['timestamp'], fields['text'], index)

    # Unsolicited notifications

    def _processUnsolicited(self, lines):
        """ Handles new SMS message indications; other notifications are passed to the unsolicited callback """
        for line in lines:
            if self.CMTI_REGEX.match(line):
                self._handleSmsReceived(line)
                return
        super(SmsModem, self)._processUnsolicited(lines)

    def _handleSmsReceived(self, notificationLine):
        """ Handler for "new SMS" unsolicited notification line: reads the message and passes it to the callback """
        self.log.debug('SMS message received')
        fields = parseNotificationFields(notificationLine)
        if len(fields) < 2 or not fields[1].isdigit():
            self.log.warning('Invalid new SMS indication: %s', notificationLine)
            return
        memory, index = fields[0], int(fields[1])
        try:
            sms = self.readSms(index).result().transformedData
        except (CommandFailure, InterruptedException) as e:
            self.log.error('Failed to read received SMS message %s from %s: %s', index, memory, e)
            return
        sms.memory = memory
        self.smsReceivedCallback(sms)
