""" SMS message classes and the text-mode SMS decoder """

import re, weakref

from .exceptions import TransformRejected, InvalidStateException
from .util import parseTextModeTimeStr, allLinesMatching

# Used for parsing SMS message reads (text mode)
CMGR_REGEX_TEXT = re.compile(r'^\+CMGR:\s*"([^"]+)","([^"]*)",[^,]*,"([^"]+)"(,.*)?$')
# Used for parsing SMS message lists (text mode)
CMGL_REGEX_TEXT = re.compile(r'^\+CMGL:\s*(\d+),"([^"]+)","([^"]*)",[^,]*,"([^"]+)"(,.*)?$')


class Sms(object):
    """ SMS message base class """

    # Some constants to ease handling SMS statuses
    STATUS_RECEIVED_UNREAD = 0
    STATUS_RECEIVED_READ = 1
    STATUS_STORED_UNSENT = 2
    STATUS_STORED_SENT = 3
    STATUS_ALL = 4
    # ...and a handy converter for text mode statuses
    TEXT_MODE_STATUS_MAP = {'REC UNREAD': STATUS_RECEIVED_UNREAD,
                            'REC READ': STATUS_RECEIVED_READ,
                            'STO UNSENT': STATUS_STORED_UNSENT,
                            'STO SENT': STATUS_STORED_SENT,
                            'ALL': STATUS_ALL}

    def __init__(self, number, text):
        self.number = number
        self.text = text


class ReceivedSms(Sms):
    """ An SMS message that has been received (MT) """

    def __init__(self, gsmModem, status, number, time, text, index=None, memory=None):
        super(ReceivedSms, self).__init__(number, text)
        self._gsmModem = weakref.proxy(gsmModem) if gsmModem != None else None
        self.status = status
        self.time = time
        # Storage location of the message on the device/SIM card
        self.index = index
        self.memory = memory

    def reply(self, message):
        """ Convenience method that sends a reply SMS to the sender of this message

        :return: Future for the sendSms() operation
        """
        if self._gsmModem == None:
            raise InvalidStateException('SMS message is not associated with a modem')
        return self._gsmModem.sendSms(self.number, message)

    def __repr__(self):
        return 'ReceivedSms({0!r}, {1!r})'.format(self.number, self.text)


class SentSms(Sms):
    """ An SMS message that has been sent (MO) """

    def __init__(self, number, text, reference):
        super(SentSms, self).__init__(number, text)
        # Message reference assigned by the modem (+CMGS: <mr>)
        self.reference = reference


def _messageText(lines):
    """ Joins the message body lines, dropping the final result code """
    if len(lines) > 0 and lines[-1] == 'OK':
        lines = lines[:-1]
    return '\n'.join(lines)


def decodeTextModeSms(lines):
    """ Decodes a text-mode +CMGR reply

    Example input: ['+CMGR: "REC READ","+33612345678",,"18/12/17,16:00:57+04"', 'Hello', 'OK']

    :raise TransformRejected: if the reply does not contain a +CMGR header

    :return: dict with keys: status, number, date, time, timestamp, text
    :rtype: dict
    """
    for i, line in enumerate(lines):
        cmgrMatch = CMGR_REGEX_TEXT.match(line)
        if cmgrMatch:
            msgStatus, number, msgTime = cmgrMatch.group(1, 2, 3)
            date, time = msgTime.split(',', 1)
            return {'status': Sms.TEXT_MODE_STATUS_MAP.get(msgStatus, Sms.STATUS_RECEIVED_UNREAD),
                    'number': number,
                    'date': date,
                    'time': time,
                    'timestamp': parseTextModeTimeStr(msgTime),
                    'text': _messageText(lines[i + 1:])}
    raise TransformRejected('Failed to parse text-mode SMS message +CMGR response', data=lines)


def decodeTextModeSmsList(lines):
    """ Decodes a text-mode +CMGL reply into a list of dicts

    Each dict has the same keys as the one returned by decodeTextModeSms(), plus the message's storage "index"

    :rtype: list
    """
    messages = []
    headers = allLinesMatching(CMGL_REGEX_TEXT, lines)
    for n, (i, cmglMatch) in enumerate(headers):
        # The message text runs up to the next header (or the end of the reply)
        end = headers[n + 1][0] if n + 1 < len(headers) else len(lines)
        msgIndex, msgStatus, number, msgTime = cmglMatch.group(1, 2, 3, 4)
        date, time = msgTime.split(',', 1)
        messages.append({'index': int(msgIndex),
                         'status': Sms.TEXT_MODE_STATUS_MAP.get(msgStatus, Sms.STATUS_RECEIVED_UNREAD),
                         'number': number,
                         'date': date,
                         'time': time,
                         'timestamp': parseTextModeTimeStr(msgTime),
                         'text': _messageText(lines[i + 1:end])})
    return messages
