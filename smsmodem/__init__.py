""" Package that allows easy control of an attached GSM modem through a queue of AT commands

The main class for controlling a modem is SmsModem, which can be imported
directly from this module. Every modem operation returns a concurrent.futures.Future
resolving to a smsmodem.task.Response.

Other important and useful classes are:
smsmodem.engine.CommandEngine: the AT command queue, dispatch loop and reply correlator
smsmodem.sms.ReceivedSms: wraps a received SMS message and passed to the sms received handler callback function
smsmodem.sms.SentSms: returned when sending SMS messages

All smsmodem-specific exceptions are defined in the smsmodem.exceptions module.

@license: LGPLv3+
"""

from .modem import SmsModem
