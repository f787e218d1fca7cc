#!/usr/bin/env python


"""\
Simple script to send an SMS message
"""
import sys, logging
from argparse import ArgumentParser

from smsmodem.modem import SmsModem
from smsmodem.exceptions import CommandFailure, TimeoutException, TransformRejected, PinRequiredError, IncorrectPinError

def parseArgs():
    """ Argument parser """
    parser = ArgumentParser(description='Simple script for sending SMS messages')
    parser.add_argument('-i', '--port', metavar='PORT', help='port to which the GSM modem is connected; a number or a device name.')
    parser.add_argument('-b', '--baud', metavar='BAUDRATE', type=int, default=115200, help='set baud rate')
    parser.add_argument('-p', '--pin', metavar='PIN', default=None, help='SIM card PIN')
    parser.add_argument('-t', '--timeout', metavar='SECONDS', type=float, default=SmsModem.DEFAULT_TIMEOUT, help='maximum time to wait for each reply from the modem')
    parser.add_argument('--debug', action='store_true', help='turn on debug (serial port dump)')
    parser.add_argument('destination', metavar='DESTINATION', help='destination mobile number')
    parser.add_argument('message', nargs='?', metavar='MESSAGE', help='message to send, defaults to stdin-prompt')
    return parser.parse_args()

def main():
    args = parseArgs()
    if args.port == None:
        sys.stderr.write('Error: No port specified. Please specify the port to which the GSM modem is connected using the -i argument.\n')
        sys.exit(1)
    if args.debug:
        # enable dump on serial port
        logging.basicConfig(format='%(levelname)s: %(message)s', level=logging.DEBUG)

    modem = SmsModem(args.port, args.baud, timeout=args.timeout)
    print('Connecting to GSM modem on {0}...'.format(args.port))
    modem.connect()
    try:
        send_sms(modem, args)
    finally:
        modem.close()

def unlock_sim(modem, pin):
    try:
        modem.checkPinCode().result()
    except (TransformRejected, PinRequiredError):
        if pin == None:
            sys.stderr.write('Error: SIM card PIN required. Please specify a PIN with the -p argument.\n')
            sys.exit(1)
        try:
            modem.setPinCode(pin).result()
        except IncorrectPinError:
            sys.stderr.write('Error: Incorrect SIM card PIN entered.\n')
            sys.exit(1)

def send_sms(modem, args):
    modem.echoOff().result()
    modem.activateErrorCodes().result()
    unlock_sim(modem, args.pin)
    print('Checking for network coverage...')
    try:
        modem.checkGsmNetwork().result()
    except TransformRejected as e:
        print('Network not available ({0}), please adjust modem position/antenna and try again.'.format(e.err))
        sys.exit(1)
    if args.message is None:
        print('\nPlease type your message and press enter to send it:')
        text = input('> ')
    else:
        text = args.message
    print('\nSending SMS message...')
    try:
        sms = modem.sendSms(args.destination, text).result().transformedData
    except TimeoutException:
        print('Failed to send message: the send operation timed out')
        sys.exit(1)
    except CommandFailure as e:
        print('Failed to send message: {0}'.format(e))
        sys.exit(1)
    if sms.reference != None:
        print('Message sent (reference {0}).'.format(sms.reference))
    else:
        print('Message sent.')

if __name__ == '__main__':
    main()
