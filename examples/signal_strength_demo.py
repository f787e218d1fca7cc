#!/usr/bin/env python

"""\
Demo: identify the modem and display the network signal quality

Queues a handful of queries at once and prints the replies as they complete.
"""

import logging

PORT = '/dev/ttyUSB2'
BAUDRATE = 115200

from smsmodem.modem import SmsModem
from smsmodem.exceptions import CommandFailure

def main():
    print('Initializing modem...')
    # Uncomment the following line to see what the modem is doing:
    #logging.basicConfig(format='%(levelname)s: %(message)s', level=logging.DEBUG)
    modem = SmsModem(PORT, BAUDRATE)
    modem.connect()
    try:
        modem.echoOff()
        queries = (('Manufacturer', modem.manufacturer()),
                   ('Model', modem.model()),
                   ('Revision', modem.revision()),
                   ('IMEI', modem.imei()))
        for name, future in queries:
            try:
                print('{0}: {1}'.format(name, future.result().data[0]))
            except CommandFailure as e:
                print('{0}: not available ({1})'.format(name, e))
        try:
            signal = modem.signalStrength().result().transformedData
        except CommandFailure as e:
            print('Failed to read signal quality: {0}'.format(e))
        else:
            # 99 means "not known or not detectable"
            print('Signal quality: rssi {0}, bit error rate {1}'.format(signal['rssi'], signal['ber']))
    finally:
        modem.close()

if __name__ == '__main__':
    main()
