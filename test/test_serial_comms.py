#!/usr/bin/env python

""" Test suite for smsmodem.serial_comms """

import time, unittest

import smsmodem.serial_comms
from smsmodem.exceptions import WriteFailure, DrainFailure

from mockserial import MockSerialPackage, waitFor


class TestConnect(unittest.TestCase):
    """ Tests opening and closing the serial port """

    def setUp(self):
        smsmodem.serial_comms.serial = MockSerialPackage()

    def test_portSettings(self):
        """ Tests that the configured port settings are passed on to pyserial """
        serialComms = smsmodem.serial_comms.SerialComms('/dev/ttyUSB0', 115200, rtscts=False, exclusive=False)
        serialComms.connect()
        try:
            kwargs = serialComms.serial.kwargs
            self.assertEqual(kwargs['port'], '/dev/ttyUSB0')
            self.assertEqual(kwargs['baudrate'], 115200)
            self.assertEqual(kwargs['bytesize'], 8)
            self.assertEqual(kwargs['parity'], 'N')
            self.assertEqual(kwargs['stopbits'], 1)
            self.assertEqual(kwargs['rtscts'], False)
            self.assertEqual(kwargs['exclusive'], False)
            self.assertTrue(serialComms.alive)
        finally:
            serialComms.close()
        self.assertFalse(serialComms.alive)
        self.assertFalse(serialComms.serial.is_open)

    def test_closeWithoutConnect(self):
        """ Tests that closing a port that was never opened does nothing """
        serialComms = smsmodem.serial_comms.SerialComms('-- PORT IGNORED DURING TESTS --')
        serialComms.close()
        self.assertFalse(serialComms.alive)


class TestFrames(unittest.TestCase):
    """ Tests grouping the lines read from the serial device into frames """

    def setUp(self):
        smsmodem.serial_comms.serial = MockSerialPackage()
        self.frames = []
        self.serialComms = smsmodem.serial_comms.SerialComms('-- PORT IGNORED DURING TESTS --',
                                                             dataCallbackFunc=self.frames.append)
        self.serialComms.connect()

    def tearDown(self):
        self.serialComms.close()

    def test_frames(self):
        """ Tests that everything available at once is delivered as a single frame """
        tests = (('ABC\r\n', ['ABC']),
                 (' blah blah blah \r\n12345\r\n', [' blah blah blah ', '12345']),
                 ('\r\n+CSQ: 22,99\r\n\r\nOK\r\n', ['+CSQ: 22,99', 'OK']),
                 ('double\r\r\n', ['double']))
        for data, expected in tests:
            del self.frames[:]
            self.serialComms.serial.feed(data)
            self.assertTrue(waitFor(lambda: len(self.frames) > 0), 'Frame not delivered for {0!r}'.format(data))
            self.assertEqual(self.frames, [expected])

    def test_separateFrames(self):
        """ Tests that data arriving at different times produces separate frames """
        self.serialComms.serial.feed('RING\r\n')
        self.assertTrue(waitFor(lambda: len(self.frames) == 1))
        self.serialComms.serial.feed('+CLIP: "+27821234567",145\r\n')
        self.assertTrue(waitFor(lambda: len(self.frames) == 2))
        self.assertEqual(self.frames, [['RING'], ['+CLIP: "+27821234567",145']])

    def test_prompt(self):
        """ Tests that the "> " SMS text prompt is delivered even though it is not terminated by a newline """
        self.serialComms.serial.feed('> ')
        self.assertTrue(waitFor(lambda: len(self.frames) > 0))
        self.assertEqual(self.frames, [['>']])

    def test_noCallback(self):
        """ Tests reading data when no callback method was specified (nothing should happen) """
        self.serialComms.dataCallback = self.serialComms._placeholderCallback
        self.serialComms.serial.feed('ABC\r\n')
        self.assertTrue(waitFor(lambda: self.serialComms.serial.in_waiting == 0))


class TestSerialException(unittest.TestCase):
    """ Tests SerialException handling """

    def setUp(self):
        smsmodem.serial_comms.serial = MockSerialPackage()
        self.serialComms = smsmodem.serial_comms.SerialComms('-- PORT IGNORED DURING TESTS --')
        self.serialComms.connect()

    def tearDown(self):
        self.serialComms.close()

    def test_readLoopException(self):
        """ Tests handling a SerialException from inside the read loop thread """
        self.assertTrue(self.serialComms.alive)
        errors = []

        def brokenRead(*args, **kwargs):
            raise MockSerialPackage.SerialException()
        self.serialComms.fatalErrorCallback = errors.append
        self.serialComms.serial.read = brokenRead

        self.assertTrue(waitFor(lambda: len(errors) > 0), 'Error callback not called on fatal error')
        self.assertFalse(self.serialComms.alive)
        self.assertIsInstance(errors[0], MockSerialPackage.SerialException)
        self.assertFalse(self.serialComms.serial.is_open)


class TestWrite(unittest.TestCase):
    """ Tests writing to the serial device """

    def setUp(self):
        smsmodem.serial_comms.serial = MockSerialPackage()
        self.serialComms = smsmodem.serial_comms.SerialComms('-- PORT IGNORED DURING TESTS --')

    def tearDown(self):
        self.serialComms.close()

    def test_write(self):
        """ Tests basic writing and draining """
        self.serialComms.connect()
        self.serialComms.write('AT\r')
        self.serialComms.write('caf\xe9' + chr(26))
        self.serialComms.drain()
        self.assertEqual(self.serialComms.serial.writeQueue, ['AT\r', 'caf\xe9\x1a'])
        self.assertEqual(self.serialComms.serial.flushCount, 1)

    def test_notConnected(self):
        """ Tests that writing to a port that was never opened fails """
        self.assertRaises(WriteFailure, self.serialComms.write, 'AT\r')
        self.assertRaises(DrainFailure, self.serialComms.drain)

    def test_writeFailure(self):
        """ Tests that serial port errors during writes are wrapped """
        self.serialComms.connect()
        self.serialComms.serial.writeError = MockSerialPackage.SerialException('device disconnected')
        try:
            self.serialComms.write('AT\r')
        except WriteFailure as e:
            self.assertIsInstance(e.cause, MockSerialPackage.SerialException)
            self.assertEqual(e.data, [])
        else:
            self.fail('WriteFailure not raised')
        self.serialComms.serial.writeError = OSError(5, 'Input/output error')
        self.assertRaises(WriteFailure, self.serialComms.write, 'AT\r')

    def test_drainFailure(self):
        self.serialComms.connect()
        self.serialComms.serial.flushError = MockSerialPackage.SerialException('device disconnected')
        self.assertRaises(DrainFailure, self.serialComms.drain)


if __name__ == "__main__":
    unittest.main()
