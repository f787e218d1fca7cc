#!/usr/bin/env python

""" Low-level serial communications handling """

import threading, logging

import serial # pyserial: http://pyserial.sourceforge.net

from .exceptions import WriteFailure, DrainFailure


class SerialComms(object):
    """ Wraps all low-level serial communications (actual read/write operations)

    Lines read from the device are grouped into frames: a frame is delivered to the
    data callback function once no more characters are waiting to be read.
    """

    log = logging.getLogger('smsmodem.serial_comms.SerialComms')

    # End-of-line read terminator
    RX_EOL_SEQ = b'\r\n'
    # Prompt issued by the modem when it expects SMS message text
    PROMPT_SEQ = b'> '
    # Character encoding used on the serial line
    ENCODING = 'latin-1'
    # Timeout for serial port reads (in seconds); controls how quickly the read thread notices close()
    READ_TIMEOUT = 1

    def __init__(self, port, baudrate=9600, bytesize=8, parity='N', stopbits=1, rtscts=True, exclusive=True,
                 dataCallbackFunc=None, fatalErrorCallbackFunc=None, *args, **kwargs):
        """ Constructor

        :param port: The serial port device name (e.g. /dev/ttyUSB0 or COM3)
        :param exclusive: Open the port in exclusive access mode (POSIX only)
        :type exclusive: bool
        :param dataCallbackFunc: function to call with the lines of every frame read from the device
        :type dataCallbackFunc: func
        :param fatalErrorCallbackFunc: function to call if a fatal error occurs in the serial device reading thread
        :type fatalErrorCallbackFunc: func
        """
        self.alive = False
        self.serial = None
        self.port = port
        self.baudrate = baudrate
        self.bytesize = bytesize
        self.parity = parity
        self.stopbits = stopbits
        self.rtscts = rtscts
        self.exclusive = exclusive

        self._frame = [] # Lines of the frame currently being read

        self.dataCallback = dataCallbackFunc or self._placeholderCallback
        self.fatalErrorCallback = fatalErrorCallbackFunc or self._placeholderCallback

    def connect(self):
        """ Connects to the device and starts the read thread """
        self.serial = serial.Serial(port=self.port, baudrate=self.baudrate, bytesize=self.bytesize, parity=self.parity,
                                    stopbits=self.stopbits, rtscts=self.rtscts, exclusive=self.exclusive,
                                    timeout=self.READ_TIMEOUT)
        # Start read thread
        self.alive = True
        self.rxThread = threading.Thread(target=self._readLoop, name='smsmodem-rx')
        self.rxThread.daemon = True
        self.rxThread.start()

    def close(self):
        """ Stops the read thread, waits for it to exit cleanly, then closes the underlying serial port """
        self.alive = False
        if self.serial == None:
            return # never connected
        if threading.current_thread() is not self.rxThread:
            self.rxThread.join()
        self.serial.close()

    def _handleLineRead(self, line):
        if len(line) > 0:
            self._frame.append(line)
        if len(self._frame) > 0 and self.serial.in_waiting == 0:
            # No more chars on the way for this frame - pass it on
            frame = self._frame
            self._frame = []
            self.log.debug('frame: %s', frame)
            self.dataCallback(frame)

    def _placeholderCallback(self, *args, **kwargs):
        """ Placeholder callback function (does nothing) """

    def _readLoop(self):
        """ Read thread main loop

        Reads lines from the connected device
        """
        try:
            readTermLen = len(self.RX_EOL_SEQ)
            rxBuffer = bytearray()
            while self.alive:
                data = self.serial.read(1)
                if len(data) > 0: # check for timeout
                    rxBuffer.extend(data)
                    if rxBuffer.endswith(self.RX_EOL_SEQ):
                        # A line (or other logical segment) has been read
                        line = bytes(rxBuffer[:-readTermLen]).decode(self.ENCODING).rstrip('\r')
                        rxBuffer = bytearray()
                        self._handleLineRead(line)
                    elif rxBuffer == self.PROMPT_SEQ and self.serial.in_waiting == 0:
                        # The modem is waiting for input; the prompt is not followed by a line terminator
                        rxBuffer = bytearray()
                        self._handleLineRead('>')
        except serial.SerialException as e:
            self.alive = False
            try:
                self.serial.close()
            except Exception: #pragma: no cover
                pass
            # Notify the fatal error handler
            self.fatalErrorCallback(e)

    def write(self, data):
        """ Writes the specified string to the device

        :raise WriteFailure: if the serial port rejects the write
        """
        if self.serial == None:
            raise WriteFailure('serial port not open')
        try:
            self.serial.write(data.encode(self.ENCODING))
        except (serial.SerialException, OSError, ValueError) as e:
            raise WriteFailure(e)

    def drain(self):
        """ Waits until all written data has been transmitted

        :raise DrainFailure: if the serial port could not be flushed
        """
        if self.serial == None:
            raise DrainFailure('serial port not open')
        try:
            self.serial.flush()
        except (serial.SerialException, OSError, ValueError) as e:
            raise DrainFailure(e)
