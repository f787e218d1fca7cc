#!/usr/bin/env python

""" python-smsmodem installation script """

import sys
from setuptools import setup, Command

with open('requirements.txt') as f:
    requires = [line.strip() for line in f if line.strip()]

test_command = [sys.executable, '-m', 'unittest', 'discover', '-s', 'test']
coverage_command = ['coverage', 'run', '--source', 'smsmodem', '-m', 'unittest', 'discover', '-s', 'test']

VERSION = '0.1'

class RunUnitTests(Command):
    """ run unit tests """

    user_options = []
    description = __doc__[1:]

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        import subprocess
        errno = subprocess.call(test_command)
        raise SystemExit(errno)

class RunUnitTestsCoverage(Command):
    """ run unit tests and report on code coverage using the 'coverage' tool """

    user_options = []
    description = __doc__[1:]

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        import subprocess
        errno = subprocess.call(coverage_command)
        if errno == 0:
            subprocess.call(['coverage', 'report'])
        raise SystemExit(errno)

setup(name='python-smsmodem',
      version=VERSION,
      description='Control an attached GSM modem through a queue of AT commands: send/receive SMS messages, query the SIM and network, etc',
      license='LGPLv3+',

      long_description="""\
python-smsmodem is a module that allows easy control of a GSM modem attached
to the system through a queue of AT commands.

Its features include:
- every AT command is queued and written one at a time; replies are matched
  to the command awaiting them using a regular expression
- every operation returns a future that resolves to the reply (and a parsed
  result where applicable) or fails with a descriptive exception
- per-command timeouts and pacing between commands
- +CME ERROR and +CMS ERROR result codes are wrapped into Python exceptions
- unsolicited notifications (e.g. new SMS messages) are passed to callbacks
- sending, reading, listing and deleting SMS messages (text mode)

Bundled utilities:
- sendsms.py: a simple command line script to send SMS messages
""",

      classifiers=['Development Status :: 4 - Beta',
                   'Environment :: Console',
                   'Intended Audience :: Developers',
                   'Intended Audience :: Telecommunications Industry',
                   'License :: OSI Approved :: GNU Lesser General Public License v3 or later (LGPLv3+)',
                   'Operating System :: OS Independent',
                   'Programming Language :: Python :: 3',
                   'Topic :: Communications :: Telephony',
                   'Topic :: Software Development :: Libraries :: Python Modules',
                   'Topic :: System :: Hardware',
                   'Topic :: Terminals :: Serial'],
      keywords = ['gsm', 'sms', 'modem', 'at', 'serial', 'queue'],

      packages=['smsmodem'],
      scripts=['tools/sendsms.py'],
      python_requires='>=3.6',
      install_requires=requires,
      extras_require={'docs': ['sphinx'],
                      'test': ['coverage']},
      cmdclass = {'test': RunUnitTests,
                  'coverage': RunUnitTestsCoverage})
