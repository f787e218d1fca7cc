""" Lookup tables for +CME ERROR and +CMS ERROR result codes

Codes follow 3GPP TS 27.007 (CME) and TS 27.005 (CMS); a handful of
widely-used vendor extensions are included as well.
"""

import re

# Used for parsing AT command errors
CM_ERROR_REGEX = re.compile(r'^\+(CM[ES]) ERROR:\s*(\d+)')

# Message used when an error code is not present in the tables
UNKNOWN_ERROR_MESSAGE = 'Unexpected data'

CME_ERRORS = {
    '0': 'Phone failure',
    '1': 'No connection to phone',
    '2': 'Phone adaptor link reserved',
    '3': 'Operation not allowed',
    '4': 'Operation not supported',
    '5': 'PH-SIM PIN required',
    '6': 'PH-FSIM PIN required',
    '7': 'PH-FSIM PUK required',
    '10': 'SIM not inserted',
    '11': 'SIM PIN required',
    '12': 'SIM PUK required',
    '13': 'SIM failure',
    '14': 'SIM busy',
    '15': 'SIM wrong',
    '16': 'Incorrect password',
    '17': 'SIM PIN2 required',
    '18': 'SIM PUK2 required',
    '20': 'Memory full',
    '21': 'Invalid index',
    '22': 'Not found',
    '23': 'Memory failure',
    '24': 'Text string too long',
    '25': 'Invalid characters in text string',
    '26': 'Dial string too long',
    '27': 'Invalid characters in dial string',
    '30': 'No network service',
    '31': 'Network timeout',
    '32': 'Network not allowed - emergency calls only',
    '40': 'Network personalization PIN required',
    '41': 'Network personalization PUK required',
    '42': 'Network subset personalization PIN required',
    '43': 'Network subset personalization PUK required',
    '44': 'Service provider personalization PIN required',
    '45': 'Service provider personalization PUK required',
    '46': 'Corporate personalization PIN required',
    '47': 'Corporate personalization PUK required',
    '100': 'Unknown error',
    '103': 'Illegal MS',
    '106': 'Illegal ME',
    '107': 'GPRS services not allowed',
    '111': 'PLMN not allowed',
    '112': 'Location area not allowed',
    '113': 'Roaming not allowed in this location area',
    '132': 'Service option not supported',
    '133': 'Requested service option not subscribed',
    '134': 'Service option temporarily out of order',
    '148': 'Unspecified GPRS error',
    '149': 'PDP authentication failure',
    '150': 'Invalid mobile class',
    '257': 'Network rejected request',
    '258': 'Retry operation',
    '259': 'Invalid deflected to number',
    '260': 'Deflected to own number',
    '261': 'Unknown subscriber',
    '262': 'Service not available',
    '263': 'Unknown class specified',
    '264': 'Unknown network message',
    '273': 'Minimum TFTs per PDP address violated',
    '274': 'Duplicate TFT eval prec index',
    '275': 'Invalid TFT param combination',
}

CMS_ERRORS = {
    '1': 'Unassigned (unallocated) number',
    '8': 'Operator determined barring',
    '10': 'Call barred',
    '21': 'Short message transfer rejected',
    '27': 'Destination out of service',
    '28': 'Unidentified subscriber',
    '29': 'Facility rejected',
    '30': 'Unknown subscriber',
    '38': 'Network out of order',
    '41': 'Temporary failure',
    '42': 'Congestion',
    '47': 'Resources unavailable, unspecified',
    '50': 'Requested facility not subscribed',
    '69': 'Requested facility not implemented',
    '81': 'Invalid short message transfer reference value',
    '95': 'Invalid message, unspecified',
    '96': 'Invalid mandatory information',
    '97': 'Message type non-existent or not implemented',
    '98': 'Message not compatible with short message protocol state',
    '99': 'Information element non-existent or not implemented',
    '111': 'Protocol error, unspecified',
    '127': 'Interworking, unspecified',
    '128': 'Telematic interworking not supported',
    '129': 'Short message type 0 not supported',
    '130': 'Cannot replace short message',
    '143': 'Unspecified TP-PID error',
    '144': 'Data coding scheme (alphabet) not supported',
    '145': 'Message class not supported',
    '159': 'Unspecified TP-DCS error',
    '160': 'Command cannot be actioned',
    '161': 'Command unsupported',
    '175': 'Unspecified TP-Command error',
    '176': 'TPDU not supported',
    '192': 'SC busy',
    '193': 'No SC subscription',
    '194': 'SC system failure',
    '195': 'Invalid SME address',
    '196': 'Destination SME barred',
    '197': 'SM rejected - duplicate SM',
    '198': 'TP-VPF not supported',
    '199': 'TP-VP not supported',
    '208': 'SIM SMS storage full',
    '209': 'No SMS storage capability in SIM',
    '210': 'Error in MS',
    '211': 'Memory capacity exceeded',
    '212': 'SIM application toolkit busy',
    '213': 'SIM data download error',
    '255': 'Unspecified error cause',
    '300': 'ME failure',
    '301': 'SMS service of ME reserved',
    '302': 'Operation not allowed',
    '303': 'Operation not supported',
    '304': 'Invalid PDU mode parameter',
    '305': 'Invalid text mode parameter',
    '310': 'SIM not inserted',
    '311': 'SIM PIN required',
    '312': 'PH-SIM PIN required',
    '313': 'SIM failure',
    '314': 'SIM busy',
    '315': 'SIM wrong',
    '316': 'SIM PUK required',
    '317': 'SIM PIN2 required',
    '318': 'SIM PUK2 required',
    '320': 'Memory failure',
    '321': 'Invalid memory index',
    '322': 'Memory full',
    '330': 'SMSC address unknown',
    '331': 'No network service',
    '332': 'Network timeout',
    '340': 'No +CNMA acknowledgement expected',
    '500': 'Unknown error',
    '512': 'MM establishment failure',
    '513': 'Lower layer failure',
    '514': 'CP error',
    '515': 'Please wait, init or command processing in progress',
    '517': 'SIM Toolkit facility not supported',
    '518': 'SIM Toolkit indication not received',
    '528': 'Location update failure - emergency calls only',
    '529': 'PLMN selection failure - emergency calls only',
    '531': 'SMS not sent: the <da> is not in FDN phonebook, and FDN lock is enabled',
    '538': 'Invalid parameter',
}

_TABLES = {'CME': CME_ERRORS, 'CMS': CMS_ERRORS}


def errorMessage(type, code):
    """ :return: The human-readable message for the specified error type ("CME" or "CMS") and code """
    table = _TABLES.get(type, {})
    return table.get(str(code), UNKNOWN_ERROR_MESSAGE)


def classifyError(line):
    """ Checks whether the specified line is a +CME ERROR or +CMS ERROR result code

    :param line: A single line read from the modem
    :type line: str

    :return: (type, code, message) tuple, e.g. ('CME', '11', 'SIM PIN required'), or None if the line is not a vendor error
    :rtype: tuple
    """
    match = CM_ERROR_REGEX.match(line.strip())
    if match:
        errorType, code = match.groups()
        return errorType, code, errorMessage(errorType, code)
    return None
