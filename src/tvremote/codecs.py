"""
Encodes key events as HID reports.

Each key belongs to one of two usage pages. Keyboard page keys are sent as an 8 byte boot keyboard
report, [modifier, reserved, key1..key6], with the usage in key1. Consumer page keys are sent as a
2 byte report holding the usage in little-endian order. Releasing a key is signalled by an all-zero
report of the same length as the press.
"""
from collections import namedtuple
import struct

from tvremote.errors import UnsupportedKeyEventError
from tvremote.keys import KeyEvent

USAGE_PAGE_KEYBOARD = 0x07
USAGE_PAGE_CONSUMER = 0x0C

# keyboard page usages
KEY_ENTER = 0x28
KEY_ESCAPE = 0x29
KEY_RIGHT = 0x4F
KEY_LEFT = 0x50
KEY_DOWN = 0x51
KEY_UP = 0x52

# consumer page usages
CONSUMER_VOLUME_INCREMENT = 0xE9
CONSUMER_VOLUME_DECREMENT = 0xEA
CONSUMER_HOME = 0x223

KEYBOARD_REPORT_LENGTH = 8
CONSUMER_REPORT_LENGTH = 2

Usage = namedtuple('Usage', ['page', 'code'])

usages = {
    KeyEvent.DPAD_UP: Usage(USAGE_PAGE_KEYBOARD, KEY_UP),
    KeyEvent.DPAD_DOWN: Usage(USAGE_PAGE_KEYBOARD, KEY_DOWN),
    KeyEvent.DPAD_LEFT: Usage(USAGE_PAGE_KEYBOARD, KEY_LEFT),
    KeyEvent.DPAD_RIGHT: Usage(USAGE_PAGE_KEYBOARD, KEY_RIGHT),
    KeyEvent.DPAD_CENTER: Usage(USAGE_PAGE_KEYBOARD, KEY_ENTER),
    KeyEvent.BACK: Usage(USAGE_PAGE_KEYBOARD, KEY_ESCAPE),
    KeyEvent.HOME: Usage(USAGE_PAGE_CONSUMER, CONSUMER_HOME),
    KeyEvent.VOLUME_UP: Usage(USAGE_PAGE_CONSUMER, CONSUMER_VOLUME_INCREMENT),
    KeyEvent.VOLUME_DOWN: Usage(USAGE_PAGE_CONSUMER, CONSUMER_VOLUME_DECREMENT),
}

report_lengths = {
    USAGE_PAGE_KEYBOARD: KEYBOARD_REPORT_LENGTH,
    USAGE_PAGE_CONSUMER: CONSUMER_REPORT_LENGTH,
}

KeyReport = namedtuple('KeyReport', ['usage_page', 'press', 'release'])


def usage_for(key) -> Usage:
    """
    Retrieves the usage page and usage code for a key.
    Raises UnsupportedKeyEventError for anything that is not a mapped KeyEvent.
    """
    usage = usages.get(key) if isinstance(key, KeyEvent) else None
    if usage is None:
        raise UnsupportedKeyEventError("Unsupported key event: %s" % (key,))
    return usage


def keyboard_report(usage_code) -> bytes:
    return struct.pack('<BB6B', 0, 0, usage_code, 0, 0, 0, 0, 0)


def consumer_report(usage_code) -> bytes:
    return struct.pack('<H', usage_code)


def release_report(usage_page) -> bytes:
    return bytes(report_lengths[usage_page])


def encode(key) -> KeyReport:
    """
    Encodes a key as the press report and the matching release report.

    >>> encode(KeyEvent.DPAD_UP).press
    b'\\x00\\x00R\\x00\\x00\\x00\\x00\\x00'
    >>> encode(KeyEvent.HOME).press
    b'#\\x02'
    """
    usage = usage_for(key)
    if usage.page == USAGE_PAGE_KEYBOARD:
        press = keyboard_report(usage.code)
    else:
        press = consumer_report(usage.code)
    return KeyReport(usage.page, press, release_report(usage.page))
