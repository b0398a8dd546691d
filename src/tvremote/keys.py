from enum import Enum


class KeyEvent(Enum):
    """
    The remote control keys that can be sent to a display device.
    The value is the key code understood by the device's input system.
    """
    DPAD_UP = 19
    DPAD_DOWN = 20
    DPAD_LEFT = 21
    DPAD_RIGHT = 22
    DPAD_CENTER = 23
    HOME = 3
    BACK = 4
    VOLUME_UP = 24
    VOLUME_DOWN = 25

    @property
    def code(self) -> int:
        return self.value

    @property
    def description(self) -> str:
        return self.name

    @classmethod
    def from_code(cls, code):
        """
        Looks up a key by its code.
        :return: the KeyEvent with the given code, or None if no key has that code.

        >>> KeyEvent.from_code(3)
        <KeyEvent.HOME: 3>
        >>> KeyEvent.from_code(99) is None
        True
        """
        try:
            return cls(code)
        except ValueError:
            return None
