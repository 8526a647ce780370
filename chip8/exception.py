class Chip8Exception(Exception):
    """
    Base class for all errors raised by the emulator.
    """


class UnknownOpCodeException(Chip8Exception):
    """
    A class to raise unknown op code exceptions. Only raised when the CPU
    runs in strict mode; otherwise unknown op codes are skipped.
    """
    def __init__(self, op_code):
        Chip8Exception.__init__(self, "Unknown op-code: {:04X}".format(op_code))
        self.op_code = op_code


class RomLoadException(Chip8Exception):
    """
    Raised when a ROM file cannot be opened or read.
    """
    def __init__(self, filename, reason):
        Chip8Exception.__init__(self, "Unable to load ROM {}: {}".format(filename, reason))
        self.filename = filename
