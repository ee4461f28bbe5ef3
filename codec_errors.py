class HuffmanError(Exception): # base class for every codec failure
    pass


class InvalidArgument(HuffmanError, ValueError):
    pass


class EmptyQueue(HuffmanError, IndexError):
    pass


class CodecNotBuilt(HuffmanError, RuntimeError):
    def __init__(self, message="no Huffman tree has been built yet"):
        super().__init__(message)


class DuplicateSymbol(HuffmanError, ValueError):
    def __init__(self, symbol):
        self.symbol = symbol
        super().__init__(f"Duplicate symbol in frequency table: {symbol!r}")


class MissingSymbol(HuffmanError, LookupError):
    def __init__(self, symbol):
        self.symbol = symbol
        super().__init__(f"Missing symbol in frequency table: {symbol!r}")


class MalformedInput(HuffmanError, ValueError):
    def __init__(self, position: int, char: str, message=None):
        self.position = position
        self.char = char
        super().__init__(message or f"Invalid bit {char!r} at position {position}")


class TruncatedCode(HuffmanError, ValueError):
    def __init__(self, bit_count: int, message=None):
        self.bit_count = bit_count
        super().__init__(message or f"Bitstring ends in the middle of a code after {bit_count} bits")
