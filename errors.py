class HuffmanError(ValueError): # base for every codec failure
    pass


class EmptyInputError(HuffmanError): # no symbols -> no tree
    pass


class MissingCodewordError(HuffmanError):
    def __init__(self, symbol):
        super().__init__(f"No codeword for symbol {symbol}")
        self.symbol = symbol


class MissingTailError(HuffmanError):
    pass


class CorruptPayloadError(HuffmanError):
    def __init__(self, message, dangling_bits = 0):
        super().__init__(message)
        self.dangling_bits = dangling_bits # bits left unmatched when decoding stopped
