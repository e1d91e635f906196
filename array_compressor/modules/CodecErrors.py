from array_compressor.util.logger import Logger

logger = Logger()
logger.set_logger_id('codec')


class CodecError(Exception):
    """Base class for every error raised by the codec."""


class InvalidEncoding(CodecError, ValueError):
    def __init__(self, marker, *args):
        self.marker = marker
        logger.error(f"InvalidEncoding: unknown method marker {marker!r}")
        super().__init__(f"Invalid encoding method: {marker!r}", *args)


class MalformedPayload(CodecError, ValueError):
    def __init__(self, marker, reason, *args):
        self.marker = marker
        self.reason = reason
        logger.error(f"MalformedPayload: [{marker}] {reason}")
        super().__init__(f"Malformed '{marker}' payload: {reason}", *args)


class ValueOutOfRange(CodecError, ValueError):
    def __init__(self, value, min_value, max_value, *args):
        self.value = value
        self.min_value = min_value
        self.max_value = max_value
        logger.error(f"ValueOutOfRange: {value!r} not an integer in [{min_value}, {max_value}]")
        super().__init__(f"Value {value!r} is not an integer in [{min_value}, {max_value}]", *args)
