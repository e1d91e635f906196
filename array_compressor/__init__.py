from array_compressor.modules.Alphabet import Alphabet, get_alphabet
from array_compressor.modules.CodecDefaults import CodecDefaults, load_config
from array_compressor.modules.CodecErrors import CodecError, InvalidEncoding, MalformedPayload, ValueOutOfRange
from array_compressor.modules.CodecObservabilityTracker import CodecObservabilityTracker
from array_compressor.modules.EncoderDecoder import EncoderDecoderManager
