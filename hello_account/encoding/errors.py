class EncodingError(Exception):
    """ A general encoding error. """


class SerializeError(EncodingError):
    """ An error during serialization of a record or an instruction. """


class DeserializeError(EncodingError):
    """ An error during deserialization of a record or an instruction. """


class SignError(EncodingError):
    """ An error during an unsuccessful attempt to sign a request. """


class VerifyError(EncodingError):
    """ An error due to a request signature that cannot be verified. """
