class ExitValidationError(Exception):
    """Base class for every failure raised while validating or recombining exits."""


class InvalidInputError(ExitValidationError, ValueError):
    pass


class OutOfRangeError(InvalidInputError):
    pass


class UnsupportedNetworkError(ExitValidationError):
    pass


class NotFoundError(ExitValidationError):
    pass


class GenesisRootNotFoundError(NotFoundError):
    pass


class ExitConflictError(ExitValidationError):
    """A submission contradicts an already accepted exit. Never resolved automatically."""


class IndexMismatchError(ExitConflictError):
    pass


class StaleEpochError(ExitConflictError):
    pass


class SignatureConflictError(ExitConflictError):
    pass


class InvalidPartialSignatureError(ExitValidationError):
    pass


class InvalidPayloadSignatureError(ExitValidationError):
    pass


class SignatureVerificationError(ExitValidationError):
    pass


class InvalidIdentityError(ExitValidationError):
    pass


class InvalidSignatureFormatError(InvalidInputError):
    pass


class InvalidSignatureLengthError(InvalidInputError):
    pass


class NoDataError(ExitValidationError):
    pass


class NoSignaturesError(ExitValidationError):
    pass


class NetworkError(ExitValidationError):
    pass
