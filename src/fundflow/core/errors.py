class TracerError(Exception):
    pass


class InvalidInputError(TracerError):
    pass


class FetchError(TracerError):
    pass


class RateLimitError(FetchError):
    pass


class NotFoundError(TracerError):
    pass


class UnsupportedFormatError(TracerError):
    pass
