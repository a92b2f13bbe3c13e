class ApisnipError(Exception):
    """Base class for every error raised by apisnip."""


class ParseError(ApisnipError):
    """The input could not be turned into an OpenAPI document."""


class EncodeError(ApisnipError):
    """A trimmed document could not be serialized."""


class UnsupportedFormat(ApisnipError):
    """The file extension names neither a JSON nor a YAML document."""


class FetchError(ApisnipError):
    """A remote document could not be retrieved."""


class ConfigError(ApisnipError):
    """The configuration file is unreadable or holds invalid values."""


class ReferenceProblem(ApisnipError):
    """
    Base class for problems with a single reference string.

    Args:
        ref (str): The offending reference
        reason (str): Human readable explanation
    """

    label = 'reference'

    def __init__(self, ref, reason):
        super().__init__(f"{reason}: {ref!r}")
        self.ref = ref
        self.reason = reason


class MalformedReference(ReferenceProblem):
    label = 'malformed'


class UnsupportedReference(ReferenceProblem):
    label = 'unsupported'


class DanglingReference(ReferenceProblem):
    label = 'dangling'
