"""Exceptions raised by the translocale tooling."""


class TranslocaleError(Exception):
    """Base class for all translocale errors."""


class FatalFetchError(TranslocaleError):
    """The translations document could not be fetched or decoded. Aborts the run."""


class GeneratorFailedError(TranslocaleError):
    """The external localization generator exited with a non-zero status."""


class MissingGeneratedOutputError(TranslocaleError):
    """The external localization generator did not produce the expected files."""
