"""
Exception types raised while building and running the BBTXT data pipeline.
Every fatal error carries enough context (path, line, index) to locate the
offending record.
"""


class BBTXTError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(BBTXTError, ValueError):
    """A required configuration field is missing or invalid."""


class CorruptAnnotation(BBTXTError, ValueError):
    """
    A line in the annotation file does not have the expected 7 fields,
    or one of its numeric fields cannot be parsed.
    """

    def __init__(self, source, lineno, line, reason='expected 7 space-separated fields'):
        self.source = str(source)
        self.lineno = lineno
        self.line = line
        super().__init__(f"Line {lineno} of '{self.source}' corrupted ({reason}): '{line}'")


class EmptyDataset(BBTXTError, ValueError):
    """The annotation file did not describe a single image."""

    def __init__(self, source):
        self.source = str(source)
        super().__init__(f"The given BBTXT file is empty: '{self.source}'")


class ImageDecodeError(BBTXTError, ValueError):
    """An image file exists but could not be decoded into a 3-channel buffer."""

    def __init__(self, path, index=None):
        self.path = str(path)
        self.index = index
        where = f" (dataset index {index})" if index is not None else ''
        super().__init__(f"Could not decode image '{self.path}'{where}")
