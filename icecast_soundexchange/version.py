from importlib import metadata

__version__ = metadata.version("icecast-soundexchange")
__version_info__ = tuple(int(digit) for digit in __version__.split("."))
