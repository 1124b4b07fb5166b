"""
Formula name extraction from raw URLs.
"""

import re
from urllib.parse import urlsplit

from ..domain import ExtractedName, is_valid_formula_name
from ..exit_codes import UnresolvableSourceError

FORMULA_PATH_PATTERN = re.compile(r'/Formula/([^/]+)\.rb$')


def extract_formula_name(url: str, extension: str = ".rb") -> ExtractedName:
    """
    Derive a formula name from a URL pointing at a formula file.

    Only the URL path is considered. A path ending in `/Formula/<name>.rb`
    is authoritative. Otherwise the last path segment is used with the
    extension stripped; if it has no such extension it is used as-is and
    marked unreliable. Names are taken verbatim, without percent-decoding.

    Raises:
        UnresolvableSourceError: if the path has no usable last segment
    """
    path = urlsplit(url).path

    match = FORMULA_PATH_PATTERN.search(path)
    if match:
        extracted = ExtractedName(name=match.group(1))
    else:
        filename = path.rstrip('/').rsplit('/', 1)[-1]
        if filename.endswith(extension) and len(filename) > len(extension):
            extracted = ExtractedName(name=filename[:-len(extension)])
        else:
            extracted = ExtractedName(name=filename, reliable=False)

    if not is_valid_formula_name(extracted.name):
        raise UnresolvableSourceError()
    return extracted
