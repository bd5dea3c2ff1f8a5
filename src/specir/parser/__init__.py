"""API description parser -- load a document and resolve it into the IR.

This sub-package turns a raw Swagger 2 or OpenAPI 3 document (JSON or YAML,
local file or remote URL) into a :class:`~specir.models.Client` that an
external renderer can consume.

Typical usage::

    from specir.parser import load_spec, extract_client

    document = load_spec("https://petstore.swagger.io/v2/swagger.json")
    client = extract_client(document)

Sub-modules:

* :mod:`~specir.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection.
* :mod:`~specir.parser.dialect` -- Swagger 2 / OpenAPI 3 descriptors and
  version marker detection.
* :mod:`~specir.parser.resolver` -- on-demand ``$ref`` lookup.
* :mod:`~specir.parser.types` and :mod:`~specir.parser.naming` -- type token
  parsing and identifier sanitisation.
* :mod:`~specir.parser.model_builder` and :mod:`~specir.parser.enums` --
  schemas to Models, compositions included.
* :mod:`~specir.parser.operations` -- parameters, bodies, responses.
* :mod:`~specir.parser.services` -- service grouping and post-processing.
* :mod:`~specir.parser.extractor` -- the :func:`extract_client` entry point.
"""

from specir.parser.dialect import detect_dialect
from specir.parser.extractor import extract_client
from specir.parser.loader import load_spec

__all__ = ["load_spec", "detect_dialect", "extract_client"]
