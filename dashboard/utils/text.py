"""
Text checks for incoming payloads.

JSON can carry lone UTF-16 surrogates ("\\ud800") that Python decodes into a
str but that cannot be written back out as UTF-8. Anything stored on a Bug,
in the ledger or in the artifact store must encode, otherwise the read API
can no longer render it.
"""
from typing import Any, Iterator, Mapping

from dashboard.core.errors import InvalidInputError


def _strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _strings(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _strings(item)


def require_utf8(fields: Mapping[str, Any]) -> None:
    """
    Raise InvalidInputError if any string in `fields` does not encode as UTF-8.

    Strings nested in lists and dicts (e.g. a model_dump()) are checked too.
    The offending text is not echoed back in the message.
    """
    for name, value in fields.items():
        for text in _strings(value):
            try:
                text.encode("utf-8")
            except UnicodeEncodeError as exc:
                raise InvalidInputError(
                    f"'{name}' is not valid UTF-8 text (position {exc.start})"
                ) from None
