# Copyright 2012-2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Encoding of request parameters."""

__all__ = ["encode_form_data", "flatten_params", "urlencode"]

from collections.abc import Mapping, Sequence
from urllib.parse import quote_plus


def urlencode(data):
    """A version of `urllib.urlencode` that isn't insane.

    This only cares that `data` is an iterable of iterables. Each sub-iterable
    must be of overall length 2, i.e. a name/value pair.
    """
    return "&".join(
        f"{quote_plus(name)}={quote_plus(value)}" for name, value in data
    )


def flatten_params(params):
    """Yield ``name, value`` pairs for `params`.

    Sequence values are expanded into one pair per item, which is how MAAS
    expects multiple-choice fields. `None` values and empty sequences are
    dropped. Numbers are rendered with `str`.
    """
    if isinstance(params, Mapping):
        params = params.items()
    for name, value in params:
        if value is None:
            continue
        elif isinstance(value, (bytes, str)):
            yield name, value
        elif isinstance(value, (bool, int, float)):
            yield name, str(value)
        elif isinstance(value, Sequence):
            for item in value:
                yield name, str(item)
        else:
            raise ValueError(
                f"{name!r} is neither a string nor a sequence: {value!r}"
            )


def encode_form_data(params):
    """Encode `params` as an HTTP form body.

    :return: (body, headers)
    """
    body = urlencode(flatten_params(params))
    headers = {
        "Content-Length": str(len(body)),
        "Content-Type": "application/x-www-form-urlencoded",
    }
    return body, headers
