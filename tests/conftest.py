"""Shared test fixtures."""

import pytest

from pycomp2iter import PythonSublanguage, TokenStream, tokenize


@pytest.fixture
def sublanguage():
    return PythonSublanguage()


@pytest.fixture
def stream_of():
    def make(text):
        return TokenStream(tokenize(text))

    return make


@pytest.fixture
def pairs():
    return [(4, 2), (5, 0), (6, 3)]


class CallRecorder:
    """Callable that records its arguments and answers from a function."""

    def __init__(self, func):
        self._func = func
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args[0] if len(args) == 1 else args)
        return self._func(*args)


@pytest.fixture
def recorder():
    return CallRecorder
