import signal

import pytest

from relay_core.domain.exceptions import StreamCancelled
from relay_core.infrastructure.interrupts import CancelToken, InterruptListener


def test_cancel_token():
    token = CancelToken()
    assert not token.cancelled
    token.cancel()
    assert token.cancelled
    token.reset()
    assert not token.cancelled


def test_listener_cancels_on_sigint_and_restores_handler():
    previous = signal.getsignal(signal.SIGINT)
    token = CancelToken()
    with pytest.raises(StreamCancelled):
        with InterruptListener().armed(token):
            signal.raise_signal(signal.SIGINT)
    assert token.cancelled
    assert signal.getsignal(signal.SIGINT) is previous
