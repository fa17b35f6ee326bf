from typing import Callable


def subscribe(signal, listener: Callable) -> Callable[[], None]:
    """
    Connect ``listener`` to a bound pyqtSignal.

    Returns:
        A callable that disconnects the listener; calling it again is a no-op
    """
    signal.connect(listener)
    connected = [True]

    def unsubscribe() -> None:
        if connected[0]:
            connected[0] = False
            signal.disconnect(listener)

    return unsubscribe
