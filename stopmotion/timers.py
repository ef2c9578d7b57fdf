# timers.py
# Thin QTimer wrapper so timed components can be driven by a fake clock in tests

from PyQt5 import QtCore


class QtTimer:
    def __init__(self, callback, single_shot=False):
        self._timer = QtCore.QTimer()
        self._timer.setSingleShot(single_shot)
        self._timer.timeout.connect(callback)

    def start(self, interval_ms):
        self._timer.start(int(interval_ms))

    def stop(self):
        self._timer.stop()

    def is_active(self):
        return self._timer.isActive()

    def interval(self):
        return self._timer.interval()

    def set_interval(self, interval_ms):
        self._timer.setInterval(int(interval_ms))


def qt_timer_factory(callback, single_shot=False):
    return QtTimer(callback, single_shot=single_shot)
