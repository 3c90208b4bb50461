import gc

from devcap.utils.listeners import ListenerRegistry


class Recorder:
    def __init__(self):
        self.calls = []

    def on_change(self, *args):
        self.calls.append(args)


def test_bound_methods_are_held_weakly():
    registry = ListenerRegistry("test")
    recorder = Recorder()
    registry.add(recorder.on_change)
    registry.add(recorder.on_change)

    registry.notify("snapshot")
    assert recorder.calls == [("snapshot",)]
    assert len(registry) == 1

    del recorder
    gc.collect()
    registry.notify("again")
    assert len(registry) == 0


def test_failing_listener_does_not_block_others():
    registry = ListenerRegistry("test")
    recorder = Recorder()

    def broken(*args):
        raise RuntimeError("listener bug")

    registry.add(broken)
    registry.add(recorder.on_change)
    registry.notify()

    assert recorder.calls == [()]


def test_remove_reports_whether_listener_was_registered():
    registry = ListenerRegistry("test")
    recorder = Recorder()
    registry.add(recorder.on_change)

    assert registry.remove(recorder.on_change) is True
    assert registry.remove(recorder.on_change) is False
