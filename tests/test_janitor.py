import threading

from statline.janitor import JanitorTimer, janitor_pass
from statline.pipeline import ingest


def _cpu(value, stamp):
    return {"cpu": {"usage": value}, "lastUpdate": {"cpu": stamp}}


def test_window_scenario(state):
    for i, t in enumerate((0, 300, 700, 1200)):
        ingest(state, _cpu(i, t), now=t)
    cpu = state.registry.get("cpu").track(0)

    assert janitor_pass(state, now=1200) == 1
    assert cpu.timestamps() == [300, 700, 1200]

    assert janitor_pass(state, now=1800) == 2
    assert cpu.timestamps() == [1200]


def test_pass_advances_every_chart_window(state):
    ingest(state, {"net": [{"interface": "eth0", "downSpeed": 1}], "lastUpdate": {"net": 1}}, now=0)
    janitor_pass(state, now=5000)
    assert state.window_start == 4000
    assert {e.window_start for e in state.registry} == {4000}


def test_pass_after_ingest_keeps_fresh_sample(state):
    ingest(state, _cpu(5, 1), now=900)
    janitor_pass(state, now=900)
    assert state.registry.get("cpu").track(0).timestamps() == [900]


def test_ingest_after_pass_does_not_resurrect(state):
    ingest(state, _cpu(5, 1), now=0)
    janitor_pass(state, now=2000)
    ingest(state, _cpu(5, 1), now=2001)
    assert len(state.registry.get("cpu").track(0)) == 0


def test_timer_keeps_firing_after_errors():
    calls = []
    done = threading.Event()

    def fire():
        calls.append(1)
        if len(calls) >= 3:
            done.set()
        raise RuntimeError("bad pass")

    timer = JanitorTimer(0.01, fire)
    timer.start()
    try:
        assert done.wait(2)
    finally:
        timer.stop()
        timer.join(1)
    assert not timer._thread.is_alive()
    assert len(calls) >= 3
