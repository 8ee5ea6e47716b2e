from weighline.domain.models import SensorSnapshot, ToleranceWindow, WeightReading
from weighline.services.feedback import ClassifyingObserver


class RecordingListener:
    def __init__(self):
        self.events = []

    def on_classified(self, validity):
        self.events.append(validity)


WINDOW = ToleranceWindow(target_weight=250, min_weight=245, max_weight=255, unit="g")


def snap(value, status="stable"):
    return SensorSnapshot(weight=WeightReading(value, status))


def test_notifies_only_on_validity_change():
    listener = RecordingListener()
    obs = ClassifyingObserver(listener, WINDOW)

    for s in [snap(100, "unstable"), snap(250), snap(251), snap(260), snap(260), snap(0, "error")]:
        obs(s)

    assert listener.events == ["ok", "overweight", None]
    assert obs.last.validity is None


def test_rebinding_product_rejudges_held_weight():
    listener = RecordingListener()
    obs = ClassifyingObserver(listener, WINDOW)
    obs(snap(250))

    obs.bind(ToleranceWindow(target_weight=0.3, min_weight=0.29, max_weight=0.31, unit="kg"))
    obs(snap(250))

    assert listener.events == ["ok", "underweight"]
    assert obs.line_unit == "g"


def test_line_unit_override():
    listener = RecordingListener()
    obs = ClassifyingObserver(listener, WINDOW, line_unit="kg")
    obs(snap(0.25))
    assert listener.events == ["ok"]
    assert obs.last.validation_value == 250.0


def test_precision_is_per_binding():
    obs = ClassifyingObserver(RecordingListener(), line_unit="g", decimal_precision=1)
    assert obs.decimal_precision == 1

    obs.bind(WINDOW, line_unit="kg", decimal_precision=3)
    assert (obs.line_unit, obs.decimal_precision) == ("kg", 3)

    obs.bind(None)
    assert obs.decimal_precision == 1
    assert obs.line_unit == "kg"
