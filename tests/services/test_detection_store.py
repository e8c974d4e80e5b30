"""Detection 상태 머신 테스트"""

import pytest
from pydantic import ValidationError

from src.schemas.detection import Detection
from src.services.detection_store import (
    DetectionFailed,
    DetectionRequested,
    DetectionState,
    DetectionStore,
    DetectionSucceeded,
    SelectedSource,
    SourceSelected,
    transition,
)

CAT = Detection(label="cat", confidence=0.93, box=(10, 10, 50, 50))
DOG = Detection(label="dog", confidence=0.41, box=(60, 10, 90, 40))


def _source(name: str = "a.jpg") -> SelectedSource:
    return SelectedSource(
        content=b"img",
        content_type="image/jpeg",
        filename=name,
        data_url="data:image/jpeg;base64,aW1n",
        natural_width=100,
        natural_height=100,
    )


def _success_store() -> DetectionStore:
    store = DetectionStore()
    store.dispatch(SourceSelected(source=_source()))
    state = store.dispatch(DetectionRequested())
    store.dispatch(DetectionSucceeded(generation=state.generation, detections=[CAT, DOG]))
    return store


class TestTransition:
    def test_initial_state_is_idle(self) -> None:
        state = DetectionState()
        assert state.status == "idle"
        assert state.detections == ()

    def test_request_without_source_is_noop(self) -> None:
        state = DetectionState()

        assert transition(state, DetectionRequested()) is state

    def test_request_with_source_moves_to_loading(self) -> None:
        state = transition(DetectionState(), SourceSelected(source=_source()))

        state = transition(state, DetectionRequested())

        assert state.status == "loading"
        assert state.detections == ()

    def test_request_while_loading_is_noop(self) -> None:
        state = transition(DetectionState(), SourceSelected(source=_source()))
        loading = transition(state, DetectionRequested())

        assert transition(loading, DetectionRequested()) is loading

    def test_success_populates_detections(self) -> None:
        state = _success_store().state

        assert state.status == "success"
        assert state.detections == (CAT, DOG)
        assert state.error is None

    def test_failure_clears_detections_and_keeps_message(self) -> None:
        state = transition(DetectionState(), SourceSelected(source=_source()))
        loading = transition(state, DetectionRequested())

        failed = transition(
            loading, DetectionFailed(generation=loading.generation, message="Prediction failed")
        )

        assert failed.status == "error"
        assert failed.detections == ()
        assert failed.error == "Prediction failed"
        assert failed.source == loading.source

    def test_select_source_from_success_resets_to_idle(self) -> None:
        state = _success_store().state

        state = transition(state, SourceSelected(source=_source("b.jpg")))

        assert state.status == "idle"
        assert state.detections == ()
        assert state.source is not None
        assert state.source.filename == "b.jpg"

    def test_retrigger_from_success_clears_detections_immediately(self) -> None:
        state = _success_store().state

        state = transition(state, DetectionRequested())

        assert state.status == "loading"
        assert state.detections == ()

    def test_retrigger_from_error(self) -> None:
        state = transition(DetectionState(), SourceSelected(source=_source()))
        loading = transition(state, DetectionRequested())
        failed = transition(loading, DetectionFailed(generation=loading.generation, message="x"))

        retried = transition(failed, DetectionRequested())

        assert retried.status == "loading"
        assert retried.error is None

    def test_stale_generation_is_discarded(self) -> None:
        state = transition(DetectionState(), SourceSelected(source=_source()))
        loading = transition(state, DetectionRequested())
        replaced = transition(loading, SourceSelected(source=_source("b.jpg")))

        after = transition(
            replaced, DetectionSucceeded(generation=loading.generation, detections=[CAT])
        )

        assert after is replaced
        assert after.detections == ()

    def test_result_outside_loading_is_discarded(self) -> None:
        state = _success_store().state

        after = transition(state, DetectionFailed(generation=state.generation, message="late"))

        assert after is state


class TestStateInvariants:
    def test_error_with_detections_is_unrepresentable(self) -> None:
        with pytest.raises(ValidationError):
            DetectionState(status="error", error="x", detections=(CAT,), source=_source())

    def test_error_requires_message(self) -> None:
        with pytest.raises(ValidationError):
            DetectionState(status="error", source=_source())

    def test_loading_requires_source(self) -> None:
        with pytest.raises(ValidationError):
            DetectionState(status="loading")


class TestDetectionStore:
    def test_can_trigger(self) -> None:
        store = DetectionStore()
        assert store.can_trigger is False

        store.dispatch(SourceSelected(source=_source()))
        assert store.can_trigger is True

        store.dispatch(DetectionRequested())
        assert store.can_trigger is False

    def test_new_source_clears_overlay(self) -> None:
        store = _success_store()
        assert len(store.state.detections) == 2

        state = store.dispatch(SourceSelected(source=_source("b.jpg")))

        assert state.status == "idle"
        assert state.detections == ()

    def test_stale_result_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        store = DetectionStore()
        store.dispatch(SourceSelected(source=_source()))
        loading = store.dispatch(DetectionRequested())
        store.dispatch(SourceSelected(source=_source("b.jpg")))

        with caplog.at_level("INFO", logger="src.services.detection_store"):
            store.dispatch(DetectionSucceeded(generation=loading.generation, detections=[CAT]))

        assert "stale" in caplog.text
