"""Unit tests for the serial dispatcher."""

import threading

from contextual_cards.manager.dispatch import SerialDispatcher


class TestSerialDispatcher:
    """Tests for SerialDispatcher."""

    def test_runs_jobs_in_order(self) -> None:
        """Jobs run in submission order."""
        dispatcher = SerialDispatcher()
        ran: list[int] = []

        for i in range(3):
            dispatcher.submit(lambda i=i: ran.append(i))

        assert ran == [0, 1, 2]
        assert dispatcher.pending_count() == 0

    def test_nested_submit_runs_after_current_job(self) -> None:
        """A job submitted from a running job is not nested inside it."""
        dispatcher = SerialDispatcher()
        events: list[str] = []

        def outer() -> None:
            events.append("outer:start")
            dispatcher.submit(lambda: events.append("inner"))
            events.append("outer:end")

        dispatcher.submit(outer)

        assert events == ["outer:start", "outer:end", "inner"]

    def test_failing_job_does_not_block_queue(self) -> None:
        """An exception in one job leaves later jobs running."""
        dispatcher = SerialDispatcher()
        ran: list[str] = []

        def fail() -> None:
            dispatcher.submit(lambda: ran.append("after"))
            raise RuntimeError("boom")

        dispatcher.submit(fail)
        dispatcher.submit(lambda: ran.append("next"))

        assert ran == ["after", "next"]

    def test_concurrent_submits_never_overlap(self) -> None:
        """Jobs from many threads run one at a time and all complete."""
        dispatcher = SerialDispatcher()
        active = 0
        max_active = 0
        completed = 0
        counter_lock = threading.Lock()

        def job() -> None:
            nonlocal active, max_active, completed
            with counter_lock:
                active += 1
                max_active = max(max_active, active)
            with counter_lock:
                active -= 1
                completed += 1

        def submit_many() -> None:
            for _ in range(200):
                dispatcher.submit(job)

        threads = [threading.Thread(target=submit_many) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert completed == 800
        assert max_active == 1
        assert dispatcher.pending_count() == 0
