"""Computer scaffold providing pacing and control utilities."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from chip8emu.chip8.hardware import Chip8Hardware
    from chip8emu.cpu.cpu import Chip8CPU
else:  # pragma: no cover - used for runtime only
    Chip8Hardware = object
    Chip8CPU = object

logger = logging.getLogger(__name__)

DEFAULT_CLOCK_SPEED = 500.0


class TimeManager:
    """Tracks wall-clock alignment of the paced execution loop."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._base_time = clock()

    def reset(self) -> float:
        self._base_time = self._clock()
        return self._base_time

    def now(self) -> float:
        return self._clock()

    def elapsed(self) -> float:
        return self._clock() - self._base_time


class Computer:
    """Host machine driving the CPU at a fixed instruction rate."""

    STATUS_RUNNING = 0
    STATUS_PAUSED = 1
    STATUS_STOPPED = 2

    def __init__(
        self,
        hardware: Chip8Hardware,
        *,
        clock_speed: float = DEFAULT_CLOCK_SPEED,
        sleep: Callable[[float], None] = time.sleep,
        time_manager: Optional[TimeManager] = None,
    ) -> None:
        if clock_speed <= 0:
            raise ValueError("clock speed must be positive")
        self.hardware = hardware
        self.cpu_clock_frequency = clock_speed
        self.instruction_count: int = 0
        self.error: Optional[BaseException] = None
        self._cpu: Optional[Chip8CPU] = None
        self._running_status: int = self.STATUS_STOPPED
        self._stop_requested = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._sleep = sleep
        self._time_manager = time_manager if time_manager is not None else TimeManager()

    # ------------------------------------------------------------------
    # CPU integration
    # ------------------------------------------------------------------
    @property
    def cpu(self) -> Optional[Chip8CPU]:
        return self._cpu

    def set_cpu(self, cpu: Chip8CPU) -> None:
        self._cpu = cpu

    def get_cpu(self) -> Optional[Chip8CPU]:
        return self._cpu

    def tick(self, instructions: int) -> int:
        """Execute ``instructions`` back to back without pacing."""

        if instructions <= 0 or self._cpu is None:
            return 0
        executed = 0
        try:
            while executed < instructions:
                self._cpu.step()
                executed += 1
        finally:
            self.instruction_count += executed
        return executed

    # ------------------------------------------------------------------
    # Paced execution
    # ------------------------------------------------------------------
    @property
    def period(self) -> float:
        return 1.0 / self.cpu_clock_frequency

    def run(self, *, max_instructions: Optional[int] = None, max_seconds: Optional[float] = None) -> int:
        """Run the paced loop until stopped, a limit is hit or the CPU fails.

        Each iteration executes one instruction (unless paused) and sleeps for
        the rest of the instruction period. Overruns are not caught up.
        """

        self._stop_requested.clear()
        return self._run_loop(max_instructions, max_seconds)

    def _run_loop(self, max_instructions: Optional[int], max_seconds: Optional[float]) -> int:
        if self._cpu is None:
            raise RuntimeError("no CPU attached")
        if self._running_status == self.STATUS_STOPPED:
            self._running_status = self.STATUS_RUNNING
        self._time_manager.reset()
        logger.info("engine started at %.1f instructions/s", self.cpu_clock_frequency)
        executed = 0
        try:
            while not self._stop_requested.is_set():
                if max_instructions is not None and executed >= max_instructions:
                    break
                if max_seconds is not None and self._time_manager.elapsed() >= max_seconds:
                    break
                start = self._time_manager.now()
                if self._running_status == self.STATUS_RUNNING:
                    self._cpu.step()
                    executed += 1
                    self.instruction_count += 1
                elapsed = self._time_manager.now() - start
                self._sleep(max(0.0, self.period - elapsed))
        except Exception as exc:
            self.error = exc
            raise
        finally:
            self._running_status = self.STATUS_STOPPED
            logger.info("engine stopped after %d instructions", executed)
        return executed

    def start(self) -> threading.Thread:
        """Run the paced loop on a daemon thread.

        Errors are kept in :attr:`error` for the owning thread to report.
        """

        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self.error = None
        self._stop_requested.clear()
        self._running_status = self.STATUS_RUNNING
        self._thread = threading.Thread(target=self._run_background, name="Chip8Engine", daemon=True)
        self._thread.start()
        return self._thread

    def _run_background(self) -> None:
        try:
            self._run_loop(None, None)
        except Exception:
            logger.debug("engine thread exited with %r", self.error)

    def join(self, timeout: Optional[float] = None) -> bool:
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    # ------------------------------------------------------------------
    # Control lifecycle
    # ------------------------------------------------------------------
    def stop(self) -> None:
        self._stop_requested.set()

    def pause(self) -> None:
        if self._running_status == self.STATUS_RUNNING:
            self._running_status = self.STATUS_PAUSED

    def resume(self) -> None:
        if self._running_status == self.STATUS_PAUSED:
            self._running_status = self.STATUS_RUNNING

    def get_running_status(self) -> int:
        return self._running_status

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def reset(self) -> None:
        if self._cpu is not None:
            self._cpu.reset()
        self.instruction_count = 0
        self.error = None

    def get_clock_frequency(self) -> float:
        return self.cpu_clock_frequency

    def set_clock_frequency(self, frequency: float) -> None:
        if frequency <= 0:
            raise ValueError("frequency must be positive")
        self.cpu_clock_frequency = frequency
