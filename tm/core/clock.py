import time

# The single source of "now" for both engines. Instants are integer epoch milliseconds, which is what gets written
# into snapshots, so a reload in a later process can still measure the gap.
class SystemClock:

    def now(self) -> int:
        return time.time_ns() // 1_000_000


# Module-level default, engines fall back to this when no clock is injected.
SYSTEM_CLOCK = SystemClock()


# A clock that only moves when told to. Pairs with ManualScheduler(on_advance=clock.advance) in tests.
class ManualClock:

    def __init__(self, start=0):
        self.current = int(start)

    def now(self) -> int:
        return self.current

    def advance(self, ms):
        self.current += int(ms)
