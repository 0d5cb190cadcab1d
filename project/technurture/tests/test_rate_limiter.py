import unittest

from technurture.middleware.auth import LoginRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class LoginRateLimiterTests(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.limiter = LoginRateLimiter(max_attempts=5, window_seconds=900, clock=self.clock)

    def test_sixth_attempt_in_window_is_blocked(self):
        for _ in range(5):
            self.assertIsNone(self.limiter.hit("10.0.0.1"))
        self.clock.now += 60
        self.assertEqual(self.limiter.hit("10.0.0.1"), 840)

    def test_other_ips_are_unaffected(self):
        for _ in range(5):
            self.limiter.hit("10.0.0.1")
        self.assertIsNotNone(self.limiter.hit("10.0.0.1"))
        self.assertIsNone(self.limiter.hit("10.0.0.2"))

    def test_window_elapsing_allows_again(self):
        for _ in range(5):
            self.limiter.hit("10.0.0.1")
        self.clock.now += 901
        self.assertIsNone(self.limiter.hit("10.0.0.1"))
        self.assertEqual(self.limiter.attempts["10.0.0.1"].count, 1)

    def test_reset_clears_the_counter(self):
        for _ in range(5):
            self.limiter.hit("10.0.0.1")
        self.limiter.reset("10.0.0.1")
        self.assertIsNone(self.limiter.hit("10.0.0.1"))

    def test_sweep_drops_only_stale_entries(self):
        self.limiter.hit("old")
        self.clock.now += 600
        self.limiter.hit("fresh")
        self.clock.now += 400

        self.assertEqual(self.limiter.sweep(), 1)
        self.assertNotIn("old", self.limiter.attempts)
        self.assertIn("fresh", self.limiter.attempts)


if __name__ == "__main__":
    unittest.main()
