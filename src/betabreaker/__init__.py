"""BetaBreaker API — climbing log, gyms and badge awards."""
