"""Badge evaluation: stats aggregation, criteria matching and awarding."""
